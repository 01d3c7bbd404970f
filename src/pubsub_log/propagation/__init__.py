"""
Pluggable strategies that deliver serialized records to a transport.
"""

from .base import PropagationError, PropagationStrategy, join_channel
from .channel import ChannelPropagationStrategy, LevelChannelPropagationStrategy
from .http_propagation import HttpPropagationStrategy

__all__ = [
  "ChannelPropagationStrategy",
  "HttpPropagationStrategy",
  "LevelChannelPropagationStrategy",
  "PropagationError",
  "PropagationStrategy",
  "join_channel",
]
