"""
pubsub_log

Asynchronous log-event forwarder: level-gated emission, an unbounded
in-process queue and a single background worker that publishes serialized
records to a pub/sub channel through a pluggable propagation strategy.
"""

from .config import ProviderConfig
from .environment import EnvironmentInfo, operation_context
from .levels import LogLevel, parse_levels
from .logging_setup import PubSubLogHandler, setup_logging
from .models import LogRecord
from .propagation import (
  ChannelPropagationStrategy,
  HttpPropagationStrategy,
  LevelChannelPropagationStrategy,
  PropagationError,
  PropagationStrategy,
)
from .provider import PubSubLogProvider
from .publishers import InMemoryPublisher, Publisher, ZmqPublisher
from .serialization import SerializationError, SerializerFormat
from .worker import DeliveryWorker, WorkerState

__all__ = [
  "ChannelPropagationStrategy",
  "DeliveryWorker",
  "EnvironmentInfo",
  "HttpPropagationStrategy",
  "InMemoryPublisher",
  "LevelChannelPropagationStrategy",
  "LogLevel",
  "LogRecord",
  "PropagationError",
  "PropagationStrategy",
  "ProviderConfig",
  "PubSubLogHandler",
  "PubSubLogProvider",
  "Publisher",
  "SerializationError",
  "SerializerFormat",
  "WorkerState",
  "ZmqPublisher",
  "operation_context",
  "parse_levels",
  "setup_logging",
]
