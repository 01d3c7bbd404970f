from __future__ import annotations

import json
import logging

from ..publishers import Publisher
from .base import PropagationError, join_channel

_logger = logging.getLogger("pubsub_log.propagation")


class ChannelPropagationStrategy:
  """
  Publishes every message on one channel, ``{prefix}:{channel}``.
  """

  def __init__(self, channel: str = "log") -> None:
    self.channel = channel

  def propagate(self, message: str, channel_prefix: str, publisher: Publisher) -> None:
    publisher.publish(join_channel(channel_prefix, self.channel), message)


class LevelChannelPropagationStrategy:
  """
  Publishes each record on a per-severity channel, ``{prefix}:log:{level}``.

  Subscribers can then filter by severity with a channel prefix match
  (e.g. only ``logs:log:error``). The level is read back from the
  serialized record, so this strategy expects the JSON record codec.
  """

  def __init__(self, channel: str = "log") -> None:
    self.channel = channel

  def propagate(self, message: str, channel_prefix: str, publisher: Publisher) -> None:
    try:
      level = json.loads(message)["level"]
    except (ValueError, KeyError, TypeError) as exc:
      raise PropagationError(f"Cannot determine level of message: {exc}") from exc

    channel = join_channel(channel_prefix, self.channel, str(level).lower())
    _logger.debug("Publishing record on %s", channel)
    publisher.publish(channel, message)
