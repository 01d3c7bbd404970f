from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from urllib import error, request

from ..publishers import Publisher
from .base import PropagationError, join_channel

_logger = logging.getLogger("pubsub_log.propagation.http")


@dataclass
class HttpPropagationStrategy:
  """
  Posts each message to an HTTP endpoint as ``{"channel": ..., "message": ...}``.

  For bridges that fan messages out on the server side. The publisher
  handle is not used. Network failures raise PropagationError so the
  worker reports and drops the message; there is no retry.
  """

  endpoint: str
  channel: str = "log"
  timeout_seconds: float = 1.0

  def propagate(self, message: str, channel_prefix: str, publisher: Publisher) -> None:
    payload = {
      "channel": join_channel(channel_prefix, self.channel),
      "message": message,
    }
    req = request.Request(
      self.endpoint,
      data=json.dumps(payload).encode("utf-8"),
      headers={"Content-Type": "application/json"},
      method="POST",
    )

    try:
      with request.urlopen(req, timeout=self.timeout_seconds):  # nosec B310
        pass
    except (error.URLError, error.HTTPError, TimeoutError, OSError) as exc:
      _logger.warning("HTTP propagation to %s failed: %s", self.endpoint, exc)
      raise PropagationError(f"HTTP propagation to {self.endpoint} failed: {exc}") from exc
