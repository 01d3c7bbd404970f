from __future__ import annotations

import logging
from typing import Protocol


class DiagnosticSink(Protocol):
  """
  Best-effort destination for internal propagation failures.

  Must not raise.
  """

  def report(self, message: str, trace: str) -> None:
    ...


class LoggingDiagnosticSink:
  """
  Reports failures at DEBUG level on the ``pubsub_log.diagnostics`` logger.
  """

  def __init__(self, logger: logging.Logger | None = None) -> None:
    self._logger = logger or logging.getLogger("pubsub_log.diagnostics")

  def report(self, message: str, trace: str) -> None:
    self._logger.debug("Message: %s | Stack Trace: %s", message, trace)
