from __future__ import annotations

import logging
from logging import Handler
from typing import Optional

from .provider import PubSubLogProvider

_OWN_LOGGER = "pubsub_log"


class PubSubLogHandler(Handler):
  """
  Logging handler that forwards standard library log records to a provider.

  The logger name becomes the record category. Records carrying exc_info
  additionally queue the exception chain at trace level.
  """

  def __init__(self, provider: PubSubLogProvider) -> None:
    super().__init__()
    self._provider = provider

  def emit(self, record: logging.LogRecord) -> None:
    # The delivery worker logs its own failures; forwarding them would
    # queue a new record for every failed publish.
    if record.name == _OWN_LOGGER or record.name.startswith(_OWN_LOGGER + "."):
      return

    try:
      message = record.getMessage()
      category = record.name
      levelno = record.levelno

      if levelno >= logging.CRITICAL:
        self._provider.fatal(category, message)
      elif levelno >= logging.ERROR:
        self._provider.error(category, message)
      elif levelno >= logging.WARNING:
        self._provider.warning(category, message)
      elif levelno >= logging.INFO:
        self._provider.info(category, message)
      elif levelno >= logging.DEBUG:
        self._provider.debug(category, message)
      else:
        self._provider.trace(category, message)

      if record.exc_info and record.exc_info[1] is not None:
        self._provider.trace(category, record.exc_info[1])
    except Exception:
      # Never break application logging.
      self.handleError(record)


def setup_logging(
  provider: PubSubLogProvider,
  logger: Optional[logging.Logger] = None,
) -> Optional[PubSubLogHandler]:
  """
  Attach a PubSubLogHandler to ``logger`` (the root logger by default).

  Existing handlers are kept. Calling this again for the same logger does
  not add a second handler. Returns the attached handler, or None when the
  provider's configuration is disabled.
  """
  if not provider.config.enabled:
    return None

  target_logger = logger or logging.getLogger()

  for existing in target_logger.handlers:
    if isinstance(existing, PubSubLogHandler):
      return existing

  handler = PubSubLogHandler(provider)
  target_logger.addHandler(handler)
  return handler
