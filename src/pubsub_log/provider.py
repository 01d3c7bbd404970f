from __future__ import annotations

import threading
import traceback
from typing import Any, Iterator, Optional, Tuple, Union

from .config import ProviderConfig
from .diagnostics import DiagnosticSink
from .environment import EnvironmentInfo
from .levels import LogLevel
from .propagation import PropagationStrategy
from .publishers import Publisher
from .queue import EventQueue
from .record_builder import RecordBuilder, RecordSerializer
from .serialization import SerializerFormat, serialize
from .worker import DeliveryWorker


class PubSubLogProvider:
  """
  Level-gated log provider that publishes records through a background worker.

  Every emission method checks the enabled-levels mask first and returns
  without any work when its level is off. Otherwise the record is built and
  serialized on the calling thread and handed to an unbounded queue; the
  call never blocks on the transport. A single worker thread, started here,
  drains the queue into the propagation strategy.

  Usage::

    provider = PubSubLogProvider(ZmqPublisher("tcp://127.0.0.1:7000"), ChannelPropagationStrategy())
    provider.set_level(LogLevel.ALL)
    provider.info("orders", "order 42 accepted")
    provider.close()
  """

  def __init__(
    self,
    publisher: Publisher,
    propagation_strategy: PropagationStrategy,
    config: Optional[ProviderConfig] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
    environment: Optional[EnvironmentInfo] = None,
    record_serializer: Optional[RecordSerializer] = None,
    diagnostics: Optional[DiagnosticSink] = None,
  ) -> None:
    self._config = config or ProviderConfig.from_env()
    self._level = self._config.level
    self._builder = RecordBuilder(environment, record_serializer)
    self._queue = EventQueue()
    self._publisher = publisher
    self._worker = DeliveryWorker(
      self._queue,
      propagation_strategy,
      publisher,
      self._config.channel_prefix,
      diagnostics=diagnostics,
      cancel_event=cancel_event,
      startup_delay=self._config.startup_delay,
      idle_timeout=self._config.idle_timeout,
    )
    self._worker.start()

  # --------------------------
  # Level gate
  # --------------------------

  @property
  def level(self) -> LogLevel:
    return self._level

  def set_level(self, level: LogLevel) -> None:
    """
    Replace the enabled-levels mask.

    Applies to every emission after this returns; records already queued
    are unaffected.
    """
    # A single attribute rebind; readers see either the old or the new mask.
    self._level = LogLevel(level)

  def is_enabled(self, level: LogLevel) -> bool:
    return bool(self._level & level)

  # --------------------------
  # Emission API
  # --------------------------

  def fatal(self, category: str, message: str) -> None:
    if not self._level & LogLevel.FATAL:
      return
    self._emit(LogLevel.FATAL, category, message)

  def error(self, category: str, message: str) -> None:
    if not self._level & LogLevel.ERROR:
      return
    self._emit(LogLevel.ERROR, category, message)

  def warning(self, category: str, message: str) -> None:
    if not self._level & LogLevel.WARNING:
      return
    self._emit(LogLevel.WARNING, category, message)

  def info(self, category: str, message: str) -> None:
    if not self._level & LogLevel.INFO:
      return
    self._emit(LogLevel.INFO, category, message)

  def trace(
    self,
    category: str,
    message: Union[str, BaseException],
    exception: Optional[BaseException] = None,
  ) -> None:
    """
    Log at trace level.

    ``message`` may be an exception, in which case two records (message,
    then traceback) are queued for it and for each exception in its
    ``__cause__``/``__context__`` chain, outermost first. Passing both a
    message and ``exception`` queues the message followed by the chain.
    """
    if not self._level & LogLevel.TRACE:
      return

    if isinstance(message, BaseException):
      self._emit_exception_chain(category, message)
      return

    self._emit(LogLevel.TRACE, category, message)
    if exception is not None:
      self._emit_exception_chain(category, exception)

  def debug(
    self,
    category: str,
    content: Any,
    identifier: Optional[str] = None,
    custom_format: Optional[SerializerFormat] = None,
  ) -> None:
    """
    Log at debug level.

    A string is used as the message as-is. Any other object is serialized
    with ``custom_format`` (or the default codec) first. ``identifier``
    marks the record as a named attachment, e.g. a file name or key.
    """
    if not self._level & LogLevel.DEBUG:
      return

    if isinstance(content, str) and custom_format is None:
      message = content
    else:
      message = serialize(content, custom_format or SerializerFormat.NONE)

    self._emit(LogLevel.DEBUG, category, message, identifier)

  # --------------------------
  # Lifecycle
  # --------------------------

  @property
  def worker(self) -> DeliveryWorker:
    return self._worker

  @property
  def config(self) -> ProviderConfig:
    return self._config

  def pending(self) -> int:
    return len(self._queue)

  def close(self, timeout: Optional[float] = None) -> bool:
    """
    Signal cancellation and wait for the worker to drain the queue.

    ``timeout`` defaults to the configured shutdown_timeout; None waits
    until the drain completes. Returns True once the worker has stopped.
    """
    if timeout is None:
      timeout = self._config.shutdown_timeout
    return self._worker.stop(timeout)

  def __enter__(self) -> "PubSubLogProvider":
    return self

  def __exit__(self, *exc_info: Any) -> None:
    self.close()

  # --------------------------
  # Internals
  # --------------------------

  def _emit(
    self,
    level: LogLevel,
    category: str,
    message: str,
    identifier: Optional[str] = None,
  ) -> None:
    serialized = self._builder.serialize(level, category, message, identifier)
    self._worker.ensure_running()
    self._queue.enqueue(serialized)

  def _emit_exception_chain(self, category: str, exception: BaseException) -> None:
    for exc in iter_exception_chain(exception, self._config.max_exception_depth):
      message, trace = describe_exception(exc)
      self._emit(LogLevel.TRACE, category, message)
      self._emit(LogLevel.TRACE, category, trace)


def iter_exception_chain(exception: BaseException, max_depth: int) -> Iterator[BaseException]:
  """
  Yield ``exception`` and its inner causes, outermost first.

  Follows ``__cause__``, else ``__context__`` unless suppressed. Stops on a
  cycle or after ``max_depth`` exceptions.
  """
  seen = set()
  exc: Optional[BaseException] = exception
  depth = 0
  while exc is not None and id(exc) not in seen and depth < max_depth:
    seen.add(id(exc))
    yield exc
    depth += 1
    if exc.__cause__ is not None:
      exc = exc.__cause__
    elif not exc.__suppress_context__:
      exc = exc.__context__
    else:
      exc = None


def describe_exception(exc: BaseException) -> Tuple[str, str]:
  """Return ``(message, traceback text)`` for a single exception, without its chain."""
  message = str(exc) or type(exc).__name__
  trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__, chain=False))
  return message, trace
