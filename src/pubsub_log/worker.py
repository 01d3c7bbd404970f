from __future__ import annotations

import logging
import os
import threading
import traceback
from enum import Enum
from typing import Optional

from .diagnostics import DiagnosticSink, LoggingDiagnosticSink
from .propagation import PropagationStrategy
from .publishers import Publisher
from .queue import EventQueue

WORKER_NAME = "pubsub-log-delivery-worker"

_logger = logging.getLogger("pubsub_log.worker")


class WorkerState(str, Enum):
  STARTING = "starting"
  RUNNING = "running"
  DRAINING = "draining"
  STOPPED = "stopped"
  FAILED = "failed"


class DeliveryWorker:
  """
  Single background thread that drains the event queue into a strategy.

  Lifecycle: STARTING (startup delay) -> RUNNING (drain, then block on the
  queue until an item arrives or cancellation is requested) -> DRAINING
  (cancellation observed; everything still queued is delivered) -> STOPPED.

  Shutdown is a graceful drain: items enqueued before cancellation is
  observed are always propagated or reported as failed. Items enqueued
  after the final drain found the queue empty are abandoned.

  The worker is fork-aware: calling ``ensure_running()`` in a forked child
  starts a fresh thread there. Items the child inherited from the parent
  are discarded, since the parent delivers them.
  """

  def __init__(
    self,
    queue: EventQueue,
    strategy: PropagationStrategy,
    publisher: Publisher,
    channel_prefix: str,
    *,
    diagnostics: Optional[DiagnosticSink] = None,
    cancel_event: Optional[threading.Event] = None,
    startup_delay: float = 1.0,
    idle_timeout: float = 0.1,
    name: str = WORKER_NAME,
  ) -> None:
    self._queue = queue
    self._strategy = strategy
    self._publisher = publisher
    self._channel_prefix = channel_prefix
    self._diagnostics: DiagnosticSink = diagnostics or LoggingDiagnosticSink()
    self._cancel = cancel_event or threading.Event()
    self._startup_delay = startup_delay
    self._idle_timeout = idle_timeout
    self._name = name

    self._thread: Optional[threading.Thread] = None
    self._state = WorkerState.STOPPED
    self._delivered = 0
    self._failed = 0
    self._pid = os.getpid()
    self._lock = threading.Lock()

  @property
  def state(self) -> WorkerState:
    return self._state

  @property
  def delivered(self) -> int:
    return self._delivered

  @property
  def failed(self) -> int:
    return self._failed

  @property
  def cancel_event(self) -> threading.Event:
    return self._cancel

  def is_alive(self) -> bool:
    return self._thread is not None and self._thread.is_alive()

  def start(self) -> None:
    """
    Start the background thread.

    Safe to call repeatedly. After a fork, the child's copy has no live
    thread, so a new one is started for the child process.
    """
    current_pid = os.getpid()
    with self._lock:
      if self._pid != current_pid:
        self._pid = current_pid
        self._thread = None
        self._queue.reset()
        self._delivered = 0
        self._failed = 0

      if self._thread is not None and self._thread.is_alive():
        return

      self._state = WorkerState.STARTING
      self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
      self._thread.start()

  def ensure_running(self) -> None:
    """Cheap per-emission check that restarts the worker in a forked child."""
    if self._pid != os.getpid() and not self._cancel.is_set():
      self.start()

  def stop(self, timeout: Optional[float] = None) -> bool:
    """
    Request cancellation and wait for the drain to finish.

    Returns True if the worker reached a terminal state within ``timeout``
    (None waits indefinitely).
    """
    self._cancel.set()
    thread = self._thread
    if thread is not None and thread.is_alive() and thread is not threading.current_thread():
      thread.join(timeout=timeout)
    return not self.is_alive()

  def _run(self) -> None:
    try:
      # Give the host process a moment to bring transport connectivity up.
      # Cancellation cuts the delay short.
      self._cancel.wait(self._startup_delay)
      self._state = WorkerState.RUNNING

      while True:
        self._drain()

        if self._cancel.is_set():
          self._state = WorkerState.DRAINING
          self._drain()
          break

        item, found = self._queue.wait_dequeue(self._idle_timeout)
        if found:
          self._propagate(item)

      self._state = WorkerState.STOPPED
      _logger.debug(
        "%s stopped (delivered=%s, failed=%s)", self._name, self._delivered, self._failed
      )
    except Exception:
      self._state = WorkerState.FAILED
      _logger.critical(
        "%s crashed; queued log records will no longer be delivered",
        self._name,
        exc_info=True,
      )
      raise

  def _drain(self) -> None:
    while True:
      item, found = self._queue.try_dequeue()
      if not found:
        return
      self._propagate(item)

  def _propagate(self, message: str) -> None:
    try:
      self._strategy.propagate(message, self._channel_prefix, self._publisher)
    except Exception as exc:
      self._failed += 1
      self._report(exc)
      return
    self._delivered += 1

  def _report(self, exc: Exception) -> None:
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
      self._diagnostics.report(str(exc), trace)
    except Exception:
      _logger.warning("Diagnostic sink failed to report a propagation error", exc_info=True)
