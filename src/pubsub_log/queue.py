from __future__ import annotations

import queue
from typing import Optional, Tuple

QueuedMessage = str


class EventQueue:
  """
  Unbounded in-process FIFO of serialized records.

  Many emitting threads enqueue; exactly one delivery worker dequeues.
  There is deliberately no capacity bound: producers never block and never
  see an error, at the cost that a stalled propagation strategy lets memory
  grow without limit.
  """

  def __init__(self) -> None:
    # maxsize=0 makes put() non-blocking.
    self._queue: "queue.Queue[QueuedMessage]" = queue.Queue()

  def enqueue(self, item: QueuedMessage) -> None:
    self._queue.put_nowait(item)

  def try_dequeue(self) -> Tuple[Optional[QueuedMessage], bool]:
    """Return ``(item, True)`` or ``(None, False)`` without blocking."""
    try:
      return self._queue.get_nowait(), True
    except queue.Empty:
      return None, False

  def wait_dequeue(self, timeout: float) -> Tuple[Optional[QueuedMessage], bool]:
    """
    Block for up to ``timeout`` seconds waiting for an item.

    Used by the worker while idle so an enqueue wakes it immediately
    instead of spinning.
    """
    try:
      return self._queue.get(timeout=timeout), True
    except queue.Empty:
      return None, False

  def __len__(self) -> int:
    return self._queue.qsize()

  def empty(self) -> bool:
    return self._queue.empty()

  def reset(self) -> None:
    """
    Replace the underlying queue with a fresh, empty one.

    Called in a forked child: the inherited items belong to the parent's
    worker, and the inherited locks may have been held at fork time.
    """
    self._queue = queue.Queue()
