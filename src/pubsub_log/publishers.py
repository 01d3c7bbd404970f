from __future__ import annotations

import threading
from typing import List, Optional, Protocol, Tuple

import zmq


class Publisher(Protocol):
  """
  Handle onto a pub/sub transport. Shared read-only by the delivery worker.
  """

  def publish(self, channel: str, message: str) -> None:
    ...

  def close(self) -> None:
    ...


class ZmqPublisher:
  """
  Publishes messages on a ZeroMQ PUB socket.

  Each message is sent as two frames ``[channel, payload]`` so SUB sockets
  can filter on a channel prefix. PUB sockets drop messages when no
  subscriber is connected; that is the transport's semantics, not an error.

  The socket is created on first publish, or earlier with ``open()`` so
  subscribers can connect before anything is sent. Ownership then passes
  to the delivery worker, the only thread that publishes.
  """

  def __init__(
    self,
    address: str,
    *,
    bind: bool = True,
    context: Optional[zmq.Context] = None,
  ) -> None:
    self.address = address
    self.bind = bind
    self._ctx = context or zmq.Context.instance()
    self._sock: Optional[zmq.Socket] = None

  def open(self) -> None:
    """Create and bind (or connect) the PUB socket now."""
    self._socket()

  def _socket(self) -> zmq.Socket:
    if self._sock is None:
      sock = self._ctx.socket(zmq.PUB)
      if self.bind:
        sock.bind(self.address)
      else:
        sock.connect(self.address)
      self._sock = sock
    return self._sock

  def publish(self, channel: str, message: str) -> None:
    self._socket().send_multipart([channel.encode("utf-8"), message.encode("utf-8")])

  def close(self, linger: int = 0) -> None:
    """
    Close the socket. ``linger`` is how many milliseconds frames still
    queued for sending may hold the close up; 0 discards them.
    """
    if self._sock is not None:
      self._sock.close(linger=linger)
      self._sock = None


class InMemoryPublisher:
  """
  Collects published ``(channel, message)`` pairs in a list.

  Useful for tests and local development where no broker is running.
  """

  def __init__(self) -> None:
    self._lock = threading.Lock()
    self._messages: List[Tuple[str, str]] = []
    self.closed = False

  def publish(self, channel: str, message: str) -> None:
    with self._lock:
      self._messages.append((channel, message))

  @property
  def messages(self) -> List[Tuple[str, str]]:
    with self._lock:
      return list(self._messages)

  def close(self) -> None:
    self.closed = True
