from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..publishers import Publisher


class PropagationError(RuntimeError):
  """Raised by a strategy when a message could not be delivered."""


@runtime_checkable
class PropagationStrategy(Protocol):
  """
  Delivers one serialized message to a transport.

  Called synchronously from the single delivery worker thread, one call at
  a time. A raised exception means the message is dropped; strategies are
  never retried by the worker.
  """

  def propagate(self, message: str, channel_prefix: str, publisher: Publisher) -> None:
    ...


def join_channel(prefix: str, *parts: str) -> str:
  """Build a ``prefix:part:part`` channel name, skipping empty segments."""
  return ":".join(p for p in (prefix, *parts) if p)
