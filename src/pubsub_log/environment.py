from __future__ import annotations

import contextlib
import contextvars
import logging
import os
import platform
import socket
import sys
import threading
from pathlib import Path
from typing import Iterator, Optional

import httpx

_logger = logging.getLogger("pubsub_log.environment")

_operation: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
  "pubsub_log_operation", default=None
)


@contextlib.contextmanager
def operation_context(name: str) -> Iterator[None]:
  """
  Tag every record emitted inside the block with ``name`` as its operation.

  Scoped with contextvars, so nested blocks, threads and asyncio tasks each
  see their own value.
  """
  token = _operation.set(name)
  try:
    yield
  finally:
    _operation.reset(token)


class EnvironmentInfo:
  """
  Read-only host metadata attached to every record.

  Expensive lookups (local and external IP) are resolved once on first use
  and cached; afterwards all accessors are plain attribute reads and safe to
  call from any number of emitting threads.
  """

  def __init__(
    self,
    *,
    external_ip_url: Optional[str] = None,
    user_agent: Optional[str] = None,
    default_operation: Optional[str] = None,
    lookup_timeout: float = 2.0,
  ) -> None:
    self._external_ip_url = external_ip_url or os.getenv("PUBSUB_LOG_EXTERNAL_IP_URL")
    self._user_agent = user_agent or _default_user_agent()
    self._default_operation = default_operation or _default_operation()
    self._lookup_timeout = lookup_timeout
    self._hostname = socket.gethostname()
    self._local_ip: Optional[str] = None
    self._remote_ip: Optional[str] = None
    self._lock = threading.Lock()

  @property
  def hostname(self) -> str:
    return self._hostname

  @property
  def process_id(self) -> int:
    # Not cached: differs in forked children.
    return os.getpid()

  @property
  def user_agent(self) -> str:
    return self._user_agent

  @property
  def operation(self) -> str:
    return _operation.get() or self._default_operation

  @property
  def local_ip(self) -> str:
    if self._local_ip is None:
      with self._lock:
        if self._local_ip is None:
          self._local_ip = _resolve_local_ip()
    return self._local_ip

  @property
  def remote_ip(self) -> str:
    if self._remote_ip is None:
      local = self.local_ip
      with self._lock:
        if self._remote_ip is None:
          self._remote_ip = self._resolve_remote_ip() or local
    return self._remote_ip

  def _resolve_remote_ip(self) -> Optional[str]:
    if not self._external_ip_url:
      return None

    try:
      response = httpx.get(self._external_ip_url, timeout=self._lookup_timeout)
      response.raise_for_status()
    except (httpx.RequestError, httpx.HTTPStatusError) as exc:
      _logger.warning(
        "External IP lookup via %s failed, using local IP instead: %s",
        self._external_ip_url,
        exc,
      )
      return None

    value = response.text.strip()
    return value or None


def _resolve_local_ip() -> str:
  # Connecting a UDP socket sends nothing; it only selects the outbound interface.
  probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
  try:
    probe.connect(("10.255.255.255", 1))
    return probe.getsockname()[0]
  except OSError:
    return "127.0.0.1"
  finally:
    probe.close()


def _default_user_agent() -> str:
  return f"python/{platform.python_version()} ({platform.system() or 'unknown'})"


def _default_operation() -> str:
  script = sys.argv[0] if sys.argv and sys.argv[0] else ""
  return Path(script).stem or "python"
