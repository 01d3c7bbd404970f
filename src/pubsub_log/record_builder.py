from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Callable, Optional

from .environment import EnvironmentInfo
from .levels import LogLevel, human_readable
from .models import LogRecord
from .serialization import serialize_record

RecordSerializer = Callable[[LogRecord], str]


def build_record(
  env: EnvironmentInfo,
  level: LogLevel,
  category: str,
  message: str,
  identifier: Optional[str] = None,
) -> LogRecord:
  """
  Populate a LogRecord from the call arguments, the clock, host metadata
  and the calling thread. A fresh id is generated on every call.
  """
  thread = threading.current_thread()
  return LogRecord(
    timestamp=datetime.now().astimezone().isoformat(),
    hostname=env.hostname,
    id=str(uuid.uuid4()),
    local_ip=env.local_ip,
    remote_ip=env.remote_ip,
    level=human_readable(level),
    category=category,
    message=message,
    message_identifier=identifier,
    operation=env.operation,
    process_id=env.process_id,
    user_agent=env.user_agent,
    thread_id=threading.get_ident(),
    thread_name=thread.name,
  )


class RecordBuilder:
  """
  Turns (level, category, message, identifier) into a serialized record.

  Holds no mutable state of its own; the environment lookups it reads are
  cached read-only values, so one builder is shared by all emitting threads.
  """

  def __init__(
    self,
    env: Optional[EnvironmentInfo] = None,
    serializer: Optional[RecordSerializer] = None,
  ) -> None:
    self._env = env or EnvironmentInfo()
    self._serializer = serializer or serialize_record

  @property
  def env(self) -> EnvironmentInfo:
    return self._env

  def serialize(
    self,
    level: LogLevel,
    category: str,
    message: str,
    identifier: Optional[str] = None,
  ) -> str:
    return self._serializer(build_record(self._env, level, category, message, identifier))
