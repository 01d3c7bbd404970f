from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LogRecord(BaseModel):
  """
  Canonical log event shape published to subscribers.

  Built on the emitting thread, serialized immediately and then discarded;
  only the serialized string travels through the queue.
  """

  model_config = ConfigDict(frozen=True)

  timestamp: str = Field(..., description="ISO-8601 local time when the record was built")
  hostname: str
  id: str = Field(..., description="Unique per record (uuid4)")
  local_ip: str
  remote_ip: str
  level: str
  category: str
  message: str
  # Only set for attachment-like debug entries.
  message_identifier: Optional[str] = None
  operation: str
  process_id: int
  user_agent: str
  thread_id: int
  thread_name: str
