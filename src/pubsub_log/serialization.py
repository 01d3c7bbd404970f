"""
Serialization codecs for records and debug attachments.

The record builder only hands objects to ``serialize``; it never knows the
wire format. Failures are raised as SerializationError on the calling
thread, before anything is queued.
"""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any, Mapping

import yaml
from pydantic import BaseModel

from .models import LogRecord


class SerializerFormat(str, Enum):
  NONE = "none"
  JSON = "json"
  YAML = "yaml"


class SerializationError(ValueError):
  """Raised when a record or payload cannot be turned into a string."""


def to_plain(content: Any) -> Any:
  """
  Reduce ``content`` to JSON/YAML-friendly builtins.
  """
  if isinstance(content, BaseModel):
    return content.model_dump(mode="json")
  if dataclasses.is_dataclass(content) and not isinstance(content, type):
    return dataclasses.asdict(content)
  if isinstance(content, tuple):
    return list(content)
  if isinstance(content, (str, int, float, bool, type(None), Mapping, list)):
    return content
  if hasattr(content, "__dict__"):
    return {k: v for k, v in vars(content).items() if not k.startswith("_")}
  raise SerializationError(f"Cannot serialize object of type {type(content).__name__}")


def serialize(content: Any, fmt: SerializerFormat = SerializerFormat.NONE) -> str:
  """Serialize ``content`` with ``fmt``; NONE selects the default JSON codec."""
  fmt = SerializerFormat(fmt)
  plain = to_plain(content)

  try:
    if fmt is SerializerFormat.YAML:
      return yaml.safe_dump(plain, default_flow_style=False, sort_keys=False)
    return json.dumps(plain, ensure_ascii=False)
  except (TypeError, ValueError, yaml.YAMLError) as exc:
    raise SerializationError(
      f"Failed to serialize {type(content).__name__} as {fmt.value}: {exc}"
    ) from exc


def serialize_record(record: LogRecord) -> str:
  try:
    return record.model_dump_json()
  except ValueError as exc:
    raise SerializationError(f"Failed to serialize log record {record.id}: {exc}") from exc
