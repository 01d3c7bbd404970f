from __future__ import annotations

import re
from enum import IntFlag
from typing import Dict


class LogLevel(IntFlag):
  """
  Bit-flag set of log severities.

  A provider holds one mask of enabled levels; each emission checks its own
  flag against that mask before doing any work.
  """

  NONE = 0
  FATAL = 1
  ERROR = 2
  WARNING = 4
  INFO = 8
  TRACE = 16
  DEBUG = 32

  PRODUCTION = FATAL | ERROR | WARNING | INFO
  DEVELOPMENT = FATAL | ERROR | WARNING | INFO | TRACE | DEBUG
  ALL = DEVELOPMENT


_HUMAN_READABLE: Dict[LogLevel, str] = {
  LogLevel.FATAL: "Fatal",
  LogLevel.ERROR: "Error",
  LogLevel.WARNING: "Warning",
  LogLevel.INFO: "Info",
  LogLevel.TRACE: "Trace",
  LogLevel.DEBUG: "Debug",
}

_ALIASES: Dict[str, LogLevel] = {
  "none": LogLevel.NONE,
  "fatal": LogLevel.FATAL,
  "critical": LogLevel.FATAL,
  "error": LogLevel.ERROR,
  "warning": LogLevel.WARNING,
  "warn": LogLevel.WARNING,
  "info": LogLevel.INFO,
  "trace": LogLevel.TRACE,
  "debug": LogLevel.DEBUG,
  "production": LogLevel.PRODUCTION,
  "development": LogLevel.DEVELOPMENT,
  "all": LogLevel.ALL,
}


def human_readable(level: LogLevel) -> str:
  """Return the tag written into a record's ``level`` field."""
  try:
    return _HUMAN_READABLE[LogLevel(level)]
  except KeyError:
    raise ValueError(f"{level!r} is not a single log level") from None


def parse_levels(text: str) -> LogLevel:
  """
  Parse a level mask such as ``"error,fatal"``, ``"info|debug"`` or ``"all"``.

  Names are case-insensitive. Unknown names raise ValueError.
  """
  mask = LogLevel.NONE
  parts = [p.strip().lower() for p in re.split(r"[,|]", text or "")]
  for part in parts:
    if not part:
      continue
    if part not in _ALIASES:
      raise ValueError(
        f"Unknown log level '{part}'. "
        f"Expected one or more of: {', '.join(sorted(_ALIASES))}"
      )
    mask |= _ALIASES[part]
  return mask
