import pytest

from pubsub_log.levels import LogLevel, human_readable, parse_levels  # type: ignore[import]


def test_parse_levels_accepts_lists_and_composites():
  assert parse_levels("error,fatal") == LogLevel.ERROR | LogLevel.FATAL
  assert parse_levels("Info | DEBUG") == LogLevel.INFO | LogLevel.DEBUG
  assert parse_levels("all") == LogLevel.ALL
  assert parse_levels("production") == LogLevel.PRODUCTION
  assert parse_levels("none") == LogLevel.NONE
  assert parse_levels("") == LogLevel.NONE


def test_parse_levels_rejects_unknown_names():
  with pytest.raises(ValueError):
    parse_levels("info,verbose")


def test_production_excludes_trace_and_debug():
  assert not LogLevel.PRODUCTION & LogLevel.TRACE
  assert not LogLevel.PRODUCTION & LogLevel.DEBUG
  assert LogLevel.PRODUCTION & LogLevel.INFO


def test_human_readable_tags():
  assert human_readable(LogLevel.ERROR) == "Error"
  assert human_readable(LogLevel.WARNING) == "Warning"
  with pytest.raises(ValueError):
    human_readable(LogLevel.ERROR | LogLevel.FATAL)
