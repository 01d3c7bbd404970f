from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .levels import LogLevel, parse_levels

_logger = logging.getLogger("pubsub_log.config")

CONFIG_PATH = Path("_pubsub_log/config.json")
DEFAULT_PUBLISHER_ADDRESS = "tcp://127.0.0.1:7000"
_VALID_SCHEMES = ("tcp://", "ipc://", "inproc://")


@dataclass(frozen=True)
class ProviderConfig:
  """
  Configuration for a PubSubLogProvider.

  Values come from explicit arguments, environment variables, the
  ``_pubsub_log/config.json`` project file, then defaults.
  """

  channel_prefix: str = "logs"
  level: LogLevel = LogLevel.PRODUCTION
  publisher_address: str = DEFAULT_PUBLISHER_ADDRESS
  startup_delay: float = 1.0
  idle_timeout: float = 0.1
  shutdown_timeout: Optional[float] = None
  max_exception_depth: int = 32
  enabled: bool = True

  @classmethod
  def from_env(cls) -> "ProviderConfig":
    """
    Load configuration from PUBSUB_LOG_* environment variables.

    Optional:
      - PUBSUB_LOG_CHANNEL_PREFIX (default: logs)
      - PUBSUB_LOG_LEVEL (default: production)
      - PUBSUB_LOG_PUBLISHER_ADDRESS (default: tcp://127.0.0.1:7000)
      - PUBSUB_LOG_STARTUP_DELAY, PUBSUB_LOG_IDLE_TIMEOUT, PUBSUB_LOG_SHUTDOWN_TIMEOUT
      - PUBSUB_LOG_MAX_EXCEPTION_DEPTH
      - PUBSUB_LOG_ENABLED
    """
    return cls.from_params_or_env()

  @classmethod
  def from_params_or_env(
    cls,
    channel_prefix: Optional[str] = None,
    level: Union[LogLevel, str, None] = None,
    publisher_address: Optional[str] = None,
    startup_delay: Optional[float] = None,
    idle_timeout: Optional[float] = None,
    shutdown_timeout: Optional[float] = None,
    max_exception_depth: Optional[int] = None,
  ) -> "ProviderConfig":
    """
    Build configuration from explicit parameters, falling back to environment variables.

    Priority:
      1. Explicit function arguments
      2. Environment variables
      3. Config file (_pubsub_log/config.json)
      4. Defaults
    """
    file_cfg = _read_config_file()

    def pick(value: Any, env_var: str, *keys: str) -> Any:
      if value is not None:
        return value
      raw = os.getenv(env_var)
      if raw is not None and raw != "":
        return raw
      for key in keys:
        if file_cfg.get(key) is not None:
          return file_cfg[key]
      return None

    prefix = pick(channel_prefix, "PUBSUB_LOG_CHANNEL_PREFIX", "channel_prefix", "channelPrefix")
    if prefix is None:
      prefix = cls.channel_prefix

    raw_level = pick(level, "PUBSUB_LOG_LEVEL", "level", "logLevel")
    if raw_level is None:
      resolved_level = cls.level
    elif isinstance(raw_level, LogLevel):
      resolved_level = raw_level
    else:
      resolved_level = parse_levels(str(raw_level))

    address = pick(publisher_address, "PUBSUB_LOG_PUBLISHER_ADDRESS", "publisher_address", "publisherAddress")
    if address is None:
      address = DEFAULT_PUBLISHER_ADDRESS
    _validate_publisher_address(address)

    delay = _as_float(
      pick(startup_delay, "PUBSUB_LOG_STARTUP_DELAY", "startup_delay", "startupDelay"),
      "PUBSUB_LOG_STARTUP_DELAY",
      cls.startup_delay,
    )
    idle = _as_float(
      pick(idle_timeout, "PUBSUB_LOG_IDLE_TIMEOUT", "idle_timeout", "idleTimeout"),
      "PUBSUB_LOG_IDLE_TIMEOUT",
      cls.idle_timeout,
    )
    shutdown = _as_float(
      pick(shutdown_timeout, "PUBSUB_LOG_SHUTDOWN_TIMEOUT", "shutdown_timeout", "shutdownTimeout"),
      "PUBSUB_LOG_SHUTDOWN_TIMEOUT",
      None,
    )
    depth = _as_int(
      pick(max_exception_depth, "PUBSUB_LOG_MAX_EXCEPTION_DEPTH", "max_exception_depth", "maxExceptionDepth"),
      "PUBSUB_LOG_MAX_EXCEPTION_DEPTH",
      cls.max_exception_depth,
    )

    if delay < 0:
      raise ValueError("PUBSUB_LOG_STARTUP_DELAY must be zero or positive")
    if idle <= 0:
      raise ValueError("PUBSUB_LOG_IDLE_TIMEOUT must be positive")
    if shutdown is not None and shutdown < 0:
      raise ValueError("PUBSUB_LOG_SHUTDOWN_TIMEOUT must be zero or positive")
    if depth < 1:
      raise ValueError("PUBSUB_LOG_MAX_EXCEPTION_DEPTH must be at least 1")

    return cls(
      channel_prefix=str(prefix),
      level=resolved_level,
      publisher_address=address,
      startup_delay=delay,
      idle_timeout=idle,
      shutdown_timeout=shutdown,
      max_exception_depth=depth,
      enabled=_get_enabled_flag(file_cfg),
    )


def _read_config_file() -> Dict[str, Any]:
  if not CONFIG_PATH.exists():
    return {}
  try:
    data = json.loads(CONFIG_PATH.read_text())
  except (OSError, ValueError) as exc:
    _logger.warning("Ignoring unreadable config file %s: %s", CONFIG_PATH, exc)
    return {}
  if not isinstance(data, dict):
    return {}
  # Accept either a flat object or one nested under "pubsub_log".
  section = data.get("pubsub_log")
  return section if isinstance(section, dict) else data


def _validate_publisher_address(address: str) -> None:
  if not address.startswith(_VALID_SCHEMES) or len(address.split("://", 1)[1]) == 0:
    raise ValueError(
      f"Invalid PUBSUB_LOG_PUBLISHER_ADDRESS '{address}'. "
      "Expected a ZeroMQ endpoint like tcp://127.0.0.1:7000"
    )


def _as_float(value: Any, name: str, default: Optional[float]) -> Optional[float]:
  if value is None:
    return default
  try:
    return float(value)
  except (TypeError, ValueError):
    raise ValueError(f"Invalid value for {name}: must be a number") from None


def _as_int(value: Any, name: str, default: int) -> int:
  if value is None:
    return default
  try:
    return int(value)
  except (TypeError, ValueError):
    raise ValueError(f"Invalid value for {name}: must be an integer") from None


def _parse_flag(raw: str) -> bool:
  value = raw.strip().lower()
  if value in ("1", "true", "yes", "on"):
    return True
  if value in ("0", "false", "no", "off"):
    return False
  # Unknown value -> treat as disabled.
  return False


def _get_enabled_flag(file_cfg: Dict[str, Any]) -> bool:
  raw = os.getenv("PUBSUB_LOG_ENABLED")
  if raw is not None:
    return _parse_flag(raw)
  value = file_cfg.get("enabled")
  if isinstance(value, bool):
    return value
  if isinstance(value, str):
    return _parse_flag(value)
  return True
