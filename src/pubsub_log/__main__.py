from __future__ import annotations

import argparse
import sys
import time
from typing import NoReturn, Optional

import zmq

from .config import ProviderConfig
from .levels import parse_levels
from .propagation import ChannelPropagationStrategy, LevelChannelPropagationStrategy
from .provider import PubSubLogProvider
from .publishers import ZmqPublisher

_CLOSE_LINGER_MS = 1000
_EMITTERS = ("fatal", "error", "warning", "info", "trace", "debug")


def main(argv: list[str] | None = None) -> NoReturn:
  argv = list(sys.argv[1:] if argv is None else argv)

  if not argv or argv[0] not in {"emit", "tail"}:
    print("Usage: python -m pubsub_log {emit|tail}", file=sys.stderr)
    print("  emit   - Publish a single log record", file=sys.stderr)
    print("  tail   - Subscribe to a log channel and print records as they arrive", file=sys.stderr)
    sys.exit(1)

  if argv[0] == "emit":
    sys.exit(_run_emit(argv[1:]))
  sys.exit(_run_tail(argv[1:]))


def _run_emit(args: list[str]) -> int:
  parser = argparse.ArgumentParser(prog="python -m pubsub_log emit")
  parser.add_argument("message")
  parser.add_argument("--level", choices=_EMITTERS, default="info")
  parser.add_argument("--category", default="cli")
  parser.add_argument("--address", help="ZeroMQ endpoint to bind the publisher on")
  parser.add_argument("--per-level", action="store_true", help="Publish on a per-level channel")
  parser.add_argument(
    "--wait",
    type=float,
    default=0.5,
    help="Seconds to wait before publishing so subscribers can connect",
  )
  ns = parser.parse_args(args)

  try:
    config = ProviderConfig.from_params_or_env(
      publisher_address=ns.address,
      startup_delay=0,
    )
  except ValueError as exc:
    print(f"Invalid configuration: {exc}", file=sys.stderr)
    return 2

  strategy = LevelChannelPropagationStrategy() if ns.per_level else ChannelPropagationStrategy()
  publisher = ZmqPublisher(config.publisher_address)
  # Bind first so subscribers can join during the wait; PUB drops frames
  # sent before a subscription arrives.
  publisher.open()
  time.sleep(ns.wait)

  provider = PubSubLogProvider(publisher, strategy, config)
  provider.set_level(config.level | parse_levels(ns.level))

  try:
    getattr(provider, ns.level)(ns.category, ns.message)
  finally:
    provider.close()
    publisher.close(linger=_CLOSE_LINGER_MS)

  if provider.worker.failed:
    print("Failed to publish record; see debug logs for details.", file=sys.stderr)
    return 1
  return 0


def _run_tail(args: list[str], ctx: Optional[zmq.Context] = None) -> int:
  parser = argparse.ArgumentParser(prog="python -m pubsub_log tail")
  parser.add_argument("--address", help="ZeroMQ endpoint to connect to")
  parser.add_argument("--channel", help="Channel prefix to subscribe to (default: configured prefix)")
  ns = parser.parse_args(args)

  try:
    config = ProviderConfig.from_params_or_env(publisher_address=ns.address)
  except ValueError as exc:
    print(f"Invalid configuration: {exc}", file=sys.stderr)
    return 2

  channel = ns.channel if ns.channel is not None else config.channel_prefix
  ctx = ctx or zmq.Context.instance()
  sock = ctx.socket(zmq.SUB)
  sock.connect(config.publisher_address)
  sock.setsockopt_string(zmq.SUBSCRIBE, channel)

  print(f"Subscribed to '{channel}' on {config.publisher_address} (Ctrl+C to stop)", file=sys.stderr)
  try:
    while True:
      topic, payload = sock.recv_multipart()
      print(f"{topic.decode('utf-8')} {payload.decode('utf-8')}", flush=True)
  except KeyboardInterrupt:
    return 0
  finally:
    sock.close(linger=0)


if __name__ == "__main__":
  main()
