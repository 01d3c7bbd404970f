import json
import logging

import pytest

from pubsub_log.propagation import (  # type: ignore[import]
  ChannelPropagationStrategy,
  HttpPropagationStrategy,
  LevelChannelPropagationStrategy,
  PropagationError,
  PropagationStrategy,
  join_channel,
)
from pubsub_log.publishers import InMemoryPublisher  # type: ignore[import]


def test_join_channel_skips_empty_parts():
  assert join_channel("logs", "log") == "logs:log"
  assert join_channel("", "log") == "log"
  assert join_channel("logs", "log", "error") == "logs:log:error"


def test_channel_strategy_publishes_on_prefixed_channel():
  publisher = InMemoryPublisher()
  strategy = ChannelPropagationStrategy(channel="events")
  assert isinstance(strategy, PropagationStrategy)

  strategy.propagate("payload", "app", publisher)
  assert publisher.messages == [("app:events", "payload")]


def test_level_channel_strategy_routes_by_record_level():
  publisher = InMemoryPublisher()
  strategy = LevelChannelPropagationStrategy()

  strategy.propagate(json.dumps({"level": "Error", "message": "x"}), "logs", publisher)
  strategy.propagate(json.dumps({"level": "Info", "message": "y"}), "logs", publisher)

  assert [c for c, _ in publisher.messages] == ["logs:log:error", "logs:log:info"]


def test_level_channel_strategy_rejects_non_record_messages():
  with pytest.raises(PropagationError):
    LevelChannelPropagationStrategy().propagate("not json", "logs", InMemoryPublisher())


def test_http_strategy_posts_channel_and_message(monkeypatch):
  import urllib.request as req  # type: ignore[import]

  sent = []

  class FakeResponse:
    def __enter__(self):
      return self

    def __exit__(self, *exc):
      return False

  def fake_urlopen(request, timeout=None):
    sent.append((request.full_url, json.loads(request.data.decode("utf-8"))))
    return FakeResponse()

  monkeypatch.setattr(req, "urlopen", fake_urlopen)

  strategy = HttpPropagationStrategy(endpoint="http://localhost:9999/publish")
  strategy.propagate("payload", "logs", InMemoryPublisher())

  assert sent == [("http://localhost:9999/publish", {"channel": "logs:log", "message": "payload"})]


def test_http_strategy_raises_and_logs_on_failure(monkeypatch, caplog):
  import urllib.request as req  # type: ignore[import]

  def boom(*args, **kwargs):
    raise req.URLError("bridge unavailable")

  monkeypatch.setattr(req, "urlopen", boom)

  strategy = HttpPropagationStrategy(endpoint="http://localhost:9999/publish")
  with caplog.at_level(logging.WARNING, logger="pubsub_log.propagation.http"):
    with pytest.raises(PropagationError):
      strategy.propagate("payload", "logs", InMemoryPublisher())

  assert "HTTP propagation to http://localhost:9999/publish failed" in caplog.text
