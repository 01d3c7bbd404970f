import os
import threading

import httpx

from pubsub_log import environment as env_mod  # type: ignore[import]
from pubsub_log.environment import EnvironmentInfo, operation_context  # type: ignore[import]


class FakeResponse:
  def __init__(self, text, status_code=200):
    self.text = text
    self.status_code = status_code

  def raise_for_status(self):
    if self.status_code >= 400:
      request = httpx.Request("GET", "http://ip.example")
      raise httpx.HTTPStatusError("bad status", request=request, response=httpx.Response(self.status_code))


def test_remote_ip_falls_back_to_local_without_lookup_url(monkeypatch):
  monkeypatch.delenv("PUBSUB_LOG_EXTERNAL_IP_URL", raising=False)
  info = EnvironmentInfo()
  assert info.remote_ip == info.local_ip
  assert info.local_ip


def test_remote_ip_lookup_is_cached(monkeypatch):
  calls = []

  def fake_get(url, timeout=None):
    calls.append(url)
    return FakeResponse("203.0.113.7\n")

  monkeypatch.setattr(env_mod.httpx, "get", fake_get)
  info = EnvironmentInfo(external_ip_url="http://ip.example")

  assert info.remote_ip == "203.0.113.7"
  assert info.remote_ip == "203.0.113.7"
  assert calls == ["http://ip.example"]


def test_remote_ip_lookup_failure_uses_local_ip(monkeypatch, caplog):
  def refuse(url, timeout=None):
    raise httpx.ConnectError("Connection refused")

  monkeypatch.setattr(env_mod.httpx, "get", refuse)
  info = EnvironmentInfo(external_ip_url="http://ip.example")

  assert info.remote_ip == info.local_ip
  assert "External IP lookup" in caplog.text


def test_remote_ip_lookup_http_error_uses_local_ip(monkeypatch):
  monkeypatch.setattr(env_mod.httpx, "get", lambda url, timeout=None: FakeResponse("", 503))
  info = EnvironmentInfo(external_ip_url="http://ip.example")
  assert info.remote_ip == info.local_ip


def test_process_id_and_defaults():
  info = EnvironmentInfo(user_agent="agent/1.0")
  assert info.process_id == os.getpid()
  assert info.user_agent == "agent/1.0"
  assert info.hostname
  assert info.operation


def test_operation_context_is_per_thread():
  info = EnvironmentInfo(default_operation="default-op")
  seen = {}

  def other():
    seen["other"] = info.operation

  with operation_context("import-job"):
    t = threading.Thread(target=other)
    t.start()
    t.join()
    seen["main"] = info.operation

  assert seen == {"main": "import-job", "other": "default-op"}
