"""Shared test fixtures for amtool tests.

This module provides:
- The fork/match pytest plugin (``fork`` fixture, ``--fork-subject``)
- MockAlertmanager: an in-process Alertmanager API v2 served over
  ``httpx.MockTransport``
- Config isolation so a developer's own amtool config never leaks in
"""

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from amtool.shared.logging import configure_logging

pytest_plugins = ["amtool.testing.plugin"]


# =============================================================================
# Config isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point HOME at an empty directory and clear amtool environment variables."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ("ALERTMANAGER_URL", "AMTOOL_TIMEOUT", "AMTOOL_OUTPUT"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path / ".config" / "amtool" / "config.yml"


@pytest.fixture(autouse=True)
def quiet_logging():
    """Reset logging after tests that turn on --verbose."""
    yield
    configure_logging()


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


# =============================================================================
# Mock Alertmanager
# =============================================================================


@dataclass
class MockAlertmanagerState:
    """State for MockAlertmanager to track requests and configure responses."""

    requests: list[httpx.Request] = field(default_factory=list)
    alerts: list[dict[str, Any]] = field(default_factory=list)
    silences: list[dict[str, Any]] = field(default_factory=list)
    next_silence_id: str = "d3b2c1a0-0000-4000-8000-000000000001"

    # Force every request to fail with this status and body
    error_status: int | None = None
    error_body: Any = None

    # Answer every request with this non-JSON 200 body
    raw_body: str | None = None

    def bodies(self, method: str, path: str) -> list[Any]:
        """JSON bodies of recorded requests for a method and path."""
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == method and r.url.path == path
        ]


class MockAlertmanager:
    """Mock Alertmanager API v2.

    Provides:
    - GET/POST /api/v2/alerts
    - GET/POST /api/v2/silences
    - DELETE /api/v2/silence/{id}
    """

    def __init__(self, state: MockAlertmanagerState | None = None):
        self.state = state or MockAlertmanagerState()

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.state.requests.append(request)

        if self.state.error_status is not None:
            return httpx.Response(self.state.error_status, json=self.state.error_body)
        if self.state.raw_body is not None:
            return httpx.Response(200, text=self.state.raw_body)

        path = request.url.path
        if path == "/api/v2/alerts":
            if request.method == "POST":
                return httpx.Response(200)
            return httpx.Response(200, json=self.state.alerts)

        if path == "/api/v2/silences":
            if request.method == "POST":
                return httpx.Response(200, json={"silenceID": self.state.next_silence_id})
            return httpx.Response(200, json=self.state.silences)

        if path.startswith("/api/v2/silence/") and request.method == "DELETE":
            silence_id = path.rsplit("/", 1)[-1]
            if not any(s["id"] == silence_id for s in self.state.silences):
                return httpx.Response(404, json={"message": f"silence {silence_id} not found"})
            return httpx.Response(200)

        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def alertmanager_state() -> MockAlertmanagerState:
    """Fixture providing MockAlertmanager state for configuration."""
    return MockAlertmanagerState()


@pytest.fixture
def alertmanager(alertmanager_state: MockAlertmanagerState, monkeypatch) -> MockAlertmanager:
    """Route every AlertmanagerClient created by the CLI to a MockAlertmanager."""
    from amtool import client as client_module

    mock = MockAlertmanager(alertmanager_state)
    original_init = client_module.AlertmanagerClient.__init__

    def patched_init(self, base_url, timeout=30.0, transport=None):
        original_init(self, base_url, timeout=timeout, transport=mock.transport())

    monkeypatch.setattr(client_module.AlertmanagerClient, "__init__", patched_init)
    return mock


# =============================================================================
# Sample API objects
# =============================================================================


@pytest.fixture
def sample_alert() -> dict[str, Any]:
    """Sample gettable alert."""
    return {
        "labels": {"alertname": "HighLatency", "instance": "web-1", "severity": "page"},
        "annotations": {"summary": "p99 latency above 1s"},
        "startsAt": "2026-10-19T08:00:00Z",
        "endsAt": "2026-10-19T09:00:00Z",
        "generatorURL": "http://prometheus:9090/graph",
        "fingerprint": "a1b2c3",
        "status": {"state": "active", "silencedBy": [], "inhibitedBy": []},
    }


@pytest.fixture
def sample_silences() -> list[dict[str, Any]]:
    """One active and one expired silence."""
    return [
        {
            "id": "active-1",
            "matchers": [{"name": "alertname", "value": "HighLatency", "isRegex": False}],
            "startsAt": "2026-10-19T08:00:00Z",
            "endsAt": "2026-10-19T10:00:00Z",
            "updatedAt": "2026-10-19T08:00:00Z",
            "createdBy": "oncall",
            "comment": "deploy in progress",
            "status": {"state": "active"},
        },
        {
            "id": "expired-1",
            "matchers": [{"name": "job", "value": "batch.*", "isRegex": True}],
            "startsAt": "2026-10-18T08:00:00Z",
            "endsAt": "2026-10-18T09:00:00Z",
            "updatedAt": "2026-10-18T09:00:00Z",
            "createdBy": "oncall",
            "comment": "old",
            "status": {"state": "expired"},
        },
    ]
