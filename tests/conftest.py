from __future__ import annotations

from pathlib import Path

import pytest

from govcontracts import http_quiver
from govcontracts.storage import EntityStore
from tests._quiver_helpers import FakeHttp


@pytest.fixture
def fake_http(monkeypatch) -> FakeHttp:
    http = FakeHttp()
    monkeypatch.setattr(http_quiver.requests, "Session", http.session_factory)
    return http


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    calls: list[float] = []
    monkeypatch.setattr("time.sleep", lambda value: calls.append(value))
    return calls


@pytest.fixture
def store(tmp_path: Path) -> EntityStore:
    return EntityStore(tmp_path / "processed", tmp_path / "staging")
