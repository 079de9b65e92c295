from __future__ import annotations

import pytest
import requests

from govcontracts.errors import QuiverRequestError
from govcontracts.http_quiver import FetchOutcome, QuiverFetcher
from tests._quiver_helpers import CountingGate, DummyResponse

BASE = "https://api.quiverquant.com/beta/"
PATH = "live/govcontractsall?date=20240102&page=1"


def _fetcher(gate, **kwargs) -> QuiverFetcher:
    return QuiverFetcher("secret-token", gate, base_url=BASE, **kwargs)


def test_success_returns_body_and_sends_auth_headers(fake_http, sleeps):
    gate = CountingGate()
    fake_http.queue(DummyResponse(200, '[{"Ticker": "AAPL"}]'))

    result = _fetcher(gate).fetch(PATH)

    assert result.outcome is FetchOutcome.OK
    assert result.body == '[{"Ticker": "AAPL"}]'
    url, headers = fake_http.calls[0]
    assert url == BASE + PATH
    assert headers["Authorization"] == "Token secret-token"
    assert headers["Accept"] == "application/json"
    assert gate.acquired == 1
    assert sleeps == []


def test_not_found_is_an_empty_result(fake_http, sleeps):
    gate = CountingGate()
    fake_http.queue(DummyResponse(404, "missing"))

    result = _fetcher(gate).fetch(PATH)

    assert result.body == ""
    assert result.outcome is FetchOutcome.NOT_FOUND
    assert gate.acquired == 1
    assert sleeps == []


def test_retries_transient_failures_then_succeeds(fake_http, sleeps):
    gate = CountingGate()
    fake_http.queue(
        requests.ConnectionError("reset"),
        DummyResponse(503, "busy"),
        DummyResponse(200, "[]"),
    )

    fetcher = _fetcher(gate)
    result = fetcher.fetch(PATH)

    assert result.body == "[]"
    assert gate.acquired == 3
    assert len(fake_http.calls) == 3
    assert fetcher.attempts == 3
    assert sleeps == [1.0, 1.0]


def test_new_session_per_attempt(fake_http, sleeps):
    fake_http.queue(requests.Timeout("slow"), DummyResponse(200, "[]"))

    _fetcher(CountingGate()).fetch(PATH)

    assert fake_http.sessions == 2


def test_gives_up_after_max_retries(fake_http, sleeps):
    gate = CountingGate()
    fake_http.default = lambda url: requests.ConnectionError("down")
    fetcher = _fetcher(gate, max_retries=5)

    with pytest.raises(QuiverRequestError) as excinfo:
        fetcher.fetch(PATH)

    assert gate.acquired == 5
    assert len(fake_http.calls) == 5
    assert len(sleeps) == 4
    assert excinfo.value.retries == 5
    assert excinfo.value.url == BASE + PATH
    assert "5/5" in str(excinfo.value)


def test_unauthorized_is_reissued_once_to_final_url(fake_http, sleeps):
    gate = CountingGate()
    final_url = "https://api.quiverquant.com/beta/redirected?page=1"
    fake_http.queue(DummyResponse(401, "", url=final_url), DummyResponse(200, "[1]"))

    result = _fetcher(gate).fetch(PATH)

    assert result.body == "[1]"
    assert [call[0] for call in fake_http.calls] == [BASE + PATH, final_url]
    assert gate.acquired == 2
    assert sleeps == []


def test_repeated_unauthorized_consumes_retry_budget(fake_http, sleeps):
    gate = CountingGate()
    fake_http.default = lambda url: DummyResponse(401, "", url=url)

    with pytest.raises(QuiverRequestError):
        _fetcher(gate, max_retries=3).fetch(PATH)

    # one original request plus one reissue per attempt
    assert len(fake_http.calls) == 6
    assert gate.acquired == 6
    assert len(sleeps) == 2


def test_custom_backoff(fake_http, sleeps):
    fake_http.queue(DummyResponse(500), DummyResponse(200, "[]"))

    _fetcher(CountingGate(), backoff_seconds=0.25).fetch(PATH)

    assert sleeps == [0.25]
