from __future__ import annotations

from datetime import date

import pytest

from govcontracts import main
from tests._quiver_helpers import DummyResponse, contract, page


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path):
    monkeypatch.setattr(main, "load_env", lambda: ([], []))
    monkeypatch.setattr(main, "init_logging", lambda *args, **kwargs: None)
    monkeypatch.delenv("VENDOR_AUTH_TOKEN", raising=False)
    monkeypatch.delenv(main.DEPLOYMENT_DATE_ENV, raising=False)
    monkeypatch.delenv("MAP_FILES_DIR", raising=False)
    monkeypatch.setenv("QUIVER_API_TOKEN", "token")
    monkeypatch.setenv("DATA_FOLDER", str(tmp_path / "data"))
    monkeypatch.setenv("TEMP_OUTPUT_DIRECTORY", str(tmp_path / "out"))
    return tmp_path


def _staging(tmp_path):
    return tmp_path / "out" / "alternative" / "quiver" / "governmentcontracts"


def test_success_exits_zero_and_builds_universe(fake_http, sleeps, tmp_path):
    fake_http.queue(DummyResponse(200, page(contract("AAPL"))), DummyResponse(200, "[]"))

    assert main.main(["--date", "20240102"]) == 0

    assert (_staging(tmp_path) / "aapl.csv").exists()
    assert (_staging(tmp_path) / "universe" / "20240102.csv").exists()


def test_failed_run_exits_one_but_still_rebuilds_universe(fake_http, sleeps, tmp_path):
    staging = _staging(tmp_path)
    staging.mkdir(parents=True)
    (staging / "msft.csv").write_text("20240101,Old,Agency,1\n", encoding="utf-8")
    fake_http.queue(DummyResponse(404, ""))

    assert main.main(["--date", "20240102"]) == 1

    assert (staging / "universe" / "20240101.csv").exists()


def test_skip_universe(fake_http, sleeps, tmp_path):
    fake_http.queue(DummyResponse(200, page(contract("AAPL"))), DummyResponse(200, "[]"))

    assert main.main(["--date", "20240102", "--skip-universe"]) == 0

    assert not (_staging(tmp_path) / "universe").exists()


def test_rejects_dates_before_dataset_start(fake_http):
    assert main.main(["--date", "20220420"]) == 1
    assert fake_http.calls == []


def test_rejects_malformed_date(fake_http):
    assert main.main(["--date", "2024-01-02"]) == 1
    assert fake_http.calls == []


def test_missing_token_is_fatal(monkeypatch, fake_http):
    monkeypatch.delenv("QUIVER_API_TOKEN")

    assert main.main(["--date", "20240102"]) == 1
    assert fake_http.calls == []


def test_missing_required_env_stops_before_any_request(monkeypatch, fake_http, tmp_path):
    monkeypatch.setattr(main, "load_env", lambda: ([str(tmp_path / ".env")], ["QUIVER_API_TOKEN"]))

    assert main.main(["--date", "20240102"]) == 1
    assert fake_http.calls == []
    assert not (tmp_path / "out").exists()


def test_unexpected_error_is_fatal(monkeypatch, fake_http, sleeps):
    def boom(self):
        raise RuntimeError("disk on fire")

    fake_http.queue(DummyResponse(200, page(contract("AAPL"))), DummyResponse(200, "[]"))
    monkeypatch.setattr(main.GovernmentContractsDownloader, "process_universe", boom)

    assert main.main(["--date", "20240102"]) == 1


def test_processing_date_from_environment(monkeypatch):
    monkeypatch.setenv(main.DEPLOYMENT_DATE_ENV, "20240315")

    assert main.resolve_processing_date() == date(2024, 3, 15)
    assert main.resolve_processing_date("20240102") == date(2024, 1, 2)


def test_processing_date_defaults_to_yesterday():
    assert main.resolve_processing_date() <= date.today()
