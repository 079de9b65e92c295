"""HTTP helpers for the Quiver Quantitative API."""
from __future__ import annotations

import enum
import logging
import time
from typing import NamedTuple

import requests

from govcontracts.config import DEFAULT_BASE_URL
from govcontracts.errors import QuiverRequestError
from govcontracts.utils.rate import RateGate

LOGGER = logging.getLogger(__name__)


class FetchOutcome(enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"


class FetchResult(NamedTuple):
    body: str
    outcome: FetchOutcome


class QuiverFetcher:
    """Issue rate-gated GET requests with bounded retries.

    A fresh :class:`requests.Session` is opened for every attempt so that auth
    headers are never carried over from a previous connection.
    """

    def __init__(
        self,
        api_token: str,
        gate: RateGate,
        *,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = 5,
        backoff_seconds: float = 1.0,
        timeout: float = 30.0,
    ) -> None:
        self.api_token = api_token
        self.gate = gate
        self.base_url = base_url.rstrip("/") + "/"
        self.max_retries = max(1, int(max_retries))
        self.backoff_seconds = backoff_seconds
        self.timeout = timeout
        self.attempts = 0

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Token {self.api_token}",
            "Accept": "application/json",
        }

    def url_for(self, path: str) -> str:
        return f"{self.base_url}{path.lstrip('/')}"

    def _get(self, session: requests.Session, url: str) -> requests.Response:
        self.gate.acquire()
        self.attempts += 1
        return session.get(url, timeout=self.timeout)

    def fetch(self, path: str) -> FetchResult:
        url = self.url_for(path)
        for retry in range(1, self.max_retries + 1):
            try:
                with requests.Session() as session:
                    session.headers.update(self._headers())
                    response = self._get(session, url)
                    if response.status_code == 404:
                        LOGGER.warning("QUIVER_NOT_FOUND url=%s", url)
                        return FetchResult("", FetchOutcome.NOT_FOUND)
                    if response.status_code == 401:
                        # response.url is the final location after redirects
                        final_url = response.url or url
                        LOGGER.info("QUIVER_UNAUTHORIZED_REISSUE url=%s", final_url)
                        response = self._get(session, final_url)
                    response.raise_for_status()
                    return FetchResult(response.text, FetchOutcome.OK)
            except requests.RequestException as exc:
                LOGGER.error(
                    "QUIVER_REQUEST_FAILED url=%s retry=%d/%d err=%s",
                    url,
                    retry,
                    self.max_retries,
                    exc,
                )
                if retry < self.max_retries:
                    time.sleep(self.backoff_seconds)
        raise QuiverRequestError(url, self.max_retries)


__all__ = ["FetchOutcome", "FetchResult", "QuiverFetcher"]
