"""Exceptions raised by the downloader."""
from __future__ import annotations

from datetime import date
from typing import Sequence


class QuiverCredentialsError(RuntimeError):
    """Raised when the Quiver API token is missing or malformed."""

    def __init__(self, reason: str, *, missing: Sequence[str] | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.missing = tuple(missing or ())


class QuiverRequestError(RuntimeError):
    """Raised when a request keeps failing after the whole retry budget."""

    def __init__(self, url: str, retries: int) -> None:
        super().__init__(
            f"Request for {url} failed with no more retries remaining "
            f"(retry {retries}/{retries})"
        )
        self.url = url
        self.retries = retries


class IdentifierResolutionError(RuntimeError):
    """Raised when a ticker cannot be mapped to a stable identifier."""

    def __init__(self, ticker: str, as_of: date, reason: str = "") -> None:
        message = f"Unable to resolve {ticker} as of {as_of:%Y-%m-%d}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.ticker = ticker
        self.as_of = as_of


__all__ = [
    "IdentifierResolutionError",
    "QuiverCredentialsError",
    "QuiverRequestError",
]
