"""Ticker to stable security identifier resolution."""
from __future__ import annotations

import bisect
import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional, Protocol

from govcontracts.errors import IdentifierResolutionError

LOGGER = logging.getLogger(__name__)

# First date covered by equity map files; unmapped tickers are stamped with it.
DEFAULT_INCEPTION = date(1998, 1, 2)


@dataclass(frozen=True, order=True)
class StableIdentifier:
    symbol: str
    inception: date

    def __str__(self) -> str:
        return f"{self.symbol} {self.inception:%Y%m%d}"


class IdentifierResolver(Protocol):
    def resolve(self, ticker: str, as_of: date) -> StableIdentifier:
        ...


class StaticResolver:
    """Resolve from a fixed ``ticker -> identifier`` mapping."""

    def __init__(
        self,
        mapping: Mapping[str, StableIdentifier],
        default: Optional[StableIdentifier] = None,
    ) -> None:
        self._mapping = {key.upper(): value for key, value in mapping.items()}
        self._default = default

    def resolve(self, ticker: str, as_of: date) -> StableIdentifier:
        found = self._mapping.get(ticker.upper(), self._default)
        if found is None:
            raise IdentifierResolutionError(ticker, as_of, "unknown ticker")
        return found


@dataclass(frozen=True)
class MapFile:
    """Ticker history of one security: ``(last_date, ticker)`` rows, ascending."""

    rows: tuple[tuple[date, str], ...]

    @property
    def first_date(self) -> date:
        return self.rows[0][0]

    @property
    def first_ticker(self) -> str:
        return self.rows[0][1]

    def ticker_on(self, as_of: date) -> Optional[str]:
        dates = [row[0] for row in self.rows]
        index = bisect.bisect_left(dates, as_of)
        if index >= len(self.rows):
            return None
        return self.rows[index][1]

    @property
    def tickers(self) -> set[str]:
        return {row[1] for row in self.rows}


def parse_map_file(lines: Iterable[str]) -> Optional[MapFile]:
    rows: list[tuple[date, str]] = []
    for raw in lines:
        parts = raw.strip().split(",")
        if len(parts) < 2 or not parts[1].strip():
            continue
        try:
            day = datetime.strptime(parts[0].strip(), "%Y%m%d").date()
        except ValueError:
            continue
        rows.append((day, parts[1].strip().upper()))
    if not rows:
        return None
    rows.sort(key=lambda row: row[0])
    return MapFile(tuple(rows))


class MapFileResolver:
    """Resolve tickers with a directory of map files.

    Each ``*.csv`` holds ``YYYYMMDD,ticker[,exchange]`` rows meaning "through
    this date the security traded as this ticker". A ticker resolves to the
    security whose active row at ``as_of`` carries it; the identifier is the
    security's first ticker and first date. Tickers with no map file resolve
    to ``DEFAULT_INCEPTION``.
    """

    def __init__(self, map_files_dir: Path) -> None:
        self.map_files_dir = Path(map_files_dir)
        self._by_ticker: Optional[dict[str, list[MapFile]]] = None
        self._lock = threading.Lock()

    def _load(self) -> dict[str, list[MapFile]]:
        with self._lock:
            if self._by_ticker is not None:
                return self._by_ticker
            by_ticker: dict[str, list[MapFile]] = {}
            if not self.map_files_dir.is_dir():
                LOGGER.warning("MAP_FILES_MISSING path=%s", self.map_files_dir)
            else:
                count = 0
                for path in sorted(self.map_files_dir.glob("*.csv")):
                    try:
                        map_file = parse_map_file(path.read_text(encoding="utf-8").split("\n"))
                    except OSError as exc:
                        LOGGER.warning("MAP_FILE_UNREADABLE path=%s err=%s", path, exc)
                        continue
                    if map_file is None:
                        continue
                    count += 1
                    for ticker in map_file.tickers:
                        by_ticker.setdefault(ticker, []).append(map_file)
                LOGGER.info("MAP_FILES_LOADED path=%s files=%d", self.map_files_dir, count)
            self._by_ticker = by_ticker
            return by_ticker

    def resolve(self, ticker: str, as_of: date) -> StableIdentifier:
        symbol = ticker.strip().upper()
        if not symbol:
            raise IdentifierResolutionError(ticker, as_of, "blank ticker")
        candidates = [
            map_file
            for map_file in self._load().get(symbol, [])
            if map_file.ticker_on(as_of) == symbol
        ]
        if not candidates:
            return StableIdentifier(symbol, DEFAULT_INCEPTION)
        chosen = max(candidates, key=lambda map_file: map_file.first_date)
        return StableIdentifier(chosen.first_ticker, chosen.first_date)


__all__ = [
    "DEFAULT_INCEPTION",
    "IdentifierResolver",
    "MapFile",
    "MapFileResolver",
    "StableIdentifier",
    "StaticResolver",
    "parse_map_file",
]
