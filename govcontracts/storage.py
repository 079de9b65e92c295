"""Flat-file storage for per-ticker datasets and universe files."""
from __future__ import annotations

import enum
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from govcontracts.utils.io_utils import read_lines, write_lines_atomic

LOGGER = logging.getLogger(__name__)

FILE_SUFFIX = ".csv"


class Location(enum.Enum):
    PROCESSED = "processed"
    STAGING = "staging"


class EntityStore:
    """Reads the processed store, writes the staging store.

    The processed directory is never written. If it cannot be created or
    listed the store carries on with the staging directory alone.
    """

    def __init__(self, processed_dir: Path, staging_dir: Path, universe_dir: Path | None = None) -> None:
        self.processed_dir = Path(processed_dir)
        self.staging_dir = Path(staging_dir)
        self.universe_dir = Path(universe_dir) if universe_dir else self.staging_dir / "universe"
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        try:
            self.processed_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("PROCESSED_STORE_UNAVAILABLE path=%s err=%s", self.processed_dir, exc)

    def _root(self, location: Location) -> Path:
        return self.processed_dir if location is Location.PROCESSED else self.staging_dir

    def entity_path(self, name: str, location: Location) -> Path:
        return self._root(location) / f"{name.lower()}{FILE_SUFFIX}"

    def find_entity(self, name: str, location: Location) -> Optional[Path]:
        """Existing file for ``name`` under ``location``, matching the stem case-insensitively."""

        path = self.entity_path(name, location)
        if path.is_file():
            return path
        wanted = name.upper()
        for ticker, candidate in self.entity_files(location):
            if ticker == wanted:
                return candidate
        return None

    def read_entity(self, name: str) -> Optional[list[str]]:
        """Return existing lines for ``name``, processed copy first.

        ``None`` means neither store holds the entity.
        """

        for location in (Location.PROCESSED, Location.STAGING):
            path = self.find_entity(name, location)
            if path is not None:
                return read_lines(path)
        return None

    def write_entity(self, name: str, lines: Iterable[str]) -> Path:
        path = self.entity_path(name, Location.STAGING)
        write_lines_atomic(path, lines)
        return path

    def entity_files(self, location: Location) -> list[tuple[str, Path]]:
        """``(TICKER, path)`` for every entity file under ``location``, sorted by path."""

        root = self._root(location)
        if not root.is_dir():
            return []
        try:
            paths = sorted(root.glob(f"*{FILE_SUFFIX}"))
        except OSError as exc:
            LOGGER.warning("ENTITY_LIST_FAILED location=%s err=%s", location.value, exc)
            return []
        return [(path.stem.upper(), path) for path in paths if path.is_file()]

    def list_entities(self, location: Location) -> list[str]:
        """Uppercased tickers with a file under ``location``, sorted."""

        return sorted({ticker for ticker, _ in self.entity_files(location)})

    def universe_path(self, day: date) -> Path:
        return self.universe_dir / f"{day:%Y%m%d}{FILE_SUFFIX}"

    def write_universe_date(self, day: date, lines: Iterable[str]) -> Path:
        path = self.universe_path(day)
        write_lines_atomic(path, lines)
        return path


__all__ = ["EntityStore", "FILE_SUFFIX", "Location"]
