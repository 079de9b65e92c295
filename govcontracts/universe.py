"""Rebuild the date-partitioned universe from every entity file on disk."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from govcontracts.identifiers import IdentifierResolver
from govcontracts.storage import EntityStore, Location
from govcontracts.utils.io_utils import read_lines

LOGGER = logging.getLogger(__name__)

MIN_INCEPTION_YEAR = 1998
DATE_WIDTH = 8


def parse_action_date(value: str) -> Optional[date]:
    """Parse a fixed-width ``YYYYMMDD`` prefix, ``None`` for anything else."""

    if len(value) != DATE_WIDTH or not (value.isascii() and value.isdigit()):
        return None
    try:
        return datetime.strptime(value, "%Y%m%d").date()
    except ValueError:
        return None


@dataclass
class UniverseReport:
    dates_written: int = 0
    lines_written: int = 0
    dropped_pre_inception: int = 0
    failed_lines: int = 0
    failed_entities: list[str] = field(default_factory=list)
    failed_dates: list[date] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_dates


class UniverseBuilder:
    """Collects ``resolved_id,TICKER,rest`` lines per action date."""

    def __init__(
        self,
        store: EntityStore,
        resolver: IdentifierResolver,
        min_inception_year: int = MIN_INCEPTION_YEAR,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.min_inception_year = min_inception_year
        self.report = UniverseReport()

    def _add_line(self, by_date: dict[date, set[str]], ticker: str, line: str) -> None:
        index = line.find(",")
        if index <= 0:
            return
        action_date = parse_action_date(line[:index])
        if action_date is None:
            self.report.failed_lines += 1
            LOGGER.warning("UNIVERSE_BAD_DATE ticker=%s line=%r", ticker, line[:40])
            return
        bucket = by_date[action_date]
        try:
            sid = self.resolver.resolve(ticker, action_date)
        except Exception as exc:  # resolver is an external collaborator
            self.report.failed_lines += 1
            LOGGER.warning(
                "UNIVERSE_RESOLVE_FAILED ticker=%s date=%s err=%s",
                ticker,
                action_date.isoformat(),
                exc,
            )
            return
        if sid.inception.year < self.min_inception_year:
            self.report.dropped_pre_inception += 1
            return
        bucket.add(f"{sid},{ticker}{line[index:]}")

    def collect(self) -> dict[date, set[str]]:
        by_date: dict[date, set[str]] = defaultdict(set)
        for location in (Location.PROCESSED, Location.STAGING):
            for ticker, path in self.store.entity_files(location):
                try:
                    lines = read_lines(path)
                except (OSError, ValueError) as exc:
                    self.report.failed_entities.append(path.name)
                    LOGGER.error(
                        "UNIVERSE_READ_FAILED ticker=%s path=%s err=%s",
                        ticker,
                        path,
                        exc,
                    )
                    continue
                for line in lines:
                    self._add_line(by_date, ticker, line)
        return by_date

    def build(self) -> bool:
        self.report = UniverseReport()
        by_date = self.collect()
        for day in sorted(by_date):
            lines = sorted(by_date[day])
            try:
                self.store.write_universe_date(day, lines)
            except OSError as exc:
                LOGGER.error("UNIVERSE_WRITE_FAILED date=%s err=%s", day.isoformat(), exc)
                self.report.failed_dates.append(day)
                continue
            self.report.dates_written += 1
            self.report.lines_written += len(lines)
        LOGGER.info(
            "UNIVERSE_WRITTEN dates=%d lines=%d dropped=%d failed_lines=%d failed_entities=%d",
            self.report.dates_written,
            self.report.lines_written,
            self.report.dropped_pre_inception,
            self.report.failed_lines,
            len(self.report.failed_entities),
        )
        return self.report.ok


__all__ = ["MIN_INCEPTION_YEAR", "UniverseBuilder", "UniverseReport", "parse_action_date"]
