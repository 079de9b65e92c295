"""Partition fetched contracts by ticker and merge them into entity files."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from govcontracts.models import RawGovernmentContract
from govcontracts.storage import EntityStore

LOGGER = logging.getLogger(__name__)

DATE_PREFIX_LEN = 8


@dataclass
class MergeReport:
    written: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped_records: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


def line_date(line: str) -> date:
    """Parse the leading ``YYYYMMDD`` of an entity line."""

    return datetime.strptime(line[:DATE_PREFIX_LEN], "%Y%m%d").date()


def sort_lines(lines: Iterable[str]) -> list[str]:
    return sorted(set(lines), key=lambda line: (line_date(line), line))


def partition(
    records: Iterable[RawGovernmentContract],
    processing_date: date,
) -> tuple[dict[str, set[str]], int]:
    """Group rendered lines by uppercased ticker.

    Returns the mapping and the number of records dropped for lacking a ticker.
    """

    by_ticker: dict[str, set[str]] = defaultdict(set)
    skipped = 0
    for record in records:
        ticker = record.ticker.upper()
        if not ticker:
            skipped += 1
            continue
        by_ticker[ticker].add(record.to_line(processing_date))
    if skipped:
        LOGGER.warning("CONTRACTS_WITHOUT_TICKER count=%d", skipped)
    return dict(by_ticker), skipped


def merge_entity(store: EntityStore, ticker: str, new_lines: Iterable[str]) -> list[str]:
    existing = store.read_entity(ticker) or []
    merged = sort_lines([*existing, *new_lines])
    store.write_entity(ticker, merged)
    return merged


def process(store: EntityStore, processing_date: date, records: Iterable[RawGovernmentContract]) -> MergeReport:
    grouped, skipped = partition(records, processing_date)
    report = MergeReport(skipped_records=skipped)
    for ticker in sorted(grouped):
        try:
            merge_entity(store, ticker, grouped[ticker])
        except (OSError, ValueError) as exc:
            LOGGER.error("ENTITY_WRITE_FAILED ticker=%s err=%s", ticker, exc)
            report.failed[ticker] = str(exc)
            continue
        report.written.append(ticker)
    LOGGER.info(
        "ENTITY_MERGE_DONE date=%s written=%d failed=%d",
        processing_date.isoformat(),
        len(report.written),
        len(report.failed),
    )
    return report


__all__ = ["MergeReport", "line_date", "merge_entity", "partition", "process", "sort_lines"]
