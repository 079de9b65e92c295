"""Page through ``govcontractsall`` for a single processing date."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from govcontracts.http_quiver import QuiverFetcher
from govcontracts.models import RawGovernmentContract, parse_page

LOGGER = logging.getLogger(__name__)

EMPTY_PAGE = "[]"


@dataclass
class PageScan:
    records: list[RawGovernmentContract] = field(default_factory=list)
    pages_fetched: int = 0
    requests: int = 0
    ceiling_reached: bool = False

    @property
    def empty(self) -> bool:
        return not self.records


def contracts_path(processing_date: date, page: int) -> str:
    return f"live/govcontractsall?date={processing_date:%Y%m%d}&page={page}"


def _is_terminal(body: str) -> bool:
    stripped = (body or "").strip()
    return not stripped or stripped == EMPTY_PAGE


def fetch_all(fetcher: QuiverFetcher, processing_date: date, max_pages: int = 100) -> PageScan:
    """Fetch pages ``1..max_pages`` until one comes back empty.

    ``ceiling_reached`` is set when the last permitted page still had data,
    in which case the API may hold more records than were collected.
    """

    scan = PageScan()
    for page in range(1, max_pages + 1):
        result = fetcher.fetch(contracts_path(processing_date, page))
        scan.requests += 1
        if _is_terminal(result.body):
            break
        scan.records.extend(parse_page(result.body))
        scan.pages_fetched = page
    else:
        scan.ceiling_reached = True
        LOGGER.warning(
            "QUIVER_PAGE_CEILING date=%s max_pages=%d records=%d",
            processing_date.isoformat(),
            max_pages,
            len(scan.records),
        )

    LOGGER.info(
        "QUIVER_PAGES_DONE date=%s pages=%d requests=%d records=%d",
        processing_date.isoformat(),
        scan.pages_fetched,
        scan.requests,
        len(scan.records),
    )
    return scan


__all__ = ["EMPTY_PAGE", "PageScan", "contracts_path", "fetch_all"]
