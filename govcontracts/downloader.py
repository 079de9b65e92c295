"""Fetch, merge and universe passes for Quiver government contracts."""
from __future__ import annotations

import logging
import time
from datetime import date
from typing import Optional

from govcontracts import merge
from govcontracts.config import VENDOR_DATA_NAME, VENDOR_NAME, DownloaderConfig
from govcontracts.errors import QuiverRequestError
from govcontracts.http_quiver import QuiverFetcher
from govcontracts.identifiers import IdentifierResolver, MapFileResolver
from govcontracts.pagination import PageScan, fetch_all
from govcontracts.storage import EntityStore
from govcontracts.universe import UniverseBuilder
from govcontracts.utils.rate import RateGate

LOGGER = logging.getLogger(__name__)


class GovernmentContractsDownloader:
    """Owns the rate gate and wires fetcher, store and resolver together.

    Use as a context manager; the gate is closed on exit and the instance
    cannot issue further requests.
    """

    def __init__(
        self,
        config: DownloaderConfig,
        *,
        resolver: Optional[IdentifierResolver] = None,
        store: Optional[EntityStore] = None,
        fetcher: Optional[QuiverFetcher] = None,
    ) -> None:
        self.config = config
        self.gate = RateGate(config.rate_limit, config.rate_window_seconds)
        self.fetcher = fetcher or QuiverFetcher(
            config.api_token,
            self.gate,
            base_url=config.base_url,
            max_retries=config.max_retries,
            backoff_seconds=config.retry_backoff_seconds,
            timeout=config.timeout_seconds,
        )
        self.store = store or EntityStore(
            config.processed_dir, config.staging_dir, config.universe_dir
        )
        self.resolver = resolver or MapFileResolver(config.resolved_map_files_dir)
        self.last_scan: Optional[PageScan] = None
        self.last_report: Optional[merge.MergeReport] = None

    def run(self, processing_date: date) -> bool:
        """Fetch every page for ``processing_date`` and merge it by ticker.

        True only if all pages came back, at least one record was found, the
        page ceiling was not hit and every ticker was written.
        """

        started = time.monotonic()
        LOGGER.info(
            "RUN_START vendor=%s dataset=%s date=%s",
            VENDOR_NAME,
            VENDOR_DATA_NAME,
            processing_date.isoformat(),
        )
        try:
            scan = fetch_all(self.fetcher, processing_date, self.config.max_pages)
        except (QuiverRequestError, ValueError) as exc:
            LOGGER.error("RUN_FETCH_FAILED date=%s err=%s", processing_date.isoformat(), exc)
            return False
        self.last_scan = scan

        if scan.empty:
            LOGGER.error("RUN_NO_RECORDS date=%s", processing_date.isoformat())
            return False

        report = merge.process(self.store, processing_date, scan.records)
        self.last_report = report

        if scan.ceiling_reached:
            LOGGER.error(
                "RUN_INCOMPLETE date=%s max_pages=%d; more data may be available",
                processing_date.isoformat(),
                self.config.max_pages,
            )
            return False
        if not report.ok:
            LOGGER.error(
                "RUN_DEGRADED date=%s failed_tickers=%s",
                processing_date.isoformat(),
                ",".join(sorted(report.failed)),
            )
            return False

        LOGGER.info(
            "RUN_DONE date=%s tickers=%d elapsed=%.2fs",
            processing_date.isoformat(),
            len(report.written),
            time.monotonic() - started,
        )
        return True

    def process_universe(self) -> bool:
        return UniverseBuilder(self.store, self.resolver).build()

    def close(self) -> None:
        self.gate.close()

    def __enter__(self) -> "GovernmentContractsDownloader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["GovernmentContractsDownloader"]
