"""Download Quiver government contracts for one date and rebuild the universe."""
from __future__ import annotations

import argparse
import logging
import os
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from govcontracts.config import VENDOR_DATA_NAME, VENDOR_NAME, DownloaderConfig
from govcontracts.downloader import GovernmentContractsDownloader
from govcontracts.errors import QuiverCredentialsError
from govcontracts.utils.env import load_env
from govcontracts.utils.logger_utils import init_logging

LOGGER = logging.getLogger(__name__)

DATASET_START_DATE = date(2022, 4, 21)
DEPLOYMENT_DATE_ENV = "QC_DATAFLEET_DEPLOYMENT_DATE"


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), "%Y%m%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYYMMDD, got {value!r}") from exc


def resolve_processing_date(value: Optional[str] = None) -> date:
    """Explicit value, else the deployment date env var, else yesterday (UTC)."""

    raw = (value or os.getenv(DEPLOYMENT_DATE_ENV) or "").strip()
    if raw:
        return _parse_date(raw)
    return (datetime.now(timezone.utc) - timedelta(days=1)).date()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--date",
        default=None,
        help=f"Processing date YYYYMMDD (default: ${DEPLOYMENT_DATE_ENV} or yesterday UTC)",
    )
    parser.add_argument(
        "--skip-universe",
        action="store_true",
        help="Only fetch and merge; do not rebuild universe files",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    loaded_files, missing_env = load_env()
    init_logging(__name__, "govcontracts.log")
    LOGGER.info("ENV_LOADED files=%s", ",".join(loaded_files) or "none")
    if missing_env:
        LOGGER.error("ENV_MISSING keys=%s", ",".join(missing_env))
        return 1

    try:
        processing_date = resolve_processing_date(args.date)
    except argparse.ArgumentTypeError as exc:
        LOGGER.error("INVALID_PROCESSING_DATE err=%s", exc)
        return 1
    if processing_date < DATASET_START_DATE:
        LOGGER.error(
            "INVALID_PROCESSING_DATE date=%s must be on or after %s",
            processing_date.isoformat(),
            DATASET_START_DATE.isoformat(),
        )
        return 1

    try:
        downloader = GovernmentContractsDownloader(DownloaderConfig.from_env())
    except (QuiverCredentialsError, ValueError, OSError) as exc:
        LOGGER.error(
            "DOWNLOADER_INIT_FAILED vendor=%s dataset=%s err=%s",
            VENDOR_NAME,
            VENDOR_DATA_NAME,
            exc,
        )
        return 1

    with downloader:
        try:
            succeeded = downloader.run(processing_date)
            if not succeeded:
                LOGGER.error(
                    "DOWNLOAD_FAILED vendor=%s dataset=%s date=%s",
                    VENDOR_NAME,
                    VENDOR_DATA_NAME,
                    processing_date.isoformat(),
                )
            if not args.skip_universe:
                succeeded = downloader.process_universe() and succeeded
        except Exception:
            LOGGER.exception("DOWNLOADER_EXITED_UNEXPECTEDLY date=%s", processing_date.isoformat())
            return 1

    return 0 if succeeded else 1


if __name__ == "__main__":
    raise SystemExit(main())
