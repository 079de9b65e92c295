"""Runtime configuration for the government contracts downloader."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from govcontracts.utils.env import env_float, env_int, env_str, get_quiver_token

VENDOR_NAME = "quiver"
VENDOR_DATA_NAME = "governmentcontracts"
DEFAULT_BASE_URL = "https://api.quiverquant.com/beta/"


@dataclass(frozen=True)
class DownloaderConfig:
    api_token: str
    base_url: str = DEFAULT_BASE_URL
    max_pages: int = 100
    rate_limit: int = 5
    rate_window_seconds: float = 10.0
    max_retries: int = 5
    retry_backoff_seconds: float = 1.0
    timeout_seconds: float = 30.0
    data_folder: Path = Path("data")
    temp_output_directory: Path = Path("/temp-output-directory")
    map_files_dir: Path | None = None

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.rate_limit < 1:
            raise ValueError("rate_limit must be at least 1")

    @property
    def processed_dir(self) -> Path:
        """Long-lived canonical store, read but never written."""
        return Path(self.data_folder) / "alternative" / VENDOR_NAME / VENDOR_DATA_NAME

    @property
    def staging_dir(self) -> Path:
        return Path(self.temp_output_directory) / "alternative" / VENDOR_NAME / VENDOR_DATA_NAME

    @property
    def universe_dir(self) -> Path:
        return self.staging_dir / "universe"

    @property
    def resolved_map_files_dir(self) -> Path:
        if self.map_files_dir is not None:
            return Path(self.map_files_dir)
        return Path(self.data_folder) / "equity" / "usa" / "map_files"

    @classmethod
    def from_env(cls) -> "DownloaderConfig":
        """Build a config from environment variables (see ``load_env``)."""

        map_files = env_str("MAP_FILES_DIR", "")
        return cls(
            api_token=get_quiver_token(),
            base_url=env_str("QUIVER_BASE_URL", DEFAULT_BASE_URL),
            max_pages=env_int("QUIVER_MAX_PAGES", 100),
            rate_limit=env_int("QUIVER_RATE_LIMIT", 5),
            rate_window_seconds=env_float("QUIVER_RATE_WINDOW_SECONDS", 10.0),
            max_retries=env_int("QUIVER_MAX_RETRIES", 5),
            retry_backoff_seconds=env_float("QUIVER_RETRY_BACKOFF_SECONDS", 1.0),
            timeout_seconds=env_float("QUIVER_TIMEOUT_SECONDS", 30.0),
            data_folder=Path(env_str("DATA_FOLDER", "data")),
            temp_output_directory=Path(
                env_str("TEMP_OUTPUT_DIRECTORY", "/temp-output-directory")
            ),
            map_files_dir=Path(map_files) if map_files else None,
        )


__all__ = ["DEFAULT_BASE_URL", "DownloaderConfig", "VENDOR_DATA_NAME", "VENDOR_NAME"]
