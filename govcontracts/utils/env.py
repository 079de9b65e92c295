"""Environment loading helpers for CLI and service entry points."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from govcontracts.errors import QuiverCredentialsError


_TOKEN_KEYS: tuple[str, ...] = ("QUIVER_API_TOKEN", "VENDOR_AUTH_TOKEN")

_REQUIRED_PRIMARY: tuple[str, ...] = ("QUIVER_API_TOKEN",)


def _load_env_file(path: Path, *, override: bool = False) -> bool:
    if not path.exists():
        return False
    return bool(load_dotenv(path, override=override))


def _resolve_env_value(primary: str, *aliases: str) -> str:
    """Return the first non-blank value among ``primary`` and its aliases.

    Values are stripped in place and an alias hit is copied onto ``primary``.
    """

    for key in (primary, *aliases):
        raw = os.environ.get(key)
        if raw is None:
            continue
        trimmed = raw.strip()
        if raw != trimmed:
            os.environ[key] = trimmed
        if trimmed:
            if key != primary:
                os.environ[primary] = trimmed
            return trimmed
    return ""


def load_env(
    required_keys: Sequence[str] | None = None,
    *,
    override: bool = False,
) -> tuple[list[str], list[str]]:
    """Load environment files from well-known locations.

    Returns a tuple of ``(loaded_files, missing_required)`` so callers can emit
    diagnostics before proceeding. The user-level file is read first, then the
    repository ``.env``; values already in the environment win unless
    ``override`` is set.
    """

    repo_root = Path(__file__).resolve().parents[2]
    user_env = Path(os.path.expanduser("~/.config/govcontracts/.env"))
    repo_env = repo_root / ".env"

    loaded_files: list[str] = []
    for path in (user_env, repo_env):
        if _load_env_file(path, override=override):
            loaded_files.append(str(path))

    _resolve_env_value(*_TOKEN_KEYS)

    required = list(required_keys) if required_keys is not None else list(_REQUIRED_PRIMARY)
    missing_required = [key for key in required if not os.environ.get(key)]
    return loaded_files, missing_required


def get_quiver_token() -> str:
    """Return the Quiver API token or raise :class:`QuiverCredentialsError`."""

    token = _resolve_env_value(*_TOKEN_KEYS)
    if not token:
        raise QuiverCredentialsError("missing", missing=[_TOKEN_KEYS[0]])
    if any(ch.isspace() for ch in token):
        raise QuiverCredentialsError("whitespace")
    return token


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


__all__ = [
    "env_float",
    "env_int",
    "env_str",
    "get_quiver_token",
    "load_env",
]
