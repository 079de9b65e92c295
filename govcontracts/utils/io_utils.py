"""I/O helpers for line-oriented flat files."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Union

from atomicwrites import atomic_write

PathLike = Union[str, os.PathLike[str]]


def write_lines_atomic(path: PathLike, lines: Iterable[str]) -> None:
    """Atomically replace ``path`` with ``lines``, one per ``\\n``-terminated row.

    Readers never observe a partially written file: the content goes to a
    temporary file in the target directory which is then moved into place.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with atomic_write(str(target), overwrite=True, newline="\n", encoding="utf-8") as handle:
        for line in lines:
            handle.write(line)
            handle.write("\n")


def read_lines(path: PathLike) -> list[str]:
    """Return the non-blank lines of a UTF-8 text file."""

    # ``str.splitlines`` would also break on unicode separators inside fields
    text = Path(path).read_text(encoding="utf-8")
    return [line for line in text.split("\n") if line.strip()]


__all__ = ["read_lines", "write_lines_atomic"]
