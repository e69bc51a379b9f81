"""Helpers for working with the bundled SQLite database."""

from __future__ import annotations

from pathlib import Path
from typing import Final

__all__ = ["DEFAULT_SQLITE_DB_PATH", "bundled_sqlite_path"]

# Resolved next to this module so callers get an absolute path regardless of
# the working directory.
DEFAULT_SQLITE_DB_PATH: Final[Path] = Path(__file__).resolve().with_name("eurofx.db")


def bundled_sqlite_path() -> Path:
    """Return the absolute path to the packaged ``eurofx.db`` file."""

    return DEFAULT_SQLITE_DB_PATH
