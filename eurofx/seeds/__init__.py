"""Import and refresh entry points for :mod:`eurofx`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["import_csv_directory", "refresh_all_from_live_source"]

if TYPE_CHECKING:  # pragma: no cover - import only for static analyzers
    from eurofx.seeds.import_archive import import_csv_directory as import_csv_directory
    from eurofx.seeds.refresh_live import (
        refresh_all_from_live_source as refresh_all_from_live_source,
    )


def __getattr__(name: str) -> Any:
    """Lazily expose the entry points to avoid import-time side effects."""

    if name == "import_csv_directory":
        from eurofx.seeds.import_archive import import_csv_directory as _import

        return _import
    if name == "refresh_all_from_live_source":
        from eurofx.seeds.refresh_live import refresh_all_from_live_source as _refresh

        return _refresh
    raise AttributeError(f"module 'eurofx.seeds' has no attribute {name}")
