"""CLI + helpers for importing the Bundesbank CSV archive into the store."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from eurofx.db import DEFAULT_SQLITE_DB_PATH
from eurofx.db.base_backend import BackendStrategy
from eurofx.db.sqlite_backend import SQLiteBackend
from eurofx.exceptions import ArchiveUnavailableError
from eurofx.ingestion.archive_csv import DEFAULT_ARCHIVE_DIR, ArchiveCSVParser
from eurofx.ingestion.reconciler import Reconciler
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ImportSummary", "import_csv_directory", "parse_args", "main"]


@dataclass(slots=True)
class ImportSummary:
    """Outcome of one directory scan."""

    files_processed: int = 0
    files_failed: int = 0
    files_skipped: int = 0
    inserted: int = 0
    skipped: int = 0
    invalid_rows: int = 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=str(DEFAULT_ARCHIVE_DIR),
        help="Directory holding BBEX3.D.<CODE>.EUR.BB.AC.000.csv files",
    )
    parser.add_argument(
        "--db",
        dest="db_path",
        default=str(DEFAULT_SQLITE_DB_PATH),
        help="SQLite database path",
    )
    return parser.parse_args(argv)


def _list_archive_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        raise ArchiveUnavailableError(f"Archive directory {directory} does not exist")
    try:
        return sorted(path for path in directory.iterdir() if path.suffix.lower() == ".csv")
    except OSError as exc:
        raise ArchiveUnavailableError(f"Cannot list archive directory {directory}: {exc}") from exc


def import_csv_directory(
    directory: str | Path = DEFAULT_ARCHIVE_DIR,
    *,
    store: BackendStrategy,
    parser: ArchiveCSVParser | None = None,
    reconciler: Reconciler | None = None,
) -> ImportSummary:
    """Import every archive file under ``directory`` into ``store``.

    A broken file is logged and counted; only an unreadable directory stops
    the scan.
    """

    csv_parser = parser or ArchiveCSVParser()
    upserter = reconciler or Reconciler(store)
    summary = ImportSummary()
    files = _list_archive_files(Path(directory))
    if not files:
        LOGGER.info("No CSV files found in %s", directory)
        return summary

    for csv_path in files:
        LOGGER.info("Importing %s", csv_path.name)
        try:
            parsed = csv_parser.parse(csv_path)
            summary.invalid_rows += parsed.invalid_lines
            if not parsed.has_identity:
                LOGGER.warning("Skipped %s: no currency code in header", csv_path.name)
                summary.files_skipped += 1
                summary.files_processed += 1
                continue
            result = upserter.reconcile(parsed.currency_code, parsed.currency_name, parsed.rows)
            upserter.backfill_name(result.currency, parsed.currency_name)
        except Exception:
            summary.files_failed += 1
            LOGGER.exception("Skipped %s due to error", csv_path.name)
            continue
        summary.files_processed += 1
        summary.inserted += result.inserted
        summary.skipped += result.skipped
        summary.invalid_rows += result.failed
        LOGGER.info(
            "%s -> %s inserted, %s skipped", result.currency, result.inserted, result.skipped
        )

    LOGGER.info(
        "Import complete: %s file(s) processed, %s failed, %s rows inserted",
        summary.files_processed,
        summary.files_failed,
        summary.inserted,
    )
    return summary


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    backend = SQLiteBackend(args.db_path)
    try:
        import_csv_directory(args.data_dir, store=backend)
    finally:
        backend.close()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
