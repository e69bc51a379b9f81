"""CLI + helpers for refreshing every known currency from the Bundesbank API."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from eurofx.db import DEFAULT_SQLITE_DB_PATH
from eurofx.db.base_backend import BackendStrategy
from eurofx.db.sqlite_backend import SQLiteBackend
from eurofx.exceptions import EuroFxError
from eurofx.ingestion.archive_csv import DEFAULT_ARCHIVE_DIR, ArchiveCSVWriter
from eurofx.ingestion.bundesbank_api import DEFAULT_TIMEOUT_SECONDS, BundesbankClient
from eurofx.ingestion.models import EURO_CODE
from eurofx.ingestion.reconciler import Reconciler
from eurofx.ingestion.sdmx_json import decode_series
from eurofx.ingestion.strategy import LiveRateSource
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_PACING_SECONDS = 2.0

__all__ = [
    "DEFAULT_PACING_SECONDS",
    "RefreshSummary",
    "refresh_all_from_live_source",
    "refresh_currency",
    "parse_args",
    "main",
]


@dataclass(slots=True)
class RefreshSummary:
    """Outcome of one pass over every known currency."""

    currencies_updated: int = 0
    currencies_unchanged: int = 0
    currencies_failed: int = 0
    inserted: int = 0
    skipped: int = 0
    write_failures: int = 0
    series_failed: int = 0
    invalid_rows: int = 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=str(DEFAULT_ARCHIVE_DIR),
        help="Directory holding the per-currency CSV archive",
    )
    parser.add_argument(
        "--db",
        dest="db_path",
        default=str(DEFAULT_SQLITE_DB_PATH),
        help="SQLite database path",
    )
    parser.add_argument(
        "--pacing",
        dest="pacing_seconds",
        type=float,
        default=DEFAULT_PACING_SECONDS,
        help="Seconds to wait between successive API calls",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help="Per-request timeout in seconds",
    )
    return parser.parse_args(argv)


def refresh_currency(
    code: str,
    *,
    client: LiveRateSource,
    reconciler: Reconciler,
    writer: ArchiveCSVWriter,
    summary: RefreshSummary,
) -> int:
    """Fetch, decode and reconcile one currency; return the number of new rates."""

    payload = client.fetch(code)
    inserted_total = 0
    for series in decode_series(payload):
        summary.invalid_rows += series.invalid
        if series.error is not None:
            summary.series_failed += 1
            continue
        try:
            result = reconciler.reconcile(series.currency_code, None, series.records())
        except EuroFxError as exc:
            summary.series_failed += 1
            LOGGER.warning("Skipped series %s for %s: %s", series.series_key, code, exc)
            continue
        inserted_total += result.inserted
        summary.inserted += result.inserted
        summary.skipped += result.skipped + series.no_value
        summary.invalid_rows += result.failed
        if result.new_rates:
            currency = reconciler.store.find_currency(result.currency)
            if currency is None or writer.append(currency, result.new_rates) is None:
                summary.write_failures += 1
        if result.inserted:
            LOGGER.info("%s -> %s new, %s skipped", result.currency, result.inserted, result.skipped)
        else:
            LOGGER.info("%s already up-to-date (%s skipped)", result.currency, result.skipped)
    return inserted_total


def refresh_all_from_live_source(
    *,
    store: BackendStrategy,
    client: LiveRateSource | None = None,
    writer: ArchiveCSVWriter | None = None,
    reconciler: Reconciler | None = None,
    pacing_seconds: float = DEFAULT_PACING_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> RefreshSummary:
    """Refresh every non-EUR currency in ``store`` from the live API.

    ``pacing_seconds`` is waited between successive calls; a failing
    currency is logged and counted and never stops the loop.
    """

    live_client = client or BundesbankClient()
    archive_writer = writer or ArchiveCSVWriter()
    upserter = reconciler or Reconciler(store)
    summary = RefreshSummary()

    currencies = [c for c in store.list_currencies() if c.code.upper() != EURO_CODE]
    if not currencies:
        LOGGER.info("No currencies found in store; import the CSV archive first")
        return summary

    for position, currency in enumerate(currencies):
        if position and pacing_seconds > 0:
            sleep(pacing_seconds)
        try:
            inserted = refresh_currency(
                currency.code,
                client=live_client,
                reconciler=upserter,
                writer=archive_writer,
                summary=summary,
            )
        except Exception:
            summary.currencies_failed += 1
            LOGGER.exception("Failed for %s", currency.code)
            continue
        if inserted:
            summary.currencies_updated += 1
        else:
            summary.currencies_unchanged += 1

    LOGGER.info(
        "Update finished: %s currencies updated, %s unchanged, %s failed",
        summary.currencies_updated,
        summary.currencies_unchanged,
        summary.currencies_failed,
    )
    return summary


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    backend = SQLiteBackend(args.db_path)
    try:
        with BundesbankClient(timeout=args.timeout) as client:
            refresh_all_from_live_source(
                store=backend,
                client=client,
                writer=ArchiveCSVWriter(Path(args.data_dir)),
                pacing_seconds=args.pacing_seconds,
            )
    finally:
        backend.close()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
