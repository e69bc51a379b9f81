"""SQLite backend strategy implementation."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from eurofx.db import DEFAULT_SQLITE_DB_PATH
from eurofx.db.base_backend import BackendStrategy
from eurofx.db.sqlite_manager import SQLiteManager
from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord


class SQLiteBackend(BackendStrategy):
    """Backend strategy that stores rates in the bundled SQLite database."""

    def __init__(
        self,
        db_path: str | Path = DEFAULT_SQLITE_DB_PATH,
        *,
        manager: SQLiteManager | None = None,
    ) -> None:
        self.manager = manager or SQLiteManager(db_path)
        self.db_path = Path(self.manager.db_path)

    def ensure_schema(self) -> None:
        # ``SQLiteManager`` creates the schema in its constructor.
        return None

    def find_currency(self, code: str) -> CurrencyRecord | None:
        return self.manager.find_currency(code)

    def save_currency(self, currency: CurrencyRecord) -> CurrencyRecord:
        return self.manager.save_currency(currency)

    def exists_rate(self, code: str, rate_date: date) -> bool:
        return self.manager.exists_rate(code, rate_date)

    def save_rate(self, rate: ExchangeRateRecord) -> ExchangeRateRecord:
        return self.manager.save_rate(rate)

    def list_currencies(self) -> list[CurrencyRecord]:
        return self.manager.list_currencies()

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
        *,
        currency: str | None = None,
    ) -> list[ExchangeRateRecord]:
        return self.manager.fetch_range(start, end, currency=currency)

    def close(self) -> None:  # pragma: no cover - trivial delegator
        self.manager.close()


__all__ = ["SQLiteBackend"]
