"""Shared logic for SQL (Postgres/MySQL) backends."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from eurofx.db.base_backend import BackendStrategy
from eurofx.exceptions import DuplicateKeyError
from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

SCHEMA_SQL_CURRENCIES = """
CREATE TABLE IF NOT EXISTS currencies (
    code VARCHAR(3) NOT NULL,
    name VARCHAR(255) NOT NULL,
    last_updated DATE NOT NULL,
    PRIMARY KEY(code)
);
"""

SCHEMA_SQL_RATES = """
CREATE TABLE IF NOT EXISTS exchange_rates (
    currency_code VARCHAR(3) NOT NULL,
    rate_date DATE NOT NULL,
    rate NUMERIC(18, 6) NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(currency_code, rate_date)
);
"""

SELECT_CURRENCY_SQL = "SELECT code, name, last_updated FROM currencies WHERE code = :code"
SELECT_CURRENCIES_SQL = "SELECT code, name, last_updated FROM currencies ORDER BY code"
UPDATE_CURRENCY_SQL = (
    "UPDATE currencies SET name = :name, last_updated = :last_updated WHERE code = :code"
)
INSERT_CURRENCY_SQL = """
INSERT INTO currencies(code, name, last_updated)
VALUES(:code, :name, :last_updated)
"""
EXISTS_RATE_SQL = (
    "SELECT 1 FROM exchange_rates WHERE currency_code = :currency_code AND rate_date = :rate_date"
)
INSERT_RATE_SQL = """
INSERT INTO exchange_rates(currency_code, rate_date, rate, created_at)
VALUES(:currency_code, :rate_date, :rate, :created_at)
"""


class RelationalBackend(BackendStrategy):
    """Base class that encapsulates SQLAlchemy powered interactions."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._engine_instance: Engine | None = None

    def _get_engine(self) -> Engine:
        if self._engine_instance is None:
            self._engine_instance = create_engine(self.url, future=True)
        return self._engine_instance

    def ensure_schema(self) -> None:
        engine = self._get_engine()
        with engine.begin() as connection:
            LOGGER.info("Ensuring currencies/exchange_rates schema exists")
            connection.execute(text("SELECT 1"))
            connection.execute(text(SCHEMA_SQL_CURRENCIES))
            connection.execute(text(SCHEMA_SQL_RATES))

    def find_currency(self, code: str) -> CurrencyRecord | None:
        with self._get_engine().connect() as connection:
            row = connection.execute(text(SELECT_CURRENCY_SQL), {"code": code}).first()
        return None if row is None else _to_currency_record(row._mapping)

    def save_currency(self, currency: CurrencyRecord) -> CurrencyRecord:
        params = {
            "code": currency.code,
            "name": currency.name,
            "last_updated": currency.last_updated.isoformat(),
        }
        with self._get_engine().begin() as connection:
            updated = connection.execute(text(UPDATE_CURRENCY_SQL), params).rowcount
            if not updated:
                connection.execute(text(INSERT_CURRENCY_SQL), params)
        return currency

    def list_currencies(self) -> list[CurrencyRecord]:
        with self._get_engine().connect() as connection:
            rows = connection.execute(text(SELECT_CURRENCIES_SQL)).all()
        return [_to_currency_record(row._mapping) for row in rows]

    def exists_rate(self, code: str, rate_date: date) -> bool:
        params = {"currency_code": code, "rate_date": rate_date.isoformat()}
        with self._get_engine().connect() as connection:
            return connection.execute(text(EXISTS_RATE_SQL), params).first() is not None

    def save_rate(self, rate: ExchangeRateRecord) -> ExchangeRateRecord:
        params = {
            "currency_code": rate.currency,
            "rate_date": rate.rate_date.isoformat(),
            "rate": format(rate.rate, "f"),
            "created_at": datetime.utcnow().isoformat(sep=" "),
        }
        try:
            with self._get_engine().begin() as connection:
                connection.execute(text(INSERT_RATE_SQL), params)
        except IntegrityError as exc:
            raise DuplicateKeyError(rate.currency, rate.rate_date) from exc
        return rate

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
        *,
        currency: str | None = None,
    ) -> list[ExchangeRateRecord]:
        where_clauses: list[str] = []
        params: dict[str, object] = {}
        if start is not None:
            where_clauses.append("rate_date >= :start_date")
            params["start_date"] = start.isoformat()
        if end is not None:
            where_clauses.append("rate_date <= :end_date")
            params["end_date"] = end.isoformat()
        if currency is not None:
            where_clauses.append("currency_code = :currency_code")
            params["currency_code"] = currency
        query = "SELECT currency_code, rate_date, rate FROM exchange_rates"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY rate_date, currency_code"

        records: list[ExchangeRateRecord] = []
        with self._get_engine().connect() as connection:
            for row in connection.execute(text(query), params):
                mapping = row._mapping
                records.append(
                    ExchangeRateRecord(
                        currency=mapping["currency_code"],
                        rate_date=_normalise_rate_date(mapping["rate_date"]),
                        rate=_normalise_rate(mapping["rate"]),
                    )
                )
        return records

    def close(self) -> None:  # pragma: no cover - trivial resource cleanup
        if self._engine_instance is not None:
            self._engine_instance.dispose()


def _to_currency_record(mapping: Any) -> CurrencyRecord:
    return CurrencyRecord(
        code=mapping["code"],
        name=mapping["name"],
        last_updated=_normalise_rate_date(mapping["last_updated"]),
    )


def _normalise_rate_date(value: object) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    return date.fromisoformat(str(value))


def _normalise_rate(value: object) -> Decimal:
    # SQLite hands NUMERIC columns back as float; go through ``str`` to keep
    # the shortest round-tripping representation.
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


__all__ = ["RelationalBackend"]
