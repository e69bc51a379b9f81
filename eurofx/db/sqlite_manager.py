"""SQLAlchemy ORM persistence for the bundled SQLite database."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import cast

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    String,
    create_engine,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.types import TypeDecorator

from eurofx.db import DEFAULT_SQLITE_DB_PATH
from eurofx.exceptions import DuplicateKeyError
from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)


class _DecimalText(TypeDecorator):
    """Store :class:`Decimal` values as text so SQLite never rounds them."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return format(Decimal(value), "f")

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    pass


class _Currency(Base):
    __tablename__ = "currencies"

    code = Column(String(3), primary_key=True)
    name = Column(String, nullable=False)
    last_updated = Column(Date, nullable=False)


class _ExchangeRate(Base):
    __tablename__ = "exchange_rates"

    currency_code = Column(String(3), ForeignKey("currencies.code"), primary_key=True)
    rate_date = Column(Date, primary_key=True)
    rate = Column(_DecimalText, nullable=False)
    created_at = Column(DateTime, server_default=text("CURRENT_TIMESTAMP"))


def _to_currency_record(model: _Currency) -> CurrencyRecord:
    return CurrencyRecord(
        code=cast(str, model.code),
        name=cast(str, model.name),
        last_updated=cast(date, model.last_updated),
    )


class SQLiteManager:
    """Currency and rate store backed by a SQLite file."""

    def __init__(self, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser().resolve()
        self.engine: Engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(self.engine)
        self._SessionFactory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False, future=True
        )
        LOGGER.debug("Opened SQLite store at %s", self.db_path)

    def find_currency(self, code: str) -> CurrencyRecord | None:
        with self._SessionFactory() as session:
            model = session.get(_Currency, code)
            return None if model is None else _to_currency_record(model)

    def save_currency(self, currency: CurrencyRecord) -> CurrencyRecord:
        with self._SessionFactory() as session:
            session.merge(
                _Currency(
                    code=currency.code,
                    name=currency.name,
                    last_updated=currency.last_updated,
                )
            )
            session.commit()
        return currency

    def list_currencies(self) -> list[CurrencyRecord]:
        with self._SessionFactory() as session:
            stmt = select(_Currency).order_by(_Currency.code)
            return [_to_currency_record(model) for model in session.execute(stmt).scalars()]

    def exists_rate(self, code: str, rate_date: date) -> bool:
        with self._SessionFactory() as session:
            pk = {"currency_code": code, "rate_date": rate_date}
            return session.get(_ExchangeRate, pk) is not None

    def save_rate(self, rate: ExchangeRateRecord) -> ExchangeRateRecord:
        with self._SessionFactory() as session:
            session.add(
                _ExchangeRate(
                    currency_code=rate.currency,
                    rate_date=rate.rate_date,
                    rate=rate.rate,
                )
            )
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateKeyError(rate.currency, rate.rate_date) from exc
        return rate

    def fetch_all(self) -> list[ExchangeRateRecord]:
        return self.fetch_range()

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
        *,
        currency: str | None = None,
    ) -> list[ExchangeRateRecord]:
        with self._SessionFactory() as session:
            stmt = select(_ExchangeRate).order_by(
                _ExchangeRate.rate_date, _ExchangeRate.currency_code
            )
            if start is not None:
                stmt = stmt.where(_ExchangeRate.rate_date >= start)
            if end is not None:
                stmt = stmt.where(_ExchangeRate.rate_date <= end)
            if currency is not None:
                stmt = stmt.where(_ExchangeRate.currency_code == currency)
            records: list[ExchangeRateRecord] = []
            for row in session.execute(stmt).scalars():
                model = cast(_ExchangeRate, row)
                records.append(
                    ExchangeRateRecord(
                        currency=cast(str, model.currency_code),
                        rate_date=cast(date, model.rate_date),
                        rate=cast(Decimal, model.rate),
                    )
                )
            return records

    def close(self) -> None:  # pragma: no cover - trivial
        self.engine.dispose()

    def __enter__(self) -> "SQLiteManager":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["SQLiteManager"]
