from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from eurofx.db.sqlite_backend import SQLiteBackend
from eurofx.exceptions import DuplicateKeyError
from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord


def test_sqlite_backend_roundtrip(tmp_path) -> None:
    backend = SQLiteBackend(db_path=tmp_path / "sqlite_backend.db")
    assert backend.ensure_schema() is None

    backend.save_currency(CurrencyRecord("USD", "US dollar", date(2024, 1, 1)))
    backend.save_rate(ExchangeRateRecord("USD", date(2024, 1, 2), Decimal("1.0956")))
    backend.save_rate(ExchangeRateRecord("USD", date(2024, 1, 3), Decimal("1.0919")))

    fetched = backend.fetch_range(date(2024, 1, 3), None, currency="USD")
    assert fetched == [ExchangeRateRecord("USD", date(2024, 1, 3), Decimal("1.0919"))]
    assert backend.exists_rate("USD", date(2024, 1, 2))

    with pytest.raises(DuplicateKeyError):
        backend.save_rate(ExchangeRateRecord("USD", date(2024, 1, 2), Decimal("2")))

    backend.close()


def test_sqlite_backend_shares_manager(tmp_path) -> None:
    first = SQLiteBackend(db_path=tmp_path / "shared.db")
    second = SQLiteBackend(manager=first.manager)

    first.save_currency(CurrencyRecord("CHF", "Switzerland", date(2024, 1, 1)))

    assert second.find_currency("CHF") == CurrencyRecord("CHF", "Switzerland", date(2024, 1, 1))
    assert second.db_path == first.db_path

    first.close()
