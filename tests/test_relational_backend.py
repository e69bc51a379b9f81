"""Relational backend integration tests using SQLite."""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from eurofx.db.relational_backend import RelationalBackend, _normalise_rate, _normalise_rate_date
from eurofx.exceptions import DuplicateKeyError
from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord


def test_relational_backend_roundtrip(tmp_path: Path) -> None:
    backend = RelationalBackend(f"sqlite:///{tmp_path / 'relational.db'}")
    backend.ensure_schema()

    backend.save_currency(CurrencyRecord("USD", "USD", date(2024, 1, 1)))
    backend.save_currency(CurrencyRecord("USD", "US dollar", date(2024, 1, 5)))
    backend.save_currency(CurrencyRecord("CHF", "Switzerland", date(2024, 1, 5)))
    assert backend.find_currency("USD") == CurrencyRecord("USD", "US dollar", date(2024, 1, 5))
    assert [c.code for c in backend.list_currencies()] == ["CHF", "USD"]
    assert backend.find_currency("GBP") is None

    backend.save_rate(ExchangeRateRecord("USD", date(2024, 1, 2), Decimal("1.0956")))
    backend.save_rate(ExchangeRateRecord("CHF", date(2024, 1, 2), Decimal("0.9313")))
    with pytest.raises(DuplicateKeyError):
        backend.save_rate(ExchangeRateRecord("USD", date(2024, 1, 2), Decimal("1.2")))

    assert backend.exists_rate("USD", date(2024, 1, 2))
    assert not backend.exists_rate("USD", date(2024, 1, 3))
    assert backend.fetch_range(date(2024, 1, 1), date(2024, 1, 31), currency="USD") == [
        ExchangeRateRecord("USD", date(2024, 1, 2), Decimal("1.0956"))
    ]
    assert {row.currency for row in backend.fetch_range()} == {"USD", "CHF"}
    assert backend.fetch_range(start=date(2024, 1, 3)) == []

    backend.close()


def test_normalise_helpers_handle_driver_types() -> None:
    assert _normalise_rate_date(date(2024, 5, 1)) == date(2024, 5, 1)
    assert _normalise_rate_date(datetime(2024, 5, 2, 15, 0)) == date(2024, 5, 2)
    assert _normalise_rate_date("2024-05-03") == date(2024, 5, 3)
    assert _normalise_rate(1.2265) == Decimal("1.2265")
    assert _normalise_rate(Decimal("0.5")) == Decimal("0.5")
