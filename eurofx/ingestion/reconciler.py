"""Idempotent upsert of exchange rates into a store."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable

from eurofx.db.base_backend import BackendStrategy
from eurofx.exceptions import DuplicateKeyError, EuroFxError, InvalidCurrencyError
from eurofx.ingestion.models import (
    ArchiveRow,
    CurrencyRecord,
    ExchangeRateRecord,
    is_valid_currency_code,
)
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)


class UpsertOutcome(str, Enum):
    INSERTED = "inserted"
    SKIPPED = "skipped"


@dataclass(slots=True)
class ReconcileResult:
    """Counts for one unit of work (a file or a series)."""

    currency: str
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    new_rates: list[ExchangeRateRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.inserted + self.skipped + self.failed


class Reconciler:
    """Insert-if-absent keyed by ``(currency, rate_date)``.

    The existence check is only a shortcut: the store's unique key decides,
    so an insert that loses a race is reported as skipped.
    """

    def __init__(
        self,
        store: BackendStrategy,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.clock = clock

    def ensure_currency(self, code: str | None, name: str | None) -> CurrencyRecord:
        if not is_valid_currency_code(code):
            raise InvalidCurrencyError(code)
        assert code is not None
        existing = self.store.find_currency(code)
        if existing is not None:
            return existing
        created = CurrencyRecord(code=code, name=name or code, last_updated=self.clock())
        LOGGER.info("Registering new currency %s (%s)", code, created.name)
        return self.store.save_currency(created)

    def backfill_name(self, code: str, name: str | None) -> CurrencyRecord | None:
        """Replace a placeholder name with ``name``; real names are never overwritten."""

        currency = self.store.find_currency(code)
        if currency is None or not currency.has_placeholder_name:
            return currency
        candidate = CurrencyRecord(code=code, name=name or "", last_updated=currency.last_updated)
        if candidate.has_placeholder_name:
            return currency
        LOGGER.info("Backfilling name of %s: %r -> %r", code, currency.name, name)
        return self.store.save_currency(candidate)

    def upsert(
        self,
        code: str | None,
        name: str | None,
        rate_date: date,
        rate: Decimal,
    ) -> UpsertOutcome:
        currency = self.ensure_currency(code, name)
        return self._insert(ExchangeRateRecord(currency=currency.code, rate_date=rate_date, rate=rate))

    def reconcile(
        self,
        code: str | None,
        name: str | None,
        rows: Iterable[ArchiveRow | ExchangeRateRecord],
    ) -> ReconcileResult:
        """Upsert every row for one currency and report what happened.

        An invalid ``code`` raises :class:`InvalidCurrencyError` before any row
        is touched; a failing row is counted and the rest still processed.
        """

        currency = self.ensure_currency(code, name)
        result = ReconcileResult(currency=currency.code)
        for row in rows:
            record = ExchangeRateRecord(currency=currency.code, rate_date=row.rate_date, rate=row.rate)
            try:
                outcome = self._insert(record)
            except EuroFxError as exc:
                result.failed += 1
                LOGGER.warning("Failed to store %s %s: %s", currency.code, row.rate_date, exc)
                continue
            if outcome is UpsertOutcome.INSERTED:
                result.inserted += 1
                result.new_rates.append(record)
            else:
                result.skipped += 1
        if result.inserted:
            self.store.save_currency(replace(currency, last_updated=self.clock()))
        return result

    def _insert(self, record: ExchangeRateRecord) -> UpsertOutcome:
        if self.store.exists_rate(record.currency, record.rate_date):
            return UpsertOutcome.SKIPPED
        try:
            self.store.save_rate(record)
        except DuplicateKeyError:
            LOGGER.debug("Concurrent insert for %s %s", record.currency, record.rate_date)
            return UpsertOutcome.SKIPPED
        return UpsertOutcome.INSERTED


__all__ = ["ReconcileResult", "Reconciler", "UpsertOutcome"]
