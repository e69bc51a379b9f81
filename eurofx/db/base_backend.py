"""Store contract implemented by every persistence backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord


class BackendStrategy(ABC):
    """Keyed datastore for currencies and their daily rates.

    Uniqueness of ``(currency, rate_date)`` is enforced by the store itself;
    :meth:`save_rate` raises :class:`~eurofx.exceptions.DuplicateKeyError`
    when the key already exists, whatever :meth:`exists_rate` said before.
    """

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create required tables/collections and verify connectivity."""

    @abstractmethod
    def find_currency(self, code: str) -> CurrencyRecord | None:
        """Return the currency stored under ``code``, if any."""

    @abstractmethod
    def save_currency(self, currency: CurrencyRecord) -> CurrencyRecord:
        """Insert ``currency`` or update the row stored under its code."""

    @abstractmethod
    def exists_rate(self, code: str, rate_date: date) -> bool:
        """Return True when a rate for ``(code, rate_date)`` is stored."""

    @abstractmethod
    def save_rate(self, rate: ExchangeRateRecord) -> ExchangeRateRecord:
        """Insert ``rate``; raise ``DuplicateKeyError`` if the key is taken."""

    @abstractmethod
    def list_currencies(self) -> list[CurrencyRecord]:
        """Return every known currency ordered by code."""

    @abstractmethod
    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
        *,
        currency: str | None = None,
    ) -> list[ExchangeRateRecord]:
        """Return rates constrained by the provided dates and currency."""

    def close(self) -> None:  # pragma: no cover - optional cleanup hook
        """Backends may override to release connections/resources."""


__all__ = ["BackendStrategy"]
