"""Error taxonomy shared by the ingestion and persistence layers."""

from __future__ import annotations

from datetime import date


class EuroFxError(Exception):
    """Base class for every error raised by :mod:`eurofx`."""


class InvalidDateError(EuroFxError, ValueError):
    def __init__(self, token: str) -> None:
        super().__init__(f"Unparseable date token: {token!r}")
        self.token = token


class InvalidCurrencyError(EuroFxError, ValueError):
    def __init__(self, code: str | None) -> None:
        super().__init__(f"Invalid currency code: {code!r}")
        self.code = code


class MalformedValueError(EuroFxError, ValueError):
    def __init__(self, token: object) -> None:
        super().__init__(f"Malformed rate value: {token!r}")
        self.token = token


class MalformedPayloadError(EuroFxError, ValueError):
    """Raised when a time-series payload lacks the structure needed to decode it."""


class DuplicateKeyError(EuroFxError):
    """Raised by a store when ``(currency, rate_date)`` already exists."""

    def __init__(self, currency: str, rate_date: date) -> None:
        super().__init__(f"Rate for {currency} on {rate_date.isoformat()} already stored")
        self.currency = currency
        self.rate_date = rate_date


class SourceUnavailableError(EuroFxError, RuntimeError):
    """Raised when the live time-series API cannot serve a currency."""

    def __init__(self, message: str, *, currency: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.currency = currency
        self.status_code = status_code


class ArchiveUnavailableError(EuroFxError, OSError):
    """Raised when the CSV archive directory itself cannot be enumerated."""


__all__ = [
    "EuroFxError",
    "InvalidDateError",
    "InvalidCurrencyError",
    "MalformedValueError",
    "MalformedPayloadError",
    "DuplicateKeyError",
    "SourceUnavailableError",
    "ArchiveUnavailableError",
]
