"""Data models shared across ingestion modules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

UNKNOWN_COUNTRY = "Unknown Country"
EURO_CODE = "EUR"
_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")


def is_valid_currency_code(code: object) -> bool:
    """Return True for exactly three uppercase ASCII letters."""

    return isinstance(code, str) and bool(_CODE_PATTERN.match(code))


@dataclass(slots=True)
class CurrencyRecord:
    """A currency known to the store, keyed by its ISO code."""

    code: str
    name: str
    last_updated: date

    @property
    def has_placeholder_name(self) -> bool:
        """True while the name is still a stand-in (sentinel or the bare code)."""

        return not self.name or self.name in {UNKNOWN_COUNTRY, self.code}


@dataclass(slots=True)
class ExchangeRateRecord:
    """Price of 1 EUR in ``currency`` units on ``rate_date``."""

    currency: str
    rate_date: date
    rate: Decimal


@dataclass(slots=True)
class ArchiveRow:
    """A ``(date, value)`` pair read from the data section of an archive file."""

    rate_date: date
    rate: Decimal


@dataclass(slots=True)
class ArchiveCursor:
    """Transient state while walking one archive file."""

    currency_code: str | None = None
    currency_name: str | None = None
    in_data_section: bool = False
    no_value_lines: int = 0
    invalid_lines: int = 0


@dataclass(slots=True)
class ArchiveParseResult:
    """Everything :class:`~eurofx.ingestion.archive_csv.ArchiveCSVParser` learnt from a file."""

    currency_code: str | None
    currency_name: str | None
    rows: list[ArchiveRow] = field(default_factory=list)
    no_value_lines: int = 0
    invalid_lines: int = 0

    @property
    def has_identity(self) -> bool:
        return self.currency_code is not None


__all__ = [
    "ArchiveCursor",
    "ArchiveParseResult",
    "ArchiveRow",
    "CurrencyRecord",
    "EURO_CODE",
    "ExchangeRateRecord",
    "UNKNOWN_COUNTRY",
    "is_valid_currency_code",
]
