"""Date and decimal token helpers shared by the CSV and SDMX readers."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from eurofx.exceptions import InvalidDateError, MalformedValueError

ISO_DATE_FORMAT = "%Y-%m-%d"
ARCHIVE_DATE_FORMAT = "%m/%d/%Y"

# Lines in the data section of an archive start with either form.
DATE_PREFIX_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{4})")


def parse_rate_date(token: str | date) -> date:
    """Parse ``YYYY-MM-DD`` or ``M/d/YYYY`` into a :class:`date`.

    Raises :class:`InvalidDateError` carrying the offending token when neither
    format matches.
    """

    if isinstance(token, datetime):
        return token.date()
    if isinstance(token, date):
        return token
    cleaned = token.strip()
    for fmt in (ISO_DATE_FORMAT, ARCHIVE_DATE_FORMAT):
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise InvalidDateError(token)


def format_archive_date(value: date) -> str:
    """Render ``value`` as ``M/d/YYYY`` without leading zeros."""

    return f"{value.month}/{value.day}/{value.year}"


def parse_rate_value(token: object) -> Decimal:
    """Return ``token`` as a positive, finite :class:`Decimal`."""

    if isinstance(token, Decimal):
        value = token
    else:
        try:
            value = Decimal(str(token).strip())
        except (InvalidOperation, ValueError):
            raise MalformedValueError(token) from None
    if not value.is_finite() or value <= 0:
        raise MalformedValueError(token)
    return value


def format_rate_value(value: Decimal) -> str:
    """Plain decimal notation with trailing zeros removed (``1.2200`` -> ``1.22``)."""

    normalised = value.normalize()
    return format(normalised, "f")


__all__ = [
    "ARCHIVE_DATE_FORMAT",
    "DATE_PREFIX_PATTERN",
    "ISO_DATE_FORMAT",
    "format_archive_date",
    "format_rate_value",
    "parse_rate_date",
    "parse_rate_value",
]
