"""Currency identity extraction from free-form archive header lines.

Archive files are not uniformly formatted, so both the code and the
country/description lookups use a pattern first and a looser scan second.
"""

from __future__ import annotations

import re

from eurofx.ingestion.models import UNKNOWN_COUNTRY

HEADER_MARKER = "EUR 1 ="

_MARKER_PATTERN = re.compile(r"EUR\s*1\s*=")
_CODE_PATTERN = re.compile(r"EUR\s*1\s*=\s*([A-Z]{3})")
_CODE_TOKEN_PATTERN = re.compile(r"^[A-Z]{3}$")
_NAME_PATTERN = re.compile(r"EUR 1 =\s*\w+\s*\.\.\.\s*/\s*(.*)$")


def extract_currency_code(line: str | None) -> str | None:
    """Return the 3-letter code following ``EUR 1 =``.

    Lines without the marker yield ``None``. When the marker is present but not
    directly followed by a code, the first standalone 3-uppercase-letter token
    is used instead.
    """

    if not line or not line.strip():
        return None
    if not _MARKER_PATTERN.search(line):
        return None
    match = _CODE_PATTERN.search(line)
    if match:
        return match.group(1)
    for token in line.split():
        if _CODE_TOKEN_PATTERN.match(token):
            return token
    return None


def extract_currency_name(line: str | None) -> str:
    """Return the country/description after ``EUR 1 = XXX ... /``.

    Falls back to the ``/`` segment following the first segment containing
    ``...`` and finally to :data:`UNKNOWN_COUNTRY`.
    """

    if not line or not line.strip():
        return UNKNOWN_COUNTRY
    match = _NAME_PATTERN.search(line)
    if match:
        return _clean_description(match.group(1))
    segments = line.split("/")
    for index, segment in enumerate(segments[:-1]):
        if "..." in segment:
            return _clean_description(segments[index + 1])
    return UNKNOWN_COUNTRY


def _clean_description(raw: str) -> str:
    description = raw.strip().rstrip(",").strip()
    if "/" in description:
        description = description.split("/")[0].strip()
    return description


__all__ = ["HEADER_MARKER", "extract_currency_code", "extract_currency_name"]
