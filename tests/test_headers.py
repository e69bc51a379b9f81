from __future__ import annotations

import pytest

from eurofx.ingestion.headers import extract_currency_code, extract_currency_name
from eurofx.ingestion.models import UNKNOWN_COUNTRY


@pytest.mark.parametrize(
    "line, code, name",
    [
        (
            "Euro foreign exchange reference rate of the ECB / EUR 1 = USD ... / US dollar",
            "USD",
            "US dollar",
        ),
        ("EUR 1 = JPY ... / Japan, ", "JPY", "Japan"),
        ("EUR 1 = CHF ... / Switzerland,,,", "CHF", "Switzerland"),
        ("EUR 1 = GBP ... / United Kingdom / pound sterling", "GBP", "United Kingdom"),
    ],
)
def test_extracts_code_and_name_from_standard_headers(line: str, code: str, name: str) -> None:
    assert extract_currency_code(line) == code
    assert extract_currency_name(line) == name


def test_code_falls_back_to_first_standalone_token() -> None:
    line = "EUR1 = nok / NOK ... / Norway"

    assert extract_currency_code(line) == "NOK"


def test_code_fallback_scan_sees_the_marker_token_first() -> None:
    # With a spaced marker the token scan reaches "EUR" before anything else.
    assert extract_currency_code("Reference rate / EUR 1 = units of NOK") == "EUR"


def test_code_pattern_tolerates_missing_spaces() -> None:
    assert extract_currency_code("EUR1=SEK ... / Sweden") == "SEK"


def test_line_without_marker_has_no_code() -> None:
    assert extract_currency_code("Exchange rates / USD ... / United States") is None
    assert extract_currency_code("") is None
    assert extract_currency_code(None) is None


def test_marker_without_any_code_token_has_no_code() -> None:
    assert extract_currency_code("EUR1= ... / nothing here") is None


def test_name_falls_back_to_segment_after_ellipsis() -> None:
    # ``EUR 1 =`` is followed by a non-word token, so only the second tier matches.
    line = "ECB rate / EUR 1 = 1.0 HKD ... / Hong Kong, "

    assert extract_currency_name(line) == "Hong Kong"


def test_name_defaults_to_sentinel() -> None:
    assert extract_currency_name("EUR 1 = USD") == UNKNOWN_COUNTRY
    assert extract_currency_name("   ") == UNKNOWN_COUNTRY
    assert extract_currency_name(None) == UNKNOWN_COUNTRY
