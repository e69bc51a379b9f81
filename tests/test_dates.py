import unittest
from datetime import date
from decimal import Decimal

from eurofx.exceptions import InvalidDateError, MalformedValueError
from eurofx.utils.dates import (
    DATE_PREFIX_PATTERN,
    format_archive_date,
    format_rate_value,
    parse_rate_date,
    parse_rate_value,
)


class ParseRateDateTests(unittest.TestCase):
    def test_iso_format(self) -> None:
        self.assertEqual(parse_rate_date("2021-01-04"), date(2021, 1, 4))

    def test_month_day_year_without_leading_zeros(self) -> None:
        self.assertEqual(parse_rate_date("1/4/2021"), date(2021, 1, 4))
        self.assertEqual(parse_rate_date("12/31/1999"), date(1999, 12, 31))

    def test_surrounding_whitespace_is_ignored(self) -> None:
        self.assertEqual(parse_rate_date("  2021-01-04 "), date(2021, 1, 4))

    def test_invalid_token_carries_token(self) -> None:
        with self.assertRaises(InvalidDateError) as ctx:
            parse_rate_date("31/12/2021")
        self.assertEqual(ctx.exception.token, "31/12/2021")
        with self.assertRaises(ValueError):
            parse_rate_date("not a date")

    def test_date_objects_pass_through(self) -> None:
        self.assertEqual(parse_rate_date(date(2020, 2, 29)), date(2020, 2, 29))


class FormattingTests(unittest.TestCase):
    def test_archive_date_has_no_leading_zeros(self) -> None:
        self.assertEqual(format_archive_date(date(2021, 1, 4)), "1/4/2021")
        self.assertEqual(parse_rate_date(format_archive_date(date(2024, 11, 9))), date(2024, 11, 9))

    def test_rate_value_strips_trailing_zeros(self) -> None:
        self.assertEqual(format_rate_value(Decimal("1.22650")), "1.2265")
        self.assertEqual(format_rate_value(Decimal("100.000")), "100")
        self.assertEqual(format_rate_value(Decimal("0.00012")), "0.00012")

    def test_date_prefix_pattern(self) -> None:
        self.assertTrue(DATE_PREFIX_PATTERN.match("2021-01-04,1.2265,"))
        self.assertTrue(DATE_PREFIX_PATTERN.match("1/4/2021,1.2265"))
        self.assertIsNone(DATE_PREFIX_PATTERN.match("last update,2021-01-04"))


class ParseRateValueTests(unittest.TestCase):
    def test_keeps_precision(self) -> None:
        self.assertEqual(parse_rate_value(" 1.22654321 "), Decimal("1.22654321"))
        self.assertEqual(parse_rate_value(1.2265), Decimal("1.2265"))

    def test_rejects_malformed_values(self) -> None:
        for token in ("abc", "", "NaN", "-1.5", "0", "Infinity"):
            with self.subTest(token=token):
                with self.assertRaises(MalformedValueError):
                    parse_rate_value(token)


if __name__ == "__main__":
    unittest.main()
