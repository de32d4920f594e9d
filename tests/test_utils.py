from datetime import date, datetime

import pytest

from invoice_editor.utils import format_currency, format_date, parse_date, parse_number


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-12-25", date(2024, 12, 25)),
        ("2024-12-25T10:30:00", date(2024, 12, 25)),
        ("12/25/2024", date(2024, 12, 25)),
        (date(2024, 1, 2), date(2024, 1, 2)),
        (datetime(2024, 1, 2, 8, 0), date(2024, 1, 2)),
        ("", None),
        (None, None),
        ("not a date", None),
    ],
)
def test_parse_date(value, expected) -> None:
    assert parse_date(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("12.5", 12.5), (" 3 ", 3.0), ("", 0), ("abc", 0), (None, 0), (7, 7), ("-4", -4.0)],
)
def test_parse_number(value, expected) -> None:
    assert parse_number(value) == expected


def test_format_currency_us() -> None:
    assert format_currency(1050, "USD", "en_US") == "$1,050.00"


def test_format_currency_german_euro() -> None:
    assert format_currency(1050, "EUR", "de_DE") == "1.050,00\xa0€"


def test_format_currency_defaults_to_home_locale() -> None:
    assert format_currency(1102.5, "EUR") == format_currency(1102.5, "EUR", "de_DE")
    assert format_currency(1102.5, "USD") == "$1,102.50"


def test_format_currency_accepts_language_tags() -> None:
    assert format_currency(1050, "USD", "en-US") == "$1,050.00"
    assert "1.050" in format_currency(1050, "VND", "vi")


def test_format_currency_unknown_locale_falls_back() -> None:
    assert format_currency(5, "USD", "xx-invalid") == "$5.00"


def test_format_currency_negative_and_yen() -> None:
    assert format_currency(-12.5, "USD", "en_US") == "-$12.50"
    assert "1,050" in format_currency(1050, "JPY", "ja_JP")


def test_format_date_medium() -> None:
    assert format_date(date(2024, 3, 31), "en_US") == "Mar 31, 2024"
