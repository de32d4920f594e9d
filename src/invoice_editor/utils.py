"""
Utility functions for invoice input parsing and display formatting.

Provides helpers for:
- Date parsing (ISO and m/d/y formats)
- Lenient number parsing for form inputs
- Locale aware currency and date formatting (via Babel)
"""

from datetime import date, datetime

from babel.core import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.numbers import format_currency as babel_format_currency

# Home locale of each supported currency.
CURRENCY_LOCALES: dict[str, str] = {
    "USD": "en_US",
    "EUR": "de_DE",
    "GBP": "en_GB",
    "JPY": "ja_JP",
    "VND": "vi_VN",
}


def parse_date(value: str | date | None) -> date | None:
    """
    Parse a calendar date.

    Args:
        value: A date, an ISO string ("2024-12-25", time part ignored) or an
               m/d/y string ("12/25/2024").

    Returns:
        date object if parsing succeeds, None otherwise.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value:
        value = value.strip()
    if not value:
        return None

    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        pass

    try:
        return datetime.strptime(value, "%m/%d/%Y").date()
    except ValueError:
        pass

    return None


def parse_number(value: str | float | int | None) -> float:
    """
    Parse a numeric form input.

    Empty or unparseable input becomes 0, matching how the invoice form
    treats a cleared number field. Negative values are passed through.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value.strip())
    except ValueError:
        return 0


def _locale(tag: str) -> Locale:
    """Resolve a language tag such as "vi", "en-US" or "de_DE"."""
    try:
        return Locale.parse(tag.replace("-", "_"))
    except (UnknownLocaleError, ValueError):
        return Locale.parse("en_US")


def format_currency(value: float, currency: str, locale: str | None = None) -> str:
    """
    Format an amount for display in the given currency and locale.

    Only the presentation changes (grouping separators, decimal mark, symbol
    placement); the numeric value is not rounded anywhere else.

    Args:
        value: Numeric amount to format.
        currency: ISO currency code (e.g. "USD", "EUR").
        locale: Locale or language tag (e.g. "de_DE", "vi", "en-GB").
                Defaults to the home locale of the currency.

    Returns:
        Formatted string such as "$1,050.00" or "1.050,00 €".
    """
    locale = locale or CURRENCY_LOCALES.get(currency, "en_US")
    return babel_format_currency(value, currency, locale=_locale(locale))


def format_date(value: date, locale: str = "en_US") -> str:
    """Format a calendar date in the medium style of the locale."""
    return babel_format_date(value, format="medium", locale=_locale(locale))
