"""Formatting helpers for report text: currency, numbers, dates and labels."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from dateutil import parser as date_parser

Number = Union[Decimal, int, float]
DateLike = Union[date, datetime, str]

DEFAULT_CURRENCY = "GHS"

_TWO_PLACES = Decimal("0.01")

_TRANSACTION_TYPE_LABELS = {
    "momo": "Mobile Money",
    "controller": "Controller",
    "interest": "Interest",
    "deposit": "Deposit",
}

# strftime patterns for the named date formats; "long" is handled separately
_DATE_PATTERNS = {
    "short": "%b %d, %Y",
    "month_year": "%B %Y",
    "iso": "%Y-%m-%d",
    "dmy": "%d/%m/%Y",
}


def _to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e


def _quantize(value: Number, quantum: Decimal) -> Decimal:
    """Round half-up to a quantum; values too large for the context raise ValueError."""
    try:
        return _to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Number out of range: {value!r}") from e


def format_currency(amount: Number, currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount as currency with two decimals.

    Example:
        >>> format_currency(Decimal("1234.5"))
        'GHS 1,234.50'
        >>> format_currency(-20)
        '-GHS 20.00'
    """
    value = _quantize(amount, _TWO_PLACES)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency} {abs(value):,.2f}"


def format_number(value: Number, max_decimals: int = 2) -> str:
    """Format a number with thousands separators and no trailing zeros.

    Example:
        >>> format_number(1234)
        '1,234'
        >>> format_number(12.50)
        '12.5'
    """
    quantum = Decimal(1).scaleb(-max_decimals)
    number = _quantize(value, quantum)
    text = f"{number:,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_percentage(part: Number, whole: Number, decimals: int = 1) -> str:
    """Format part/whole as a percentage.

    Returns "N/A" when the whole is zero, so a report never prints NaN or
    Infinity.
    """
    whole_value = _to_decimal(whole)
    if whole_value == 0:
        return "N/A"
    percent = _to_decimal(part) * 100 / whole_value
    return format_plain_percent(percent, decimals)


def format_plain_percent(value: Number, decimals: int = 1) -> str:
    """Format a value that is already a percentage (e.g. 12.34 -> '12.3%')."""
    quantum = Decimal(1).scaleb(-decimals)
    number = _quantize(value, quantum)
    return f"{number:.{decimals}f}%"


def format_rate(rate: Number) -> str:
    """Format a fractional interest rate (0.0425 -> '4.25%')."""
    return format_plain_percent(_to_decimal(rate) * 100, decimals=2)


def parse_date(value: DateLike) -> date:
    """Parse an ISO date/datetime string (or pass a date through).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date: {value!r}")
    try:
        return date_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Not an ISO date: {value!r}") from e


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(value: DateLike, pattern: str = "long") -> str:
    """Format a date for display.

    Patterns:
        long: October 18th, 2026
        short: Oct 18, 2026
        month_year: October 2026
        iso: 2026-10-18
        dmy: 18/10/2026
    """
    day = parse_date(value)
    if pattern == "long":
        return f"{day.strftime('%B')} {_ordinal(day.day)}, {day.year}"
    try:
        return day.strftime(_DATE_PATTERNS[pattern])
    except KeyError:
        raise ValueError(f"Unknown date pattern: {pattern}") from None


def format_transaction_type(transaction_type: str) -> str:
    """Human label for a transaction type code."""
    return _TRANSACTION_TYPE_LABELS.get(transaction_type, transaction_type.upper())


def format_status(status: str) -> str:
    """Capitalise a status code ('pending' -> 'Pending')."""
    return status[:1].upper() + status[1:]


def payment_method_label(transaction_type: str, payment_method: Optional[str] = None) -> str:
    """Classify a transaction into a payment-method reporting bucket."""
    if transaction_type == "interest":
        return "Interest Payment"
    if transaction_type == "controller":
        return "Controller Transfer"
    if payment_method == "momo":
        return "Mobile Money"
    if payment_method == "deposit" or transaction_type == "deposit":
        return "Bank Transfer"
    return "Other"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' to an (r, g, b) tuple."""
    clean = hex_color.lstrip("#")
    if len(clean) != 6:
        raise ValueError(f"Color must be in hex format (#RRGGBB): {hex_color}")
    return int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16)


def convert_to_mm(pixels: float, dpi: float = 96) -> float:
    """Convert screen pixels to millimetres."""
    return pixels * 25.4 / dpi


def convert_to_px(mm: float, dpi: float = 96) -> float:
    """Convert millimetres to screen pixels."""
    return mm * dpi / 25.4
