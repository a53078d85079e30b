"""Fixed-width field rendering for CPA-005 records.

Every function here returns a string of exactly the requested width or
raises. Records are built only from these outputs, so a record can never
drift from its documented length because of a long or short value.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from ach_errors import FieldInvalid, FieldOverflow

# 0YYDDD: century flag, two-digit year, day of year
DATE_WIDTH = 6


class FieldType(Enum):
    ALPHANUMERIC = "alphanumeric"
    NUMERIC = "numeric"
    MONEY = "money"
    DATE = "date"


def _fit(text, width, field):
    if len(text) > width:
        raise FieldOverflow(field, text, width)
    return text


def alphanumeric(value, width, field="alphanumeric"):
    """Left-justify ``value`` in a space-filled field."""
    text = "" if value is None else str(value)
    return _fit(text, width, field).ljust(width, " ")


def numeric(value, width, field="numeric"):
    """Right-justify a non-negative integer in a zero-filled field."""
    if isinstance(value, bool):
        raise FieldInvalid(field, value, "expected a whole number")
    if isinstance(value, int):
        if value < 0:
            raise FieldInvalid(field, value, "must not be negative")
        text = str(value)
    else:
        text = str(value).strip()
        if not (text.isascii() and text.isdigit()):
            raise FieldInvalid(field, value, "expected digits only")
    return _fit(text, width, field).rjust(width, "0")


def to_cents(amount, field="amount"):
    """Convert a dollar amount to whole cents, rounding half up."""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise FieldInvalid(field, amount, "expected a decimal amount") from None
    if not value.is_finite():
        raise FieldInvalid(field, amount, "expected a decimal amount")
    cents = int((value * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if cents < 0:
        raise FieldInvalid(field, amount, "must not be negative")
    return cents


def money(amount, width, field="amount"):
    """Amount with two implied decimals, e.g. 1234.5 -> 0000123450."""
    cents = to_cents(amount, field)
    return _fit(f"{cents:0{width}d}", width, field)


def julian_date(value, width=DATE_WIDTH, field="date"):
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        raise FieldInvalid(field, value, "expected a calendar date")
    text = f"0{value.year % 100:02d}{value.timetuple().tm_yday:03d}"
    return _fit(text, width, field).rjust(width, "0")


def zeros(width):
    return "0" * width


def spaces(width):
    return " " * width


_RENDERERS = {
    FieldType.ALPHANUMERIC: alphanumeric,
    FieldType.NUMERIC: numeric,
    FieldType.MONEY: money,
    FieldType.DATE: julian_date,
}


def render(value, field_type, width, field=None):
    """Render ``value`` as ``field_type`` into exactly ``width`` characters.

    Raises ``FieldOverflow`` when the natural representation is wider than
    the field and ``FieldInvalid`` when the value is not of the field's type.
    """
    renderer = _RENDERERS[FieldType(field_type)]
    return renderer(value, width, field or FieldType(field_type).value)
