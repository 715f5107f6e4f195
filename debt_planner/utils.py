"""Utility functions for the debt planner.

This module provides helpers for converting user input into ``Decimal`` values
and for handling dates, including adding months and normalizing year-month
strings to ``datetime.date`` instances.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext
from typing import Any

from .errors import InvalidInputError

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")


def parse_year_month(ym: str) -> date:
    """Parse a YYYY-MM or YYYY-MM-DD string into a ``date`` object.

    A missing day component means the first day of the month.

    Raises
    ------
    InvalidInputError
        If the string is not a valid date.
    """
    try:
        parts = ym.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except (AttributeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid date string: {ym!r}") from exc


def to_date(value: Any, field: str = "date") -> date:
    """Coerce ``value`` (date, datetime or string) into a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_year_month(value)
    raise InvalidInputError(f"{field} must be a date, got {value!r}")


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def first_of_month(dt: date | None = None) -> date:
    return (dt or date.today()).replace(day=1)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace. It raises
    ``InvalidInputError`` if conversion fails or the value is not finite.
    """
    try:
        result = Decimal(value.strip().replace(",", ""))
    except (AttributeError, InvalidOperation) as exc:
        raise InvalidInputError(f"Invalid numeric value: {value!r}") from exc
    if not result.is_finite():
        raise InvalidInputError(f"Invalid numeric value: {value!r}")
    return result


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """Coerce ints, floats, numeric strings and Decimals into a ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. Booleans and ``None`` are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = decimal_from_str(value)
        except InvalidInputError as exc:
            raise InvalidInputError(f"{field} must be a number, got {value!r}") from exc
    else:
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidInputError(f"{field} must be finite, got {value!r}")
    return result


def round_currency(value: Decimal) -> Decimal:
    """Round a monetary amount to cents (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
