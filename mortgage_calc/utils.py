"""Utility functions for the mortgage calculator.

This module provides helpers for parsing user input into Python data types and
for month arithmetic on ``datetime.date`` instances.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal, DecimalException, InvalidOperation, getcontext

from .data_models import OneTimePayment

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM`` or ``YYYY-MM-DD`` string into a ``date``.

    A missing day component defaults to the first day of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except Exception as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.strip().replace(",", "")
        result = Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("300000", "300,000") and shorthand with ``k``/``m``
    suffixes (e.g., "300k" meaning 300_000).
    """
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    try:
        return decimal_from_str(text) * factor
    except (ValueError, DecimalException):
        raise ValueError(f"Invalid amount: {value}") from None


def parse_one_time_payment(value: str) -> OneTimePayment:
    """Parse a ``MONTH:AMOUNT`` string, e.g. ``"12:5k"``."""
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"One-time payment must be in MONTH:AMOUNT format; got {value}")
    month_str, amount_str = parts
    try:
        month = int(month_str.strip())
    except ValueError:
        raise ValueError(f"Invalid one-time payment month: {month_str}") from None
    if month < 1:
        raise ValueError(f"One-time payment month must be 1 or later; got {month}")
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"One-time payment amount must be positive; got {amount_str}")
    return OneTimePayment(month=month, amount=amount)
