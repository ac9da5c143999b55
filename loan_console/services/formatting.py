"""Display formatting shared by the console views."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)

MISSING = "-"
NOT_AVAILABLE = "N/A"

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def parse_datetime(value: str | date | datetime | None) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable date value %r", value)
        return None


def format_date_ddmmyyyy(value: str | date | datetime | None) -> str:
    parsed = parse_datetime(value)
    if parsed is None:
        return MISSING
    return parsed.strftime("%d-%m-%Y")


def format_date_long(value: str | date | datetime | None) -> str:
    """e.g. ``5 March 2025``."""
    parsed = parse_datetime(value)
    if parsed is None:
        return NOT_AVAILABLE
    return f"{parsed.day} {_MONTHS[parsed.month - 1]} {parsed.year}"


def format_datetime_long(value: str | date | datetime | None) -> str:
    """e.g. ``5 March 2025, 2:07 pm``."""
    parsed = parse_datetime(value)
    if parsed is None:
        return NOT_AVAILABLE
    hour = parsed.hour % 12 or 12
    meridiem = "am" if parsed.hour < 12 else "pm"
    return f"{format_date_long(parsed)}, {hour}:{parsed.minute:02d} {meridiem}"


def to_title_case(value: str | None) -> str:
    if not value:
        return ""
    words = str(value).replace("_", " ").lower().split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _as_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _group_indian(digits: str) -> str:
    # Last three digits, then groups of two: 12,34,56,789
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = re.findall(r"\d{1,2}", head[::-1])
    return ",".join(group[::-1] for group in reversed(groups)) + "," + tail


def format_indian_number(value: Any) -> str:
    amount = _as_decimal(value)
    if amount is None:
        return MISSING
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount == amount.to_integral_value():
        return f"{sign}{_group_indian(str(int(amount)))}"
    whole, _, fraction = f"{amount.normalize():f}".partition(".")
    return f"{sign}{_group_indian(whole)}.{fraction[:3]}"


def format_inr(value: Any) -> str:
    amount = _as_decimal(value)
    if amount is None:
        return MISSING
    amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):f}".partition(".")
    return f"{sign}₹{_group_indian(whole)}.{fraction}"
