"""
Month columns for the reporting year.

Every table carries exactly twelve month columns in a fixed canonical order.
Values are whole numbers or ``None`` (no data, which is not the same as 0).
"""

from __future__ import annotations

from typing import Literal

MonthKey = Literal[
    "Jan-2024",
    "Feb-2024",
    "Mar-2024",
    "Apr-2024",
    "May-2024",
    "Jun-2024",
    "Jul-2024",
    "Aug-2024",
    "Sep-2024",
    "Oct-2024",
    "Nov-2024",
    "Dec-2024",
]

REPORTING_YEAR = 2024

MONTH_KEYS: tuple[MonthKey, ...] = (
    "Jan-2024",
    "Feb-2024",
    "Mar-2024",
    "Apr-2024",
    "May-2024",
    "Jun-2024",
    "Jul-2024",
    "Aug-2024",
    "Sep-2024",
    "Oct-2024",
    "Nov-2024",
    "Dec-2024",
)

MONTH_DISPLAY_NAMES: dict[MonthKey, str] = {
    key: key.split("-", 1)[0] for key in MONTH_KEYS
}


def is_month_key(value: object) -> bool:
    """Check whether ``value`` is one of the twelve month keys."""
    return isinstance(value, str) and value in MONTH_KEYS


def empty_months() -> dict[MonthKey, int | None]:
    """Return a fresh month mapping with every month set to ``None``."""
    return {month: None for month in MONTH_KEYS}


def zero_months() -> dict[MonthKey, int]:
    """Return a fresh month mapping with every month set to 0."""
    return {month: 0 for month in MONTH_KEYS}
