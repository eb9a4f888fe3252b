"""
Amount parsing and whole-unit rounding for CostLab.

Every monetary value reaching the engine is an integer. Upstream text (CSV
cells, form inputs, clipboard pastes) is cleaned and rounded here exactly once.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

__all__ = [
    "AmountParseError",
    "RoundingPolicy",
    "coerce_month_value",
    "parse_amount",
    "round_amount",
]

# Currency symbols, thousands separators, whitespace and percent signs.
_STRIP_CHARS = re.compile(r"[$€£¥,\s%]")


class AmountParseError(ValueError):
    """Raised when a cell cannot be read as a number."""


class RoundingPolicy(Enum):
    """Rounding policies for whole-unit amounts."""

    BANKERS = ROUND_HALF_EVEN
    HALF_UP = ROUND_HALF_UP


def round_amount(
    value: Decimal | float | int, rounding: RoundingPolicy = RoundingPolicy.HALF_UP
) -> int:
    """
    Round a number to a whole unit.

    ``HALF_UP`` rounds ties away from zero, so ``2.5 -> 3`` and ``-2.5 -> -3``.

    Raises:
        AmountParseError: If ``value`` is NaN or infinite
    """
    if isinstance(value, bool):
        raise AmountParseError(f"Cannot convert {value!r} to number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise AmountParseError("Invalid number value")
        value = Decimal(str(value))
    if not value.is_finite():
        raise AmountParseError("Invalid number value")
    return int(value.quantize(Decimal("1"), rounding=rounding.value))


def parse_amount(
    raw: str | float | int | None, rounding: RoundingPolicy = RoundingPolicy.HALF_UP
) -> int | None:
    """
    Parse a spreadsheet-style amount into an integer.

    Blank input maps to ``None``, never 0. Currency symbols, thousands
    separators and percent signs are stripped; accounting-style parentheses
    mark a negative amount.

    Args:
        raw: Cell content as text or number
        rounding: Rounding policy for fractional input

    Returns:
        Rounded integer, or ``None`` for blank input

    Raises:
        AmountParseError: If the input is not a finite number

    Example:
        ```python
        parse_amount("$1,234.50")   # 1235
        parse_amount("(1,000)")     # -1000
        parse_amount("  ")          # None
        ```
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
        return round_amount(raw, rounding)
    if not isinstance(raw, str):
        raise AmountParseError(f"Cannot convert {raw!r} to number")

    text = raw.strip()
    if text == "":
        return None

    negative = "(" in text and ")" in text
    cleaned = _STRIP_CHARS.sub("", text).replace("(", "").replace(")", "")
    if cleaned == "":
        return None
    # Decimal accepts "1_000"; spreadsheets do not
    if "_" in cleaned:
        raise AmountParseError(f'Cannot convert "{raw}" to number')

    try:
        number = Decimal(cleaned)
    except InvalidOperation as exc:
        raise AmountParseError(f'Cannot convert "{raw}" to number') from exc
    if not number.is_finite():
        raise AmountParseError(f'Cannot convert "{raw}" to number')

    if negative:
        number = -number
    return round_amount(number, rounding)


def coerce_month_value(raw: object) -> int | float | None:
    """
    Coerce a month cell from a row payload the way form inputs are coerced.

    Finite numbers are rounded, numeric strings are parsed and anything
    unreadable becomes ``None``. Non-finite floats pass through untouched so
    that validation can report them.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float) and not math.isfinite(raw):
        return raw
    try:
        return parse_amount(raw)  # type: ignore[arg-type]
    except AmountParseError:
        return None
