"""
Aggregation engine for computed rows.

Computed rows never store values. Their month-by-month values are derived from
the current data rows every time they are needed:

- a subtotal sums the data rows named in its ``target_rows``
- a grand total sums every data row in the table

Targets that are not data rows (headers, other computed rows, unknown ids)
contribute 0. Reporting dangling targets is the validation pipeline's job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .kinds import Formula, RowKind
from .months import MONTH_KEYS, MonthKey, zero_months
from .rows import ComputedRow, TableRow, computed_rows, data_rows, index_rows

__all__ = [
    "PatternSuggestion",
    "RowTotalsCheck",
    "compare_row_totals",
    "detect_computation_pattern",
    "evaluate_all",
    "grand_total",
    "is_empty_row",
    "month_sum",
    "monthly_totals",
    "subtotal",
    "totals_match",
    "ytd",
]

logger = logging.getLogger(__name__)

MonthValues = dict[MonthKey, int]


def month_sum(rows: list[TableRow], target_ids: Iterable[str], month: MonthKey) -> int:
    """
    Sum one month across the given row ids.

    Ids that do not resolve to a data row contribute 0, as do ``None`` values.

    Args:
        rows: Full table
        target_ids: Ids to sum; duplicates are summed once per occurrence
        month: Month key to read

    Returns:
        Integer sum
    """
    index = index_rows(rows)
    total = 0
    for row_id in target_ids:
        row = index.get(row_id)
        if row is not None and row.kind == RowKind.DATA:
            total += row.value(month) or 0
    return total


def subtotal(rows: list[TableRow], computed_row: ComputedRow) -> MonthValues:
    """Sum ``computed_row.target_rows`` for every month."""
    return {
        month: month_sum(rows, computed_row.target_rows, month) for month in MONTH_KEYS
    }


def grand_total(rows: list[TableRow]) -> MonthValues:
    """Sum every data row for every month, ignoring any stored target list."""
    result = zero_months()
    for row in data_rows(rows):
        for month in MONTH_KEYS:
            result[month] += row.value(month) or 0
    return result


def evaluate_all(rows: list[TableRow]) -> dict[str, MonthValues]:
    """
    Resolve every computed row in one pass.

    Computed rows are processed in ascending ``order``. The result does not
    depend on that order because subtotals only ever read data rows.

    Returns:
        Mapping from computed row id to its month values
    """
    values: dict[str, MonthValues] = {}
    for row in sorted(computed_rows(rows), key=lambda r: r.order):
        if row.formula == Formula.GRAND_TOTAL:
            values[row.id] = grand_total(rows)
        elif row.formula == Formula.SUBTOTAL:
            values[row.id] = subtotal(rows, row)
    logger.debug("Evaluated %d computed rows", len(values))
    return values


def totals_match(computed: int, manual: int) -> bool:
    """Exact equality, no rounding tolerance."""
    return computed == manual


def ytd(months: dict[MonthKey, int | None]) -> int:
    """Year-to-date total of a month mapping."""
    return sum(months.get(month) or 0 for month in MONTH_KEYS)


def monthly_totals(rows: list[TableRow]) -> MonthValues:
    """Total of all data rows per month."""
    return grand_total(rows)


def is_empty_row(months: dict[MonthKey, int | None]) -> bool:
    """True if every month is ``None`` or 0."""
    return all(months.get(month) in (None, 0) for month in MONTH_KEYS)


@dataclass(frozen=True)
class RowTotalsCheck:
    """Outcome of comparing a data row against expected month values."""

    is_valid: bool
    mismatches: list[MonthKey] = field(default_factory=list)


def compare_row_totals(
    rows: list[TableRow], row_id: str, expected: MonthValues
) -> RowTotalsCheck:
    """
    Compare a data row against expected values, month by month.

    A row that is missing or not a data row is reported invalid with no
    mismatches.
    """
    row = index_rows(rows).get(row_id)
    if row is None or row.kind != RowKind.DATA:
        return RowTotalsCheck(is_valid=False)

    mismatches = [
        month
        for month in MONTH_KEYS
        if not totals_match(row.value(month) or 0, expected[month])
    ]
    return RowTotalsCheck(is_valid=not mismatches, mismatches=mismatches)


@dataclass(frozen=True)
class PatternSuggestion:
    """Suggested formula for a data row that looks like a total."""

    confidence: float
    formula: str | None = None
    target_rows: tuple[str, ...] = ()


def detect_computation_pattern(rows: list[TableRow], row_id: str) -> PatternSuggestion:
    """
    Guess whether a data row is really a total.

    Categories mentioning "total" or "sum" are candidates. "grand"/"overall"
    suggests a grand total; otherwise earlier data rows sharing a word with
    the category are suggested as subtotal targets.
    """
    target = index_rows(rows).get(row_id)
    if target is None or target.kind != RowKind.DATA:
        return PatternSuggestion(confidence=0.0)

    category = target.category.lower()
    if "total" not in category and "sum" not in category:
        return PatternSuggestion(confidence=0.0)

    if "grand" in category or "overall" in category:
        return PatternSuggestion(confidence=0.9, formula=Formula.GRAND_TOTAL)

    words = set(category.split())
    related = [
        row.id
        for row in data_rows(rows)
        if row.id != row_id
        and row.order < target.order
        and words.intersection(row.category.lower().split())
    ]
    if related:
        return PatternSuggestion(
            confidence=0.7, formula=Formula.SUBTOTAL, target_rows=tuple(related)
        )
    return PatternSuggestion(confidence=0.0)
