"""
Summary statistics for CostLab tables.

These helpers describe a table for dashboards and reports. They read data
rows only and never affect validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from .core.aggregation import monthly_totals
from .core.months import MONTH_KEYS, MonthKey
from .core.rows import TableRow, data_rows

__all__ = ["DataSummary", "data_summary", "monthly_growth", "rolling_average"]


@dataclass(frozen=True)
class DataSummary:
    """
    Headline figures of a table.

    Attributes:
        total_rows: Number of data rows
        year_total: Sum of every month of every data row
        monthly_totals: Per-month totals across data rows
        highest_month: ``(month, total)`` with the largest total (first on ties)
        lowest_month: ``(month, total)`` with the smallest total (first on ties)
        data_completeness: Percentage of cells holding a non-zero value
        filled_cells: Cells holding a non-zero value
        total_cells: Twelve cells per data row
    """

    total_rows: int
    year_total: int
    monthly_totals: dict[MonthKey, int] = field(default_factory=dict)
    highest_month: tuple[MonthKey, int] = (MONTH_KEYS[0], 0)
    lowest_month: tuple[MonthKey, int] = (MONTH_KEYS[0], 0)
    data_completeness: float = 0.0
    filled_cells: int = 0
    total_cells: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_rows": self.total_rows,
            "year_total": self.year_total,
            "monthly_totals": dict(self.monthly_totals),
            "highest_month": {"month": self.highest_month[0], "value": self.highest_month[1]},
            "lowest_month": {"month": self.lowest_month[0], "value": self.lowest_month[1]},
            "data_completeness": self.data_completeness,
            "filled_cells": self.filled_cells,
            "total_cells": self.total_cells,
        }


def data_summary(rows: list[TableRow]) -> DataSummary:
    """Compute headline figures for a table."""
    data = data_rows(rows)
    totals = monthly_totals(rows)

    highest = (MONTH_KEYS[0], totals[MONTH_KEYS[0]])
    lowest = highest
    for month in MONTH_KEYS:
        if totals[month] > highest[1]:
            highest = (month, totals[month])
        if totals[month] < lowest[1]:
            lowest = (month, totals[month])

    total_cells = len(data) * len(MONTH_KEYS)
    filled_cells = sum(
        1 for row in data for month in MONTH_KEYS if row.value(month) not in (None, 0)
    )
    completeness = (filled_cells / total_cells) * 100 if total_cells else 0.0

    return DataSummary(
        total_rows=len(data),
        year_total=sum(totals.values()),
        monthly_totals=totals,
        highest_month=highest,
        lowest_month=lowest,
        data_completeness=completeness,
        filled_cells=filled_cells,
        total_cells=total_cells,
    )


def monthly_growth(current: int, previous: int) -> float | None:
    """
    Percentage change from ``previous`` to ``current``.

    Returns ``None`` when ``previous`` is 0. A negative base uses its
    magnitude, so moving from -100 to -50 is +50%.
    """
    if previous == 0:
        return None
    return ((current - previous) / abs(previous)) * 100


def rolling_average(
    monthly: dict[MonthKey, int | None], window: int = 3
) -> dict[MonthKey, float | None]:
    """
    Trailing average over ``window`` months.

    Missing months count as 0. The first ``window - 1`` months have no
    average and map to ``None``.
    """
    if window < 1:
        raise ValueError("window must be >= 1")
    series = pd.Series([monthly.get(month) or 0 for month in MONTH_KEYS], dtype="float64")
    rolled = series.rolling(window=window, min_periods=window).mean()
    return {
        month: (None if pd.isna(value) else float(value))
        for month, value in zip(MONTH_KEYS, rolled)
    }
