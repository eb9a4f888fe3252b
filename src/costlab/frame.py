"""
pandas views of CostLab tables.

Computed rows hold no values of their own; the frame fills them in from
``evaluate_all`` so a display or export layer can render every row alike.
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd

from .core.aggregation import evaluate_all
from .core.kinds import RowKind
from .core.months import MONTH_DISPLAY_NAMES, MONTH_KEYS, REPORTING_YEAR
from .core.rows import TableRow

__all__ = ["month_index", "monthly_series", "to_frame"]


def month_index(year: int = REPORTING_YEAR) -> pd.PeriodIndex:
    """
    Monthly period index for the reporting year.

    Example:
        ```python
        month_index()
        # PeriodIndex(['2024-01', '2024-02', ..., '2024-12'], dtype='period[M]')
        ```
    """
    start = np.datetime64(f"{year}-01", "M")
    months = start + np.arange(len(MONTH_KEYS)).astype("timedelta64[M]")
    return pd.PeriodIndex(months.astype(str), freq="M")


def _display_value(value):
    # NaN and infinity are validation errors; the view shows them as missing
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def to_frame(rows: list[TableRow], *, short_month_names: bool = False) -> pd.DataFrame:
    """
    Build a DataFrame with one line per row, sorted by ``order``.

    Columns: ``Category``, ``kind``, the twelve months and ``YTD``. Month
    cells use the nullable ``Int64`` dtype so that "no data" stays distinct
    from 0. Header rows have no values.

    Args:
        rows: Full table
        short_month_names: Label month columns ``Jan`` … ``Dec``

    Returns:
        DataFrame indexed by row id
    """
    computed = evaluate_all(rows)
    records = []
    for row in sorted(rows, key=lambda r: r.order):
        record: dict = {"id": row.id, "Category": row.category, "kind": row.kind}
        if row.kind == RowKind.DATA:
            values = {month: row.value(month) for month in MONTH_KEYS}
        elif row.kind == RowKind.COMPUTED:
            values = dict(computed.get(row.id, {}))
        else:
            values = {}
        for month in MONTH_KEYS:
            record[month] = _display_value(values.get(month))
        records.append(record)

    frame = pd.DataFrame.from_records(
        records, columns=["id", "Category", "kind", *MONTH_KEYS]
    ).set_index("id")
    frame[list(MONTH_KEYS)] = frame[list(MONTH_KEYS)].astype("Int64")
    frame["YTD"] = frame[list(MONTH_KEYS)].sum(axis=1, min_count=1).astype("Int64")

    if short_month_names:
        frame = frame.rename(columns=MONTH_DISPLAY_NAMES)
    return frame


def monthly_series(values: dict, name: str | None = None) -> pd.Series:
    """Turn a month mapping into a Series over ``month_index()``."""
    return pd.Series(
        [values.get(month) for month in MONTH_KEYS],
        index=month_index(),
        name=name,
        dtype="Float64",
    )
