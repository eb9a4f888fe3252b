"""
Row model for CostLab tables.

A table is a flat list of rows of three kinds, discriminated by ``kind``:

- ``DataRow``: twelve month values entered by the user or imported
- ``HeaderRow``: a presentation label without numbers
- ``ComputedRow``: a subtotal or grand total whose values are always derived

Rows are immutable. Every operation that changes a table returns a new list,
so aggregation and validation can never observe a half-edited table.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from .amounts import coerce_month_value
from .errors import ConfigError
from .kinds import Formula, RowKind
from .months import MONTH_KEYS, MonthKey, empty_months

__all__ = [
    "ComputedRow",
    "DataRow",
    "HeaderRow",
    "TableRow",
    "data_rows",
    "computed_rows",
    "index_rows",
    "row_from_dict",
    "row_to_dict",
    "rows_from_dicts",
    "rows_to_dicts",
]


@dataclass(frozen=True, slots=True)
class DataRow:
    """
    Row with one value per month.

    Attributes:
        id: Unique identifier across the table
        category: Display label (serialized as ``Category``)
        order: Manual sort key, kept equal to list position
        months: Month key to integer value, or ``None`` for no data
        is_manual_total: Imported spreadsheet total expected to reconcile
            with a computed row
    """

    id: str
    category: str
    order: int
    months: dict[MonthKey, int | None] = field(default_factory=empty_months)
    is_manual_total: bool = False
    kind: Literal["data"] = field(default=RowKind.DATA, init=False)

    def value(self, month: MonthKey) -> int | None:
        """Value for ``month``; missing keys read as ``None``."""
        return self.months.get(month)


@dataclass(frozen=True, slots=True)
class HeaderRow:
    """Label-only row used for presentation grouping."""

    id: str
    category: str
    order: int
    kind: Literal["header"] = field(default=RowKind.HEADER, init=False)


@dataclass(frozen=True, slots=True)
class ComputedRow:
    """
    Derived row whose values are re-computed on demand and never stored.

    Attributes:
        formula: ``"subtotal"`` sums ``target_rows``; ``"grandtotal"`` sums
            every data row and ignores ``target_rows``
        target_rows: Row ids to sum (order does not affect the result)
        group_id: Cost group this subtotal tracks; when set, ``target_rows``
            is a cache maintained by ``grouping.refresh_targets``
    """

    id: str
    category: str
    order: int
    formula: str = Formula.SUBTOTAL
    target_rows: tuple[str, ...] = ()
    group_id: str | None = None
    kind: Literal["computed"] = field(default=RowKind.COMPUTED, init=False)

    def __post_init__(self) -> None:
        if self.formula not in Formula.all_formulas():
            raise ConfigError(
                f"Computed row '{self.id}' has unknown formula '{self.formula}'. "
                f"Expected one of: {', '.join(Formula.all_formulas())}"
            )
        if not isinstance(self.target_rows, tuple):
            object.__setattr__(self, "target_rows", tuple(self.target_rows))

    @property
    def is_grand_total(self) -> bool:
        return self.formula == Formula.GRAND_TOTAL

    @property
    def is_group_bound(self) -> bool:
        """True for subtotals whose targets follow a cost group."""
        return self.formula == Formula.SUBTOTAL and bool(self.group_id)


TableRow = Union[DataRow, HeaderRow, ComputedRow]


def data_rows(rows: list[TableRow]) -> list[DataRow]:
    """Return the data rows of a table, in list order."""
    return [row for row in rows if row.kind == RowKind.DATA]


def computed_rows(rows: list[TableRow]) -> list[ComputedRow]:
    """Return the computed rows of a table, in list order."""
    return [row for row in rows if row.kind == RowKind.COMPUTED]


def index_rows(rows: list[TableRow]) -> dict[str, TableRow]:
    """
    Map row id to row.

    When ids collide the first row wins, matching a front-to-back lookup.
    """
    index: dict[str, TableRow] = {}
    for row in rows:
        index.setdefault(row.id, row)
    return index


def row_from_dict(data: dict[str, Any]) -> TableRow:
    """
    Build a row from its wire shape.

    The wire shape uses ``Category``, ``targetRows``, ``groupId`` and
    ``isManualTotal`` keys. Month values are coerced like form inputs.

    Raises:
        ConfigError: If the payload does not describe a valid row
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Row payload must be a mapping, got {type(data).__name__}")

    row_id = data.get("id")
    if not isinstance(row_id, str) or not row_id:
        raise ConfigError(f"Row payload is missing a string 'id': {data!r}")

    category = data.get("Category", data.get("category"))
    if category is None:
        raise ConfigError(f"Row '{row_id}' is missing 'Category'")
    if not isinstance(category, str):
        raise ConfigError(f"Row '{row_id}': 'Category' must be a string")

    order = data.get("order", 0)
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        raise ConfigError(f"Row '{row_id}': 'order' must be a number")
    order = int(order)

    kind = data.get("kind")
    if kind == RowKind.DATA:
        raw_months = data.get("months")
        if raw_months is None:
            raw_months = {}
        if not isinstance(raw_months, dict):
            raise ConfigError(f"Row '{row_id}': 'months' must be a mapping")
        months = {month: coerce_month_value(raw_months.get(month)) for month in MONTH_KEYS}
        is_manual_total = data.get("isManualTotal", data.get("is_manual_total", False))
        if is_manual_total is None:
            is_manual_total = False
        if not isinstance(is_manual_total, bool):
            raise ConfigError(f"Row '{row_id}': 'isManualTotal' must be a boolean")
        return DataRow(
            id=row_id,
            category=category,
            order=order,
            months=months,
            is_manual_total=is_manual_total,
        )
    if kind == RowKind.HEADER:
        return HeaderRow(id=row_id, category=category, order=order)
    if kind == RowKind.COMPUTED:
        targets = data.get("targetRows", data.get("target_rows", []))
        if targets is None:
            targets = []
        if not isinstance(targets, (list, tuple)) or not all(
            isinstance(t, str) for t in targets
        ):
            raise ConfigError(f"Row '{row_id}': 'targetRows' must be a list of ids")
        group_id = data.get("groupId", data.get("group_id"))
        if group_id is not None and not isinstance(group_id, str):
            raise ConfigError(f"Row '{row_id}': 'groupId' must be a string")
        return ComputedRow(
            id=row_id,
            category=category,
            order=order,
            formula=data.get("formula", Formula.SUBTOTAL),
            target_rows=tuple(targets),
            group_id=group_id or None,
        )
    raise ConfigError(
        f"Row '{row_id}' has unknown kind {kind!r}. "
        f"Expected one of: {', '.join(RowKind.all_kinds())}"
    )


def row_to_dict(row: TableRow) -> dict[str, Any]:
    """Convert a row to its wire shape."""
    base: dict[str, Any] = {
        "id": row.id,
        "Category": row.category,
        "kind": row.kind,
        "order": row.order,
    }
    if row.kind == RowKind.DATA:
        base["months"] = {month: row.value(month) for month in MONTH_KEYS}
        if row.is_manual_total:
            base["isManualTotal"] = True
    elif row.kind == RowKind.COMPUTED:
        base["formula"] = row.formula
        base["targetRows"] = list(row.target_rows)
        if row.group_id:
            base["groupId"] = row.group_id
    elif row.kind != RowKind.HEADER:
        raise ConfigError(f"Row '{row.id}' has unknown kind {row.kind!r}")
    return base


def rows_from_dicts(payload: list[dict[str, Any]]) -> list[TableRow]:
    """Build every row of a table from wire-shape payloads."""
    return [row_from_dict(item) for item in payload]


def rows_to_dicts(rows: list[TableRow]) -> list[dict[str, Any]]:
    """Convert every row of a table to its wire shape."""
    return [row_to_dict(row) for row in rows]
