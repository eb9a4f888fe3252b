"""
Table editing operations.

Every operation takes the current row list and returns a new one. Structural
edits (insert, delete, duplicate, move) finish with ``renumber`` so that each
row's ``order`` equals its 1-based list position.
"""
from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Iterable

from .amounts import AmountParseError, parse_amount, round_amount
from .errors import ConfigError
from .kinds import Formula, RowKind
from .months import MONTH_KEYS, MonthKey, empty_months, is_month_key
from .rows import ComputedRow, DataRow, HeaderRow, TableRow

__all__ = [
    "add_row",
    "duplicate_row",
    "move_row",
    "new_row_id",
    "parse_clipboard",
    "paste_block",
    "remove_row",
    "rename_row",
    "renumber",
    "set_targets",
    "update_month",
]


def new_row_id() -> str:
    """Generate a fresh row id."""
    return f"row-{uuid.uuid4().hex[:12]}"


def renumber(rows: Iterable[TableRow]) -> list[TableRow]:
    """Reassign ``order`` so it matches list position (starting at 1)."""
    return [
        row if row.order == position else replace(row, order=position)
        for position, row in enumerate(rows, start=1)
    ]


def _position(rows: list[TableRow], row_id: str) -> int:
    for i, row in enumerate(rows):
        if row.id == row_id:
            return i
    raise ConfigError(f"Row '{row_id}' not found in table")


def add_row(
    rows: list[TableRow],
    kind: str = RowKind.DATA,
    *,
    category: str | None = None,
    row_id: str | None = None,
    index: int | None = None,
) -> list[TableRow]:
    """
    Insert a blank row of the given kind.

    Args:
        rows: Current table
        kind: ``"data"``, ``"header"`` or ``"computed"`` (a subtotal)
        category: Label; a kind-specific placeholder when omitted
        row_id: Id for the new row; generated when omitted
        index: Insert position; appended when omitted

    Raises:
        ConfigError: On an unknown kind or a duplicate id
    """
    row_id = row_id or new_row_id()
    if any(row.id == row_id for row in rows):
        raise ConfigError(f"Row id '{row_id}' already exists")

    if kind == RowKind.DATA:
        new: TableRow = DataRow(
            id=row_id,
            category=category or "New Category",
            order=0,
            months=empty_months(),
        )
    elif kind == RowKind.HEADER:
        new = HeaderRow(id=row_id, category=category or "New Header", order=0)
    elif kind == RowKind.COMPUTED:
        new = ComputedRow(
            id=row_id,
            category=category or "New Total",
            order=0,
            formula=Formula.SUBTOTAL,
        )
    else:
        raise ConfigError(
            f"Unknown row kind {kind!r}. Expected one of: {', '.join(RowKind.all_kinds())}"
        )

    updated = list(rows)
    updated.insert(len(updated) if index is None else index, new)
    return renumber(updated)


def remove_row(rows: list[TableRow], row_id: str) -> list[TableRow]:
    """
    Delete one row.

    Computed rows that referenced it keep the dangling id; validation reports it.
    """
    position = _position(rows, row_id)
    return renumber(rows[:position] + rows[position + 1 :])


def duplicate_row(
    rows: list[TableRow], row_id: str, *, new_id: str | None = None
) -> list[TableRow]:
    """Append a copy of a row labelled ``"<category> (Copy)"``."""
    source = rows[_position(rows, row_id)]
    new_id = new_id or new_row_id()
    if any(row.id == new_id for row in rows):
        raise ConfigError(f"Row id '{new_id}' already exists")

    changes: dict = {"id": new_id, "category": f"{source.category} (Copy)"}
    if source.kind == RowKind.DATA:
        changes["months"] = dict(source.months)
    return renumber(list(rows) + [replace(source, **changes)])


def move_row(rows: list[TableRow], from_index: int, to_index: int) -> list[TableRow]:
    """Move the row at ``from_index`` to ``to_index``."""
    if not 0 <= from_index < len(rows) or not 0 <= to_index < len(rows):
        raise ConfigError(
            f"Move {from_index} -> {to_index} is out of range for {len(rows)} rows"
        )
    updated = list(rows)
    updated.insert(to_index, updated.pop(from_index))
    return renumber(updated)


def update_month(
    rows: list[TableRow], row_id: str, month: MonthKey, value: int | float | None
) -> list[TableRow]:
    """
    Set one month of a data row.

    Finite fractional input is rounded to a whole unit; ``None`` clears the cell.

    Raises:
        ConfigError: If the row is not a data row or ``month`` is not a month key
    """
    if not is_month_key(month):
        raise ConfigError(f"Unknown month '{month}'")
    position = _position(rows, row_id)
    row = rows[position]
    if row.kind != RowKind.DATA:
        raise ConfigError(f"Row '{row_id}' is a {row.kind} row and has no month values")

    months = dict(row.months)
    months[month] = None if value is None else round_amount(value)
    updated = list(rows)
    updated[position] = replace(row, months=months)
    return updated


def rename_row(rows: list[TableRow], row_id: str, category: str) -> list[TableRow]:
    """
    Change a row's category.

    Group-bound subtotal targets are not updated here; call
    ``grouping.refresh_targets`` after category edits.
    """
    position = _position(rows, row_id)
    updated = list(rows)
    updated[position] = replace(rows[position], category=category)
    return updated


def set_targets(
    rows: list[TableRow], row_id: str, target_ids: Iterable[str]
) -> list[TableRow]:
    """
    Replace the curated target list of a subtotal.

    Raises:
        ConfigError: If the row is not computed, or is bound to a cost group
            (its targets are maintained by ``grouping.refresh_targets``)
    """
    position = _position(rows, row_id)
    row = rows[position]
    if row.kind != RowKind.COMPUTED:
        raise ConfigError(f"Row '{row_id}' is not a computed row")
    if row.group_id:
        raise ConfigError(
            f"Computed row '{row_id}' is bound to group '{row.group_id}'; "
            "its targets are refreshed from categories and cannot be set directly"
        )
    updated = list(rows)
    updated[position] = replace(row, target_rows=tuple(target_ids))
    return updated


def parse_clipboard(text: str) -> list[list[str]]:
    """
    Split copied spreadsheet cells into a rectangular grid of strings.

    Blank lines are dropped. Each line is split on tabs when it contains one,
    otherwise on commas. Cells are stripped and short lines are padded with
    ``""`` to the widest line.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    grid = [
        [cell.strip() for cell in line.split("\t" if "\t" in line else ",")]
        for line in lines
    ]
    width = max((len(cells) for cells in grid), default=0)
    return [cells + [""] * (width - len(cells)) for cells in grid]


def paste_block(
    rows: list[TableRow], text: str, row_index: int, column_index: int
) -> list[TableRow]:
    """
    Paste a block of copied cells into the table starting at one cell.

    Column 0 is the category column and columns 1-12 are the months, so a
    paste at ``column_index=1`` fills January onwards. Cells that land on the
    category column, past December, past the last row or on a header or
    computed row are dropped. Blank and unreadable cells leave the existing
    value untouched; readable ones go through ``parse_amount``.

    Args:
        rows: Current table
        text: Clipboard text, tab- or comma-separated
        row_index: List position of the top-left target row
        column_index: Grid column of the top-left target cell

    Returns:
        New table with the pasted months applied

    Raises:
        ConfigError: If either start index is negative
    """
    if row_index < 0 or column_index < 0:
        raise ConfigError(
            f"Paste target ({row_index}, {column_index}) must not be negative"
        )

    updated = list(rows)
    for row_offset, cells in enumerate(parse_clipboard(text)):
        position = row_index + row_offset
        if position >= len(updated):
            break
        row = updated[position]
        if row.kind != RowKind.DATA:
            continue

        months = dict(row.months)
        for col_offset, cell in enumerate(cells):
            column = column_index + col_offset
            if column == 0 or column > len(MONTH_KEYS):
                continue
            try:
                value = parse_amount(cell)
            except AmountParseError:
                continue
            if value is not None:
                months[MONTH_KEYS[column - 1]] = value
        updated[position] = replace(row, months=months)
    return updated
