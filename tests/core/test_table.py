"""
Tests for table editing operations.
"""

import pytest
from costlab.core.categories import default_template
from costlab.core.errors import ConfigError
from costlab.core.kinds import Formula, RowKind
from costlab.core.months import MONTH_KEYS
from costlab.core.rows import ComputedRow, DataRow, HeaderRow
from costlab.core.table import (
    add_row,
    duplicate_row,
    move_row,
    new_row_id,
    parse_clipboard,
    paste_block,
    remove_row,
    rename_row,
    renumber,
    set_targets,
    update_month,
)


def _orders(rows):
    return [row.order for row in rows]


class TestStructuralEdits:
    """Structural edits keep order equal to 1-based position."""

    def test_add_row_appends_and_renumbers(self):
        rows = add_row(default_template(), RowKind.DATA, row_id="new")
        assert rows[-1].id == "new"
        assert rows[-1].category == "New Category"
        assert _orders(rows) == list(range(1, 13))

    def test_add_row_at_index(self):
        rows = add_row(default_template(), RowKind.HEADER, row_id="h", index=0)
        assert rows[0].id == "h"
        assert rows[0].kind == RowKind.HEADER
        assert rows[0].order == 1
        assert rows[1].order == 2

    def test_add_computed_row_is_subtotal(self):
        rows = add_row([], RowKind.COMPUTED, category="Total Misc", row_id="c")
        assert rows[0].formula == Formula.SUBTOTAL
        assert rows[0].target_rows == ()

    def test_add_row_rejects_unknown_kind(self):
        with pytest.raises(ConfigError, match="Unknown row kind"):
            add_row([], "chart")

    def test_add_row_rejects_duplicate_id(self):
        with pytest.raises(ConfigError, match="already exists"):
            add_row(default_template(), RowKind.DATA, row_id="row-1")

    def test_generated_ids_are_unique(self):
        assert new_row_id() != new_row_id()

    def test_remove_row_keeps_dangling_targets(self):
        rows = remove_row(default_template(), "row-1")
        assert "row-1" not in {row.id for row in rows}
        subtotal = next(row for row in rows if row.id == "row-10")
        assert "row-1" in subtotal.target_rows
        assert _orders(rows) == list(range(1, 11))

    def test_duplicate_row_copies_values(self):
        rows = update_month(default_template(), "row-6", "Jan-2024", 40)
        rows = duplicate_row(rows, "row-6", new_id="copy")
        copy = rows[-1]
        assert copy.id == "copy"
        assert copy.category == "Dental Claims (Copy)"
        assert copy.value("Jan-2024") == 40
        assert copy.order == len(rows)

    def test_move_row(self):
        rows = move_row(default_template(), 0, 2)
        assert [row.id for row in rows[:3]] == ["row-2", "row-3", "row-1"]
        assert _orders(rows) == list(range(1, 12))

    def test_move_row_out_of_range(self):
        with pytest.raises(ConfigError, match="out of range"):
            move_row(default_template(), 0, 99)

    def test_renumber_returns_new_rows(self):
        rows = [
            DataRow(id="a", category="Dental Claims", order=7),
            DataRow(id="b", category="Vision Claims", order=3),
        ]
        assert _orders(renumber(rows)) == [1, 2]
        assert rows[0].order == 7


class TestCellEdits:
    """Test in-place style edits that return a new list."""

    def test_update_month_rounds(self):
        rows = update_month(default_template(), "row-1", "Jan-2024", 100.5)
        assert rows[0].value("Jan-2024") == 101

    def test_update_month_clears_with_none(self):
        rows = update_month(default_template(), "row-1", "Jan-2024", 100)
        rows = update_month(rows, "row-1", "Jan-2024", None)
        assert rows[0].value("Jan-2024") is None

    def test_update_month_does_not_mutate_input(self):
        original = default_template()
        update_month(original, "row-1", "Jan-2024", 5)
        assert original[0].value("Jan-2024") is None

    def test_update_month_rejects_computed_row(self):
        with pytest.raises(ConfigError, match="no month values"):
            update_month(default_template(), "row-10", "Jan-2024", 5)

    def test_update_month_rejects_unknown_month(self):
        with pytest.raises(ConfigError, match="Unknown month"):
            update_month(default_template(), "row-1", "Jan-2025", 5)

    def test_unknown_row_id(self):
        with pytest.raises(ConfigError, match="not found"):
            update_month(default_template(), "nope", "Jan-2024", 5)

    def test_rename_row(self):
        rows = rename_row(default_template(), "row-6", "Dental Claims (Adult)")
        assert rows[5].category == "Dental Claims (Adult)"


class TestSetTargets:
    """Curated subtotals accept explicit targets; group-bound ones do not."""

    def test_set_targets_on_curated_subtotal(self):
        rows = default_template() + [
            ComputedRow(id="c", category="Total Dental and Vision", order=12)
        ]
        rows = set_targets(rows, "c", ["row-6", "row-7"])
        assert rows[-1].target_rows == ("row-6", "row-7")

    def test_set_targets_rejects_group_bound(self):
        with pytest.raises(ConfigError, match="bound to group"):
            set_targets(default_template(), "row-10", ["row-1"])

    def test_set_targets_rejects_data_row(self):
        with pytest.raises(ConfigError, match="not a computed row"):
            set_targets(default_template(), "row-1", ["row-2"])


class TestClipboardPaste:
    """Pasting copied spreadsheet blocks into month cells."""

    def test_parse_clipboard_tabs_and_commas(self):
        grid = parse_clipboard("1\t2\t3\r\n\n4,5\n")
        assert grid == [["1", "2", "3"], ["4", "5", ""]]

    def test_parse_clipboard_empty(self):
        assert parse_clipboard("  \n\n") == []

    def test_paste_fills_months_from_target_cell(self):
        rows = default_template()
        updated = paste_block(rows, "$1,200\t(300)\t12.5", 0, 1)

        assert updated[0].value("Jan-2024") == 1200
        assert updated[0].value("Feb-2024") == -300
        assert updated[0].value("Mar-2024") == 13
        assert rows[0].value("Jan-2024") is None

    def test_paste_overrunning_rows_and_months_is_clipped(self):
        rows = default_template()[:2]
        text = "1\t2\t3\n4\t5\t6\n7\t8\t9"
        updated = paste_block(rows, text, 1, 11)

        assert len(updated) == 2
        assert updated[0] == rows[0]
        assert updated[1].value("Nov-2024") == 1
        assert updated[1].value("Dec-2024") == 2
        assert [updated[1].value(m) for m in MONTH_KEYS[:10]] == [None] * 10

    def test_paste_skips_category_column(self):
        rows = default_template()
        updated = paste_block(rows, "Dental\t10\t20", 5, 0)

        assert updated[5].category == "Dental Claims"
        assert updated[5].value("Jan-2024") == 10
        assert updated[5].value("Feb-2024") == 20

    def test_paste_landing_on_non_data_rows_skips_them(self):
        rows = [
            HeaderRow(id="h", category="Medical", order=1),
            DataRow(id="d", category="Dental Claims", order=2),
            ComputedRow(id="t", category="Total Dental", order=3, target_rows=("d",)),
        ]
        updated = paste_block(rows, "1\t2\n3\t4\n5\t6", 0, 1)

        assert updated[0] == rows[0]
        assert updated[2] == rows[2]
        assert updated[1].value("Jan-2024") == 3
        assert updated[1].value("Feb-2024") == 4

    def test_blank_and_unreadable_cells_keep_existing_values(self):
        rows = update_month(default_template(), "row-1", "Jan-2024", 7)
        rows = update_month(rows, "row-1", "Feb-2024", 8)
        updated = paste_block(rows, "\tn/a\t9", 0, 1)

        assert updated[0].value("Jan-2024") == 7
        assert updated[0].value("Feb-2024") == 8
        assert updated[0].value("Mar-2024") == 9

    def test_negative_start_is_rejected(self):
        with pytest.raises(ConfigError, match="must not be negative"):
            paste_block(default_template(), "1", -1, 1)
