"""
Tests for spreadsheet import and export.
"""

from pathlib import Path

import pandas as pd
import pytest
from costlab.core.kinds import Formula, RowKind
from costlab.core.months import MONTH_KEYS
from costlab.core.rows import ComputedRow, DataRow, HeaderRow
from costlab.core.validation import IssueType
from costlab.ingest import (
    CSV_HEADERS,
    check_headers,
    export_records,
    read_csv,
    records_to_rows,
    write_csv,
)


def _record(category, **values):
    record = {"Category": category}
    for month in MONTH_KEYS:
        record[month] = ""
    for month, value in values.items():
        record[month.replace("_", "-")] = value
    return record


class TestHeaders:
    def test_canonical_headers(self):
        assert CSV_HEADERS[0] == "Category"
        assert CSV_HEADERS[1:] == MONTH_KEYS

    def test_missing_and_extra(self):
        missing, extra = check_headers(["Category", "Jan-2024", "Notes"])
        assert "Feb-2024" in missing
        assert extra == ["Notes"]

    def test_header_issues(self):
        result = records_to_rows(
            [{"Category": "Dental Claims", "Jan-2024": "10", "Notes": "x"}]
        )
        ids = {issue.id: issue.type for issue in result.issues}
        assert ids["header-missing"] == IssueType.ERROR
        assert ids["header-extra"] == IssueType.WARNING
        assert result.has_errors


class TestRecordsToRows:
    """Each spreadsheet line becomes one row."""

    def test_data_rows(self):
        result = records_to_rows(
            [
                _record("Dental Claims", Jan_2024="$1,200.50", Feb_2024="(300)"),
                _record("Vision Claims", Mar_2024="45"),
            ]
        )
        assert not result.has_errors
        first, second = result.rows
        assert first.id == "imported-1"
        assert first.order == 1
        assert first.value("Jan-2024") == 1201
        assert first.value("Feb-2024") == -300
        assert first.value("Mar-2024") is None
        assert second.value("Mar-2024") == 45

    def test_blank_categories_skipped(self):
        result = records_to_rows([_record("  "), _record("Dental Claims")])
        assert [row.id for row in result.rows] == ["imported-2"]
        assert result.stats.skipped_rows == 1
        assert result.stats.total_rows == 2

    def test_bad_cells_reported(self):
        result = records_to_rows([_record("Dental Claims", Apr_2024="lots")])
        issue = result.issues[0]
        assert issue.id == "imported-1-Apr-2024"
        assert issue.is_error
        assert issue.field == "Apr-2024"
        assert result.rows[0].value("Apr-2024") is None

    @pytest.mark.parametrize(
        "category, formula",
        [
            ("Total Hospital Claims", Formula.SUBTOTAL),
            ("Sum of fees", Formula.SUBTOTAL),
            ("Grand Total", Formula.GRAND_TOTAL),
            ("Overall Total", Formula.GRAND_TOTAL),
        ],
    )
    def test_totals_become_computed_rows(self, category, formula):
        result = records_to_rows([_record(category, Jan_2024="999")])
        row = result.rows[0]

        assert row.kind == RowKind.COMPUTED
        assert row.formula == formula
        assert row.target_rows == ()
        assert result.stats.converted_totals == 1
        assert result.issues[0].id == "imported-1-converted"
        assert result.issues[0].type == IssueType.WARNING

    def test_literal_total_input_is_converted_too(self):
        result = records_to_rows([_record("Total Direct Labor", Jan_2024="50")])
        assert result.rows[0].kind == RowKind.COMPUTED


class TestCsvFiles:
    def test_read_csv(self, tmp_path: Path):
        path = tmp_path / "costs.csv"
        frame = pd.DataFrame(
            [
                _record("Dental Claims", Jan_2024="1,000"),
                _record("Grand Total", Jan_2024="1,000"),
            ],
            columns=list(CSV_HEADERS),
        )
        frame.to_csv(path, index=False)

        result = read_csv(path)
        assert not result.has_errors
        assert result.rows[0].value("Jan-2024") == 1000
        assert result.rows[0].value("Feb-2024") is None
        assert result.rows[1].formula == Formula.GRAND_TOTAL

    def test_export_records(self):
        rows = [
            HeaderRow(id="h", category="Costs", order=1),
            DataRow(id="d", category="Dental Claims", order=2, months={"Jan-2024": 5}),
            ComputedRow(id="g", category="Grand Total", order=3, formula="grandtotal"),
        ]
        records = export_records(rows)
        assert [r["Category"] for r in records] == ["Costs", "Dental Claims"]
        assert records[1]["Jan-2024"] == 5
        assert records[1]["Feb-2024"] == ""

        with_totals = export_records(
            rows,
            include_computed=True,
            computed_values={"g": {month: 5 if month == "Jan-2024" else 0 for month in MONTH_KEYS}},
        )
        assert with_totals[-1]["Category"] == "Grand Total"
        assert with_totals[-1]["Jan-2024"] == 5

    def test_write_then_read(self, tmp_path: Path):
        rows = [
            DataRow(
                id="d",
                category="Dental Claims",
                order=1,
                months={"Jan-2024": 5, "Feb-2024": -20},
            )
        ]
        path = tmp_path / "out.csv"
        write_csv(rows, path)

        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        assert list(frame.columns) == list(CSV_HEADERS)

        result = read_csv(path)
        assert result.rows[0].value("Jan-2024") == 5
        assert result.rows[0].value("Feb-2024") == -20
        assert result.rows[0].value("Mar-2024") is None
