"""
Tests for cost-group classification and subtotal synthesis.
"""

import pytest
from costlab.core.aggregation import evaluate_all
from costlab.core.categories import default_template
from costlab.core.grouping import (
    COST_GROUPS,
    classify,
    get_group,
    group_hierarchy,
    refresh_targets,
    suggest,
    synthesize_subtotals,
)
from costlab.core.kinds import Formula, RowKind
from costlab.core.rows import ComputedRow, DataRow, HeaderRow
from costlab.core.table import rename_row, update_month


def _rows(*categories):
    return [
        DataRow(id=f"d{i}", category=category, order=i)
        for i, category in enumerate(categories, start=1)
    ]


class TestClassify:
    """First matching group in priority order wins."""

    @pytest.mark.parametrize(
        "category, group_id",
        [
            ("Domestic Medical Facility Claims (Inpatient)", "medical-inpatient"),
            ("Hospital Outpatient Services", "medical-outpatient"),
            ("Non-Domestic Medical Claims", "medical-non-hospital"),
            ("Prescription Drug Claims", "pharmacy"),
            ("DENTAL CLAIMS", "dental"),
            ("Optometry", "vision"),
            ("TPA Fees", "administrative"),
            ("Specific Stop-Loss", "stop-loss"),
            ("Miscellaneous", None),
        ],
    )
    def test_classify(self, category, group_id):
        assert classify(category) == group_id

    def test_priority_order(self):
        # "inpatient" is checked before "pharmacy"
        assert classify("Inpatient Pharmacy") == "medical-inpatient"

    def test_eight_groups_in_order(self):
        assert [group.order for group in COST_GROUPS] == list(range(1, 9))
        assert get_group("dental").name == "Dental"
        assert get_group("hospital-medical") is None


class TestSynthesizeSubtotals:
    """Subtotals only for groups with more than one member."""

    def test_groups_with_two_members(self):
        rows = _rows("Dental Claims", "Vision Claims", "Dentist Visits", "Misc")
        generated = synthesize_subtotals(rows)

        assert [row.id for row in generated] == [
            "computed-dental-subtotal",
            "computed-grand-total",
        ]
        dental = generated[0]
        assert dental.category == "Total Dental"
        assert dental.target_rows == ("d1", "d3")
        assert dental.group_id == "dental"
        assert dental.formula == Formula.SUBTOTAL

    def test_grand_total_always_appended(self):
        generated = synthesize_subtotals(_rows("Dental Claims"))
        assert len(generated) == 1
        assert generated[0].formula == Formula.GRAND_TOTAL
        assert generated[0].target_rows == ()

    def test_orders_follow_existing_rows(self):
        rows = _rows("Dental Claims", "Dentist Visits", "Rx Drug", "Pharmacy Claims")
        generated = synthesize_subtotals(rows)
        assert [row.order for row in generated] == [5, 6, 7]

    def test_groups_emitted_in_first_member_order(self):
        rows = _rows("Pharmacy Claims", "Dental Claims", "Drug Rebates", "Dentist")
        ids = [row.id for row in synthesize_subtotals(rows)]
        assert ids[:2] == ["computed-pharmacy-subtotal", "computed-dental-subtotal"]

    def test_no_rows(self):
        generated = synthesize_subtotals([])
        assert [row.order for row in generated] == [1]


class TestRefreshTargets:
    """Group-bound subtotals follow category edits."""

    def test_group_bound_subtotal_follows_rename(self):
        rows = _rows("Dental Claims", "Dentist Visits", "Vision Claims")
        rows = rows + synthesize_subtotals(rows)
        rows = rename_row(rows, "d3", "Dental Ortho")
        refreshed = refresh_targets(rows)

        dental = next(row for row in refreshed if row.id == "computed-dental-subtotal")
        assert dental.target_rows == ("d1", "d2", "d3")

    def test_group_without_members_becomes_empty(self):
        rows = _rows("Dental Claims", "Dentist Visits")
        rows = rows + synthesize_subtotals(rows)
        rows = rename_row(rows, "d1", "Misc")
        rows = rename_row(rows, "d2", "Other")
        dental = next(
            row for row in refresh_targets(rows) if row.id == "computed-dental-subtotal"
        )
        assert dental.target_rows == ()
        assert evaluate_all(rows)["computed-dental-subtotal"]["Jan-2024"] == 0

    def test_grand_total_targets_cached(self):
        rows = default_template()
        grand = next(row for row in refresh_targets(rows) if row.id == "row-11")
        assert grand.target_rows == tuple(f"row-{i}" for i in range(1, 10))

    def test_curated_subtotal_untouched(self):
        curated = ComputedRow(id="c", category="Total", order=3, target_rows=("d1",))
        rows = _rows("Dental Claims", "Vision Claims") + [curated]
        assert refresh_targets(rows)[-1] is curated

    def test_input_not_modified(self):
        rows = default_template()
        refresh_targets(rows)
        assert rows[-1].target_rows == ()

    def test_template_group_matches_no_classification(self):
        # "hospital-medical" is not a cost group id, so its cache empties
        rows = update_month(default_template(), "row-1", "Jan-2024", 10)
        hospital = next(row for row in refresh_targets(rows) if row.id == "row-10")
        assert hospital.target_rows == ()


class TestSuggest:
    """Advisory suggestions ranked by confidence."""

    def test_scores_and_ranking(self):
        rows = _rows("Pharmacy", "Pharmacy Claims", "Dental Claims")
        suggestions = suggest(rows)

        assert [s.group_id for s in suggestions] == ["pharmacy", "dental"]
        assert suggestions[0].row_ids == ["d1", "d2"]
        assert suggestions[0].confidence == pytest.approx(0.85)
        assert suggestions[1].confidence == pytest.approx(0.7)

    def test_row_may_appear_in_several_groups(self):
        suggestions = suggest(_rows("Inpatient Pharmacy"))
        assert {s.group_id for s in suggestions} == {"medical-inpatient", "pharmacy"}

    def test_no_matches(self):
        assert suggest(_rows("Misc")) == []


class TestGroupHierarchy:
    """Display sections for a grouped table."""

    def test_sections(self):
        rows = [HeaderRow(id="h", category="Costs", order=0)]
        data = _rows("Dental Claims", "Dentist Visits", "Misc")
        rows = rows + data + synthesize_subtotals(data)
        sections = group_hierarchy(rows)

        assert [row.id for row in sections[0].rows] == ["h"]
        assert sections[1].group.id == "dental"
        assert [row.id for row in sections[1].rows] == [
            "d1",
            "d2",
            "computed-dental-subtotal",
        ]
        assert sections[1].subtotal_row.id == "computed-dental-subtotal"
        assert [row.id for row in sections[2].rows] == ["d3"]
        assert sections[2].group is None
        assert sections[-1].rows[0].kind == RowKind.COMPUTED
        assert sections[-1].rows[0].formula == Formula.GRAND_TOTAL
