"""
Known healthcare cost categories and the stock table template.
"""

from __future__ import annotations

from .kinds import Formula
from .months import empty_months
from .rows import ComputedRow, DataRow, TableRow

KNOWN_CATEGORIES: tuple[str, ...] = (
    "Domestic Medical Facility Claims (Inpatient)",
    "Domestic Medical Facility Claims (Outpatient)",
    "Non-Domestic Medical Claims",
    "Non-Hospital Medical Claims",
    "Prescription Drug Claims",
    "Dental Claims",
    "Vision Claims",
    "Administrative Fees",
    "Stop-Loss Premium",
    "Total Hospital Medical Claims",
    "Grand Total",
    # Additional common categories
    "Medical Claims",
    "Pharmacy Claims",
    "Hospital Claims",
    "Outpatient Claims",
    "Inpatient Claims",
    "Preventive Care",
    "Emergency Services",
    "Mental Health Services",
    "Specialist Services",
    "Laboratory Services",
    "Radiology Services",
    "Physical Therapy",
    "Occupational Therapy",
    "Chiropractic Services",
    "Case Management Fees",
    "Network Access Fees",
    "Claims Processing Fees",
    "TPA Fees",
    "Cobra Administration",
    "Reinsurance Premium",
    "Stop-Loss Claims",
    "Aggregate Stop-Loss",
    "Specific Stop-Loss",
)

_KNOWN_LOWER = tuple(known.lower() for known in KNOWN_CATEGORIES)


def is_known_category(category: str) -> bool:
    """
    Fuzzy-match a category against the known list.

    A category is known when, ignoring case, it equals a known category,
    contains one, or is contained in one.
    """
    text = category.lower()
    return any(known == text or known in text or text in known for known in _KNOWN_LOWER)


_TEMPLATE_DATA = (
    ("row-1", "Domestic Medical Facility Claims (Inpatient)"),
    ("row-2", "Domestic Medical Facility Claims (Outpatient)"),
    ("row-3", "Non-Domestic Medical Claims"),
    ("row-4", "Non-Hospital Medical Claims"),
    ("row-5", "Prescription Drug Claims"),
    ("row-6", "Dental Claims"),
    ("row-7", "Vision Claims"),
    ("row-8", "Administrative Fees"),
    ("row-9", "Stop-Loss Premium"),
)


def default_template() -> list[TableRow]:
    """
    Build the stock reporting table.

    Nine empty data rows, a hospital subtotal over the inpatient and
    outpatient facility rows, and a grand total.
    """
    rows: list[TableRow] = [
        DataRow(id=row_id, category=category, order=order, months=empty_months())
        for order, (row_id, category) in enumerate(_TEMPLATE_DATA, start=1)
    ]
    rows.append(
        ComputedRow(
            id="row-10",
            category="Total Hospital Medical Claims",
            order=10,
            formula=Formula.SUBTOTAL,
            target_rows=("row-1", "row-2"),
            group_id="hospital-medical",
        )
    )
    rows.append(
        ComputedRow(
            id="row-11",
            category="Grand Total",
            order=11,
            formula=Formula.GRAND_TOTAL,
        )
    )
    return rows
