"""
Keyword-based auto-grouping of healthcare cost categories.

Each data row's category is classified into one of eight cost groups. The
classification drives two things:

- synthesizing subtotal rows for ungrouped imported data
- keeping a group-bound subtotal's ``target_rows`` in sync when categories change

Classification is first-match-wins over ``COST_GROUPS`` in priority order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .kinds import Formula, RowKind
from .rows import ComputedRow, DataRow, HeaderRow, TableRow, data_rows

__all__ = [
    "COST_GROUPS",
    "CostGroup",
    "GroupSection",
    "GroupSuggestion",
    "classify",
    "get_group",
    "group_hierarchy",
    "refresh_targets",
    "suggest",
    "synthesize_subtotals",
]

logger = logging.getLogger(__name__)

GRAND_TOTAL_ID = "computed-grand-total"


@dataclass(frozen=True)
class CostGroup:
    """
    Cost group definition.

    Attributes:
        id: Stable group identifier stored on subtotal rows as ``group_id``
        name: Display name, used in synthesized subtotal labels
        description: Short human description
        patterns: Lowercase keywords matched as substrings of a category
        color: Display color hint for renderers
        order: Priority position (1 is checked first)
    """

    id: str
    name: str
    description: str
    patterns: tuple[str, ...]
    color: str
    order: int


COST_GROUPS: tuple[CostGroup, ...] = (
    CostGroup(
        id="medical-inpatient",
        name="Inpatient Medical",
        description="Hospital inpatient claims and services",
        patterns=("inpatient", "hospital inpatient", "facility inpatient"),
        color="blue",
        order=1,
    ),
    CostGroup(
        id="medical-outpatient",
        name="Outpatient Medical",
        description="Hospital outpatient and ambulatory services",
        patterns=("outpatient", "hospital outpatient", "facility outpatient"),
        color="indigo",
        order=2,
    ),
    CostGroup(
        id="medical-non-hospital",
        name="Non-Hospital Medical",
        description="Physician visits, specialist care, and non-facility services",
        patterns=("non-hospital", "physician", "specialist", "non-domestic"),
        color="purple",
        order=3,
    ),
    CostGroup(
        id="pharmacy",
        name="Pharmacy",
        description="Prescription drugs and pharmacy services",
        patterns=("prescription", "pharmacy", "drug", "medication"),
        color="green",
        order=4,
    ),
    CostGroup(
        id="dental",
        name="Dental",
        description="Dental care and oral health services",
        patterns=("dental", "oral health", "dentist"),
        color="yellow",
        order=5,
    ),
    CostGroup(
        id="vision",
        name="Vision",
        description="Eye care and vision services",
        patterns=("vision", "optical", "eye care", "optometry"),
        color="pink",
        order=6,
    ),
    CostGroup(
        id="administrative",
        name="Administrative",
        description="Plan administration and processing fees",
        patterns=("administrative", "admin", "tpa", "processing", "management"),
        color="gray",
        order=7,
    ),
    CostGroup(
        id="stop-loss",
        name="Stop-Loss",
        description="Stop-loss insurance and reinsurance",
        patterns=("stop-loss", "stop loss", "reinsurance", "excess"),
        color="red",
        order=8,
    ),
)

_GROUPS_BY_ID = {group.id: group for group in COST_GROUPS}


def get_group(group_id: str) -> CostGroup | None:
    """Look up a cost group by id."""
    return _GROUPS_BY_ID.get(group_id)


def classify(category: str) -> str | None:
    """
    Assign a category to a cost group.

    Returns the id of the first group (in priority order) with a keyword that
    occurs in the lowercased category, or ``None`` when nothing matches.
    """
    text = category.lower()
    for group in COST_GROUPS:
        for pattern in group.patterns:
            if pattern in text:
                return group.id
    return None


def synthesize_subtotals(rows: list[DataRow]) -> list[ComputedRow]:
    """
    Create subtotal rows for every cost group with more than one member.

    Groups are emitted in order of their first member. A group with a single
    member gets no subtotal. A grand total row is always appended last. New
    rows are ordered after the highest existing ``order``.

    Args:
        rows: Data rows to group

    Returns:
        New computed rows (subtotals followed by one grand total)
    """
    members: dict[str, list[str]] = {}
    for row in rows:
        group_id = classify(row.category)
        if group_id is not None:
            members.setdefault(group_id, []).append(row.id)

    next_order = max((row.order for row in rows), default=0) + 1
    generated: list[ComputedRow] = []
    for group_id, row_ids in members.items():
        if len(row_ids) < 2:
            continue
        group = _GROUPS_BY_ID[group_id]
        generated.append(
            ComputedRow(
                id=f"computed-{group_id}-subtotal",
                category=f"Total {group.name}",
                order=next_order,
                formula=Formula.SUBTOTAL,
                target_rows=tuple(row_ids),
                group_id=group_id,
            )
        )
        next_order += 1

    generated.append(
        ComputedRow(
            id=GRAND_TOTAL_ID,
            category="Grand Total",
            order=next_order,
            formula=Formula.GRAND_TOTAL,
        )
    )
    logger.debug(
        "Synthesized %d subtotal rows from %d data rows", len(generated) - 1, len(rows)
    )
    return generated


def refresh_targets(rows: list[TableRow]) -> list[TableRow]:
    """
    Recompute cached target lists of computed rows.

    - grand totals get the ids of all current data rows (cosmetic only)
    - group-bound subtotals get the ids of data rows classifying to their group
    - subtotals without a ``group_id`` are left as curated

    Returns:
        A new row list; the input is not modified
    """
    data = data_rows(rows)
    all_ids = tuple(row.id for row in data)
    classified = [(row.id, classify(row.category)) for row in data]

    refreshed: list[TableRow] = []
    for row in rows:
        if row.kind == RowKind.COMPUTED:
            if row.formula == Formula.GRAND_TOTAL:
                row = replace(row, target_rows=all_ids)
            elif row.is_group_bound:
                targets = tuple(rid for rid, gid in classified if gid == row.group_id)
                row = replace(row, target_rows=targets)
        refreshed.append(row)
    return refreshed


@dataclass(frozen=True)
class GroupSuggestion:
    """Advisory grouping of data rows; not authoritative."""

    group_id: str
    group_name: str
    row_ids: list[str]
    confidence: float


def suggest(rows: list[TableRow]) -> list[GroupSuggestion]:
    """
    Suggest cost groups for the data rows of a table.

    Unlike ``classify`` a row may appear under several groups. Each row scores
    1.0 against a group when its category equals a keyword and 0.7 when it
    merely contains one. Suggestions carry the average score and are ranked
    by it, highest first.
    """
    scored: dict[str, tuple[list[str], list[float]]] = {}
    for row in data_rows(rows):
        category = row.category.lower()
        for group in COST_GROUPS:
            best = 0.0
            for pattern in group.patterns:
                if pattern in category:
                    best = max(best, 1.0 if category == pattern else 0.7)
            if best > 0:
                ids, scores = scored.setdefault(group.id, ([], []))
                ids.append(row.id)
                scores.append(best)

    suggestions = [
        GroupSuggestion(
            group_id=group_id,
            group_name=_GROUPS_BY_ID[group_id].name,
            row_ids=ids,
            confidence=sum(scores) / len(scores),
        )
        for group_id, (ids, scores) in scored.items()
    ]
    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions


@dataclass
class GroupSection:
    """One display section of a grouped table."""

    rows: list[TableRow]
    group: CostGroup | None = None
    subtotal_row: ComputedRow | None = None
    is_expanded: bool = True


def group_hierarchy(rows: list[TableRow]) -> list[GroupSection]:
    """
    Arrange a table into display sections.

    Sections are: header rows, then one section per cost group with members
    (followed by its subtotal when one is bound to the group), then ungrouped
    data rows, then the grand total. Rows inside a section are sorted by
    ``order``.
    """
    headers: list[HeaderRow] = []
    computed: list[ComputedRow] = []
    grouped: dict[str, list[TableRow]] = {}
    ungrouped: list[TableRow] = []

    for row in rows:
        if row.kind == RowKind.HEADER:
            headers.append(row)
        elif row.kind == RowKind.COMPUTED:
            computed.append(row)
        elif row.kind == RowKind.DATA:
            group_id = classify(row.category)
            if group_id is None:
                ungrouped.append(row)
            else:
                grouped.setdefault(group_id, []).append(row)

    sections: list[GroupSection] = []
    if headers:
        sections.append(GroupSection(rows=sorted(headers, key=lambda r: r.order)))

    for group in COST_GROUPS:
        members = grouped.get(group.id)
        if not members:
            continue
        subtotal_row = next(
            (
                r
                for r in computed
                if r.formula == Formula.SUBTOTAL and r.group_id == group.id
            ),
            None,
        )
        section_rows = list(members)
        if subtotal_row is not None:
            section_rows.append(subtotal_row)
        sections.append(
            GroupSection(
                rows=sorted(section_rows, key=lambda r: r.order),
                group=group,
                subtotal_row=subtotal_row,
            )
        )

    if ungrouped:
        sections.append(GroupSection(rows=sorted(ungrouped, key=lambda r: r.order)))

    grand = next((r for r in computed if r.formula == Formula.GRAND_TOTAL), None)
    if grand is not None:
        sections.append(GroupSection(rows=[grand]))
    return sections
