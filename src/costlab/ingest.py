"""
Spreadsheet ingestion and export for CostLab tables.

Imported records are plain mappings from column header to cell text, one per
spreadsheet line. Each line becomes a data row, except lines whose category
reads like a total ("total", "sum", "subtotal"), which become computed rows.
Their original numbers are discarded and a warning is recorded, since the
engine re-derives totals itself.

Note:
    The total heuristic also converts legitimate inputs such as
    "Total Direct Labor" into computed rows. Review the ``<id>-converted``
    warnings after every import.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from .core.amounts import AmountParseError, parse_amount
from .core.kinds import Formula, RowKind
from .core.months import MONTH_KEYS, MonthKey
from .core.rows import ComputedRow, DataRow, TableRow
from .core.validation import IssueType, ValidationIssue

__all__ = [
    "CSV_HEADERS",
    "ImportResult",
    "ImportStats",
    "check_headers",
    "export_records",
    "read_csv",
    "records_to_rows",
    "write_csv",
]

logger = logging.getLogger(__name__)

CSV_HEADERS: tuple[str, ...] = ("Category", *MONTH_KEYS)

_TOTAL_WORDS = ("total", "sum", "subtotal")
_GRAND_WORDS = ("grand", "overall")


@dataclass(frozen=True)
class ImportStats:
    total_rows: int = 0
    imported_rows: int = 0
    skipped_rows: int = 0
    converted_totals: int = 0


@dataclass
class ImportResult:
    """Rows built from a spreadsheet plus the problems met while reading it."""

    rows: list[TableRow] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)
    stats: ImportStats = field(default_factory=ImportStats)

    @property
    def has_errors(self) -> bool:
        return any(issue.type == IssueType.ERROR for issue in self.issues)


def check_headers(headers: Iterable[str]) -> tuple[list[str], list[str]]:
    """Return ``(missing, extra)`` headers compared with ``CSV_HEADERS``."""
    headers = list(headers)
    missing = [h for h in CSV_HEADERS if h not in headers]
    extra = [h for h in headers if h not in CSV_HEADERS]
    return missing, extra


def _is_total_label(category: str) -> bool:
    text = category.lower()
    return any(word in text for word in _TOTAL_WORDS)


def records_to_rows(
    records: Iterable[Mapping[str, Any]], headers: Iterable[str] | None = None
) -> ImportResult:
    """
    Convert spreadsheet records into table rows.

    Args:
        records: One mapping per spreadsheet line, keyed by column header
        headers: Column headers as read from the file; taken from the first
            record when omitted

    Returns:
        ImportResult with rows ordered as read (ids ``imported-<n>``)
    """
    records = list(records)
    if headers is None:
        headers = list(records[0].keys()) if records else []

    issues: list[ValidationIssue] = []
    missing, extra = check_headers(headers)
    if missing:
        issues.append(
            ValidationIssue(
                id="header-missing",
                row_id="header",
                type=IssueType.ERROR,
                message=f"Missing required headers: {', '.join(missing)}",
                value=missing,
            )
        )
    if extra:
        issues.append(
            ValidationIssue(
                id="header-extra",
                row_id="header",
                type=IssueType.WARNING,
                message=f"Extra headers found (will be ignored): {', '.join(extra)}",
                value=extra,
            )
        )

    rows: list[TableRow] = []
    skipped = 0
    converted = 0
    for position, record in enumerate(records, start=1):
        row_id = f"imported-{position}"
        category = record.get("Category")
        if category is None or not str(category).strip():
            skipped += 1
            continue
        category = str(category)

        months: dict[MonthKey, int | None] = {}
        for month in MONTH_KEYS:
            raw = record.get(month)
            try:
                months[month] = parse_amount(raw)
            except AmountParseError as exc:
                issues.append(
                    ValidationIssue(
                        id=f"{row_id}-{month}",
                        row_id=row_id,
                        type=IssueType.ERROR,
                        field=month,
                        message=f"Invalid number: {exc}",
                        value=raw,
                    )
                )
                months[month] = None

        if _is_total_label(category):
            lowered = category.lower()
            formula = (
                Formula.GRAND_TOTAL
                if any(word in lowered for word in _GRAND_WORDS)
                else Formula.SUBTOTAL
            )
            rows.append(
                ComputedRow(id=row_id, category=category, order=position, formula=formula)
            )
            converted += 1
            issues.append(
                ValidationIssue(
                    id=f"{row_id}-converted",
                    row_id=row_id,
                    type=IssueType.WARNING,
                    message="Converted manual total to computed row. Original values ignored.",
                    value=category,
                )
            )
            logger.info("Converted '%s' to a %s row", category, formula)
        else:
            rows.append(
                DataRow(id=row_id, category=category, order=position, months=months)
            )

    if skipped:
        logger.debug("Skipped %d records with a blank category", skipped)

    return ImportResult(
        rows=rows,
        issues=issues,
        stats=ImportStats(
            total_rows=len(records),
            imported_rows=len(rows),
            skipped_rows=skipped,
            converted_totals=converted,
        ),
    )


def read_csv(path: str | Path, *, sep: str = ",") -> ImportResult:
    """
    Read a spreadsheet export and convert it into table rows.

    Every cell is read as text so that amounts go through ``parse_amount``.
    Fully blank lines are dropped.
    """
    frame = pd.read_csv(
        path, sep=sep, dtype=str, keep_default_na=False, skip_blank_lines=True
    )
    frame.columns = [str(column).strip() for column in frame.columns]
    logger.debug("Read %d records from %s", len(frame), path)
    return records_to_rows(frame.to_dict("records"), headers=list(frame.columns))


def export_records(
    rows: list[TableRow],
    *,
    include_computed: bool = False,
    computed_values: Mapping[str, Mapping[MonthKey, int]] | None = None,
) -> list[dict[str, Any]]:
    """
    Convert a table into spreadsheet records, sorted by ``order``.

    Data rows export their values, with ``""`` for empty cells. Header rows
    export blank months. Computed rows are left out unless
    ``include_computed`` is set; their months are blank unless
    ``computed_values`` (from ``evaluate_all``) supplies them.
    """
    records: list[dict[str, Any]] = []
    for row in sorted(rows, key=lambda r: r.order):
        if row.kind == RowKind.COMPUTED and not include_computed:
            continue
        record: dict[str, Any] = {"Category": row.category}
        if row.kind == RowKind.DATA:
            for month in MONTH_KEYS:
                value = row.value(month)
                record[month] = "" if value is None else value
        elif row.kind == RowKind.COMPUTED and computed_values and row.id in computed_values:
            for month in MONTH_KEYS:
                record[month] = computed_values[row.id][month]
        else:
            for month in MONTH_KEYS:
                record[month] = ""
        records.append(record)
    return records


def write_csv(
    rows: list[TableRow],
    path: str | Path,
    *,
    include_computed: bool = False,
    computed_values: Mapping[str, Mapping[MonthKey, int]] | None = None,
    sep: str = ",",
) -> None:
    """Write ``export_records`` output to a CSV file with the canonical headers."""
    records = export_records(
        rows, include_computed=include_computed, computed_values=computed_values
    )
    frame = pd.DataFrame(records, columns=list(CSV_HEADERS))
    frame.to_csv(path, sep=sep, index=False)
