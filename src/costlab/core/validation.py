"""
Validation pipeline for CostLab tables.

``validate`` runs every check over a row list and returns a single
``ValidationResult``. Checks never modify rows and never stop each other; a
table that is malformed in many ways gets a report listing all of them.

Two severities exist. Errors block export; warnings are informational.

Check order (issue order follows it):
1. Per-row checks (category, month values, computed-row targets and cycles)
2. Manual totals against computed values
3. Dataset-level quality heuristics
4. Category uniqueness
"""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .aggregation import evaluate_all, is_empty_row, totals_match
from .categories import is_known_category
from .config import DEFAULT_THRESHOLDS, ValidationThresholds
from .errors import ConfigError
from .exceptions import TableValidationError
from .kinds import Formula, RowKind
from .months import MONTH_KEYS, is_month_key
from .rows import ComputedRow, DataRow, TableRow, data_rows, index_rows

__all__ = [
    "GLOBAL_ROW_ID",
    "IssueType",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
    "has_circular_reference",
    "require_exportable",
    "validate",
    "validate_field_change",
]

logger = logging.getLogger(__name__)

GLOBAL_ROW_ID = "global"
CATEGORY_FIELD = "Category"


class IssueType(str, Enum):
    """Issue severity."""

    ERROR = "error"  # Blocks export
    WARNING = "warning"  # Informational


@dataclass(frozen=True)
class ValidationIssue:
    """
    One reported problem.

    Attributes:
        id: Stable identifier derived from the row and check
        row_id: Offending row id, or ``"global"`` for dataset-level issues
        type: ``IssueType.ERROR`` or ``IssueType.WARNING``
        message: Human-readable description
        field: Month key or ``"Category"`` when the issue concerns one cell
        value: Offending value, when there is one
    """

    id: str
    row_id: str
    type: IssueType
    message: str
    field: str | None = None
    value: Any = None

    @property
    def is_error(self) -> bool:
        return self.type == IssueType.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "rowId": self.row_id,
            "type": self.type.value,
            "message": self.message,
            "value": list(self.value) if isinstance(self.value, tuple) else self.value,
        }
        if self.field is not None:
            data["field"] = self.field
        return data


@dataclass(frozen=True)
class ValidationSummary:
    """Short status line for display."""

    status: str  # "valid" | "warnings" | "errors"
    message: str
    can_proceed: bool


@dataclass
class ValidationResult:
    """
    Outcome of validating a table.

    ``is_valid`` and ``can_export`` are both ``error_count == 0``; warnings
    never block export.
    """

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.type == IssueType.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.type == IssueType.WARNING)

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    @property
    def can_export(self) -> bool:
        return self.error_count == 0

    def errors(self) -> list[ValidationIssue]:
        return self.issues_by_type(IssueType.ERROR)

    def warnings(self) -> list[ValidationIssue]:
        return self.issues_by_type(IssueType.WARNING)

    def issues_for_row(self, row_id: str) -> list[ValidationIssue]:
        """Issues reported against one row."""
        return [issue for issue in self.issues if issue.row_id == row_id]

    def issues_by_type(self, issue_type: IssueType | str) -> list[ValidationIssue]:
        """Issues of one severity."""
        wanted = IssueType(issue_type)
        return [issue for issue in self.issues if issue.type == wanted]

    def group_by_row(self) -> dict[str, list[ValidationIssue]]:
        """Issues keyed by row id, in first-seen order."""
        grouped: dict[str, list[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.row_id, []).append(issue)
        return grouped

    def summary(self) -> ValidationSummary:
        """Status line for display."""
        errors = self.error_count
        if errors > 0:
            plural = "s" if errors != 1 else ""
            return ValidationSummary(
                status="errors",
                message=f"{errors} error{plural} must be fixed before proceeding",
                can_proceed=False,
            )
        warnings = self.warning_count
        if warnings > 0:
            plural = "s" if warnings != 1 else ""
            return ValidationSummary(
                status="warnings",
                message=f"{warnings} warning{plural} detected",
                can_proceed=True,
            )
        return ValidationSummary(
            status="valid", message="All validations passed", can_proceed=True
        )

    def get_exit_code(self) -> int:
        """
        Get appropriate CLI exit code.

        Returns:
            0: Valid (no issues)
            1: Errors present
            2: Warnings only
        """
        if self.error_count:
            return 1
        elif self.warning_count:
            return 2
        else:
            return 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_valid": self.is_valid,
            "can_export": self.can_export,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def __str__(self) -> str:
        """Human-readable string representation."""
        lines = []

        if self.is_valid:
            lines.append("✅ Validation passed")
        else:
            lines.append("❌ Validation failed")
        lines.append(f"{self.error_count} errors, {self.warning_count} warnings")

        for issue in self.issues:
            marker = "ERROR" if issue.is_error else "WARN "
            where = issue.row_id if issue.field is None else f"{issue.row_id}.{issue.field}"
            lines.append(f"  {marker} [{where}] {issue.message}")

        return "\n".join(lines)


def validate(
    rows: list[TableRow], thresholds: ValidationThresholds | None = None
) -> ValidationResult:
    """
    Validate a table and gate export.

    Args:
        rows: Full table
        thresholds: Data-quality limits (defaults apply when omitted)

    Returns:
        ValidationResult with every issue found, in check order

    Example:
        ```python
        result = validate(rows)
        if not result.can_export:
            for issue in result.errors():
                print(issue.row_id, issue.message)
        ```
    """
    limits = thresholds or DEFAULT_THRESHOLDS
    index = index_rows(rows)

    issues: list[ValidationIssue] = []
    for row in rows:
        issues.extend(_check_row(row, index, limits))
    issues.extend(_check_manual_totals(rows))
    issues.extend(_check_data_quality(rows, limits))
    issues.extend(_check_uniqueness(rows))

    result = ValidationResult(issues=issues)
    logger.debug(
        "Validated %d rows: %d errors, %d warnings",
        len(rows),
        result.error_count,
        result.warning_count,
    )
    return result


def require_exportable(
    rows: list[TableRow],
    thresholds: ValidationThresholds | None = None,
    *,
    label: str = "<rows>",
) -> ValidationResult:
    """
    Validate a table and raise if export must be blocked.

    Raises:
        TableValidationError: If any error is reported
    """
    result = validate(rows, thresholds)
    if not result.can_export:
        problem_ids = list(dict.fromkeys(issue.row_id for issue in result.errors()))
        raise TableValidationError(
            label,
            f"{result.error_count} validation errors block export",
            result=result,
            problem_ids=problem_ids,
        )
    return result


# --- per-row checks -------------------------------------------------------


def _check_row(
    row: TableRow, index: dict[str, TableRow], limits: ValidationThresholds
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    if not row.category or not row.category.strip():
        issues.append(
            ValidationIssue(
                id=f"{row.id}-category-empty",
                row_id=row.id,
                type=IssueType.ERROR,
                field=CATEGORY_FIELD,
                message="Category is required",
                value=row.category,
            )
        )

    if row.kind == RowKind.DATA:
        issues.extend(_check_data_row(row, limits))
    elif row.kind == RowKind.COMPUTED:
        issues.extend(_check_computed_row(row, index))
    elif row.kind != RowKind.HEADER:
        raise ConfigError(f"Row '{row.id}' has unknown kind {row.kind!r}")

    return issues


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return False


def _check_data_row(row: DataRow, limits: ValidationThresholds) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    for month in MONTH_KEYS:
        value = row.value(month)
        if value is None:
            continue
        if not _is_finite_number(value):
            issues.append(
                ValidationIssue(
                    id=f"{row.id}-{month}-invalid",
                    row_id=row.id,
                    type=IssueType.ERROR,
                    field=month,
                    message="Invalid number value",
                    value=value,
                )
            )
        elif abs(value) > limits.max_abs_value:
            issues.append(
                ValidationIssue(
                    id=f"{row.id}-{month}-extreme",
                    row_id=row.id,
                    type=IssueType.WARNING,
                    field=month,
                    message="Unusually large value - please verify",
                    value=value,
                )
            )

    if is_empty_row(row.months):
        issues.append(
            ValidationIssue(
                id=f"{row.id}-empty-row",
                row_id=row.id,
                type=IssueType.WARNING,
                message="Row has no data for any month",
            )
        )

    if not is_known_category(row.category):
        issues.append(
            ValidationIssue(
                id=f"{row.id}-unknown-category",
                row_id=row.id,
                type=IssueType.WARNING,
                field=CATEGORY_FIELD,
                message="Category not found in known healthcare cost types",
                value=row.category,
            )
        )

    return issues


def _check_computed_row(
    row: ComputedRow, index: dict[str, TableRow]
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    for target_id in row.target_rows:
        if target_id not in index:
            issues.append(
                ValidationIssue(
                    id=f"{row.id}-missing-target-{target_id}",
                    row_id=row.id,
                    type=IssueType.ERROR,
                    message=f"Target row '{target_id}' not found",
                    value=target_id,
                )
            )

    if has_circular_reference(row, index):
        issues.append(
            ValidationIssue(
                id=f"{row.id}-circular-ref",
                row_id=row.id,
                type=IssueType.ERROR,
                message="Circular reference detected in computed row targets",
                value=row.target_rows,
            )
        )

    if row.formula == Formula.GRAND_TOTAL and row.target_rows:
        issues.append(
            ValidationIssue(
                id=f"{row.id}-grandtotal-targets",
                row_id=row.id,
                type=IssueType.WARNING,
                message="Grand total should not specify target rows (will use all data rows)",
                value=row.target_rows,
            )
        )

    return issues


def has_circular_reference(row: ComputedRow, index: dict[str, TableRow]) -> bool:
    """
    Check whether a cycle is reachable from ``row`` through computed targets.

    Depth-first search where each branch carries its own path, so siblings
    never see each other's visits. Rows already proven cycle-free are not
    searched again.
    """
    acyclic: set[str] = set()

    def dfs(current: ComputedRow, path: frozenset[str]) -> bool:
        if current.id in path:
            return True
        if current.id in acyclic:
            return False
        path = path | {current.id}
        for target_id in current.target_rows:
            target = index.get(target_id)
            if target is not None and target.kind == RowKind.COMPUTED:
                if dfs(target, path):
                    return True
        acyclic.add(current.id)
        return False

    return dfs(row, frozenset())


# --- cross-row checks -----------------------------------------------------


def _check_manual_totals(rows: list[TableRow]) -> list[ValidationIssue]:
    """Compare imported manual totals with the computed row they pair with."""
    issues: list[ValidationIssue] = []
    manual_rows = [row for row in data_rows(rows) if row.is_manual_total]
    if not manual_rows:
        return issues

    computed_values = evaluate_all(rows)
    for manual in manual_rows:
        if "total" not in manual.category.lower():
            continue
        paired = next(
            (
                row
                for row in rows
                if row.kind == RowKind.COMPUTED and "total" in row.category.lower()
            ),
            None,
        )
        if paired is None:
            continue
        expected = computed_values.get(paired.id)
        if expected is None:
            continue

        for month in MONTH_KEYS:
            actual = manual.value(month) or 0
            if not totals_match(actual, expected[month]):
                issues.append(
                    ValidationIssue(
                        id=f"{manual.id}-{month}-mismatch",
                        row_id=manual.id,
                        type=IssueType.ERROR,
                        field=month,
                        message=(
                            f"Manual total ({actual}) does not match "
                            f"computed value ({expected[month]})"
                        ),
                        value=actual,
                    )
                )
    return issues


def _numeric(value: Any) -> int | float:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    return 0


def _check_data_quality(
    rows: list[TableRow], limits: ValidationThresholds
) -> list[ValidationIssue]:
    """Dataset-level heuristics: emptiness, completeness, uniformity, swings."""
    issues: list[ValidationIssue] = []
    data = data_rows(rows)

    if not data:
        issues.append(
            ValidationIssue(
                id="no-data-rows",
                row_id=GLOBAL_ROW_ID,
                type=IssueType.ERROR,
                message="No data rows found",
            )
        )
        return issues

    total_cells = 0
    filled_cells = 0
    for row in data:
        for month in MONTH_KEYS:
            total_cells += 1
            if row.value(month) not in (None, 0):
                filled_cells += 1

    completeness = (filled_cells / total_cells) * 100 if total_cells else 0.0
    if completeness < limits.min_completeness_pct:
        issues.append(
            ValidationIssue(
                id="low-completeness",
                row_id=GLOBAL_ROW_ID,
                type=IssueType.WARNING,
                message=f"Low data completeness ({completeness:.1f}%)",
                value=completeness,
            )
        )

    totals = [sum(_numeric(row.value(month)) for row in data) for month in MONTH_KEYS]

    non_zero = {total for total in totals if total != 0}
    if len(non_zero) == 1:
        issues.append(
            ValidationIssue(
                id="uniform-values",
                row_id=GLOBAL_ROW_ID,
                type=IssueType.WARNING,
                message="All months have identical totals - verify data accuracy",
                value=next(iter(non_zero)),
            )
        )

    for i in range(1, len(totals)):
        previous, current = totals[i - 1], totals[i]
        if previous > 0 and current > 0:
            change_pct = abs((current - previous) / previous) * 100
            if change_pct > limits.max_change_pct:
                issues.append(
                    ValidationIssue(
                        id=f"extreme-change-{i}",
                        row_id=GLOBAL_ROW_ID,
                        type=IssueType.WARNING,
                        message=(
                            f"Extreme change from {MONTH_KEYS[i - 1]} to "
                            f"{MONTH_KEYS[i]} ({change_pct:.0f}%)"
                        ),
                        value={
                            "previous": previous,
                            "current": current,
                            "change_percent": change_pct,
                        },
                    )
                )

    return issues


def _check_uniqueness(rows: list[TableRow]) -> list[ValidationIssue]:
    """Every row sharing a normalized category gets its own error."""
    by_category: dict[str, list[str]] = defaultdict(list)
    for row in rows:
        by_category[row.category.strip().lower()].append(row.id)

    issues: list[ValidationIssue] = []
    for category, row_ids in by_category.items():
        if len(row_ids) < 2:
            continue
        for row_id in row_ids:
            issues.append(
                ValidationIssue(
                    id=f"{row_id}-duplicate-category",
                    row_id=row_id,
                    type=IssueType.ERROR,
                    field=CATEGORY_FIELD,
                    message=f'Duplicate category: "{category}"',
                    value=category,
                )
            )
    return issues


# --- single-cell checks ---------------------------------------------------


def validate_field_change(
    rows: list[TableRow], row_id: str, field_name: str, value: Any
) -> list[ValidationIssue]:
    """
    Check a single pending cell edit before it is applied.

    Args:
        rows: Current table
        row_id: Row being edited
        field_name: ``"Category"`` or a month key
        value: Proposed new value

    Returns:
        Issues for the proposed value; empty when the row does not exist

    Raises:
        ConfigError: If ``field_name`` is neither ``"Category"`` nor a month key
    """
    if field_name != CATEGORY_FIELD and not is_month_key(field_name):
        raise ConfigError(f"Unknown field '{field_name}'")
    if row_id not in index_rows(rows):
        return []

    issues: list[ValidationIssue] = []
    if field_name == CATEGORY_FIELD:
        text = value if isinstance(value, str) else ""
        if not text.strip():
            issues.append(
                ValidationIssue(
                    id=f"{row_id}-category-empty",
                    row_id=row_id,
                    type=IssueType.ERROR,
                    field=CATEGORY_FIELD,
                    message="Category is required",
                    value=value,
                )
            )
        normalized = text.strip().lower()
        if any(
            row.id != row_id and row.category.strip().lower() == normalized
            for row in rows
        ):
            issues.append(
                ValidationIssue(
                    id=f"{row_id}-category-duplicate",
                    row_id=row_id,
                    type=IssueType.ERROR,
                    field=CATEGORY_FIELD,
                    message="Category already exists",
                    value=value,
                )
            )
        return issues

    if value is None:
        return issues
    if not _is_finite_number(value):
        issues.append(
            ValidationIssue(
                id=f"{row_id}-{field_name}-invalid",
                row_id=row_id,
                type=IssueType.ERROR,
                field=field_name,
                message="Must be a valid number",
                value=value,
            )
        )
    elif abs(value) > DEFAULT_THRESHOLDS.max_abs_value:
        issues.append(
            ValidationIssue(
                id=f"{row_id}-{field_name}-extreme",
                row_id=row_id,
                type=IssueType.WARNING,
                field=field_name,
                message="Unusually large value",
                value=value,
            )
        )
    return issues
