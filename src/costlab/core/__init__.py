"""
Core module for CostLab.

This module contains the row model, the aggregation engine, auto-grouping and
the validation pipeline.
"""

from .aggregation import (
    PatternSuggestion,
    RowTotalsCheck,
    compare_row_totals,
    detect_computation_pattern,
    evaluate_all,
    grand_total,
    is_empty_row,
    month_sum,
    monthly_totals,
    subtotal,
    totals_match,
    ytd,
)
from .amounts import AmountParseError, RoundingPolicy, parse_amount, round_amount
from .categories import KNOWN_CATEGORIES, default_template, is_known_category
from .config import DEFAULT_THRESHOLDS, ValidationThresholds, load_thresholds
from .errors import ConfigError
from .exceptions import TableValidationError
from .grouping import (
    COST_GROUPS,
    CostGroup,
    GroupSection,
    GroupSuggestion,
    classify,
    get_group,
    group_hierarchy,
    refresh_targets,
    suggest,
    synthesize_subtotals,
)
from .kinds import Formula, RowKind
from .loader import TableDocument, TableLoadError, dump_table, load_table
from .months import MONTH_DISPLAY_NAMES, MONTH_KEYS, MonthKey, empty_months
from .rows import (
    ComputedRow,
    DataRow,
    HeaderRow,
    TableRow,
    computed_rows,
    data_rows,
    row_from_dict,
    row_to_dict,
    rows_from_dicts,
    rows_to_dicts,
)
from .table import (
    add_row,
    duplicate_row,
    move_row,
    parse_clipboard,
    paste_block,
    remove_row,
    rename_row,
    renumber,
    set_targets,
    update_month,
)
from .validation import (
    IssueType,
    ValidationIssue,
    ValidationResult,
    ValidationSummary,
    require_exportable,
    validate,
    validate_field_change,
)

__all__ = [
    # Errors
    "ConfigError",
    "TableValidationError",
    "TableLoadError",
    "AmountParseError",
    # Months and kinds
    "MONTH_KEYS",
    "MONTH_DISPLAY_NAMES",
    "MonthKey",
    "empty_months",
    "RowKind",
    "Formula",
    # Rows
    "DataRow",
    "HeaderRow",
    "ComputedRow",
    "TableRow",
    "data_rows",
    "computed_rows",
    "row_from_dict",
    "row_to_dict",
    "rows_from_dicts",
    "rows_to_dicts",
    # Table editing
    "add_row",
    "remove_row",
    "duplicate_row",
    "move_row",
    "update_month",
    "paste_block",
    "parse_clipboard",
    "rename_row",
    "set_targets",
    "renumber",
    # Amounts
    "RoundingPolicy",
    "parse_amount",
    "round_amount",
    # Categories
    "KNOWN_CATEGORIES",
    "is_known_category",
    "default_template",
    # Aggregation
    "month_sum",
    "subtotal",
    "grand_total",
    "evaluate_all",
    "monthly_totals",
    "ytd",
    "is_empty_row",
    "totals_match",
    "compare_row_totals",
    "RowTotalsCheck",
    "detect_computation_pattern",
    "PatternSuggestion",
    # Grouping
    "COST_GROUPS",
    "CostGroup",
    "GroupSection",
    "GroupSuggestion",
    "classify",
    "get_group",
    "synthesize_subtotals",
    "refresh_targets",
    "suggest",
    "group_hierarchy",
    # Config
    "ValidationThresholds",
    "DEFAULT_THRESHOLDS",
    "load_thresholds",
    # Loader
    "TableDocument",
    "load_table",
    "dump_table",
    # Validation
    "IssueType",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSummary",
    "validate",
    "validate_field_change",
    "require_exportable",
]
