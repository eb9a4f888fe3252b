"""
CostLab - Monthly Healthcare Cost Tables

CostLab models a year of healthcare operating costs as an ordered table of
rows. Data rows hold twelve monthly amounts, header rows label sections, and
computed rows (subtotals and grand totals) derive their values from other rows.
The engine aggregates computed rows, groups categories into cost families and
validates a table before it may be exported.

Key Features:
- **Row Model**: Data, header and computed rows with stable ids and ordering
- **Aggregation**: Subtotals over target rows, grand totals over all data rows
- **Auto-grouping**: Pattern-based cost families with synthesized subtotals
- **Validation**: Errors that block export and warnings that only inform
- **Spreadsheet I/O**: CSV import with amount parsing, CSV export

Quick Start:
    ```python
    from costlab import default_template, evaluate_all, update_month, validate

    rows = default_template()
    rows = update_month(rows, "row-1", "Jan-2024", 12_500)
    print(evaluate_all(rows)["row-11"]["Jan-2024"])  # 12500

    result = validate(rows)
    print(result)
    ```

License:
    This is a proof-of-concept for educational and research purposes.
"""

# Version information
__version__ = "0.1.0"
__author__ = "CostLab Team"
__description__ = "Monthly healthcare cost tables with subtotals and validation"

from .core import (
    COST_GROUPS,
    DEFAULT_THRESHOLDS,
    MONTH_KEYS,
    ComputedRow,
    ConfigError,
    DataRow,
    Formula,
    HeaderRow,
    IssueType,
    RowKind,
    TableDocument,
    TableRow,
    TableValidationError,
    ValidationIssue,
    ValidationResult,
    ValidationThresholds,
    add_row,
    classify,
    default_template,
    dump_table,
    evaluate_all,
    grand_total,
    load_table,
    load_thresholds,
    refresh_targets,
    remove_row,
    require_exportable,
    subtotal,
    suggest,
    synthesize_subtotals,
    update_month,
    validate,
)
from .frame import to_frame
from .ingest import read_csv, records_to_rows, write_csv
from .kpi import data_summary, monthly_growth, rolling_average

__all__ = [
    # Rows
    "MONTH_KEYS",
    "RowKind",
    "Formula",
    "DataRow",
    "HeaderRow",
    "ComputedRow",
    "TableRow",
    "default_template",
    "add_row",
    "remove_row",
    "update_month",
    # Aggregation
    "subtotal",
    "grand_total",
    "evaluate_all",
    # Grouping
    "COST_GROUPS",
    "classify",
    "suggest",
    "synthesize_subtotals",
    "refresh_targets",
    # Validation
    "IssueType",
    "ValidationIssue",
    "ValidationResult",
    "ValidationThresholds",
    "DEFAULT_THRESHOLDS",
    "load_thresholds",
    "validate",
    "require_exportable",
    # Errors
    "ConfigError",
    "TableValidationError",
    # Documents and spreadsheets
    "TableDocument",
    "load_table",
    "dump_table",
    "read_csv",
    "records_to_rows",
    "write_csv",
    # Frames and KPIs
    "to_frame",
    "data_summary",
    "monthly_growth",
    "rolling_average",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]
