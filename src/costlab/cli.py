"""
Command-line interface for CostLab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from costlab import __version__
from costlab.core.aggregation import evaluate_all
from costlab.core.categories import default_template
from costlab.core.config import load_thresholds
from costlab.core.exceptions import TableValidationError
from costlab.core.grouping import refresh_targets, synthesize_subtotals
from costlab.core.loader import TableDocument, dump_table, load_table
from costlab.core.rows import TableRow, data_rows
from costlab.core.table import renumber
from costlab.core.validation import ValidationIssue, ValidationResult, require_exportable, validate
from costlab.ingest import read_csv, write_csv
from costlab.kpi import data_summary

logger = logging.getLogger(__name__)


def _load_input(path: str) -> tuple[list[TableRow], list[ValidationIssue]]:
    """Load rows from a CSV export or a YAML/JSON table document."""
    if Path(path).suffix.lower() in {".csv", ".tsv"}:
        sep = "\t" if path.lower().endswith(".tsv") else ","
        imported = read_csv(path, sep=sep)
        logger.info(
            "Imported %d of %d records (%d totals converted)",
            imported.stats.imported_rows,
            imported.stats.total_rows,
            imported.stats.converted_totals,
        )
        return imported.rows, imported.issues
    return load_table(path).rows, []


def _emit_json(data, output: str | None) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    else:
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")


def cmd_template(args) -> int:
    """Print the stock table as a JSON document."""
    _emit_json(TableDocument(rows=default_template()).to_dict(), None)
    return 0


def cmd_validate(args) -> int:
    """Validate a table and report issues."""
    try:
        rows, import_issues = _load_input(args.input)
        thresholds = load_thresholds(args.config)
        result = validate(rows, thresholds)
        combined = ValidationResult(issues=import_issues + result.issues)

        if args.format == "json":
            _emit_json(combined.to_dict(), None)
        else:
            print(combined)
            print(combined.summary().message)

        if args.warn:
            return 0
        return 1 if combined.error_count else 0

    except Exception as e:
        if args.warn:
            print(f"Warning: {e}")
            return 0
        print(f"Validation failed: {e}", file=sys.stderr)
        return 1


def cmd_evaluate(args) -> int:
    """Print computed-row values."""
    rows, _ = _load_input(args.input)
    _emit_json(evaluate_all(rows), args.output)
    return 0


def cmd_group(args) -> int:
    """Refresh group-bound targets, optionally synthesizing subtotals first."""
    rows, _ = _load_input(args.input)
    if args.synthesize:
        rows = renumber(list(rows) + synthesize_subtotals(data_rows(rows)))
    rows = refresh_targets(rows)

    document = TableDocument(rows=rows)
    if args.output:
        dump_table(document, args.output)
    else:
        _emit_json(document.to_dict(), None)
    return 0


def cmd_summary(args) -> int:
    """Print headline figures for a table."""
    rows, _ = _load_input(args.input)
    summary = data_summary(rows)
    if args.json:
        _emit_json(summary.to_dict(), None)
    else:
        print(f"Data rows:     {summary.total_rows}")
        print(f"Year total:    {summary.year_total}")
        print(f"Highest month: {summary.highest_month[0]} ({summary.highest_month[1]})")
        print(f"Lowest month:  {summary.lowest_month[0]} ({summary.lowest_month[1]})")
        print(
            f"Completeness:  {summary.data_completeness:.1f}% "
            f"({summary.filled_cells}/{summary.total_cells} cells)"
        )
    return 0


def cmd_export(args) -> int:
    """Write a CSV export, refusing when validation reports errors."""
    rows, import_issues = _load_input(args.input)
    try:
        require_exportable(
            rows, load_thresholds(args.config), label=Path(args.input).name
        )
    except TableValidationError as e:
        print(f"❌ Export blocked: {e}", file=sys.stderr)
        return 1
    if any(issue.is_error for issue in import_issues):
        print("❌ Export blocked: input could not be read cleanly", file=sys.stderr)
        return 1

    write_csv(
        rows,
        args.output,
        include_computed=args.include_computed,
        computed_values=evaluate_all(rows) if args.include_computed else None,
    )
    print(f"✅ Exported {len(rows)} rows to {args.output}")
    return 0


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="costlab", description="CostLab - Monthly healthcare cost tables"
    )

    parser.add_argument("--version", action="version", version=f"CostLab {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    template_parser = subparsers.add_parser(
        "template", help="Print the stock table as JSON"
    )
    template_parser.set_defaults(func=cmd_template)

    validate_parser = subparsers.add_parser("validate", help="Validate a table")
    validate_parser.add_argument(
        "-i", "--input", required=True, help="Input table (.csv, .json, .yaml)"
    )
    validate_parser.add_argument("--config", help="Threshold config (.yaml, .json)")
    validate_parser.add_argument(
        "--warn", action="store_true", help="Warn instead of error on issues"
    )
    validate_parser.add_argument(
        "--format", choices=["human", "json"], default="human", help="Output format"
    )
    validate_parser.set_defaults(func=cmd_validate)

    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Print computed-row values as JSON"
    )
    evaluate_parser.add_argument("-i", "--input", required=True, help="Input table")
    evaluate_parser.add_argument("-o", "--output", help="Output JSON file")
    evaluate_parser.set_defaults(func=cmd_evaluate)

    group_parser = subparsers.add_parser(
        "group", help="Refresh subtotal targets from category groups"
    )
    group_parser.add_argument("-i", "--input", required=True, help="Input table")
    group_parser.add_argument("-o", "--output", help="Output table (.json, .yaml)")
    group_parser.add_argument(
        "--synthesize",
        action="store_true",
        help="Append a subtotal per multi-row cost group and a grand total",
    )
    group_parser.set_defaults(func=cmd_group)

    summary_parser = subparsers.add_parser("summary", help="Show headline figures")
    summary_parser.add_argument("-i", "--input", required=True, help="Input table")
    summary_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    summary_parser.set_defaults(func=cmd_summary)

    export_parser = subparsers.add_parser(
        "export", help="Export a validated table to CSV"
    )
    export_parser.add_argument("-i", "--input", required=True, help="Input table")
    export_parser.add_argument("-o", "--output", required=True, help="Output CSV file")
    export_parser.add_argument("--config", help="Threshold config (.yaml, .json)")
    export_parser.add_argument(
        "--include-computed",
        action="store_true",
        help="Include subtotal and grand total rows with their values",
    )
    export_parser.set_defaults(func=cmd_export)

    # Parse arguments and execute
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
