"""
Smoke tests to verify basic imports and functionality.
"""


def test_import_costlab():
    """Test that we can import the main package."""
    import costlab

    assert hasattr(costlab, "__version__")
    assert costlab.__version__ == "0.1.0"


def test_import_core_components():
    """Test that core components can be imported."""
    from costlab import (
        ComputedRow,
        DataRow,
        HeaderRow,
        ValidationResult,
        evaluate_all,
        synthesize_subtotals,
        validate,
    )

    assert DataRow is not None
    assert HeaderRow is not None
    assert ComputedRow is not None
    assert ValidationResult is not None
    assert callable(evaluate_all)
    assert callable(synthesize_subtotals)
    assert callable(validate)


def test_basic_table_flow():
    """Test a basic edit, evaluate and validate cycle."""
    from costlab import default_template, evaluate_all, update_month, validate

    rows = default_template()
    rows = update_month(rows, "row-1", "Jan-2024", 12_500)
    rows = update_month(rows, "row-2", "Jan-2024", 2_500)

    values = evaluate_all(rows)
    assert values["row-10"]["Jan-2024"] == 15_000
    assert values["row-11"]["Jan-2024"] == 15_000

    result = validate(rows)
    assert result.can_export
