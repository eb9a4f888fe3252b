"""
Error classes for CostLab.

This module defines the exception raised for caller-side mistakes: malformed
row payloads, edits that would break a row invariant, and bad configuration.
Data-quality problems are never raised; they are reported as validation issues.
"""


class ConfigError(Exception):
    """
    Configuration or shape error while building or editing a table.

    **Common Causes:**
    - Row payload with an unknown ``kind`` or ``formula``
    - Missing ``id`` or ``Category`` field in a row payload
    - Editing ``targetRows`` of a subtotal that is bound to a cost group
    - Referring to a row id that is not in the table
    - Non-positive validation thresholds

    **Example Usage:**
        ```python
        from costlab.core.errors import ConfigError
        from costlab.core.rows import row_from_dict

        try:
            row_from_dict({"id": "r1", "Category": "Dental", "kind": "chart"})
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass
