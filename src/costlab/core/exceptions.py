"""
Custom exceptions for CostLab.

This module provides structured exceptions for callers that prefer raising
over inspecting a validation result, such as an export step.
"""

from __future__ import annotations


class TableValidationError(Exception):
    """
    Raised when a table is not allowed to be exported.

    Attributes:
        label: Name of the table (file name or caller-chosen label)
        result: The ``ValidationResult`` that blocked the export
        problem_ids: Row ids carrying at least one error
    """

    def __init__(
        self,
        label: str,
        message: str,
        result=None,
        problem_ids: list[str] | None = None,
    ):
        self.label = label
        self.result = result
        self.problem_ids = problem_ids or []
        super().__init__(self._fmt(message))

    def _fmt(self, msg: str) -> str:
        """Format the error message with additional context."""
        suffix = ""
        if self.problem_ids:
            preview = ", ".join(self.problem_ids[:10])
            more = (
                f" (+{len(self.problem_ids)-10} more)"
                if len(self.problem_ids) > 10
                else ""
            )
            suffix = f" | problem_ids: [{preview}]{more}"
        return f"[Table {self.label}] {msg}{suffix}"
