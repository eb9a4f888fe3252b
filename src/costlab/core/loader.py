"""Utilities for loading and dumping table documents from YAML/JSON sources."""

from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .rows import TableRow, row_from_dict, rows_to_dicts

__all__ = [
    "TableDocument",
    "TableLoadError",
    "dump_table",
    "load_table",
]

logger = logging.getLogger(__name__)


class TableLoadError(ValueError):
    """Raised when a table document cannot be parsed."""


@dataclass(slots=True)
class TableDocument:
    """Rows of one table plus document metadata."""

    rows: list[TableRow]
    version: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    source: str = "<memory>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the document wire shape."""
        data: dict[str, Any] = {"version": self.version, "rows": rows_to_dicts(self.rows)}
        if self.metadata:
            data["metadata"] = deepcopy(self.metadata)
        return data


def load_table(
    source: str | Path | dict[str, Any] | list[Any], *, format: str | None = None
) -> TableDocument:
    """
    Parse a table document from YAML/JSON/mapping/list into rows.

    A document is either a bare list of rows or a mapping with a ``rows`` list
    and optional ``version`` and ``metadata`` keys.

    Raises:
        TableLoadError: If the document or any row payload is malformed
        FileNotFoundError: If ``source`` names a missing file
    """
    data, label = _read_source(source, format=format)

    if isinstance(data, list):
        raw_rows, version, metadata = data, 1, {}
    elif isinstance(data, dict):
        raw_rows = data.get("rows")
        if not isinstance(raw_rows, list):
            raise TableLoadError(f"{label}: document must define a 'rows' list")
        version = data.get("version", 1)
        if isinstance(version, bool) or not isinstance(version, int):
            raise TableLoadError(f"{label}: 'version' must be an integer")
        metadata = data.get("metadata")
        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise TableLoadError(f"{label}: 'metadata' must be a mapping")
    else:
        raise TableLoadError(f"{label}: document root must be a list or mapping")

    rows: list[TableRow] = []
    for idx, entry in enumerate(raw_rows):
        try:
            rows.append(row_from_dict(entry))
        except ConfigError as exc:
            raise TableLoadError(f"{label}::rows[{idx}]: {exc}") from exc

    logger.debug("Loaded %d rows from %s", len(rows), label)
    return TableDocument(
        rows=rows, version=version, metadata=deepcopy(metadata), source=label
    )


def dump_table(document: TableDocument, path: str | Path, *, format: str | None = None) -> None:
    """Write a table document to a YAML or JSON file chosen by suffix."""
    path = Path(path)
    fmt = (format or path.suffix.lstrip(".")).lower()
    data = document.to_dict()
    if fmt == "json":
        text = json.dumps(data, indent=2)
    elif fmt in {"yaml", "yml"}:
        text = yaml.safe_dump(data, sort_keys=False)
    else:
        raise TableLoadError(f"Unsupported table format '{fmt}' for {path}")
    path.write_text(text, encoding="utf-8")


def _read_source(
    source: str | Path | dict[str, Any] | list[Any], *, format: str | None
) -> tuple[Any, str]:
    if isinstance(source, (dict, list)):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    if fmt in {"yaml", "yml", ""}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise TableLoadError(f"{path}: invalid YAML ({exc})") from exc
    elif fmt == "json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TableLoadError(f"{path}: invalid JSON ({exc})") from exc
    else:
        raise TableLoadError(f"Unsupported table format '{fmt}' for {path}")

    return data, str(path)
