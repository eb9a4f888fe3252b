"""Validation thresholds and their YAML/JSON loader."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

__all__ = ["DEFAULT_THRESHOLDS", "ValidationThresholds", "load_thresholds"]


@dataclass(frozen=True, slots=True)
class ValidationThresholds:
    """
    Tunable limits for the data-quality checks.

    Attributes:
        max_abs_value: Month values above this magnitude are flagged
        min_completeness_pct: Share of filled cells (percent) below which the
            dataset is flagged as sparse
        max_change_pct: Month-over-month change (percent) above which a swing
            is flagged
    """

    max_abs_value: int = 1_000_000_000
    min_completeness_pct: float = 25.0
    max_change_pct: float = 500.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"Threshold '{f.name}' must be a number")
            if value <= 0:
                raise ConfigError(f"Threshold '{f.name}' must be positive, got {value}")


DEFAULT_THRESHOLDS = ValidationThresholds()


def load_thresholds(
    source: str | Path | dict[str, Any] | None, *, format: str | None = None
) -> ValidationThresholds:
    """
    Load validation thresholds from a YAML/JSON file or a mapping.

    The mapping may hold the threshold keys directly or under a
    ``validation:`` section. Missing keys keep their defaults.

    Raises:
        ConfigError: On unknown keys, bad values or an unsupported format
        FileNotFoundError: If ``source`` names a missing file
    """
    if source is None:
        return DEFAULT_THRESHOLDS

    if isinstance(source, dict):
        data: Any = source
        label = "<mapping>"
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(path)
        label = str(path)
        fmt = (format or path.suffix.lstrip(".")).lower()
        text = path.read_text(encoding="utf-8")
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text) or {}
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise ConfigError(f"Unsupported config format '{fmt}' for {path}")

    if not isinstance(data, dict):
        raise ConfigError(f"{label}: config root must be a mapping")
    section = data.get("validation", data)
    if not isinstance(section, dict):
        raise ConfigError(f"{label}: 'validation' must be a mapping")

    known = {f.name for f in fields(ValidationThresholds)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"{label}: unknown threshold keys: {', '.join(unknown)}")
    return ValidationThresholds(**section)
