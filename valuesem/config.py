"""
valuesem/config.py
══════════════════

Tuning knobs for the resolver, the classifier and the record checker.

A config file is plain JSON::

    {
        "known_wrappers": ["System.ArraySegment<T>", "My.Buffers.Window<T>"],
        "inline_array_attributes": ["InlineArray"],
        "guard_policy": "call",
        "ignore_types": ["Legacy.Snapshot"],
        "suppress": [],
        "suppress_types": ["JSV01:Legacy.*"],
        "severity": "warning"
    }

Every key is optional; missing keys keep their defaults.  A
``suppress_types`` entry is ``<diagnostic id>:<record pattern>``, the
pattern matched with :mod:`fnmatch` against the record's full name.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Tuple, Union

logger = logging.getLogger(__name__)

# Standard wrappers whose default equality compares the identity of an
# underlying buffer, not its contents.
DEFAULT_KNOWN_WRAPPERS: FrozenSet[str] = frozenset({
    "System.ArraySegment<T>",
    "System.Collections.Immutable.ImmutableArray<T>",
    "System.Memory<T>",
    "System.ReadOnlyMemory<T>",
})

DEFAULT_INLINE_ARRAY_ATTRIBUTES: FrozenSet[str] = frozenset({
    "InlineArray",
    "System.Runtime.CompilerServices.InlineArray",
})

GUARD_POLICIES = ("call", "path")
SEVERITIES = ("error", "warning", "style", "information")


class ConfigError(ValueError):
    """Raised for unreadable or ill-typed configuration."""


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings shared by the engine and the record checker."""
    known_wrappers: FrozenSet[str] = DEFAULT_KNOWN_WRAPPERS
    inline_array_attributes: FrozenSet[str] = DEFAULT_INLINE_ARRAY_ATTRIBUTES
    guard_policy: str = "call"
    ignore_types: FrozenSet[str] = frozenset()
    suppress: FrozenSet[str] = frozenset()
    suppress_types: FrozenSet[str] = frozenset()
    severity: str = "warning"

    def validate(self) -> List[str]:
        """Return a list of validation problems (empty if valid)."""
        problems: List[str] = []
        if self.guard_policy not in GUARD_POLICIES:
            problems.append(
                f"guard_policy must be one of {', '.join(GUARD_POLICIES)}"
            )
        if self.severity not in SEVERITIES:
            problems.append(
                f"severity must be one of {', '.join(SEVERITIES)}"
            )
        for entry in sorted(self.suppress_types):
            error_id, _, pattern = entry.partition(":")
            if not error_id or not pattern:
                problems.append(
                    f"suppress_types entry {entry!r} must be 'ID:PATTERN'"
                )
        return problems

    def merged(self, **overrides: Any) -> AnalysisConfig:
        """Copy with the non-``None`` *overrides* applied (set keys are unioned)."""
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            current = getattr(self, key)
            if isinstance(current, frozenset):
                changes[key] = current | frozenset(value)
            else:
                changes[key] = value
        return replace(self, **changes)

    def type_suppressions(self) -> List[Tuple[str, str]]:
        """``(error id, record pattern)`` pairs from ``suppress_types``."""
        pairs = []
        for entry in sorted(self.suppress_types):
            error_id, _, pattern = entry.partition(":")
            pairs.append((error_id, pattern))
        return pairs


def config_from_dict(raw: Dict[str, Any]) -> AnalysisConfig:
    if not isinstance(raw, dict):
        raise ConfigError("configuration must be a JSON object")

    known = {f.name: f for f in fields(AnalysisConfig)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("ignoring unknown config key %r", key)
            continue
        default = getattr(AnalysisConfig, key)
        if isinstance(default, frozenset):
            if not isinstance(value, list) or not all(
                isinstance(v, str) for v in value
            ):
                raise ConfigError(f"{key!r} must be a list of strings")
            values[key] = frozenset(value)
        else:
            if not isinstance(value, str):
                raise ConfigError(f"{key!r} must be a string")
            values[key] = value

    config = AnalysisConfig(**values)
    problems = config.validate()
    if problems:
        raise ConfigError("; ".join(problems))
    return config


def load_config(path: Union[str, Path]) -> AnalysisConfig:
    """Read a JSON config file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {p}: {exc}") from exc
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{p}: invalid JSON: {exc}") from exc
    logger.debug("loaded config from %s", p)
    return config_from_dict(raw)


__all__ = [
    "DEFAULT_KNOWN_WRAPPERS",
    "DEFAULT_INLINE_ARRAY_ATTRIBUTES",
    "GUARD_POLICIES",
    "SEVERITIES",
    "ConfigError",
    "AnalysisConfig",
    "config_from_dict",
    "load_config",
]
