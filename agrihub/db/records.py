"""Typed accessors for schema-flexible graph rows.

Each accessor returns the value when the key is present *and* of the expected
type, otherwise ``None``.  ``None`` always means "absent or unusable", so a
stored ``0`` or ``""`` stays distinguishable from a missing field.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


def get_str(row: Mapping[str, Any], key: str) -> Optional[str]:
    value = row.get(key)
    return value if isinstance(value, str) else None


def get_float(row: Mapping[str, Any], key: str) -> Optional[float]:
    """Accept ints and floats (booleans are rejected)."""
    value = row.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_int(row: Mapping[str, Any], key: str) -> Optional[int]:
    """Accept ints and integral floats."""
    value = row.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def get_map(row: Mapping[str, Any], key: str) -> Optional[dict[str, Any]]:
    value = row.get(key)
    return value if isinstance(value, dict) else None


def str_or_empty(row: Mapping[str, Any], key: str) -> str:
    """Convenience for response fields that default to ``""``."""
    value = get_str(row, key)
    return value if value is not None else ""

