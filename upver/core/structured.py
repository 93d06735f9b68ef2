"""Helpers for safely working with dynamic (untyped) structures.

Use these helpers at boundaries where we ingest TOML/JSON or other untyped data.
They provide runtime validation and static type narrowing.

Two families:
- ``get_*`` are lenient (config files): anything unusable reads as None.
- ``read_*`` are strict (API payloads): a missing key or JSON null reads as the
  zero value, a value of the wrong type is an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

from .result import Err, Ok, Result

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    """Return obj as StrDict if it matches, else None."""
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_float(table: Mapping[str, object], key: str) -> float | None:
    """Get a number as float. Booleans are rejected (bool is an int subclass)."""
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    """Get a nested table (dict with string keys) from a mapping."""
    value = table.get(key)
    return as_str_dict(value)


def _type_name(value: object) -> str:
    match value:
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list():
            return "array"
        case dict():
            return "object"
        case _:
            return type(value).__name__


def read_str(table: Mapping[str, object], key: str) -> Result[str, str]:
    """Read a string field; missing or null reads as ""."""
    value = table.get(key)
    if value is None:
        return Ok("")
    if not isinstance(value, str):
        return Err(f"field {key!r}: expected string, got {_type_name(value)}")
    return Ok(value)


def read_bool(table: Mapping[str, object], key: str) -> Result[bool, str]:
    """Read a boolean field; missing or null reads as False."""
    value = table.get(key)
    if value is None:
        return Ok(False)
    if not isinstance(value, bool):
        return Err(f"field {key!r}: expected boolean, got {_type_name(value)}")
    return Ok(value)
