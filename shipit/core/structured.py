"""Helpers for narrowing untyped data (TOML tables, JSON, env strings).

Use these at the boundaries where config files and manifests are ingested.
"""

from __future__ import annotations

import re
from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped. Missing, non-str and blank give None."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    """Get a TOML boolean. Strings are parsed with ``parse_bool``."""
    value = table.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return parse_bool(value)
    return None


def get_str_list(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    """Get a list of non-blank strings, preserving order.

    A plain string is split like an environment variable (see ``split_list``).
    """
    value = table.get(key)
    if isinstance(value, str):
        return split_list(value)
    if not isinstance(value, list):
        return None
    items = cast(list[object], value)
    out: list[str] = []
    for item in items:
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return tuple(out)


def parse_bool(text: str) -> bool | None:
    """Parse true/false/1/0/yes/no/on/off (case-insensitive); None if unknown."""
    s = text.strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return None


def split_list(text: str) -> tuple[str, ...]:
    """Split a comma or whitespace separated value."""
    return tuple(part for part in re.split(r"[,\s]+", text.strip()) if part)
