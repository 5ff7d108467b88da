"""Lenient accessors used by dataset mappers.

Mappers never fail: a missing key or a malformed number yields the zero
value of the target type. Each accessor takes several candidate keys
because publishers rename columns across releases; the first key holding a
non-empty value wins.
"""

from __future__ import annotations

import math
from collections.abc import Mapping


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return str(value).replace("\x00", "").strip()


def first_non_empty(*values: str) -> str:
    """Return the first value that is not blank, else ""."""
    for value in values:
        if value.strip():
            return value
    return ""


def get_str(row: Mapping[str, object], *keys: str) -> str:
    """Trimmed text of the first non-empty key."""
    for key in keys:
        text = _text(row.get(key))
        if text:
            return text
    return ""


def get_upper(row: Mapping[str, object], *keys: str) -> str:
    return get_str(row, *keys).upper()


def get_int(row: Mapping[str, object], *keys: str) -> int:
    """Integer value of the first non-empty key, 0 when malformed.

    Float text ("12.0") is truncated toward zero since some exports write
    integer columns that way.
    """
    for key in keys:
        value = row.get(key)
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else 0
        text = _text(value)
        if not text:
            continue
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return 0
        return int(number) if math.isfinite(number) else 0
    return 0


def get_float(row: Mapping[str, object], *keys: str) -> float:
    """Float value of the first non-empty key, 0.0 when malformed."""
    for key in keys:
        value = row.get(key)
        if isinstance(value, int | float) and not isinstance(value, bool):
            number = float(value)
        else:
            text = _text(value)
            if not text:
                continue
            try:
                number = float(text)
            except ValueError:
                return 0.0
        return number if math.isfinite(number) else 0.0
    return 0.0
