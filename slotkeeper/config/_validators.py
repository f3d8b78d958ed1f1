"""Shared env parsing and field validators for the config dataclasses."""
from __future__ import annotations

import os

_TRUTHY = ("1", "true", "yes", "on")


def positive_int(value: int, name: str, min_val: int = 1) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < min_val:
        raise ValueError(f"{name} must be an integer >= {min_val}, got {value!r}")
    return value


def env_bool(var: str, default: bool) -> bool:
    raw = os.environ.get(var, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY
