"""Tolerant value extraction shared by every vendor adapter.

Telemetry tools emit "N/A", "[Not Supported]", empty strings or null for
metrics a device does not support. The helpers here never raise: they
always return a definite finite number, falling back to a default (0).
"""

import math
import re
from typing import Any, Dict, Optional, Union

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)")

Number = Union[int, float]


def safe_get(d: Dict, *keys, default: Any = None) -> Any:
    """Safely get nested dictionary value.

    Args:
        d: Dictionary to search
        *keys: Keys to traverse (e.g. "mem_usage", "total_vram", "value")
        default: Default value if any key is missing or a level is not a dict

    Returns:
        Value at nested key or default
    """
    value = d
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key, default)
        else:
            return default
    return value if value is not None else default


def parse_number(value: Any) -> Optional[float]:
    """Parse value as a finite float, or None when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).strip()
        try:
            number = float(text)
        except ValueError:
            # "45 C", "120.5 W" and similar unit-suffixed values
            match = _LEADING_NUMBER.match(text)
            if not match:
                return None
            number = float(match.group(1))
    if not math.isfinite(number):
        return None
    return number


def to_float(value: Any, default: float = 0.0) -> float:
    """Parse value as a float; return default on any failure or non-finite result."""
    number = parse_number(value)
    return number if number is not None else default


def to_int(value: Any, default: int = 0) -> int:
    """Parse value as an int (truncating decimals); return default on any failure."""
    number = parse_number(value)
    return int(number) if number is not None else default


def resolve_index(value: Any) -> Optional[int]:
    """Resolve a device index, or None when it is not a finite non-negative number."""
    number = parse_number(value)
    if number is None or number < 0:
        return None
    return int(number)
