"""Formatting helpers"""
import math
from typing import Any


def to_number(value: Any) -> float:
    """Coerce a loosely typed value to a number; missing, NaN or garbage becomes 0

    "1.500" style strings are not interpreted as thousands; "1500", 1500 and
    "12.5" are.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else 0
    try:
        number = float(str(value).replace(",", "").strip())
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def format_rupiah(n: float) -> str:
    """Indonesian-style number: '.' thousands separator, ',' decimals

    Example: 1234567 -> "1.234.567", 1500.5 -> "1.500,5", 1500.999 -> "1.501"
    """
    n = round(float(n), 2)
    if n.is_integer():
        return f"{n:,.0f}".replace(",", ".")
    text = f"{n:,.2f}".rstrip("0").rstrip(".")
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_percent(value: float) -> str:
    """10 -> "10%", 12.5 -> "12.5%" """
    return f"{value:g}%"


_TRUE_WORDS = {"true", "1", "yes", "ya", "y"}
_FALSE_WORDS = {"false", "0", "no", "tidak", "n", ""}


def to_flag(value: Any) -> bool:
    """Coerce a checkbox value; "false", "0" and "tidak" are False

    Raises ValueError for strings that are neither.
    """
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ValueError(f"not a yes/no value: {value!r}")
    return bool(value)
