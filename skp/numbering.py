"""No. Surat generation

Format: SEQ/SKP-ALPRO/ROMAN_MONTH/YEAR, e.g. 004/SKP-ALPRO/X/2026
"""
from dataclasses import replace
from datetime import datetime
from typing import Optional

from .models import SKPData

ROMAN_MONTHS = ["I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X", "XI", "XII"]
DEFAULT_PREFIX = "SKP-ALPRO"


def to_roman_month(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    return ROMAN_MONTHS[month - 1]


def generate_number(n: int, now: Optional[datetime] = None, prefix: str = DEFAULT_PREFIX) -> str:
    """Document number for the (n+1)-th document

    Args:
        n: number of documents already in the archive
        now: clock override, defaults to datetime.now()
        prefix: middle segment of the number

    Returns:
        str: sequence zero-padded to 3 digits (grows past 999 unbounded)
    """
    now = now or datetime.now()
    return f"{n + 1:03d}/{prefix}/{to_roman_month(now.month)}/{now.year}"


def ensure_number(
    doc: SKPData,
    n: int,
    now: Optional[datetime] = None,
    prefix: str = DEFAULT_PREFIX,
) -> SKPData:
    """Assign a number once; a document that already has one is returned as is"""
    if doc.number:
        return doc
    return replace(doc, number=generate_number(n, now=now, prefix=prefix))
