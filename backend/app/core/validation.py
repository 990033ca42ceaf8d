"""
Input helpers shared by services.
"""

import re
from typing import Any

_DIGITS = re.compile(r"[0-9]+")

# Primary keys are 32-bit integer columns
MAX_ID = 2**31 - 1
_MAX_ID_DIGITS = len(str(MAX_ID))


def parse_positive_int(value: Any) -> int | None:
    """
    Coerce an id from JSON, query or path input.

    Accepts positive ints, integral floats and digit strings
    (surrounding whitespace allowed). Returns None for anything else.
    Digit strings too long to be a stored id come back as MAX_ID + 1.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        value = value.strip()
        if not _DIGITS.fullmatch(value):
            return None
        digits = value.lstrip("0")
        value = MAX_ID + 1 if len(digits) > _MAX_ID_DIGITS else int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def is_storable_id(value: int) -> bool:
    """Whether a positive id fits the primary key columns."""
    return value <= MAX_ID


def clean_text(value: Any) -> str:
    """Trim string input; non-strings become empty."""
    if not isinstance(value, str):
        return ""
    return value.strip()
