"""
Device identifiers carried as strings.

Product ids and serial numbers are integers on the wire (FIT uint16/uint32z,
XML attributes, JSON numbers) but strings in the canonical record. A value
that does not parse to a finite non-negative integer is dropped rather than
stored as garbage.
"""

import math
from typing import Any, Optional


def parse_device_number(raw: Any) -> Optional[str]:
    """
    Normalize a raw device number to its canonical digit string.

    Examples:
        >>> parse_device_number(1234)
        '1234'
        >>> parse_device_number(" 42 ")
        '42'
        >>> parse_device_number("abc") is None
        True
        >>> parse_device_number(float("nan")) is None
        True
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return str(raw) if raw >= 0 else None
    if isinstance(raw, float):
        number = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        if text.isascii() and text.isdigit():
            return str(int(text))
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number < 0 or not number.is_integer():
        return None
    return str(int(number))


def device_number_to_int(value: Optional[str]) -> Optional[int]:
    """Parse a canonical device number back to an int, None if unusable."""
    parsed = parse_device_number(value)
    return int(parsed) if parsed is not None else None
