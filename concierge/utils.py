"""Shared utilities used across the concierge engine."""

import re
from typing import Any, Optional


def normalize_email(value: str) -> str:
    """Lower-case an email address and strip surrounding whitespace.

    Examples:
        >>> normalize_email("  Ada@Example.COM ")
        'ada@example.com'
    """
    return value.strip().lower()


def slugify_tag(value: str) -> str:
    """Turn a display value into a lowercase, hyphenated tag.

    Examples:
        >>> slugify_tag("Lab Grown  Diamond")
        'lab-grown-diamond'
    """
    return re.sub(r"\s+", "-", value.strip().lower())


def parse_number(value: Any) -> Optional[float]:
    """Coerce ints, floats, and numeric strings like "$1,200" to float.

    Returns None for booleans, blanks, and anything unparseable.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = re.sub(r"[,$\s]", "", value)
        if not cleaned:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None
