"""
Type Caster
===========
Converts raw answer values (form input, YAML, JSON) into the in-memory type
for a field. Bad data becomes None; deciding whether None is acceptable is
the validator's job.

    integer                        -> int
    monetary, decimal, percentage  -> Decimal
    boolean, enum, string          -> str (trimmed)
    date                           -> datetime.date

Dimensional fields hold a ``{CATEGORY: value}`` map, see cast_dimensional().
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import CastingError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_INPUT_LENGTH = 64

INTEGER_PATTERN = re.compile(r"^-?\d+$")
DECIMAL_PATTERN = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INTEGER_TYPES = frozenset({"integer"})
DECIMAL_TYPES = frozenset({"monetary", "decimal", "percentage"})
TEXT_TYPES = frozenset({"boolean", "enum", "string"})
NUMERIC_TYPES = INTEGER_TYPES | DECIMAL_TYPES


# ---------------------------------------------------------------------------
# Scalar casters
# ---------------------------------------------------------------------------

def _numeric_text(value: Any):
    """Common guards for numeric input: trimmed text, or None."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text or len(text) > MAX_INPUT_LENGTH:
        return None
    return text


def cast_integer(value: Any):
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = _numeric_text(value)
    if text is None or not INTEGER_PATTERN.match(text):
        return None
    return int(text)


def cast_decimal(value: Any):
    """Parse into Decimal. Floats go through their shortest repr so that
    99.99 becomes Decimal('99.99') rather than its binary expansion."""
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    text = _numeric_text(value)
    if text is None:
        return None
    if not isinstance(value, float) and not DECIMAL_PATTERN.match(text):
        return None
    try:
        result = Decimal(text)
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def cast_text(value: Any):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def cast_date(value: Any):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = cast_text(value)
    if text is None or not DATE_PATTERN.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def cast(value: Any, field_type: str):
    """Cast one scalar value for ``field_type``. Never raises."""
    if field_type in INTEGER_TYPES:
        return cast_integer(value)
    if field_type in DECIMAL_TYPES:
        return cast_decimal(value)
    if field_type in TEXT_TYPES:
        return cast_text(value)
    if field_type == "date":
        return cast_date(value)
    return value


# ---------------------------------------------------------------------------
# Dimensional values
# ---------------------------------------------------------------------------

def cast_dimensional(value: Any, field_type: str):
    """Cast a per-category answer.

    Keys are normalized to upper case and each value goes through the scalar
    caster. Two keys that collapse onto the same category (``"fr"`` and
    ``"FR"``) are a caller bug and raise CastingError. Anything that is not
    a mapping is cast as a scalar and left for the generator to reject.
    """
    if not isinstance(value, Mapping):
        return cast(value, field_type)

    result: dict[str, Any] = {}
    for key, raw in value.items():
        category = str(key).strip().upper()
        if category in result:
            raise CastingError(
                f"Category key collision: '{key}' normalizes to "
                f"'{category}', which is already present"
            )
        result[category] = cast(raw, field_type)
    return result


def is_answered(value: Any) -> bool:
    """True when a cast value holds an answer.

    A category map counts only if at least one category is answered, so
    ``{"FR": None}`` is as empty as None.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Mapping):
        return any(is_answered(v) for v in value.values())
    return True
