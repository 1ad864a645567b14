"""
Submission Validator
====================
Checks every visible field of a submission and reports findings as data.

    presence   a visible field has no answer
    enum       the answer is not one of the field's declared values
    range      a numeric answer falls outside [min, max]

Fields without declared bounds whose id or name mentions a percentage are
checked against [0, 100]. Dimensional answers are checked per category.
Messages are available in French and English.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from .locale_support import resolve_locale
from .model import Field
from .type_caster import is_answered

PERCENTAGE_BOUNDS = (Decimal(0), Decimal(100))
PERCENTAGE_MARKERS = ("percentage", "pourcentage")

MESSAGES = {
    "fr": {
        "presence": "{label} est obligatoire",
        "enum": "{label} doit être l'une des valeurs suivantes : {allowed}",
        "range_min": "{label} doit être supérieur ou égal à {min}",
        "range_max": "{label} doit être inférieur ou égal à {max}",
    },
    "en": {
        "presence": "{label} is required",
        "enum": "{label} must be one of: {allowed}",
        "range_min": "{label} must be at least {min}",
        "range_max": "{label} must be at most {max}",
    },
}


def message(key: str, locale: Optional[str] = None, **params) -> str:
    table = resolve_locale(MESSAGES, locale)
    return table[key].format(**params)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationError:
    field: str                          # Wire id of the field
    rule: str                           # presence / enum / range
    message: str
    severity: str = "error"
    context: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "rule": self.rule,
            "message": self.message,
            "severity": self.severity,
            "context": dict(self.context),
        }

    def __str__(self) -> str:
        return f"[{self.severity}] {self.field}: {self.message}"


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple = ()
    warnings: tuple = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def complete(self) -> bool:
        return not any(e.rule == "presence" for e in self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def errors_for(self, field_id: str) -> list[ValidationError]:
        wanted = str(field_id).lower()
        return [e for e in self.errors if e.field.lower() == wanted]


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def _category_values(value) -> list[tuple[Optional[str], Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return [(None, value)]


def _bounds(field: Field):
    if field.has_range:
        return field.min_value, field.max_value
    names = [field.id, *field.labels.values()]
    if any(marker in name.lower() for name in names for marker in PERCENTAGE_MARKERS):
        return PERCENTAGE_BOUNDS
    return None


class Validator:
    def __init__(self, submission, locale: Optional[str] = None):
        self.submission = submission
        self.locale = locale

    def validate(self) -> ValidationResult:
        data = self.submission.data
        errors: list[ValidationError] = []
        for field in self.submission.questionnaire.fields:
            if not field.visible(data):
                continue
            value = data.get(field.wire_id)
            errors.extend(self._check_presence(field, value))
            errors.extend(self._check_enum(field, value))
            errors.extend(self._check_range(field, value))
        return ValidationResult(errors=tuple(errors))

    def _error(self, field: Field, rule: str, key: str, context: dict, **params) -> ValidationError:
        return ValidationError(
            field=field.wire_id,
            rule=rule,
            message=message(key, self.locale, label=field.label(self.locale), **params),
            context=context,
        )

    def _check_presence(self, field: Field, value):
        if field.required and not is_answered(value):
            yield self._error(field, "presence", "presence", {})

    def _check_enum(self, field: Field, value):
        if not field.valid_values or not is_answered(value):
            return
        for category, item in _category_values(value):
            if item is None or item in field.valid_values:
                continue
            context = {"value": item, "valid_values": list(field.valid_values)}
            if category is not None:
                context["category"] = category
            yield self._error(field, "enum", "enum", context,
                              allowed=", ".join(field.valid_values))

    def _check_range(self, field: Field, value):
        if not field.numeric or not is_answered(value):
            return
        bounds = _bounds(field)
        if bounds is None:
            return
        low, high = bounds
        for category, item in _category_values(value):
            if item is None:
                continue
            number = Decimal(str(item))
            context = {"value": item, "min": low, "max": high}
            if category is not None:
                context["category"] = category
            if low is not None and number < low:
                yield self._error(field, "range", "range_min", context, min=low)
            elif high is not None and number > high:
                yield self._error(field, "range", "range_max", context, max=high)


def validate(submission, locale: Optional[str] = None) -> ValidationResult:
    return Validator(submission, locale=locale).validate()
