"""
Questionnaire model
===================
Immutable value objects built once by the taxonomy loader:

    Questionnaire
        Part            (question numbers restart at 1 in each part)
            Section     (numbered across the whole questionnaire)
                Subsection   (numbered within its section, e.g. "1.2")
                    Question -> Field

A Field carries what the taxonomy says about one reported concept. A Question
adds presentation: its display number and optional instructions. Everything
that reads text takes an explicit ``locale`` argument.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from . import type_caster
from .errors import DuplicateFieldError
from .locale_support import resolve_locale

_MISSING = object()


# ---------------------------------------------------------------------------
# Field
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Field:
    """One schema-declared concept."""
    id: str                                 # Canonical lowercase id
    wire_id: str                            # Original casing, used in XML
    type: str                               # boolean/integer/string/...
    xbrl_type: Optional[str] = None         # Declared schema type, verbatim
    labels: dict = field(default_factory=dict)          # {locale: text}
    verbose_labels: dict = field(default_factory=dict)  # {locale: text}
    valid_values: Optional[tuple] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    dimensional: bool = False
    gate: bool = False
    depends_on: dict = field(default_factory=dict)      # {gate wire id: literal}

    def label(self, locale: Optional[str] = None) -> str:
        return resolve_locale(self.labels, locale) or self.wire_id

    def verbose_label(self, locale: Optional[str] = None) -> Optional[str]:
        return resolve_locale(self.verbose_labels, locale)

    @property
    def required(self) -> bool:
        return True

    @property
    def numeric(self) -> bool:
        return self.type in type_caster.NUMERIC_TYPES

    @property
    def has_range(self) -> bool:
        return self.min_value is not None or self.max_value is not None

    def visible(self, data) -> bool:
        """True when every gate this field depends on holds its literal.

        A gate that is missing from ``data`` or explicitly None never
        matches, whatever the required literal is.
        """
        for gate_id, literal in self.depends_on.items():
            current = data.get(gate_id, _MISSING)
            if current is _MISSING or current is None:
                return False
            if current != literal:
                return False
        return True

    def cast(self, value: Any):
        if self.dimensional:
            return type_caster.cast_dimensional(value, self.type)
        return type_caster.cast(value, self.type)


# ---------------------------------------------------------------------------
# Question
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Question:
    number: int
    field: Field
    instruction_texts: dict = field(default_factory=dict)  # {locale: text}

    @property
    def id(self) -> str:
        return self.field.id

    @property
    def wire_id(self) -> str:
        return self.field.wire_id

    @property
    def type(self) -> str:
        return self.field.type

    @property
    def valid_values(self):
        return self.field.valid_values

    @property
    def gate(self) -> bool:
        return self.field.gate

    @property
    def dimensional(self) -> bool:
        return self.field.dimensional

    @property
    def depends_on(self) -> dict:
        return self.field.depends_on

    def label(self, locale: Optional[str] = None) -> str:
        return self.field.label(locale)

    def instructions(self, locale: Optional[str] = None) -> Optional[str]:
        return resolve_locale(self.instruction_texts, locale)

    def visible(self, data) -> bool:
        return self.field.visible(data)

    def cast(self, value: Any):
        return self.field.cast(value)


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Subsection:
    number: str
    titles: dict = field(default_factory=dict)
    questions: tuple = ()
    instruction_texts: dict = field(default_factory=dict)

    def title(self, locale: Optional[str] = None) -> Optional[str]:
        return resolve_locale(self.titles, locale)

    def instructions(self, locale: Optional[str] = None) -> Optional[str]:
        return resolve_locale(self.instruction_texts, locale)

    @property
    def fields(self) -> list[Field]:
        return [q.field for q in self.questions]

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def empty(self) -> bool:
        return not self.questions

    def visible(self, data) -> bool:
        return any(q.visible(data) for q in self.questions)


@dataclass(frozen=True)
class Section:
    number: int
    titles: dict = field(default_factory=dict)
    subsections: tuple = ()

    def title(self, locale: Optional[str] = None) -> Optional[str]:
        return resolve_locale(self.titles, locale)

    @property
    def questions(self) -> list[Question]:
        return [q for sub in self.subsections for q in sub.questions]

    @property
    def fields(self) -> list[Field]:
        return [q.field for q in self.questions]

    @property
    def question_count(self) -> int:
        return sum(sub.question_count for sub in self.subsections)

    @property
    def subsection_count(self) -> int:
        return len(self.subsections)

    @property
    def empty(self) -> bool:
        return self.question_count == 0

    def visible(self, data) -> bool:
        return any(sub.visible(data) for sub in self.subsections)


@dataclass(frozen=True)
class Part:
    names: dict = field(default_factory=dict)
    sections: tuple = ()

    def name(self, locale: Optional[str] = None) -> Optional[str]:
        return resolve_locale(self.names, locale)

    @property
    def questions(self) -> list[Question]:
        return [q for section in self.sections for q in section.questions]

    @property
    def fields(self) -> list[Field]:
        return [q.field for q in self.questions]

    @property
    def question_count(self) -> int:
        return sum(section.question_count for section in self.sections)

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def empty(self) -> bool:
        return self.question_count == 0

    def visible(self, data) -> bool:
        return any(section.visible(data) for section in self.sections)


# ---------------------------------------------------------------------------
# Questionnaire
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Questionnaire:
    industry: str
    year: int
    parts: tuple = ()
    taxonomy_namespace: Optional[str] = None
    schema_url: Optional[str] = None       # Overrides the derived schemaRef
    dimension_name: str = "CountryDimension"
    member_prefix: str = "sdl"
    entity_scheme: Optional[str] = None
    currency: str = "EUR"
    _index: dict = field(default_factory=dict, init=False, repr=False,
                         compare=False)

    def __post_init__(self):
        index: dict[str, Question] = {}
        for part in self.parts:
            for section in part.sections:
                for sub in section.subsections:
                    for question in sub.questions:
                        if question.id in index:
                            raise DuplicateFieldError(
                                question.id,
                                f"section {section.number}, "
                                f"subsection {sub.number}",
                            )
                        index[question.id] = question
        object.__setattr__(self, "_index", index)

    # -- lookups ------------------------------------------------------------

    def question(self, field_id: str) -> Optional[Question]:
        return self._index.get(str(field_id).lower())

    def field(self, field_id: str) -> Optional[Field]:
        question = self.question(field_id)
        return question.field if question else None

    def __contains__(self, field_id) -> bool:
        return str(field_id).lower() in self._index

    # -- flattened views ----------------------------------------------------

    @property
    def sections(self) -> list[Section]:
        return [section for part in self.parts for section in part.sections]

    @property
    def questions(self) -> list[Question]:
        return [q for part in self.parts for q in part.questions]

    @property
    def fields(self) -> list[Field]:
        return [q.field for q in self.questions]

    @property
    def gate_questions(self) -> list[Question]:
        return [q for q in self.questions if q.gate]

    @property
    def dimensional_questions(self) -> list[Question]:
        return [q for q in self.questions if q.dimensional]

    @property
    def part_count(self) -> int:
        return len(self.parts)

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def question_count(self) -> int:
        return len(self._index)
