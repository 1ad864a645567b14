"""
Submission
==========
One entity's answers for one questionnaire and reporting period.

    submission = Submission(industry="real_estate", year=2025,
                            entity_id="ENTITY_001", period=date(2025, 12, 31))
    submission["aACTIVE"] = "Oui"
    submission["a1101"] = "42"          # stored as 42

Field ids are case-insensitive on the way in; answers are stored under the
wire id so they can be written to XML as-is.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .errors import UnknownFieldError
from .model import Question, Questionnaire
from .type_caster import is_answered


class Submission:
    def __init__(self, industry, year, entity_id: str, period,
                 questionnaire: Optional[Questionnaire] = None,
                 registry=None):
        self.industry = industry
        self.year = year
        self.entity_id = entity_id
        self.period = period
        self._questionnaire = questionnaire
        self._registry = registry
        self._data: dict[str, Any] = {}

    @property
    def questionnaire(self) -> Questionnaire:
        """Resolved through the registry on first use, then cached."""
        if self._questionnaire is None:
            registry = self._registry
            if registry is None:
                from .registry import default_registry as registry
            self._questionnaire = registry.questionnaire(self.industry, self.year)
        return self._questionnaire

    # -- answers ------------------------------------------------------------

    def _question(self, field_id) -> Question:
        question = self.questionnaire.question(field_id)
        if question is None:
            raise UnknownFieldError(str(field_id))
        return question

    def __getitem__(self, field_id):
        return self._data.get(self._question(field_id).wire_id)

    def __setitem__(self, field_id, value) -> None:
        question = self._question(field_id)
        typed = question.cast(value)
        if not is_answered(typed):
            self._data.pop(question.wire_id, None)
        else:
            self._data[question.wire_id] = typed

    def __delitem__(self, field_id) -> None:
        self._data.pop(self._question(field_id).wire_id, None)

    def update(self, answers: Mapping) -> None:
        for field_id, value in answers.items():
            self[field_id] = value

    @property
    def data(self) -> dict[str, Any]:
        """Copy of the answers, keyed by wire id."""
        return {
            key: dict(value) if isinstance(value, dict) else value
            for key, value in self._data.items()
        }

    # -- completeness -------------------------------------------------------

    def question_visible(self, field_id) -> bool:
        return self._question(field_id).visible(self._data)

    def visible_questions(self) -> list[Question]:
        return [q for q in self.questionnaire.questions if q.visible(self._data)]

    def unanswered_questions(self) -> list[Question]:
        return [
            q for q in self.visible_questions()
            if not is_answered(self._data.get(q.wire_id))
        ]

    def complete(self) -> bool:
        return not self.unanswered_questions()

    def completion_percentage(self) -> float:
        visible = self.visible_questions()
        if not visible:
            return 100.0
        answered = len(visible) - len(self.unanswered_questions())
        return round(answered / len(visible) * 100, 1)

    def __repr__(self) -> str:
        return (f"Submission(industry={self.industry!r}, year={self.year!r}, "
                f"entity_id={self.entity_id!r}, period={self.period!r})")
