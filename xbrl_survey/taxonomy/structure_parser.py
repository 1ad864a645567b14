"""
Structure Parser
================
Reads ``questionnaire_structure.yml``, the hand-maintained layout of the
questionnaire:

    parts:
      - name: {fr: Risque inhérent, en: Inherent Risk}
        sections:
          - number: 1
            title: {fr: Activité, en: Activity}
            subsections:
              - number: "1.1"
                title: Statut
                instructions: ...
                questions:
                  - field_id: aACTIVE
                    number: 1
                    instructions: ...

Numbers are optional; the loader fills gaps positionally. Older files with a
top-level ``sections`` list are read as a single unnamed part.
Each container key must hold a list; any other shape is a malformed file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import MalformedTaxonomyError
from ..locale_support import normalize_locale_map

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise MalformedTaxonomyError(path, str(e)) from e


def _as_int(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class StructureParser:
    def __init__(self, structure_path):
        self.structure_path = Path(structure_path)

    def parse(self) -> dict[str, list]:
        if not self.structure_path.is_file():
            logger.debug("No structure file at %s", self.structure_path)
            return {"parts": []}

        document = load_yaml(self.structure_path)
        if document is None:
            return {"parts": []}
        if not isinstance(document, dict):
            raise MalformedTaxonomyError(
                self.structure_path, "top level must be a mapping"
            )

        if "parts" in document:
            parts = [self._parse_part(p) for p in self._list(document, "parts")]
        elif "sections" in document:
            parts = [self._parse_part({"sections": document["sections"]})]
        else:
            parts = []
        return {"parts": parts}

    def _list(self, data: dict, key: str) -> list:
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise MalformedTaxonomyError(
                self.structure_path, f"'{key}' must be a list, got {type(value).__name__}"
            )
        return value

    def _parse_part(self, data) -> dict:
        data = data if isinstance(data, dict) else {}
        return {
            "name": normalize_locale_map(data.get("name")),
            "sections": [self._parse_section(s) for s in self._list(data, "sections")],
        }

    def _parse_section(self, data) -> dict:
        data = data if isinstance(data, dict) else {}
        return {
            "number": _as_int(data.get("number")),
            "title": normalize_locale_map(data.get("title")),
            "subsections": [
                self._parse_subsection(s) for s in self._list(data, "subsections")
            ],
        }

    def _parse_subsection(self, data) -> dict:
        data = data if isinstance(data, dict) else {}
        number = data.get("number")
        return {
            "number": str(number).strip() if number is not None else None,
            "title": normalize_locale_map(data.get("title")),
            "instructions": normalize_locale_map(data.get("instructions")),
            "questions": [
                q for q in (self._parse_question(q) for q in self._list(data, "questions"))
                if q is not None
            ],
        }

    def _parse_question(self, data) -> Optional[dict]:
        if not isinstance(data, dict) or not data.get("field_id"):
            logger.warning("Skipping question without field_id in %s: %r",
                           self.structure_path, data)
            return None
        return {
            "field_id": str(data["field_id"]).strip().lower(),
            "number": _as_int(data.get("number")),
            "instructions": normalize_locale_map(data.get("instructions")),
        }
