"""
Taxonomy Loader
===============
Turns one taxonomy directory (one industry, one year) into a Questionnaire.

Expected files, matched by pattern:

    *.xsd                         schema (required)
    *_lab.xml                     labels
    *_def.xml                     dimensions
    *.xule                        gate rules
    questionnaire_structure.yml   parts / sections / questions
    taxonomy.yml                  metadata (schema_url, entity_scheme, currency)

Loading is all-or-nothing: any error is raised before a Questionnaire exists.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..errors import (
    DuplicateFieldError,
    MalformedTaxonomyError,
    MissingTaxonomyFileError,
    TaxonomyLoadError,
    UnknownFieldReferenceError,
)
from ..model import Field, Part, Question, Questionnaire, Section, Subsection
from .dimension_parser import DimensionParser
from .label_parser import LabelParser
from .schema_parser import SchemaParser
from .structure_parser import StructureParser, load_yaml
from .xule_parser import XuleParser

logger = logging.getLogger(__name__)

STRUCTURE_FILENAME = "questionnaire_structure.yml"
METADATA_FILENAME = "taxonomy.yml"

# Rule files write gate literals as generic tokens; schemas use the filing
# language. Only French and English values have been seen in taxonomies.
BOOLEAN_SYNONYMS = {
    "affirmative": frozenset({"yes", "oui"}),
    "negative": frozenset({"no", "non"}),
}


def translate_literal(literal: str, valid_values) -> str:
    """Map a rule literal such as ``Yes`` onto the gate's own value (``Oui``).

    Only applies when the gate declares exactly two values; otherwise, or
    when no synonym matches, the literal is returned unchanged.
    """
    if not valid_values or len(valid_values) != 2:
        return literal
    token = literal.strip().lower()
    for synonyms in BOOLEAN_SYNONYMS.values():
        if token not in synonyms:
            continue
        for value in valid_values:
            if value.strip().lower() in synonyms:
                return value
    return literal


class Loader:
    def __init__(self, taxonomy_path):
        self.taxonomy_path = Path(taxonomy_path)

    # -- file discovery -----------------------------------------------------

    def _find(self, pattern: str) -> Optional[Path]:
        matches = sorted(self.taxonomy_path.glob(pattern))
        if len(matches) > 1:
            logger.warning(
                "Several files match %s in %s; using %s, ignoring %s",
                pattern, self.taxonomy_path, matches[0].name,
                ", ".join(m.name for m in matches[1:]),
            )
        return matches[0] if matches else None

    def _metadata(self) -> dict:
        path = self.taxonomy_path / METADATA_FILENAME
        if not path.is_file():
            return {}
        data = load_yaml(path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise MalformedTaxonomyError(path, "top level must be a mapping")
        return data

    # -- loading ------------------------------------------------------------

    def load(self, industry, year) -> Questionnaire:
        try:
            year = int(year)
        except (TypeError, ValueError):
            raise TaxonomyLoadError(f"Invalid taxonomy year: {year!r}") from None
        if not self.taxonomy_path.is_dir():
            raise MissingTaxonomyFileError(self.taxonomy_path, "taxonomy directory")

        xsd_path = self._find("*.xsd")
        if xsd_path is None:
            raise MissingTaxonomyFileError(self.taxonomy_path, "schema (*.xsd)")

        schema = SchemaParser(xsd_path)
        schema_fields = schema.parse()

        label_path = self._find("*_lab.xml")
        labels = LabelParser(label_path).parse() if label_path else {}
        rule_path = self._find("*.xule")
        rules = XuleParser(rule_path).parse() if rule_path else None
        def_path = self._find("*_def.xml")
        dimensions = DimensionParser(def_path).parse() if def_path else None
        structure = StructureParser(self.taxonomy_path / STRUCTURE_FILENAME).parse()
        metadata = self._metadata()

        fields = self._build_fields(schema_fields, labels, rules, dimensions)
        parts = self._build_parts(structure["parts"], fields)
        if not parts:
            logger.warning("Taxonomy %s has no questionnaire structure",
                           self.taxonomy_path)

        options = {}
        if dimensions is not None:
            options["dimension_name"] = dimensions.dimension_name
            options["member_prefix"] = dimensions.member_prefix
        if metadata.get("currency"):
            options["currency"] = str(metadata["currency"])

        return Questionnaire(
            industry=industry,
            year=year,
            parts=tuple(parts),
            taxonomy_namespace=schema.target_namespace,
            schema_url=metadata.get("schema_url"),
            entity_scheme=metadata.get("entity_scheme"),
            **options,
        )

    def _build_fields(self, schema_fields, labels, rules, dimensions) -> dict[str, Field]:
        """Return ``{lowercase id: Field}`` in schema order."""
        wire_ids = {wire_id.lower(): wire_id for wire_id in schema_fields}
        labels = {k.lower(): v for k, v in labels.items()}
        dimensional = {f.lower() for f in dimensions.dimensional_fields} if dimensions else set()

        gates = set()
        dependencies: dict[str, dict[str, str]] = {}
        if rules is not None:
            for gate in rules.gate_fields:
                if gate.lower() in wire_ids:
                    gates.add(gate.lower())
                else:
                    logger.warning("Rule gate '%s' is not declared in the schema", gate)
            for controlled, deps in rules.gate_rules.items():
                if controlled.lower() not in wire_ids:
                    logger.warning("Rule target '%s' is not declared in the schema",
                                   controlled)
                    continue
                resolved = dependencies.setdefault(controlled.lower(), {})
                for gate, literal in deps.items():
                    if gate.lower() in wire_ids:
                        resolved[wire_ids[gate.lower()]] = literal
                    else:
                        logger.warning("Dropping gate '%s' on '%s': gate is not declared "
                                       "in the schema", gate, controlled)

        fields: dict[str, Field] = {}
        for wire_id, record in schema_fields.items():
            field_id = wire_id.lower()
            entry = labels.get(field_id, {})
            depends_on = {
                gate: translate_literal(literal, schema_fields[gate].valid_values)
                for gate, literal in dependencies.get(field_id, {}).items()
            }
            fields[field_id] = Field(
                id=field_id,
                wire_id=wire_id,
                type=record.type,
                xbrl_type=record.xbrl_type,
                labels=dict(entry.get("label", {})),
                verbose_labels=dict(entry.get("verbose_label", {})),
                valid_values=record.valid_values,
                min_value=record.min_value,
                max_value=record.max_value,
                dimensional=field_id in dimensional,
                gate=field_id in gates,
                depends_on=depends_on,
            )
        return fields

    def _build_parts(self, part_data: list, fields: dict[str, Field]) -> list[Part]:
        placed: dict[str, str] = {}             # {field id: location}
        parts = []
        section_number = 0

        for part_index, part in enumerate(part_data, start=1):
            question_number = 0
            sections = []
            for section in part["sections"]:
                section_number = section["number"] if section["number"] is not None else section_number + 1
                subsections = []
                for sub_index, sub in enumerate(section["subsections"], start=1):
                    sub_number = sub["number"] or f"{section_number}.{sub_index}"
                    location = f"part {part_index}, section {section_number}, subsection {sub_number}"
                    questions = []
                    for q in sub["questions"]:
                        field_id = q["field_id"]
                        if field_id not in fields:
                            raise UnknownFieldReferenceError(field_id, location)
                        if field_id in placed:
                            raise DuplicateFieldError(field_id, location, placed[field_id])
                        placed[field_id] = location
                        question_number = q["number"] if q["number"] is not None else question_number + 1
                        questions.append(Question(
                            number=question_number,
                            field=fields[field_id],
                            instruction_texts=q["instructions"],
                        ))
                    subsections.append(Subsection(
                        number=sub_number,
                        titles=sub["title"],
                        questions=tuple(questions),
                        instruction_texts=sub["instructions"],
                    ))
                sections.append(Section(
                    number=section_number,
                    titles=section["title"],
                    subsections=tuple(subsections),
                ))
            parts.append(Part(names=part["name"], sections=tuple(sections)))
        return parts
