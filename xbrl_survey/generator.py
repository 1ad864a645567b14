"""
XBRL Instance Generator
=======================
Serializes a Submission into an XBRL instance document:

    <xbrli:xbrl xmlns:strix="<taxonomy namespace>" ...>
      <link:schemaRef xlink:type="simple" xlink:href="survey.xsd"/>
      <xbrli:context id="ctx_ENTITY_20251231">...</xbrli:context>
      <xbrli:context id="ctx_ENTITY_20251231_FR">...</xbrli:context>   (lazy)
      <xbrli:unit id="pure">...</xbrli:unit>
      <xbrli:unit id="EUR">...</xbrli:unit>
      <strix:a1101 contextRef="..." unitRef="pure" decimals="0">42</strix:a1101>
      ...
    </xbrli:xbrl>

Only visible fields are written, in questionnaire order. Unanswered fields
become nil facts unless ``include_empty=False``.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Mapping
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from urllib.parse import urlparse

from lxml import etree

from .errors import GeneratorError, RegistryError
from .model import Field, Questionnaire

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

XBRLI = "http://www.xbrl.org/2003/instance"
LINK = "http://www.xbrl.org/2003/linkbase"
XLINK = "http://www.w3.org/1999/xlink"
XBRLDI = "http://xbrl.org/2006/xbrldi"
ISO4217 = "http://www.xbrl.org/2003/iso4217"
XSI = "http://www.w3.org/2001/XMLSchema-instance"

NAMESPACES = {
    "xbrli": XBRLI,
    "link": LINK,
    "xlink": XLINK,
    "xbrldi": XBRLDI,
    "iso4217": ISO4217,
    "xsi": XSI,
}

FACT_PREFIX = "strix"
ENTITY_SCHEME = "https://amlcft.amsf.mc"
FALLBACK_SCHEMA = "taxonomy.xsd"

PURE_UNIT = "pure"

DECIMALS = {
    "integer": "0",
    "monetary": "2",
    "decimal": "2",
    "percentage": "2",
}

TWO_PLACES = Decimal("0.01")
NON_ID_CHARS = re.compile(r"[^\w.-]")


def _q(namespace: str, name: str) -> str:
    return f"{{{namespace}}}{name}"


def _ncname(text) -> str:
    return NON_ID_CHARS.sub("_", str(text))


def schema_filename(namespace: Optional[str]) -> str:
    """Derive the schema file name from the last segment of the namespace.

    'https://amlcft.amsf.mc/dcm/DTS/strix_Real_Estate_AML_CFT_survey_2025'
    -> 'strix_Real_Estate_AML_CFT_survey_2025.xsd'
    """
    if not namespace:
        return FALLBACK_SCHEMA
    try:
        path = urlparse(namespace).path
    except ValueError:
        return FALLBACK_SCHEMA
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    return f"{segment}.xsd" if segment else FALLBACK_SCHEMA


def format_value(value, field_type: str) -> str:
    if field_type in ("monetary", "decimal", "percentage"):
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        return format(amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP), "f")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class Generator:
    def __init__(self, submission, pretty: bool = False,
                 include_empty: bool = True):
        self.submission = submission
        self.pretty = pretty
        self.include_empty = include_empty
        self._root = None
        self._base_context = None
        self._last_context = None
        self._dimension_contexts: dict[str, str] = {}

    def generate(self) -> str:
        questionnaire = self._validate()
        self._build_root(questionnaire)
        self._build_schema_ref(questionnaire)
        self._build_base_context(questionnaire)
        self._build_units(questionnaire)
        self._build_facts(questionnaire)
        logger.debug("Generated instance for %s with %d category contexts",
                     self.submission.entity_id, len(self._dimension_contexts))
        return etree.tostring(
            self._root.getroottree(),
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=self.pretty,
        ).decode("utf-8")

    # -- states -------------------------------------------------------------

    def _validate(self) -> Questionnaire:
        if self.submission is None:
            raise GeneratorError("Submission is required")
        if not isinstance(self.submission.period, date):
            raise GeneratorError(
                f"Period must be a date, got {type(self.submission.period).__name__}"
            )
        try:
            questionnaire = self.submission.questionnaire
        except RegistryError as e:
            raise GeneratorError(f"Questionnaire could not be resolved: {e}") from e
        if questionnaire is None:
            raise GeneratorError("Questionnaire could not be resolved")
        return questionnaire

    def _build_root(self, questionnaire: Questionnaire) -> None:
        nsmap = dict(NAMESPACES)
        if questionnaire.taxonomy_namespace:
            nsmap[FACT_PREFIX] = questionnaire.taxonomy_namespace
        self._root = etree.Element(_q(XBRLI, "xbrl"), nsmap=nsmap)

    def _build_schema_ref(self, questionnaire: Questionnaire) -> None:
        href = questionnaire.schema_url or schema_filename(questionnaire.taxonomy_namespace)
        schema_ref = etree.SubElement(self._root, _q(LINK, "schemaRef"))
        schema_ref.set(_q(XLINK, "type"), "simple")
        schema_ref.set(_q(XLINK, "href"), href)

    @property
    def context_id(self) -> str:
        entity = _ncname(self.submission.entity_id)
        return f"ctx_{entity}_{self.submission.period.strftime('%Y%m%d')}"

    def _build_base_context(self, questionnaire: Questionnaire) -> None:
        context = etree.SubElement(self._root, _q(XBRLI, "context"), id=self.context_id)
        entity = etree.SubElement(context, _q(XBRLI, "entity"))
        identifier = etree.SubElement(entity, _q(XBRLI, "identifier"),
                                      scheme=questionnaire.entity_scheme or ENTITY_SCHEME)
        identifier.text = str(self.submission.entity_id)
        period = etree.SubElement(context, _q(XBRLI, "period"))
        instant = etree.SubElement(period, _q(XBRLI, "instant"))
        instant.text = self.submission.period.strftime("%Y-%m-%d")
        self._base_context = self._last_context = context

    def _build_units(self, questionnaire: Questionnaire) -> None:
        for unit_id, measure in ((PURE_UNIT, "xbrli:pure"),
                                 (questionnaire.currency, f"iso4217:{questionnaire.currency}")):
            unit = etree.SubElement(self._root, _q(XBRLI, "unit"), id=unit_id)
            etree.SubElement(unit, _q(XBRLI, "measure")).text = measure

    def _build_facts(self, questionnaire: Questionnaire) -> None:
        data = self.submission.data
        for field in questionnaire.fields:
            if not field.visible(data):
                continue
            value = data.get(field.wire_id)
            if field.dimensional:
                self._add_dimensional_facts(questionnaire, field, value)
            elif isinstance(value, Mapping):
                raise GeneratorError(
                    f"Field {field.wire_id} is not dimensional but has a category map"
                )
            elif value is not None or self.include_empty:
                self._add_fact(questionnaire, field, value, self.context_id)

    def _add_dimensional_facts(self, questionnaire: Questionnaire, field: Field, value) -> None:
        # Absent and empty answers carry no categories, so nothing is written.
        if value is None:
            return
        if not isinstance(value, Mapping):
            raise GeneratorError(
                f"Dimensional field {field.wire_id} needs a category map, "
                f"got {type(value).__name__}"
            )
        for category, category_value in value.items():
            if category_value is None and not self.include_empty:
                continue
            context_id = self._dimension_context(questionnaire, category)
            self._add_fact(questionnaire, field, category_value, context_id)

    def _dimension_context(self, questionnaire: Questionnaire, category: str) -> str:
        if category in self._dimension_contexts:
            return self._dimension_contexts[category]

        context_id = f"{self.context_id}_{_ncname(category)}"
        context = etree.Element(_q(XBRLI, "context"), id=context_id)
        entity = etree.SubElement(context, _q(XBRLI, "entity"))
        base_entity = self._base_context.find(_q(XBRLI, "entity"))
        for child in base_entity:
            entity.append(copy.deepcopy(child))
        segment = etree.SubElement(entity, _q(XBRLI, "segment"))
        member = etree.SubElement(
            segment, _q(XBRLDI, "explicitMember"),
            dimension=f"{FACT_PREFIX}:{questionnaire.dimension_name}",
        )
        member.text = f"{FACT_PREFIX}:{questionnaire.member_prefix}{category}"
        period = self._base_context.find(_q(XBRLI, "period"))
        context.append(copy.deepcopy(period))

        self._last_context.addnext(context)
        self._last_context = context
        self._dimension_contexts[category] = context_id
        return context_id

    def _add_fact(self, questionnaire: Questionnaire, field: Field, value, context_id: str) -> None:
        if questionnaire.taxonomy_namespace:
            tag = _q(questionnaire.taxonomy_namespace, field.wire_id)
        else:
            tag = field.wire_id
        fact = etree.SubElement(self._root, tag, contextRef=context_id)

        if value is None:
            fact.set(_q(XSI, "nil"), "true")
            return

        decimals = DECIMALS.get(field.type)
        if decimals is not None:
            fact.set("unitRef", questionnaire.currency if field.type == "monetary" else PURE_UNIT)
            fact.set("decimals", decimals)
        fact.text = format_value(value, field.type)


def to_xbrl(submission, pretty: bool = False, include_empty: bool = True) -> str:
    return Generator(submission, pretty=pretty, include_empty=include_empty).generate()
