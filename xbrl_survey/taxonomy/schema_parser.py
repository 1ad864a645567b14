"""
Schema Parser
=============
Reads the taxonomy .xsd and returns one SchemaField per reportable concept,
in declaration order.

Abstract elements (section headers, hypercubes, dimensions, domain members)
are not reportable and are skipped. The type comes from the ``type``
attribute, or from the base of an inline restriction:

    <xs:element name="aGATE" ...>
      <xs:complexType><xs:simpleContent>
        <xs:restriction base="xbrli:stringItemType">
          <xs:enumeration value="Oui"/>
          <xs:enumeration value="Non"/>
        </xs:restriction>
      </xs:simpleContent></xs:complexType>
    </xs:element>

A two-value Oui/Non or Yes/No enumeration is a boolean; other enumerations
are enums. Values are kept exactly as written.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from lxml import etree

from ..errors import MalformedTaxonomyError, MissingTaxonomyFileError, TaxonomyLoadError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

XS = "http://www.w3.org/2001/XMLSchema"
XS_PREFIX = f"{{{XS}}}"

TYPE_MAPPING = {
    "integerItemType": "integer",
    "decimalItemType": "decimal",
    "stringItemType": "string",
    "monetaryItemType": "monetary",
    "booleanItemType": "boolean",
    "pureItemType": "percentage",
    "dateItemType": "date",
}

BOOLEAN_PAIRS = (
    frozenset({"oui", "non"}),
    frozenset({"yes", "no"}),
)

# Structural XBRL elements that are never facts
NON_FACT_GROUPS = frozenset({"hypercubeItem", "dimensionItem"})


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class SchemaField:
    """One reportable element declared in the schema."""
    wire_id: str                        # Element name, original casing
    type: str                           # Canonical type
    xbrl_type: Optional[str] = None     # Declared type, e.g. xbrli:monetaryItemType
    valid_values: Optional[tuple] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class SchemaParser:
    MAX_FIELDS = 10_000

    def __init__(self, xsd_path):
        self.xsd_path = Path(xsd_path)
        self.target_namespace: Optional[str] = None

    @staticmethod
    def _strip_ns_prefix(type_str: str) -> str:
        """'xbrli:monetaryItemType' -> 'monetaryItemType'."""
        if ":" in type_str:
            return type_str.split(":", 1)[1]
        return type_str

    def parse(self) -> dict[str, SchemaField]:
        """Return ``{wire_id: SchemaField}`` in declaration order."""
        if not self.xsd_path.is_file():
            raise MissingTaxonomyFileError(self.xsd_path, "schema")
        try:
            tree = etree.parse(str(self.xsd_path))
        except etree.XMLSyntaxError as e:
            raise MalformedTaxonomyError(self.xsd_path, str(e)) from e

        root = tree.getroot()
        self.target_namespace = root.get("targetNamespace") or None

        fields: dict[str, SchemaField] = {}
        for elem in root.iterchildren(f"{XS_PREFIX}element"):
            name = elem.get("name", "")
            if not name or not self._is_fact(elem):
                continue
            fields[name] = self._build_field(name, elem)
            if len(fields) > self.MAX_FIELDS:
                raise TaxonomyLoadError(
                    f"{self.xsd_path} declares more than "
                    f"{self.MAX_FIELDS} fields"
                )

        logger.debug("Parsed %d fields from %s", len(fields), self.xsd_path)
        return fields

    def _is_fact(self, elem) -> bool:
        if elem.get("abstract", "false").lower() == "true":
            return False
        group = self._strip_ns_prefix(elem.get("substitutionGroup", ""))
        return group not in NON_FACT_GROUPS

    def _build_field(self, name: str, elem) -> SchemaField:
        restriction = elem.find(
            f"{XS_PREFIX}complexType/{XS_PREFIX}simpleContent/{XS_PREFIX}restriction"
        )
        if restriction is None:
            restriction = elem.find(f"{XS_PREFIX}simpleType/{XS_PREFIX}restriction")

        xbrl_type = elem.get("type")
        if not xbrl_type and restriction is not None:
            xbrl_type = restriction.get("base")

        field_type = TYPE_MAPPING.get(self._strip_ns_prefix(xbrl_type or ""), "string")
        valid_values = None
        min_value = max_value = None

        if restriction is not None:
            values = [
                html.unescape(e.get("value", ""))
                for e in restriction.iterchildren(f"{XS_PREFIX}enumeration")
            ]
            if values:
                valid_values = tuple(values)
                field_type = "boolean" if self._is_boolean_pair(values) else "enum"
            min_value = self._facet(restriction, "minInclusive")
            max_value = self._facet(restriction, "maxInclusive")

        return SchemaField(
            wire_id=name,
            type=field_type,
            xbrl_type=xbrl_type,
            valid_values=valid_values,
            min_value=min_value,
            max_value=max_value,
        )

    @staticmethod
    def _is_boolean_pair(values: list[str]) -> bool:
        if len(values) != 2:
            return False
        lowered = frozenset(v.strip().lower() for v in values)
        return lowered in BOOLEAN_PAIRS

    def _facet(self, restriction, name: str) -> Optional[Decimal]:
        facet = restriction.find(f"{XS_PREFIX}{name}")
        if facet is None:
            return None
        try:
            return Decimal(facet.get("value", "").strip())
        except InvalidOperation:
            logger.warning("Ignoring non-numeric %s facet in %s",
                           name, self.xsd_path)
            return None
