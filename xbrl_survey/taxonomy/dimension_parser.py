"""
Dimension Parser
================
Reads the definition linkbase (``*_def.xml``) to find which fields are
reported per category (per country, typically) and how category members are
named.

    Abstract_aAC --all--> CountryTable --hypercube-dimension--> CountryDimension
         |                                  --dimension-domain--> sdlAll
         +--domain-member--> a1204, a1205      sdlAll --domain-member--> sdlFR, sdlDE

Fields below a primary-item root (the source of an ``all`` arc, or an
abstract named like ``Abstract_aAC``) are dimensional. Members such as
``sdlFR`` give the member prefix ``sdl``.
"""

from __future__ import annotations

import logging
import re
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lxml import etree

from ..errors import MalformedTaxonomyError
from .label_parser import LINK, concept_id_from_href, xlink

logger = logging.getLogger(__name__)

ARCROLE_ALL = "http://xbrl.org/int/dim/arcrole/all"
ARCROLE_HYPERCUBE_DIMENSION = "http://xbrl.org/int/dim/arcrole/hypercube-dimension"
ARCROLE_DIMENSION_DOMAIN = "http://xbrl.org/int/dim/arcrole/dimension-domain"
ARCROLE_DOMAIN_MEMBER = "http://xbrl.org/int/dim/arcrole/domain-member"

DIMENSIONAL_ABSTRACT_PATTERN = re.compile(r"Abstract_aAC$")
MEMBER_PATTERN = re.compile(r"^([a-z]+)[A-Z]{2}$")

DEFAULT_DIMENSION_NAME = "CountryDimension"
DEFAULT_MEMBER_PREFIX = "sdl"


@dataclass
class DimensionInfo:
    dimensional_fields: set = field(default_factory=set)
    dimension_name: str = DEFAULT_DIMENSION_NAME
    member_prefix: str = DEFAULT_MEMBER_PREFIX


class DimensionParser:
    def __init__(self, def_path):
        self.def_path = Path(def_path)

    def parse(self) -> DimensionInfo:
        if not self.def_path.is_file():
            logger.debug("No definition linkbase at %s", self.def_path)
            return DimensionInfo()
        try:
            root = etree.parse(str(self.def_path)).getroot()
        except etree.XMLSyntaxError as e:
            raise MalformedTaxonomyError(self.def_path, str(e)) from e

        locators = {}
        for loc in root.iter(f"{{{LINK}}}loc"):
            label = loc.get(xlink("label"))
            locators[label] = concept_id_from_href(loc.get(xlink("href"), label or ""))

        def concept(label: Optional[str]) -> str:
            if label in locators:
                return locators[label]
            return concept_id_from_href(f"#{label or ''}")

        arcs = defaultdict(list)                # {arcrole: [(from, to)]}
        for arc in root.iter(f"{{{LINK}}}definitionArc"):
            arcs[arc.get(xlink("arcrole"))].append(
                (concept(arc.get(xlink("from"))), concept(arc.get(xlink("to"))))
            )

        children = defaultdict(list)
        for source, target in arcs[ARCROLE_DOMAIN_MEMBER]:
            children[source].append(target)

        info = DimensionInfo()

        dimensions = [target for _, target in arcs[ARCROLE_HYPERCUBE_DIMENSION]]
        if dimensions:
            info.dimension_name = dimensions[0]

        domains = {target for _, target in arcs[ARCROLE_DIMENSION_DOMAIN]}
        members = self._descendants(domains, children)
        prefixes = Counter(
            m.group(1) for m in map(MEMBER_PATTERN.match, members) if m
        )
        if prefixes:
            info.member_prefix = prefixes.most_common(1)[0][0]

        roots = {source for source, _ in arcs[ARCROLE_ALL]}
        roots |= {
            source for source, _ in arcs[ARCROLE_DOMAIN_MEMBER]
            if DIMENSIONAL_ABSTRACT_PATTERN.search(source)
        }
        info.dimensional_fields = self._descendants(roots - domains, children) - members

        logger.debug("Found %d dimensional fields in %s",
                     len(info.dimensional_fields), self.def_path)
        return info

    @staticmethod
    def _descendants(roots, children) -> set:
        seen: set = set()
        stack = list(roots)
        while stack:
            node = stack.pop()
            for child in children.get(node, ()):
                if child not in seen:
                    seen.add(child)
                    stack.append(child)
        return seen
