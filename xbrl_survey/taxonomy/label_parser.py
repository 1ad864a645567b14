"""
Label Parser
============
Reads a label linkbase (``*_lab.xml``) and returns, per field, the standard
and verbose labels keyed by language:

    {"aGATE": {"label": {"fr": "...", "en": "..."},
               "verbose_label": {"fr": "..."}}}

Labels are joined to concepts through locators and arcs:

    loc   (href="survey.xsd#strix_aGATE", label="loc_aGATE")
    arc   (from="loc_aGATE", to="lab_aGATE")
    label (label="lab_aGATE", role=.../label, xml:lang="fr")

Label text frequently carries HTML (escaped or inline); only the text is
kept.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path

from lxml import etree, html

from ..errors import MalformedTaxonomyError
from ..locale_support import DEFAULT_LOCALE

logger = logging.getLogger(__name__)

LINK = "http://www.xbrl.org/2003/linkbase"
XLINK = "http://www.w3.org/1999/xlink"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

ROLE_LABEL = "http://www.xbrl.org/2003/role/label"
ROLE_VERBOSE = "http://www.xbrl.org/2003/role/verboseLabel"

ROLE_KEYS = {
    ROLE_LABEL: "label",
    ROLE_VERBOSE: "verbose_label",
}


def xlink(name: str) -> str:
    return f"{{{XLINK}}}{name}"


def concept_id_from_href(href: str) -> str:
    """'survey.xsd#strix_aGATE' -> 'aGATE'."""
    fragment = href.split("#", 1)[-1]
    if "_" in fragment:
        return fragment.split("_", 1)[1]
    return fragment


def strip_markup(text: str) -> str:
    """Return the plain text of a snippet that may contain HTML tags."""
    text = (text or "").strip()
    if not text or "<" not in text:
        return text
    fragment = html.fragment_fromstring(text, create_parent="div")
    return " ".join(fragment.text_content().split())


class LabelParser:
    def __init__(self, label_path):
        self.label_path = Path(label_path)

    def parse(self) -> dict[str, dict[str, dict[str, str]]]:
        if not self.label_path.is_file():
            logger.debug("No label file at %s", self.label_path)
            return {}
        try:
            root = etree.parse(str(self.label_path)).getroot()
        except etree.XMLSyntaxError as e:
            raise MalformedTaxonomyError(self.label_path, str(e)) from e

        locators = {
            loc.get(xlink("label")): concept_id_from_href(loc.get(xlink("href"), ""))
            for loc in root.iter(f"{{{LINK}}}loc")
        }

        resources = defaultdict(list)
        for label_el in root.iter(f"{{{LINK}}}label"):
            key = ROLE_KEYS.get(label_el.get(xlink("role"), ROLE_LABEL))
            if key is None:
                continue
            text = strip_markup("".join(label_el.itertext()))
            if not text:
                continue
            lang = label_el.get(XML_LANG) or DEFAULT_LOCALE
            resources[label_el.get(xlink("label"))].append((key, lang, text))

        labels: dict[str, dict[str, dict[str, str]]] = {}
        for arc in root.iter(f"{{{LINK}}}labelArc"):
            field_id = locators.get(arc.get(xlink("from")))
            if not field_id:
                continue
            entry = labels.setdefault(field_id, {"label": {}, "verbose_label": {}})
            for key, lang, text in resources.get(arc.get(xlink("to")), []):
                entry[key].setdefault(lang, text)

        logger.debug("Parsed labels for %d fields from %s",
                     len(labels), self.label_path)
        return labels
