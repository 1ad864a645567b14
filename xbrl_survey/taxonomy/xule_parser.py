"""
Rule Parser
===========
Extracts gate dependencies from the taxonomy's XULE rule file. Only one rule
shape is understood: an output named ``GATE-FIELD`` whose assertion reads

    $a1 == Yes and $a2 > 0

meaning FIELD may only be reported when GATE equals the literal. Every other
rule (sum checks, multi-field consistency) is outside this grammar and is
skipped with a log message.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..errors import MalformedTaxonomyError

logger = logging.getLogger(__name__)

BLOCK_SPLIT = re.compile(r"\n(?=output\s)")
OUTPUT_HEADER = re.compile(r"^output\s+(\S+)")
GATE_NAME = re.compile(r"^(\w+)-(\w+)$")
GATE_EXPRESSION = re.compile(
    r"\$\w+\s*==\s*(?:\"([^\"]*)\"|'([^']*)'|(\w+))\s+and\s+\$\w+\s*>\s*0\b"
)
MESSAGE = re.compile(r"\bmessage\s*\"((?:[^\"\\]|\\.)*)\"", re.DOTALL)

# Rule names ending like this are arithmetic checks, not gates
SUM_CHECK_SUFFIXES = ("-sum", "_sum", "-SUM", "_SUM")


@dataclass
class GateRule:
    gate: str                           # Controlling field, as written
    controlled: str                     # Field it enables
    literal: str                        # Required gate value
    message: Optional[str] = None


@dataclass
class XuleRules:
    gate_rules: dict = field(default_factory=dict)   # {controlled: {gate: literal}}
    gate_fields: set = field(default_factory=set)
    rules: list = field(default_factory=list)        # [GateRule]


class XuleParser:
    def __init__(self, xule_path):
        self.xule_path = Path(xule_path)

    def parse(self) -> XuleRules:
        result = XuleRules()
        if not self.xule_path.is_file():
            logger.debug("No rule file at %s", self.xule_path)
            return result

        try:
            content = self.xule_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedTaxonomyError(self.xule_path, str(e)) from e
        content = content.replace("\r\n", "\n").replace("\r", "\n")

        for block in BLOCK_SPLIT.split(content):
            block = block.strip()
            header = OUTPUT_HEADER.match(block)
            if not header:
                continue
            rule = self._parse_block(header.group(1), block)
            if rule is None:
                continue
            result.rules.append(rule)
            result.gate_fields.add(rule.gate)
            result.gate_rules.setdefault(rule.controlled, {})[rule.gate] = rule.literal

        logger.debug("Parsed %d gate rules from %s",
                     len(result.rules), self.xule_path)
        return result

    def _parse_block(self, name: str, block: str) -> Optional[GateRule]:
        if name.count("-") > 1 or name.endswith(SUM_CHECK_SUFFIXES):
            logger.debug("Skipping rule %s: not a gate rule", name)
            return None

        match = GATE_NAME.match(name)
        if not match:
            logger.warning("Skipping unparseable rule name '%s' in %s",
                           name, self.xule_path)
            return None

        expression = GATE_EXPRESSION.search(block)
        if not expression:
            logger.debug("Skipping rule %s: no gate expression", name)
            return None

        literal = next(g for g in expression.groups() if g is not None)
        message = MESSAGE.search(block)
        return GateRule(
            gate=match.group(1),
            controlled=match.group(2),
            literal=literal,
            message=message.group(1).strip() if message else None,
        )
