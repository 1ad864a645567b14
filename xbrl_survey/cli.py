"""
xbrl-survey command line
========================
Inspect a taxonomy, validate an answers file against it, or write the XBRL
instance for those answers.

Usage:
    xbrl-survey inspect taxonomies/real_estate/2025
    xbrl-survey validate taxonomies/real_estate/2025 --answers answers.yml \\
        --entity-id ENTITY_001 --period 2025-12-31 --locale en
    xbrl-survey generate taxonomies/real_estate/2025 --answers answers.yml \\
        --entity-id ENTITY_001 --period 2025-12-31 --pretty --output out.xml

The answers file is a YAML (or JSON) mapping of field id to value. Dimensional
fields take a nested mapping of category code to value:

    aACTIVE: Oui
    a1101: 42
    a1204: {FR: 40.5, DE: 12}
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from . import load
from .errors import XbrlSurveyError
from .generator import to_xbrl
from .locale_support import DEFAULT_LOCALE, SUPPORTED_LOCALES
from .submission import Submission
from .taxonomy.structure_parser import load_yaml
from .validation_service import ArelleClient
from .validator import validate


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _period(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {text}") from None


def build_submission(args) -> Submission:
    questionnaire = load(args.taxonomy)
    answers = load_yaml(Path(args.answers)) or {}
    if not isinstance(answers, dict):
        raise XbrlSurveyError(f"{args.answers} must contain a mapping of field ids")
    submission = Submission(
        questionnaire.industry, questionnaire.year,
        entity_id=args.entity_id, period=args.period,
        questionnaire=questionnaire,
    )
    submission.update(answers)
    return submission


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_inspect(args) -> int:
    questionnaire = load(args.taxonomy)
    locale = args.locale
    print("=" * 60)
    print(f"{questionnaire.industry} {questionnaire.year}")
    print(f"Namespace: {questionnaire.taxonomy_namespace or '(none)'}")
    print("=" * 60)
    print(f"Parts:     {questionnaire.part_count}")
    print(f"Sections:  {questionnaire.section_count}")
    print(f"Questions: {questionnaire.question_count}")
    print(f"Gates:     {len(questionnaire.gate_questions)}")
    print(f"Dimensional: {len(questionnaire.dimensional_questions)}")

    for part in questionnaire.parts:
        print(f"\n{part.name(locale) or '(unnamed part)'}")
        for section in part.sections:
            print(f"  {section.number}. {section.title(locale) or ''}")
            for sub in section.subsections:
                print(f"    {sub.number} {sub.title(locale) or ''}")
                if args.verbose:
                    for q in sub.questions:
                        gate = " [gate]" if q.gate else ""
                        print(f"      Q{q.number} {q.wire_id} ({q.type}){gate}: "
                              f"{q.label(locale)}")
    return 0


def cmd_validate(args) -> int:
    submission = build_submission(args)
    result = validate(submission, locale=args.locale)
    print(f"Completion: {submission.completion_percentage()}%")
    for error in result.errors:
        print(f"  {error}")
    print(f"{result.error_count} error(s)")

    if args.arelle:
        with ArelleClient(base_url=args.arelle_url) as client:
            service = client.validate(to_xbrl(submission))
        print(f"Arelle: {'valid' if service.valid else 'invalid'}")
        for msg in service.messages:
            print(f"  [{msg.severity}] {msg.message}")
        if not service.valid:
            return 1
    return 0 if result.valid else 1


def cmd_generate(args) -> int:
    submission = build_submission(args)
    xml = to_xbrl(submission, pretty=args.pretty, include_empty=not args.omit_empty)
    if args.output:
        Path(args.output).write_text(xml, encoding="utf-8")
        print(f"Instance written to: {args.output}")
    else:
        sys.stdout.write(xml)
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xbrl-survey",
        description="Work with XBRL survey taxonomies and answers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Usage:", 1)[1],
    )
    parser.add_argument("--verbose", action="store_true",
                        help="Debug logging and per-question detail")
    commands = parser.add_subparsers(dest="command", required=True)

    inspect = commands.add_parser("inspect", help="Summarize a taxonomy")
    inspect.add_argument("taxonomy", help="Taxonomy directory (<industry>/<year>)")
    inspect.add_argument("--locale", default=DEFAULT_LOCALE, choices=SUPPORTED_LOCALES)
    inspect.set_defaults(handler=cmd_inspect)

    for name, handler, help_text in (
        ("validate", cmd_validate, "Validate an answers file"),
        ("generate", cmd_generate, "Write the XBRL instance for an answers file"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("taxonomy", help="Taxonomy directory (<industry>/<year>)")
        sub.add_argument("--answers", required=True, help="YAML or JSON answers file")
        sub.add_argument("--entity-id", required=True)
        sub.add_argument("--period", required=True, type=_period,
                         help="Reporting date, YYYY-MM-DD")
        sub.set_defaults(handler=handler)

    validate_cmd = commands.choices["validate"]
    validate_cmd.add_argument("--locale", default=DEFAULT_LOCALE, choices=SUPPORTED_LOCALES)
    validate_cmd.add_argument("--arelle", action="store_true",
                              help="Also send the instance to the Arelle service")
    validate_cmd.add_argument("--arelle-url", default=None,
                              help="Service URL (default: $ARELLE_API_URL)")

    generate_cmd = commands.choices["generate"]
    generate_cmd.add_argument("--pretty", action="store_true")
    generate_cmd.add_argument("--omit-empty", action="store_true",
                              help="Leave unanswered fields out instead of nil facts")
    generate_cmd.add_argument("--output", default=None, help="Write XML to this path")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.handler(args)
    except XbrlSurveyError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
