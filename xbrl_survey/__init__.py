"""
xbrl_survey
===========
Load regulator XBRL survey taxonomies, collect typed answers, validate them
and write XBRL instance documents.

    import xbrl_survey

    xbrl_survey.register_plugin("real_estate", "taxonomies/real_estate")
    submission = xbrl_survey.Submission("real_estate", 2025, "ENTITY_001",
                                        date(2025, 12, 31))
    submission["aACTIVE"] = "Oui"
    result = xbrl_survey.validate(submission, locale="en")
    xml = xbrl_survey.to_xbrl(submission, pretty=True)
"""

from __future__ import annotations

from pathlib import Path

from .errors import (
    CastingError,
    DuplicateFieldError,
    DuplicateIndustryError,
    GeneratorError,
    MalformedTaxonomyError,
    MissingTaxonomyFileError,
    RegistryError,
    TaxonomyLoadError,
    TaxonomyPathError,
    UnknownFieldError,
    UnknownFieldReferenceError,
    UnknownIndustryError,
    UnsupportedYearError,
    ValidationServiceError,
    XbrlSurveyError,
)
from .generator import Generator, to_xbrl
from .model import Field, Part, Question, Questionnaire, Section, Subsection
from .registry import Registry, default_registry
from .submission import Submission
from .taxonomy import Loader
from .validator import ValidationError, ValidationResult, Validator, validate

__version__ = "0.1.0"


def load(taxonomy_path, industry=None, year=None) -> Questionnaire:
    """Load one taxonomy directory without going through the registry.

    Industry and year default to the directory layout
    ``<industry>/<year>/``.
    """
    path = Path(taxonomy_path)
    if year is None:
        year = path.name
    if industry is None:
        industry = path.parent.name
    return Loader(path).load(industry, year)


def register_plugin(industry, taxonomy_path) -> None:
    default_registry.register_plugin(industry, taxonomy_path)


def registered(industry) -> bool:
    return default_registry.registered(industry)


def registered_industries() -> list[str]:
    return default_registry.registered_industries()


def supported_years(industry) -> list[int]:
    return default_registry.supported_years(industry)


def questionnaire(industry, year) -> Questionnaire:
    return default_registry.questionnaire(industry, year)


__all__ = [
    "CastingError",
    "DuplicateFieldError",
    "DuplicateIndustryError",
    "Field",
    "Generator",
    "GeneratorError",
    "Loader",
    "MalformedTaxonomyError",
    "MissingTaxonomyFileError",
    "Part",
    "Question",
    "Questionnaire",
    "Registry",
    "RegistryError",
    "Section",
    "Subsection",
    "Submission",
    "TaxonomyLoadError",
    "TaxonomyPathError",
    "UnknownFieldError",
    "UnknownFieldReferenceError",
    "UnknownIndustryError",
    "UnsupportedYearError",
    "ValidationError",
    "ValidationResult",
    "ValidationServiceError",
    "Validator",
    "XbrlSurveyError",
    "default_registry",
    "load",
    "questionnaire",
    "register_plugin",
    "registered",
    "registered_industries",
    "supported_years",
    "to_xbrl",
    "validate",
]
