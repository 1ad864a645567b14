"""
Exception hierarchy
===================
Every error raised on purpose by the package derives from XbrlSurveyError,
so callers can catch one type at the boundary.

    XbrlSurveyError
        TaxonomyLoadError
            MissingTaxonomyFileError
            MalformedTaxonomyError
            UnknownFieldReferenceError
            DuplicateFieldError
        UnknownFieldError
        CastingError
        GeneratorError
        RegistryError
            TaxonomyPathError
            DuplicateIndustryError
            UnknownIndustryError
            UnsupportedYearError
        ValidationServiceError
"""

from __future__ import annotations

from typing import Iterable, Optional


class XbrlSurveyError(Exception):
    """Base class for all package errors."""


# ---------------------------------------------------------------------------
# Taxonomy loading
# ---------------------------------------------------------------------------

class TaxonomyLoadError(XbrlSurveyError):
    """A taxonomy could not be turned into a Questionnaire."""


class MissingTaxonomyFileError(TaxonomyLoadError):
    def __init__(self, path, kind: str):
        self.path = str(path)
        self.kind = kind
        super().__init__(f"Missing {kind} file in {self.path}")


class MalformedTaxonomyError(TaxonomyLoadError):
    def __init__(self, path, detail: str):
        self.path = str(path)
        self.detail = detail
        super().__init__(f"Malformed taxonomy file {self.path}: {detail}")


class UnknownFieldReferenceError(TaxonomyLoadError):
    """The structure file references a field the schema does not declare."""

    def __init__(self, field_id: str, location: str):
        self.field_id = field_id
        self.location = location
        super().__init__(
            f"Unknown field '{field_id}' referenced in {location}"
        )


class DuplicateFieldError(TaxonomyLoadError):
    """A field id is placed more than once in a questionnaire."""

    def __init__(self, field_id: str, location: str,
                 first_location: Optional[str] = None):
        self.field_id = field_id
        self.location = location
        self.first_location = first_location
        if first_location:
            message = (f"Duplicate field '{field_id}' in {location} "
                       f"(first placed in {first_location})")
        else:
            message = f"Duplicate field '{field_id}' in {location}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Answers and output
# ---------------------------------------------------------------------------

class UnknownFieldError(XbrlSurveyError):
    """A submission was asked to read or write a field it does not know."""

    def __init__(self, field_id: str):
        self.field_id = field_id
        super().__init__(f"Unknown field: {field_id}")


class CastingError(XbrlSurveyError):
    """Raised for structural problems while casting, never for bad data."""


class GeneratorError(XbrlSurveyError):
    """An XBRL instance could not be produced."""


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class RegistryError(XbrlSurveyError):
    pass


class TaxonomyPathError(RegistryError):
    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Taxonomy path does not exist: {self.path}")


class DuplicateIndustryError(RegistryError):
    def __init__(self, industry: str):
        self.industry = industry
        super().__init__(f"Industry already registered: {industry}")


class UnknownIndustryError(RegistryError):
    def __init__(self, industry: str, known: Iterable[str] = ()):
        self.industry = industry
        self.known = sorted(known)
        listing = ", ".join(self.known) or "none"
        super().__init__(
            f"Unknown industry '{industry}' (registered: {listing})"
        )


class UnsupportedYearError(RegistryError):
    def __init__(self, industry: str, year, supported: Iterable[int] = ()):
        self.industry = industry
        self.year = year
        self.supported = sorted(supported)
        listing = ", ".join(str(y) for y in self.supported) or "none"
        super().__init__(
            f"Year {year} not supported for '{industry}' "
            f"(supported: {listing})"
        )


# ---------------------------------------------------------------------------
# External validation service
# ---------------------------------------------------------------------------

class ValidationServiceError(XbrlSurveyError):
    """The rule-validation service could not be reached or answered badly."""
