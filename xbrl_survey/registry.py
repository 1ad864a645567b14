"""
Industry Registry
=================
Maps an industry name to a directory of yearly taxonomies and caches the
Questionnaire built for each (industry, year):

    taxonomies/real_estate/
        2024/  survey.xsd, survey_lab.xml, ...
        2025/  ...

    registry.register_plugin("real_estate", "taxonomies/real_estate")
    registry.questionnaire("real_estate", 2025)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .errors import DuplicateIndustryError, TaxonomyPathError, UnknownIndustryError, UnsupportedYearError
from .model import Questionnaire
from .taxonomy.loader import Loader

logger = logging.getLogger(__name__)

YEAR_DIRECTORY = re.compile(r"^(19|20)\d{2}$")


class Registry:
    def __init__(self):
        self._industries: dict[str, Path] = {}
        self._cache: dict[tuple[str, int], Questionnaire] = {}

    def register_plugin(self, industry, taxonomy_path) -> None:
        industry = str(industry)
        path = Path(taxonomy_path)
        if not path.is_dir():
            raise TaxonomyPathError(path)
        if industry in self._industries:
            raise DuplicateIndustryError(industry)
        self._industries[industry] = path
        logger.debug("Registered industry %s at %s", industry, path)

    def registered(self, industry) -> bool:
        return str(industry) in self._industries

    def registered_industries(self) -> list[str]:
        return sorted(self._industries)

    def supported_years(self, industry) -> list[int]:
        path = self._industry_path(industry)
        return sorted(
            int(child.name) for child in path.iterdir()
            if child.is_dir() and YEAR_DIRECTORY.match(child.name)
        )

    def questionnaire(self, industry, year) -> Questionnaire:
        industry = str(industry)
        path = self._industry_path(industry)
        try:
            year = int(year)
        except (TypeError, ValueError):
            raise UnsupportedYearError(industry, year, self.supported_years(industry)) from None

        key = (industry, year)
        if key not in self._cache:
            if year not in self.supported_years(industry):
                raise UnsupportedYearError(industry, year, self.supported_years(industry))
            logger.info("Loading taxonomy %s/%d", industry, year)
            self._cache[key] = Loader(path / str(year)).load(industry, year)
        return self._cache[key]

    def reset(self) -> None:
        self._industries.clear()
        self._cache.clear()

    def _industry_path(self, industry) -> Path:
        try:
            return self._industries[str(industry)]
        except KeyError:
            raise UnknownIndustryError(str(industry), self._industries) from None


default_registry = Registry()
