from pathlib import Path

import pytest

from xbrl_survey.errors import DuplicateIndustryError, TaxonomyPathError, UnknownIndustryError, UnsupportedYearError
from xbrl_survey.registry import Registry

TAXONOMIES = Path(__file__).parent / "fixtures" / "taxonomies"


def test_registration(registry):
    assert registry.registered("test_industry")
    assert not registry.registered("other")
    assert registry.registered_industries() == ["test_industry"]


def test_supported_years_only_count_year_directories(tmp_path):
    (tmp_path / "2024").mkdir()
    (tmp_path / "2025").mkdir()
    (tmp_path / "drafts").mkdir()
    (tmp_path / "2023").write_text("not a directory")
    registry = Registry()
    registry.register_plugin("ind", tmp_path)
    assert registry.supported_years("ind") == [2024, 2025]


def test_questionnaire_is_cached(registry):
    first = registry.questionnaire("test_industry", 2025)
    assert registry.questionnaire("test_industry", "2025") is first
    assert first.industry == "test_industry"


def test_bad_registrations(registry, tmp_path):
    with pytest.raises(TaxonomyPathError):
        registry.register_plugin("ghost", tmp_path / "missing")
    with pytest.raises(DuplicateIndustryError):
        registry.register_plugin("test_industry", TAXONOMIES / "test_industry")


def test_unknown_industry_lists_alternatives(registry):
    with pytest.raises(UnknownIndustryError, match="test_industry"):
        registry.questionnaire("casinos", 2025)


def test_unsupported_year_lists_alternatives(registry):
    with pytest.raises(UnsupportedYearError, match="2025"):
        registry.questionnaire("test_industry", 1999)


def test_reset(registry):
    registry.reset()
    assert registry.registered_industries() == []
