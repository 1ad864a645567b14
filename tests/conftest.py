from datetime import date
from pathlib import Path

import pytest

from xbrl_survey import Submission
from xbrl_survey.registry import Registry
from xbrl_survey.taxonomy import Loader

FIXTURES = Path(__file__).parent / "fixtures"
TAXONOMIES = FIXTURES / "taxonomies"
TEST_TAXONOMY = TAXONOMIES / "test_industry" / "2025"


@pytest.fixture(scope="session")
def questionnaire():
    return Loader(TEST_TAXONOMY).load("test_industry", 2025)


@pytest.fixture
def registry():
    reg = Registry()
    reg.register_plugin("test_industry", TAXONOMIES / "test_industry")
    return reg


@pytest.fixture
def submission(questionnaire):
    return Submission(
        "test_industry", 2025,
        entity_id="ENTITY_001",
        period=date(2025, 12, 31),
        questionnaire=questionnaire,
    )


@pytest.fixture
def taxonomy_dir(tmp_path):
    """Writable copy of the fixture taxonomy for tests that break it."""
    target = tmp_path / "test_industry" / "2025"
    target.mkdir(parents=True)
    for source in TEST_TAXONOMY.iterdir():
        (target / source.name).write_bytes(source.read_bytes())
    return target
