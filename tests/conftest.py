import pytest

from screening_rulesets.catalog import QuestionnaireCatalog
from screening_rulesets.engine import ScreeningEngine

from helpers.utils import catalog_path, load_yaml


@pytest.fixture
def yml():
    return load_yaml


@pytest.fixture(scope="session")
def raw_sections():
    """The catalog file parsed as plain YAML, without model validation."""
    return load_yaml(catalog_path())


@pytest.fixture(scope="session")
def catalog():
    """Load the packaged QuestionnaireCatalog once for the entire test session."""
    c = QuestionnaireCatalog()
    c.load()
    return c


@pytest.fixture
def engine(catalog):
    """Fresh ScreeningEngine (empty in-memory repository) per test."""
    return ScreeningEngine(catalog)
