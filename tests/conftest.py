import pytest
from pathlib import Path

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixture_path():
    """Returns the path of a Program.cs fixture by stem, e.g. 'simple'."""
    def _path(name: str) -> Path:
        return FIXTURES / f"{name}.cs"
    return _path


@pytest.fixture
def fixture_source(fixture_path):
    def _source(name: str) -> str:
        return fixture_path(name).read_text(encoding="utf-8")
    return _source
