from pathlib import Path

import pytest

from pipeline.session import AnalysisSession
from settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_STREAM = FIXTURES_DIR / "sample_stream.jsonl"


@pytest.fixture
def sample_stream() -> Path:
    """Recorded event stream of one successful analysis, with two junk lines."""
    return SAMPLE_STREAM


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a server that unit tests never actually reach."""
    return Settings(ws_base_url="ws://analysis.test:8000", open_timeout=1.0)


@pytest.fixture
def session() -> AnalysisSession:
    return AnalysisSession()
