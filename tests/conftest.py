"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pathshala.config import get_settings
from pathshala.core.models import (
    Difficulty,
    FavoriteStoryRecord,
    Language,
    LetterProgressRecord,
    Operation,
    PracticeResultRecord,
)
from pathshala.storage.record_store import MemoryRecordStore

# Fixed "now" for analytics tests; late morning UTC keeps nearby minutes on one local date
FIXED_NOW = datetime(2024, 3, 15, 11, 30, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture
def rng():
    """Seeded random source for reproducible generation."""
    return random.Random(1234)


@pytest.fixture
def memory_store():
    """Empty in-memory record store."""
    return MemoryRecordStore()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def make_score():
    """Factory for math session records."""

    def _make(correct=7, total=10, when=FIXED_NOW, operation=Operation.ADDITION,
              difficulty=Difficulty.EASY):
        return PracticeResultRecord(
            operation=operation,
            difficulty=difficulty,
            correct_count=correct,
            total_attempted=total,
            timestamp=when,
        )

    return _make


@pytest.fixture
def make_letter():
    """Factory for letter progress records."""

    def _make(letter_id="A", completed=True, when=FIXED_NOW, language=Language.ENGLISH):
        return LetterProgressRecord(
            letter_id=letter_id, language=language, completed=completed, timestamp=when
        )

    return _make


@pytest.fixture
def make_story():
    def _make(title="The Brave Cat", when=FIXED_NOW):
        return FavoriteStoryRecord(title=title, content="Once upon a time...", words=["cat"], timestamp=when)

    return _make


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary data directory."""
    monkeypatch.setenv("PATHSHALA_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("PATHSHALA_DATABASE_URL", raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
