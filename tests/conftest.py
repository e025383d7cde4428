"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest
from loguru import logger

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from flashdeck.db import SqliteStorage, add_card, create_deck  # noqa: E402
from flashdeck.scheduling.card import CardQueue, FlashCard, MemoryState  # noqa: E402
from flashdeck.scheduling.collection import Collection  # noqa: E402
from flashdeck.scheduling.states import (  # noqa: E402
    LearningState,
    ReviewState,
    SchedulingStates,
)
from flashdeck.scheduling.timing import SchedTimingToday  # noqa: E402

T0 = 1_700_000_000


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory SQLite)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class StubScheduler:
    """Scheduler returning fixed successors, recording every state it is asked about."""

    def __init__(self, again=None, hard=None, good=None, easy=None):
        self.again = again or LearningState(MemoryState(1.96, 0))
        self.hard = hard or ReviewState(2, MemoryState(2.36, 1))
        self.good = good or ReviewState(5, MemoryState(2.5, 1))
        self.easy = easy or ReviewState(10, MemoryState(2.6, 1))
        self.calls = []

    def next_states(self, current):
        self.calls.append(current)
        return SchedulingStates(
            current=current,
            again=self.again,
            hard=self.hard,
            good=self.good,
            easy=self.easy,
        )


@pytest.fixture
def storage():
    """Fresh in-memory collection storage with schema."""
    store = SqliteStorage.open_or_create(":memory:")
    store.init_schema()
    yield store
    store.close()


@pytest.fixture
def deck_id(storage):
    return create_deck(storage, "Networking")


@pytest.fixture
def stub_scheduler():
    return StubScheduler()


@pytest.fixture
def make_collection(storage):
    """Build a Collection over the storage fixture with a fixed day index."""

    def _make(scheduler, days_elapsed=5):
        timing = SchedTimingToday(
            now=T0 + days_elapsed * 86_400,
            days_elapsed=days_elapsed,
            next_day_at=days_elapsed + 1,
        )
        return Collection(
            storage=storage,
            col_path=":memory:",
            timing=timing,
            scheduler=scheduler,
        )

    return _make


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def sample_card():
    """Provide an unsaved review card for pure transform tests."""
    return FlashCard(
        id=42,
        deck_id=1,
        front="What does TCP stand for?",
        back="Transmission Control Protocol",
        queue=CardQueue.REVIEW,
        due=3,
        interval=3,
        memory_state=MemoryState(2.5, 2),
    )


def seed_cards(storage, deck_id, count, front_prefix="Q"):
    """Insert ``count`` new cards and return them in insertion order."""
    return [
        add_card(storage, deck_id, f"{front_prefix}{i}", f"A{i}") for i in range(count)
    ]

