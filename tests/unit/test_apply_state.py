"""
Unit tests for Collection.apply_state.

apply_state is a pure transform of (card, successor) -> card, so these
tests never touch storage.
"""

from dataclasses import dataclass

import pytest

from flashdeck.errors import DataIntegrityError, UnknownCardStateError
from flashdeck.scheduling.card import CardQueue, FlashCard, MemoryState
from flashdeck.scheduling.states import LearningState, NewState, ReviewState


@dataclass(frozen=True)
class RelearningState:
    """A successor variant the collection has no rule for."""

    memory_state: MemoryState


@pytest.fixture
def collection(make_collection, stub_scheduler):
    return make_collection(stub_scheduler, days_elapsed=5)


class TestApplyState:
    """Tests for each successor variant."""

    def test_review_sets_due_from_days_elapsed(self, collection, sample_card):
        memory = MemoryState(2.6, 3)
        collection.apply_state(sample_card, ReviewState(scheduled_days=10, memory_state=memory))

        assert sample_card.queue is CardQueue.REVIEW
        assert sample_card.due == 15
        assert sample_card.interval == 10
        assert sample_card.memory_state == memory

    def test_learning_keeps_due_and_interval(self, collection, sample_card):
        memory = MemoryState(1.96, 0)
        collection.apply_state(sample_card, LearningState(memory_state=memory))

        assert sample_card.queue is CardQueue.LEARNING
        assert sample_card.memory_state == memory
        assert sample_card.due == 3
        assert sample_card.interval == 3

    def test_new_sets_position(self, collection, sample_card):
        collection.apply_state(sample_card, NewState(position=12))

        assert sample_card.queue is CardQueue.NEW
        assert sample_card.due == 12
        assert sample_card.interval == 3
        assert sample_card.memory_state == MemoryState(2.5, 2)

    def test_returns_same_card(self, collection, sample_card):
        assert collection.apply_state(sample_card, NewState(position=1)) is sample_card

    def test_unknown_variant_raises_and_logs(self, collection, sample_card, log_records):
        before = FlashCard(**vars(sample_card))

        with pytest.raises(UnknownCardStateError):
            collection.apply_state(sample_card, RelearningState(MemoryState(2.0, 0)))

        assert sample_card == before
        errors = [r for r in log_records if r["level"].name == "ERROR"]
        assert len(errors) == 1
        assert "RelearningState" in errors[0]["message"]

    def test_unknown_variant_is_integrity_error(self):
        assert issubclass(UnknownCardStateError, DataIntegrityError)

    def test_review_due_at_day_zero(self, make_collection, stub_scheduler, sample_card):
        collection = make_collection(stub_scheduler, days_elapsed=0)
        collection.apply_state(sample_card, ReviewState(scheduled_days=1, memory_state=None))
        assert sample_card.due == 1
