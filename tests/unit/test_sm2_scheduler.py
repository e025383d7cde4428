"""
Unit tests for the SM-2 scheduler.

Tests successor shapes per bucket, determinism, and the interval ordering
the queue relies on.
"""

import pytest

from flashdeck.config import Settings
from flashdeck.scheduling.card import Answer, MemoryState
from flashdeck.scheduling.sm2 import SM2Config, SM2Scheduler
from flashdeck.scheduling.states import LearningState, NewState, ReviewState


@pytest.fixture
def scheduler():
    return SM2Scheduler()


class TestUpdateMemory:
    """Tests for the easiness/repetition update."""

    def test_missing_memory_starts_at_initial_easiness(self, scheduler):
        memory = scheduler.update_memory(None, Answer.GOOD)
        assert memory == MemoryState(easiness_factor=2.5, repetitions=1)

    def test_easy_raises_easiness(self, scheduler):
        memory = scheduler.update_memory(MemoryState(2.5, 2), Answer.EASY)
        assert memory.easiness_factor == pytest.approx(2.6)
        assert memory.repetitions == 3

    def test_hard_lowers_easiness(self, scheduler):
        memory = scheduler.update_memory(MemoryState(2.5, 2), Answer.HARD)
        assert memory.easiness_factor == pytest.approx(2.36)
        assert memory.repetitions == 3

    def test_again_resets_repetitions(self, scheduler):
        memory = scheduler.update_memory(MemoryState(2.5, 4), Answer.AGAIN)
        assert memory.repetitions == 0
        assert memory.easiness_factor == pytest.approx(1.96)

    def test_easiness_floor(self, scheduler):
        memory = scheduler.update_memory(MemoryState(1.4, 0), Answer.AGAIN)
        assert memory.easiness_factor == pytest.approx(1.3)


class TestNextStates:
    """Tests for successor states per bucket."""

    def test_new_card_good_stays_in_learning(self, scheduler):
        states = scheduler.next_states(NewState(position=3))
        assert states.current == NewState(position=3)
        assert isinstance(states.again, LearningState)
        assert isinstance(states.hard, LearningState)
        assert isinstance(states.good, LearningState)
        assert states.easy == ReviewState(4, MemoryState(2.6, 1))

    def test_learning_card_good_graduates(self, scheduler):
        states = scheduler.next_states(LearningState(MemoryState(2.5, 1)))
        assert isinstance(states.again, LearningState)
        assert isinstance(states.hard, LearningState)
        assert states.good == ReviewState(1, MemoryState(2.5, 2))
        assert states.easy.scheduled_days == 4

    def test_review_again_relearns(self, scheduler):
        states = scheduler.next_states(ReviewState(10, MemoryState(2.5, 3)))
        assert states.again == LearningState(MemoryState(1.96, 0))

    @pytest.mark.parametrize("days", [0, 1, 2, 3, 10, 45, 365])
    @pytest.mark.parametrize("easiness", [1.3, 1.8, 2.5, 3.2])
    def test_review_intervals_increase_with_grade(self, scheduler, days, easiness):
        states = scheduler.next_states(ReviewState(days, MemoryState(easiness, 3)))
        hard = states.hard.scheduled_days
        good = states.good.scheduled_days
        easy = states.easy.scheduled_days
        assert 1 <= hard < good < easy

    def test_review_without_memory_state(self, scheduler):
        states = scheduler.next_states(ReviewState(5, None))
        assert states.good.memory_state == MemoryState(2.5, 1)

    def test_deterministic(self, scheduler):
        state = ReviewState(7, MemoryState(2.2, 5))
        assert scheduler.next_states(state) == scheduler.next_states(state)

    def test_unknown_state_rejected(self, scheduler):
        with pytest.raises(TypeError):
            scheduler.next_states(object())


class TestSM2Config:
    """Tests for building config from settings."""

    def test_from_settings(self):
        settings = Settings(first_interval=2, easy_interval=6, hard_factor=1.5)
        config = SM2Config.from_settings(settings)
        assert config.first_interval == 2
        assert config.easy_interval == 6
        assert config.hard_factor == 1.5
        assert config.initial_easiness == 2.5

    def test_custom_config_changes_graduation(self):
        scheduler = SM2Scheduler(SM2Config(first_interval=3, easy_interval=3))
        states = scheduler.next_states(LearningState(MemoryState(2.5, 1)))
        assert states.good.scheduled_days == 3
        # Easy must still beat Good
        assert states.easy.scheduled_days == 4
