"""
SM-2 Spaced Repetition Scheduler.

Default Scheduler implementation. Computes all four successor states for a
card in one pass so the queue can carry them alongside each entry.

Grade to SM-2 quality mapping:
    Again -> 1  (incorrect, remembered once shown)
    Hard  -> 3  (correct with significant difficulty)
    Good  -> 4  (correct with some hesitation)
    Easy  -> 5  (perfect recall)
"""

from __future__ import annotations

from dataclasses import dataclass

from flashdeck.config import Settings
from flashdeck.scheduling.card import Answer, MemoryState
from flashdeck.scheduling.states import (
    CardState,
    LearningState,
    NewState,
    ReviewState,
    SchedulingStates,
)

SM2_QUALITY = {
    Answer.AGAIN: 1,
    Answer.HARD: 3,
    Answer.GOOD: 4,
    Answer.EASY: 5,
}


@dataclass(frozen=True)
class SM2Config:
    """Configuration for SM-2 algorithm."""

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days for first review
    easy_interval: int = 4  # Days for first review when a new card is Easy
    hard_factor: float = 1.2
    easy_bonus: float = 1.3

    @classmethod
    def from_settings(cls, settings: Settings) -> SM2Config:
        return cls(**settings.get_scheduler_config())


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    Memory state per card:
    - Easiness Factor (EF): How easy the item is (2.5 default, min 1.3)
    - Repetitions: Consecutive correct recalls

    Review successors always satisfy hard < good < easy in scheduled days.
    """

    def __init__(self, config: SM2Config | None = None):
        self.config = config or SM2Config()

    def next_states(self, current: CardState) -> SchedulingStates:
        if isinstance(current, NewState):
            return self._from_learning(current, None)
        if isinstance(current, LearningState):
            return self._from_learning(current, current.memory_state)
        if isinstance(current, ReviewState):
            return self._from_review(current)
        raise TypeError(f"Unsupported card state: {current!r}")

    def update_memory(self, memory: MemoryState | None, answer: Answer) -> MemoryState:
        """
        Apply the SM-2 easiness and repetition update for one grade.

        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        """
        if memory is None:
            memory = MemoryState(easiness_factor=self.config.initial_easiness)

        q = SM2_QUALITY[answer]
        ef_delta = 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)
        new_ef = max(self.config.minimum_easiness, memory.easiness_factor + ef_delta)

        if q < 3:
            # Failed - reset to beginning
            repetitions = 0
        else:
            repetitions = memory.repetitions + 1

        return MemoryState(easiness_factor=round(new_ef, 4), repetitions=repetitions)

    def _from_learning(
        self, current: CardState, memory: MemoryState | None
    ) -> SchedulingStates:
        cfg = self.config
        again = LearningState(self.update_memory(memory, Answer.AGAIN))
        hard = LearningState(self.update_memory(memory, Answer.HARD))

        if isinstance(current, NewState):
            # A new card is seen at least once more before graduating
            good: CardState = LearningState(self.update_memory(memory, Answer.GOOD))
            easy_days = cfg.easy_interval
        else:
            good = ReviewState(cfg.first_interval, self.update_memory(memory, Answer.GOOD))
            easy_days = max(cfg.easy_interval, cfg.first_interval + 1)

        easy = ReviewState(easy_days, self.update_memory(memory, Answer.EASY))
        return SchedulingStates(current=current, again=again, hard=hard, good=good, easy=easy)

    def _from_review(self, current: ReviewState) -> SchedulingStates:
        cfg = self.config
        memory = current.memory_state
        days = max(1, current.scheduled_days)

        again = LearningState(self.update_memory(memory, Answer.AGAIN))

        hard_memory = self.update_memory(memory, Answer.HARD)
        hard_days = max(1, round(days * cfg.hard_factor))

        good_memory = self.update_memory(memory, Answer.GOOD)
        good_days = max(hard_days + 1, round(days * good_memory.easiness_factor))

        easy_memory = self.update_memory(memory, Answer.EASY)
        easy_days = max(
            good_days + 1,
            round(days * easy_memory.easiness_factor * cfg.easy_bonus),
        )

        return SchedulingStates(
            current=current,
            again=again,
            hard=ReviewState(hard_days, hard_memory),
            good=ReviewState(good_days, good_memory),
            easy=ReviewState(easy_days, easy_memory),
        )
