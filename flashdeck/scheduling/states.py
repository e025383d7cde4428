"""
Card state model.

CardState is a tagged union over the lifecycle buckets. Each variant carries
only the fields that matter for its bucket, and a Scheduler turns one current
state into the four grade-conditioned successors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from flashdeck.errors import DataIntegrityError
from flashdeck.scheduling.card import Answer, CardQueue, FlashCard, MemoryState


@dataclass(frozen=True)
class NewState:
    position: int


@dataclass(frozen=True)
class LearningState:
    memory_state: MemoryState | None


@dataclass(frozen=True)
class ReviewState:
    scheduled_days: int
    memory_state: MemoryState | None


CardState = NewState | LearningState | ReviewState


@dataclass(frozen=True)
class SchedulingStates:
    """The current state plus one successor per grade."""

    current: CardState
    again: CardState
    hard: CardState
    good: CardState
    easy: CardState

    def for_answer(self, answer: Answer) -> CardState:
        """Select the successor matching a grade."""
        if answer is Answer.AGAIN:
            return self.again
        if answer is Answer.HARD:
            return self.hard
        if answer is Answer.GOOD:
            return self.good
        if answer is Answer.EASY:
            return self.easy
        raise ValueError(f"Unknown answer: {answer!r}")


class Scheduler(Protocol):
    """
    Computes successor states for a card.

    Implementations must be pure: the same state always yields the same
    SchedulingStates. Review successors are expected to have non-decreasing
    ``scheduled_days`` across Again, Hard, Good, Easy; queue consumers rely
    on that ordering but it is not checked here.
    """

    def next_states(self, current: CardState) -> SchedulingStates: ...


def get_current_card_state(card: FlashCard) -> CardState:
    """
    Map a persisted card to the state variant of its bucket.

    Raises:
        DataIntegrityError: If the card's queue is not a known bucket
    """
    if card.queue == CardQueue.NEW:
        return NewState(position=card.due)
    if card.queue == CardQueue.LEARNING:
        return LearningState(memory_state=card.memory_state)
    if card.queue == CardQueue.REVIEW:
        return ReviewState(scheduled_days=card.interval, memory_state=card.memory_state)
    raise DataIntegrityError(f"Card {card.id} has unknown queue {card.queue!r}")
