"""
Card data classes for the scheduling core.

A FlashCard is the in-memory view of one row in the ``cards`` table. The
scheduling core mutates it in place and hands it back to storage to persist.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any

from flashdeck.errors import DataIntegrityError


class CardQueue(IntEnum):
    """Lifecycle bucket a card currently sits in."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2

    @classmethod
    def from_raw(cls, value: int) -> CardQueue:
        """Convert a persisted integer, rejecting values outside the known set."""
        try:
            return cls(value)
        except ValueError as e:
            raise DataIntegrityError(f"Unknown card queue value: {value!r}") from e


class Answer(IntEnum):
    """User grade for a recall attempt."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: str) -> Answer:
        """Accept a grade name ("good") or number ("3")."""
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        return cls[text.upper()]


@dataclass(frozen=True)
class MemoryState:
    """
    Scheduler-owned memory payload.

    The collection and queue only carry it forward; only the scheduler
    reads its fields.
    """

    easiness_factor: float
    repetitions: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> MemoryState | None:
        if data is None:
            return None
        return cls(
            easiness_factor=float(data["easiness_factor"]),
            repetitions=int(data.get("repetitions", 0)),
        )


@dataclass
class FlashCard:
    """A single flashcard and its scheduling fields."""

    id: int | None
    deck_id: int
    front: str
    back: str
    queue: CardQueue = CardQueue.NEW
    due: int = 0  # New: ordering position, Review: absolute day index
    interval: int = 0  # Days until next review (Review only)
    memory_state: MemoryState | None = None

    def set_queue(self, queue: CardQueue) -> None:
        self.queue = queue
