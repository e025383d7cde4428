"""
Due-card queue for a deck.

Cards are scanned bucket by bucket, then laid out Review first, Learning
second and New last, each entry tagged with its four successor states so the
host can show interval previews without calling the scheduler again.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from flashdeck.db.database import SqliteStorage
from flashdeck.db.repository import for_each_card_in_deck
from flashdeck.errors import StorageError
from flashdeck.scheduling.card import CardQueue, FlashCard
from flashdeck.scheduling.states import Scheduler, SchedulingStates, get_current_card_state

if TYPE_CHECKING:
    from flashdeck.scheduling.collection import Collection

SCAN_ORDER = (CardQueue.NEW, CardQueue.LEARNING, CardQueue.REVIEW)


@dataclass(frozen=True)
class Stats:
    new: int = 0
    learning: int = 0
    review: int = 0

    @property
    def total(self) -> int:
        return self.new + self.learning + self.review


@dataclass(frozen=True)
class QueueEntry:
    card_id: int
    states: SchedulingStates


@dataclass
class Queue:
    """Ordered due cards plus the bucket counts they were built from."""

    stats: Stats = field(default_factory=Stats)
    core: deque[QueueEntry] = field(default_factory=deque)

    def __len__(self) -> int:
        return len(self.core)

    @property
    def is_empty(self) -> bool:
        return not self.core

    def pop_front(self) -> QueueEntry | None:
        """Remove and return the next entry, or None when the queue is drained."""
        return self.core.popleft() if self.core else None

    def push_front(self, entry: QueueEntry) -> None:
        self.core.appendleft(entry)

    def push_back(self, entry: QueueEntry) -> None:
        self.core.append(entry)


class QueueBuilder:
    """
    Builds a Queue for one deck.

    Usage:
        builder = QueueBuilder(deck_id, scheduler)
        builder.collect_cards(collection)
        queue = builder.build()
    """

    def __init__(self, deck_id: int, scheduler: Scheduler):
        self.deck_id = deck_id
        self.scheduler = scheduler
        self.new: list[FlashCard] = []
        self.learning: list[FlashCard] = []
        self.review: list[FlashCard] = []

    def collect_cards(self, col: Collection) -> None:
        self.collect_from_storage(col.storage)

    def collect_from_storage(self, storage: SqliteStorage) -> None:
        """
        Scan each bucket of the deck.

        A storage failure in one bucket is logged and leaves that bucket
        empty; the remaining buckets are still scanned.
        """
        for queue in SCAN_ORDER:
            bucket = self._bucket(queue)
            bucket.clear()
            try:
                for_each_card_in_deck(storage, self.deck_id, queue, bucket.append)
            except StorageError as e:
                bucket.clear()
                logger.error(
                    f"Error collecting {queue.name.lower()} cards for deck {self.deck_id}: {e}"
                )

        logger.debug(
            f"Collected deck {self.deck_id}: {len(self.review)} review, "
            f"{len(self.learning)} learning, {len(self.new)} new"
        )

    def get_scheduling_states(self, card: FlashCard) -> SchedulingStates:
        return self.scheduler.next_states(get_current_card_state(card))

    def build(self) -> Queue:
        core: deque[QueueEntry] = deque()

        for card in [*self.review, *self.learning, *self.new]:
            core.append(QueueEntry(card_id=card.id, states=self.get_scheduling_states(card)))

        stats = Stats(
            new=len(self.new),
            learning=len(self.learning),
            review=len(self.review),
        )
        logger.info(f"Queue built for deck {self.deck_id}: {stats.total} cards")
        return Queue(stats=stats, core=core)

    def _bucket(self, queue: CardQueue) -> list[FlashCard]:
        if queue == CardQueue.NEW:
            return self.new
        if queue == CardQueue.LEARNING:
            return self.learning
        return self.review
