"""
Collection: applies graded answers to cards.

A Collection owns the storage handle, the timing context computed when it
was opened, and the scheduler used to derive successor states. One
Collection exists per open store; hosts hold it through an AppContext
instead of a process-wide global.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from flashdeck.config import Settings, get_settings
from flashdeck.db.database import MEMORY_PATH, SqliteStorage
from flashdeck.db.repository import load_card, save_card
from flashdeck.errors import UnknownCardStateError
from flashdeck.scheduling.card import Answer, CardQueue, FlashCard
from flashdeck.scheduling.queue import Queue, QueueBuilder
from flashdeck.scheduling.sm2 import SM2Config, SM2Scheduler
from flashdeck.scheduling.states import (
    CardState,
    LearningState,
    NewState,
    ReviewState,
    Scheduler,
    get_current_card_state,
)
from flashdeck.scheduling.timing import SchedTimingToday, timing_for_timestamp


def _epoch_now() -> int:
    return int(time.time())


class CollectionBuilder:
    """Opens a store and assembles a Collection around it."""

    def __init__(
        self,
        col_path: str | Path | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], int] = _epoch_now,
    ):
        self.collection_path = col_path
        self.scheduler = scheduler
        self.clock = clock

    def build(self) -> Collection:
        """
        Open (or create) the collection and compute today's timing.

        Raises:
            StorageError: If the store cannot be opened or initialized
        """
        col_path = str(self.collection_path) if self.collection_path else MEMORY_PATH
        logger.info(f"Opening collection at {col_path}")

        storage = SqliteStorage.open_or_create(col_path)
        try:
            storage.init_schema()
            timing = timing_for_timestamp(storage, self.clock())
        except Exception:  # Intentionally broad - release the engine before re-raising
            storage.close()
            raise

        return Collection(
            storage=storage,
            col_path=col_path,
            timing=timing,
            scheduler=self.scheduler or SM2Scheduler(),
            clock=self.clock,
        )


class Collection:
    """
    Applies answers to cards and builds due queues for one store.

    All storage-touching operations hold ``self.lock`` so a load-modify-save
    in answer_card never interleaves with another answer or a queue scan.
    """

    def __init__(
        self,
        storage: SqliteStorage,
        col_path: str,
        timing: SchedTimingToday,
        scheduler: Scheduler,
        clock: Callable[[], int] = _epoch_now,
    ):
        self.storage = storage
        self.col_path = col_path
        self.timing = timing
        self.scheduler = scheduler
        self.clock = clock
        self.card_queues: Queue | None = None
        self.lock = threading.RLock()

    def apply_state(self, card: FlashCard, next_state: CardState) -> FlashCard:
        """
        Move a card into ``next_state`` in memory. Performs no I/O.

        Raises:
            UnknownCardStateError: If ``next_state`` is not a known variant
        """
        if isinstance(next_state, NewState):
            card.set_queue(CardQueue.NEW)
            card.due = next_state.position
        elif isinstance(next_state, LearningState):
            card.set_queue(CardQueue.LEARNING)
            card.memory_state = next_state.memory_state
        elif isinstance(next_state, ReviewState):
            card.set_queue(CardQueue.REVIEW)
            card.interval = next_state.scheduled_days
            card.due = self.timing.days_elapsed + next_state.scheduled_days
            card.memory_state = next_state.memory_state
        else:
            logger.error(f"No transition rule for state {next_state!r} on card {card.id}")
            raise UnknownCardStateError(
                f"Cannot apply state {type(next_state).__name__} to card {card.id}"
            )
        return card

    def answer_card(self, card_id: int, answer: Answer) -> FlashCard:
        """
        Grade a card and persist its next state.

        Raises:
            NotFoundError: If the card does not exist
            StorageError: If the card cannot be loaded or saved
            DataIntegrityError: If the stored card or chosen state is invalid
        """
        with self.lock:
            card = load_card(card_id, self.storage)

            current_state = get_current_card_state(card)
            next_states = self.scheduler.next_states(current_state)
            self.apply_state(card, next_states.for_answer(answer))

            save_card(card, self.storage)

        logger.debug(
            f"Answered card {card_id} {answer.name}: queue={card.queue.name}, "
            f"due={card.due}, interval={card.interval}"
        )
        return card

    def build_queue(self, deck_id: int) -> Queue:
        """Build and remember the due queue for a deck."""
        with self.lock:
            builder = QueueBuilder(deck_id, self.scheduler)
            builder.collect_cards(self)
            self.card_queues = builder.build()
            return self.card_queues

    def refresh_timing(self, now: int | None = None) -> SchedTimingToday:
        """Recompute the timing context, e.g. after crossing a day boundary."""
        with self.lock:
            self.timing = timing_for_timestamp(
                self.storage, self.clock() if now is None else now
            )
            return self.timing

    def close(self) -> None:
        with self.lock:
            self.card_queues = None
            self.storage.close()


class AppContext:
    """
    Owns the single Collection for a host application.

    Usage:
        with AppContext.open() as ctx:
            ctx.collection.answer_card(card_id, Answer.GOOD)
    """

    def __init__(self, collection: Collection, settings: Settings):
        self.collection = collection
        self.settings = settings
        self._closed = False

    @classmethod
    def open(
        cls,
        settings: Settings | None = None,
        clock: Callable[[], int] = _epoch_now,
    ) -> AppContext:
        settings = settings or get_settings()
        scheduler = SM2Scheduler(SM2Config.from_settings(settings))
        collection = CollectionBuilder(settings.database_path, scheduler, clock).build()
        return cls(collection, settings)

    def close(self) -> None:
        if not self._closed:
            self.collection.close()
            self._closed = True

    def __enter__(self) -> AppContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
