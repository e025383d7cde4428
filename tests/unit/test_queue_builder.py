"""
Unit tests for Queue and QueueBuilder.build.

The builder's bucket lists are filled by hand here; storage-backed scans
are covered in tests/integration/test_queue_scan.py.
"""

from collections import deque

from conftest import StubScheduler

from flashdeck.scheduling.card import CardQueue, FlashCard, MemoryState
from flashdeck.scheduling.queue import Queue, QueueBuilder, QueueEntry, Stats
from flashdeck.scheduling.states import LearningState, NewState, ReviewState


def _card(card_id, queue, due=0, interval=0):
    memory = None if queue is CardQueue.NEW else MemoryState(2.5, 1)
    return FlashCard(
        id=card_id, deck_id=1, front=f"Q{card_id}", back=f"A{card_id}",
        queue=queue, due=due, interval=interval, memory_state=memory,
    )


class TestQueueBuilderBuild:
    """Tests for ordering and stats."""

    def test_review_then_learning_then_new(self):
        builder = QueueBuilder(deck_id=1, scheduler=StubScheduler())
        builder.new = [_card(1, CardQueue.NEW, due=1), _card(2, CardQueue.NEW, due=2)]
        builder.learning = [_card(3, CardQueue.LEARNING)]
        builder.review = [_card(4, CardQueue.REVIEW, due=5, interval=3), _card(5, CardQueue.REVIEW, due=6)]

        queue = builder.build()

        assert [e.card_id for e in queue.core] == [4, 5, 3, 1, 2]
        assert queue.stats == Stats(new=2, learning=1, review=2)
        assert len(queue) == queue.stats.total

    def test_entries_carry_current_state(self):
        builder = QueueBuilder(deck_id=1, scheduler=StubScheduler())
        builder.new = [_card(1, CardQueue.NEW, due=9)]
        builder.learning = [_card(2, CardQueue.LEARNING)]
        builder.review = [_card(3, CardQueue.REVIEW, interval=4)]

        currents = [e.states.current for e in builder.build().core]

        assert currents == [
            ReviewState(4, MemoryState(2.5, 1)),
            LearningState(MemoryState(2.5, 1)),
            NewState(9),
        ]

    def test_scheduler_called_once_per_card(self):
        scheduler = StubScheduler()
        builder = QueueBuilder(deck_id=1, scheduler=scheduler)
        builder.new = [_card(i, CardQueue.NEW, due=i) for i in range(1, 4)]

        builder.build()

        assert scheduler.calls == [NewState(1), NewState(2), NewState(3)]

    def test_empty_deck(self):
        queue = QueueBuilder(deck_id=1, scheduler=StubScheduler()).build()
        assert queue.is_empty
        assert queue.stats == Stats(0, 0, 0)


class TestQueue:
    """Tests for front pop and reinsertion."""

    def _entries(self, n):
        scheduler = StubScheduler()
        return [QueueEntry(i, scheduler.next_states(NewState(i))) for i in range(n)]

    def test_pop_front_in_order(self):
        entries = self._entries(3)
        queue = Queue(core=deque(entries))

        assert queue.pop_front() == entries[0]
        assert queue.pop_front() == entries[1]
        assert len(queue) == 1

    def test_pop_front_when_empty(self):
        assert Queue().pop_front() is None

    def test_push_back_and_front(self):
        first, second, third = self._entries(3)
        queue = Queue()
        queue.push_back(second)
        queue.push_back(third)
        queue.push_front(first)

        assert [e.card_id for e in queue.core] == [0, 1, 2]
