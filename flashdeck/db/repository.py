"""
Card, deck and creation-stamp persistence.

Every function takes the SqliteStorage handle explicitly and converts
SQLAlchemy failures into StorageError so callers only deal with the
flashdeck error taxonomy.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from flashdeck.db.database import SqliteStorage
from flashdeck.db.models import CardRecord, CollectionMeta, Deck
from flashdeck.errors import NotFoundError, StorageError
from flashdeck.scheduling.card import CardQueue, FlashCard, MemoryState

META_ROW_ID = 1


def _to_card(row: CardRecord) -> FlashCard:
    return FlashCard(
        id=row.id,
        deck_id=row.deck_id,
        front=row.front,
        back=row.back,
        queue=CardQueue.from_raw(row.queue),
        due=row.due,
        interval=row.interval,
        memory_state=MemoryState.from_dict(row.memory_state),
    )


def _memory_to_json(memory: MemoryState | None) -> dict[str, Any] | None:
    return memory.to_dict() if memory is not None else None


# =============================================================================
# Cards
# =============================================================================


def load_card(card_id: int, storage: SqliteStorage) -> FlashCard:
    """
    Load a card by id.

    Raises:
        NotFoundError: If no card has this id
        StorageError: If the query fails
        DataIntegrityError: If the stored queue value is unknown
    """
    try:
        with storage.session_scope() as session:
            row = session.get(CardRecord, card_id)
            if row is None:
                raise NotFoundError("Card", card_id)
            return _to_card(row)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to load card {card_id}: {e}") from e


def save_card(card: FlashCard, storage: SqliteStorage) -> None:
    """
    Write a card's scheduling fields back to its row.

    Raises:
        StorageError: If the card has no row or the write fails
    """
    if card.id is None:
        raise StorageError("Cannot save a card that was never inserted")

    try:
        with storage.session_scope() as session:
            row = session.get(CardRecord, card.id)
            if row is None:
                raise StorageError(f"Card {card.id} no longer exists")
            row.queue = int(card.queue)
            row.due = card.due
            row.interval = card.interval
            row.memory_state = _memory_to_json(card.memory_state)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to save card {card.id}: {e}") from e


def for_each_card_in_deck(
    storage: SqliteStorage,
    deck_id: int,
    queue: CardQueue,
    callback: Callable[[FlashCard], None],
) -> None:
    """
    Stream every card of a deck in one bucket, ordered by due then id.

    The scan runs inside a single transaction so the callback sees a
    consistent snapshot of the bucket.

    Raises:
        StorageError: If the query fails
    """
    stmt = (
        select(CardRecord)
        .where(CardRecord.deck_id == deck_id, CardRecord.queue == int(queue))
        .order_by(CardRecord.due, CardRecord.id)
    )
    try:
        with storage.session_scope() as session:
            for row in session.scalars(stmt):
                callback(_to_card(row))
    except SQLAlchemyError as e:
        raise StorageError(
            f"Failed to scan {queue.name.lower()} cards in deck {deck_id}: {e}"
        ) from e


def add_card(storage: SqliteStorage, deck_id: int, front: str, back: str) -> FlashCard:
    """
    Insert a new card at the end of its deck's new-card order.

    Raises:
        NotFoundError: If the deck does not exist
        StorageError: If the insert fails
    """
    try:
        with storage.session_scope() as session:
            if session.get(Deck, deck_id) is None:
                raise NotFoundError("Deck", deck_id)

            last_position = session.scalar(
                select(func.coalesce(func.max(CardRecord.due), 0)).where(
                    CardRecord.deck_id == deck_id,
                    CardRecord.queue == int(CardQueue.NEW),
                )
            )
            row = CardRecord(
                deck_id=deck_id,
                front=front,
                back=back,
                queue=int(CardQueue.NEW),
                due=last_position + 1,
                interval=0,
                memory_state=None,
            )
            session.add(row)
            session.flush()
            card = _to_card(row)
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to add card to deck {deck_id}: {e}") from e

    logger.debug(f"Added card {card.id} to deck {deck_id} at position {card.due}")
    return card


# =============================================================================
# Decks
# =============================================================================


def create_deck(storage: SqliteStorage, name: str) -> int:
    """Create a deck and return its id."""
    try:
        with storage.session_scope() as session:
            deck = Deck(name=name)
            session.add(deck)
            session.flush()
            deck_id = deck.id
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to create deck {name!r}: {e}") from e

    logger.debug(f"Created deck {deck_id} ({name})")
    return deck_id


def list_decks(storage: SqliteStorage) -> list[dict[str, Any]]:
    """
    List decks with their card counts.

    Returns:
        List of {"id", "name", "cards"} dictionaries ordered by id
    """
    stmt = (
        select(Deck.id, Deck.name, func.count(CardRecord.id))
        .outerjoin(CardRecord, CardRecord.deck_id == Deck.id)
        .group_by(Deck.id, Deck.name)
        .order_by(Deck.id)
    )
    try:
        with storage.session_scope() as session:
            return [
                {"id": deck_id, "name": name, "cards": count}
                for deck_id, name, count in session.execute(stmt)
            ]
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to list decks: {e}") from e


# =============================================================================
# Creation stamp
# =============================================================================


def get_creation_stamp(storage: SqliteStorage) -> int:
    """
    Read the collection's creation stamp (seconds since epoch).

    Raises:
        NotFoundError: If the stamp was never set
        StorageError: If the query fails
    """
    try:
        with storage.session_scope() as session:
            meta = session.get(CollectionMeta, META_ROW_ID)
            if meta is None or meta.creation_stamp is None:
                raise NotFoundError("Creation stamp")
            return meta.creation_stamp
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to read creation stamp: {e}") from e


def set_creation_stamp(storage: SqliteStorage, stamp: int) -> None:
    """Persist the collection's creation stamp, replacing any previous value."""
    try:
        with storage.session_scope() as session:
            meta = session.get(CollectionMeta, META_ROW_ID)
            if meta is None:
                session.add(CollectionMeta(id=META_ROW_ID, creation_stamp=stamp))
            else:
                meta.creation_stamp = stamp
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to write creation stamp: {e}") from e
