"""
Collection table models.

A collection is one SQLite file holding decks, their cards, and a single
metadata row with the creation stamp all day indices are measured from.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, BigInteger, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Deck(Base):
    """A named group of cards studied together."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    cards: Mapped[list[CardRecord]] = relationship(
        back_populates="deck", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Deck id={self.id} name={self.name!r}>"


class CardRecord(Base):
    """Persisted flashcard with its scheduling fields."""

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(
        ForeignKey("decks.id", ondelete="CASCADE"), nullable=False
    )
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)

    # Scheduling
    queue: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # CardQueue value
    due: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    memory_state: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    deck: Mapped[Deck] = relationship(back_populates="cards")

    __table_args__ = (Index("idx_cards_deck_queue_due", "deck_id", "queue", "due"),)

    def __repr__(self) -> str:
        return f"<CardRecord id={self.id} deck={self.deck_id} queue={self.queue} due={self.due}>"


class CollectionMeta(Base):
    """Single-row table holding collection-wide values."""

    __tablename__ = "collection_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    creation_stamp: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
