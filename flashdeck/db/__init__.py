"""Collection storage: SQLAlchemy models, storage handle, and card queries."""

from .database import MEMORY_PATH, SqliteStorage
from .repository import (
    add_card,
    create_deck,
    for_each_card_in_deck,
    get_creation_stamp,
    list_decks,
    load_card,
    save_card,
    set_creation_stamp,
)

__all__ = [
    "MEMORY_PATH",
    "SqliteStorage",
    "add_card",
    "create_deck",
    "for_each_card_in_deck",
    "get_creation_stamp",
    "list_decks",
    "load_card",
    "save_card",
    "set_creation_stamp",
]
