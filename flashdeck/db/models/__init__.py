# SQLAlchemy models
from .base import Base
from .collection import CardRecord, CollectionMeta, Deck

__all__ = [
    "Base",
    "CardRecord",
    "CollectionMeta",
    "Deck",
]
