"""In-memory repository implementations."""

from .card_repository import InMemoryCardRepository

__all__ = ["InMemoryCardRepository"]
