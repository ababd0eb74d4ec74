"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for the domain layer (ports).
- Keep application/domain independent from infrastructure (file sink, in-memory).
- Enable dependency inversion and straightforward unit testing (mock/stub).

Collaborators
- domain.cards: AccessCard
- domain.audit: AuditRecord
- infrastructure.repositories.in_memory: card repository
- infrastructure.audit_sink: FileAuditSink
- application.daily_quota: DailyAccessLedger

Constraints
- Pure interfaces only: no side effects, no infrastructure imports.
- Implementations MUST match method signatures exactly.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- Lookups return None for unknown ids (not-found is never an exception here).
"""

from datetime import date, datetime, time
from typing import List, Optional, Protocol

from .audit import AuditRecord
from .cards import AccessCard


class CardRepository(Protocol):
    """
    R: Interface for card persistence (card lookup collaborator).

    Implementations must provide:
      - Lookup by real id and by any facade id
      - Replace-on-save semantics (same real id overwrites)
    """

    def save(self, card: AccessCard) -> None:
        """R: Persist (or replace) a card by its real id."""
        ...

    def get(self, card_id: str) -> Optional[AccessCard]:
        """R: Card by real id, or None."""
        ...

    def find_by_facade_id(self, facade_id: str) -> Optional[AccessCard]:
        """R: Card owning this facade id, or None."""
        ...

    def delete(self, card_id: str) -> bool:
        """R: Remove a card; False if it did not exist."""
        ...

    def list_cards(self) -> List[AccessCard]:
        """R: All cards in insertion order."""
        ...


class AuditSink(Protocol):
    """R: Durable append-only destination for audit records."""

    def append(self, record: AuditRecord) -> None:
        """R: Fire-and-forget; must never raise into the caller."""
        ...


class AccessLedger(Protocol):
    """R: Per-card, per-day record of successful restricted-floor accesses."""

    def count_for_day(self, card_id: str, day: date) -> int:
        """R: Accesses recorded for card on that day."""
        ...

    def record(self, card_id: str, at: datetime) -> int:
        """R: Record one access; returns the new count for that day."""
        ...

    def try_record(self, card_id: str, at: datetime, limit: int) -> bool:
        """R: Atomically record one access if the day count is below limit."""
        ...

    def accesses_for_day(self, card_id: str, day: date) -> List[time]:
        """R: Times recorded for card on that day (insertion order)."""
        ...
