"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/card_repository.py
============================================================
Class: InMemoryCardRepository

Responsibilities:
  - Almacenar tarjetas en memoria (id real -> AccessCard).
  - Índice secundario facade id -> id real (lookup del borde de decisión).
  - Mantener orden de inserción determinístico en list_cards.

Collaborators:
  - domain.cards.AccessCard
  - domain.repositories.CardRepository (contrato a implementar)
  - application.card_management / application.access_control

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - save() con el mismo id real reemplaza (así se aplican los cambios de
    permisos, que producen una tarjeta nueva con la misma identidad).
  - Los facade ids de una tarjeta nunca cambian: el índice se actualiza
    solo al insertar/eliminar.
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, List, Optional

from ....domain.cards import AccessCard
from ....domain.repositories import CardRepository


class InMemoryCardRepository(CardRepository):
    """Repositorio in-memory, thread-safe, para tarjetas."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._cards: Dict[str, AccessCard] = {}
        self._by_facade: Dict[str, str] = {}

    def save(self, card: AccessCard) -> None:
        with self._lock:
            self._cards[card.real_id] = card
            for facade_id in card.facade_ids:
                self._by_facade[facade_id] = card.real_id

    def get(self, card_id: str) -> Optional[AccessCard]:
        with self._lock:
            return self._cards.get(card_id)

    def find_by_facade_id(self, facade_id: str) -> Optional[AccessCard]:
        with self._lock:
            real_id = self._by_facade.get(facade_id)
            return self._cards.get(real_id) if real_id is not None else None

    def delete(self, card_id: str) -> bool:
        with self._lock:
            card = self._cards.pop(card_id, None)
            if card is None:
                return False
            for facade_id in card.facade_ids:
                self._by_facade.pop(facade_id, None)
            return True

    def list_cards(self) -> List[AccessCard]:
        with self._lock:
            return list(self._cards.values())
