"""
===============================================================================
SERVICE: Card Management (emisión / permisos / revocación)
===============================================================================

Business Goal:
    Administrar el ciclo de vida de las tarjetas: emitirlas, reemplazar sus
    permisos, revocarlas/reactivarlas y resolverlas por facade id.

-------------------------------------------------------------------------------
CRC CARD (Class-Responsibility-Collaborator)
-------------------------------------------------------------------------------
Class:
    CardManagementService

Responsibilities:
    - issue_card: crear vía CardFactory (registra CARD_CREATION) y persistir.
    - modify_permissions: reemplazar la tarjeta guardada por
      card.with_permission(...) y registrar CARD_MODIFICATION.
    - revoke_card / reactivate_card: cambiar `active` y auditar.
    - find_card_by_facade_id / get_card: lookups (None si no existe).

Collaborators:
    - domain.repositories.CardRepository
    - application.card_factory.CardFactory
    - domain.services.AuditLogger

-------------------------------------------------------------------------------
BUSINESS RULES
-------------------------------------------------------------------------------
R1) Tarjeta desconocida NO es excepción: modify -> None, revoke -> False.
R2) Cambiar permisos nunca muta el permiso compartido: se crea una tarjeta
    nueva con la misma identidad (id real, facade ids, creación, último uso).
R3) set_active no audita por sí mismo; este servicio es quien registra.
R4) Emitir un id real ya registrado es un conflicto (CardAlreadyExistsError);
    la tarjeta existente, activa o revocada, nunca se reemplaza.
R5) Las mutaciones (emitir, modificar, revocar, reactivar) se serializan con
    un lock propio: un reemplazo de permisos no pisa una revocación concurrente.
===============================================================================
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable

from ..crosscutting.exceptions import CardAlreadyExistsError
from ..crosscutting.logger import logger
from ..domain.cards import AccessCard, CardIdentifier
from ..domain.permissions import Permission
from ..domain.repositories import CardRepository
from ..domain.services import AuditLogger
from .card_factory import CardFactory

Clock = Callable[[], datetime]


class CardManagementService:
    """Application service para el ciclo de vida de tarjetas."""

    def __init__(
        self,
        repository: CardRepository,
        factory: CardFactory,
        audit_logger: AuditLogger,
        *,
        clock: Clock,
    ) -> None:
        self._cards = repository
        self._factory = factory
        self._audit = audit_logger
        self._clock = clock
        self._lock = threading.Lock()

    def issue_card(
        self,
        identifier: CardIdentifier,
        permission: Permission,
        *,
        issued_by: str | None = None,
    ) -> AccessCard:
        with self._lock:
            real_id = self._factory.generate_card_id(identifier)
            if self._cards.get(real_id) is not None:
                logger.warning("Issue card: real id already registered")
                raise CardAlreadyExistsError("Card already exists for this identifier")
            card = self._factory.create_card(
                identifier, permission, created_by=issued_by, now=self._clock()
            )
            self._cards.save(card)
        return card

    def modify_permissions(
        self, card_id: str, permission: Permission, *, modified_by: str
    ) -> AccessCard | None:
        with self._lock:
            card = self._cards.get(card_id)
            if card is None:
                logger.info("Modify permissions: card not found")
                return None

            updated = card.with_permission(permission)
            self._cards.save(updated)
        self._audit.log_card_modification(
            card_id, modified_by, permission.describe(), self._clock()
        )
        return updated

    def revoke_card(self, card_id: str, *, revoked_by: str) -> bool:
        with self._lock:
            card = self._cards.get(card_id)
            if card is None:
                logger.info("Revoke card: card not found")
                return False

            card.set_active(False)
        self._audit.log_card_revocation(card_id, revoked_by, self._clock())
        return True

    def reactivate_card(self, card_id: str, *, modified_by: str) -> bool:
        with self._lock:
            card = self._cards.get(card_id)
            if card is None:
                return False

            card.set_active(True)
        self._audit.log_card_modification(
            card_id, modified_by, "reactivated", self._clock()
        )
        return True

    def find_card_by_facade_id(self, facade_id: str) -> AccessCard | None:
        return self._cards.find_by_facade_id(facade_id)

    def get_card(self, card_id: str) -> AccessCard | None:
        return self._cards.get(card_id)

    def list_cards(self) -> list[AccessCard]:
        return self._cards.list_cards()
