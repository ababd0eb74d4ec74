"""
===============================================================================
TARJETA CRC — application/card_factory.py
===============================================================================

Componente:
  CardFactory (+ build_card_factory)

Responsabilidades:
  - Generar el id real desde CardIdentifier (ISS-serie-yyyyMMdd).
  - Derivar facade ids (1..N) desde el id real.
  - Variante segura (composición, no herencia): aplicar el sufijo de
    obfuscación al id real y a cada facade id.
  - Registrar CARD_CREATION (actor SYSTEM / SYSTEM-SECURE o el emisor).

Colaboradores:
  - domain.cards: CardIdentifier, AccessCard
  - identity.facade_ids: derive_facade_ids, obfuscate_id
  - domain.services.AuditLogger (opcional)
  - crosscutting.config.Settings (selección de variante)

Errores:
  - DigestUnavailableError si el algoritmo de facade no existe: la creación
    se aborta (sin tarjeta y sin registro de auditoría).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.cards import AccessCard, CardIdentifier
from ..domain.permissions import Permission
from ..domain.services import AuditLogger
from ..identity.facade_ids import DEFAULT_ALGORITHM, derive_facade_ids, obfuscate_id

SYSTEM_ACTOR = "SYSTEM"
SECURE_SYSTEM_ACTOR = "SYSTEM-SECURE"


class CardFactory:
    """Fábrica de tarjetas estándar o segura según `secure`."""

    def __init__(
        self,
        audit_logger: AuditLogger | None = None,
        *,
        secure: bool = False,
        facade_id_count: int = 1,
        algorithm: str = DEFAULT_ALGORITHM,
    ) -> None:
        if facade_id_count < 1:
            raise ValueError("facade_id_count must be >= 1")
        self._audit_logger = audit_logger
        self._secure = secure
        self._facade_id_count = facade_id_count
        self._algorithm = algorithm

    @property
    def secure(self) -> bool:
        return self._secure

    def generate_card_id(self, identifier: CardIdentifier) -> str:
        card_id = identifier.to_card_id()
        if self._secure:
            card_id = obfuscate_id(card_id)
        return card_id

    def generate_facade_ids(self, real_id: str) -> tuple[str, ...]:
        facade_ids = derive_facade_ids(real_id, self._facade_id_count, self._algorithm)
        if self._secure:
            facade_ids = tuple(obfuscate_id(f) for f in facade_ids)
        return facade_ids

    def create_card(
        self,
        identifier: CardIdentifier,
        permission: Permission,
        *,
        created_by: str | None = None,
        now: datetime | None = None,
    ) -> AccessCard:
        real_id = self.generate_card_id(identifier)
        facade_ids = self.generate_facade_ids(real_id)
        created_at = now or datetime.now(timezone.utc)

        card = AccessCard(real_id, facade_ids, permission, created_at=created_at)

        actor = created_by or (SECURE_SYSTEM_ACTOR if self._secure else SYSTEM_ACTOR)
        if self._audit_logger is not None:
            self._audit_logger.log_card_creation(real_id, actor, created_at)

        logger.info(
            "Tarjeta creada",
            extra={
                "facade_id": card.primary_facade_id,
                "facade_id_count": len(facade_ids),
                "secure": self._secure,
            },
        )
        return card


def build_card_factory(
    settings: Settings, audit_logger: AuditLogger | None = None
) -> CardFactory:
    return CardFactory(
        audit_logger,
        secure=settings.secure_card_ids,
        facade_id_count=settings.facade_id_count,
        algorithm=settings.facade_hash_algorithm,
    )
