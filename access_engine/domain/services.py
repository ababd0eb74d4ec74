"""
===============================================================================
TARJETA CRC — domain/services.py
===============================================================================

Módulo:
    Puertos de servicios (Protocols)

Responsabilidades:
    - Definir el contrato del registro de auditoría (AuditLogger), que
      implementan el logger en memoria y todos sus decoradores.
    - Definir el contrato de validación de tokens que consume el borde
      de decisión.

Colaboradores:
    - application.audit_logger: InMemoryAuditLogger + decoradores.
    - identity.tokens.TokenService: implementación de TokenValidator.
    - application.floor_access / card_factory / card_management /
      access_control: consumen estos puertos.

Reglas:
    - SOLO interfaces: nada de implementación.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .audit import AuditRecord


class AuditLogger(Protocol):
    """Contrato del registro de auditoría (componible por decoradores)."""

    def log_access_attempt(
        self,
        card_id: str,
        location: str,
        granted: bool,
        timestamp: datetime,
        details: dict[str, str] | None = None,
    ) -> AuditRecord: ...

    def log_card_creation(
        self, card_id: str, created_by: str, timestamp: datetime
    ) -> AuditRecord: ...

    def log_card_modification(
        self, card_id: str, modified_by: str, modification: str, timestamp: datetime
    ) -> AuditRecord: ...

    def log_card_revocation(
        self, card_id: str, revoked_by: str, timestamp: datetime
    ) -> AuditRecord: ...

    def get_access_history(self, card_id: str) -> list[AuditRecord]: ...

    def get_location_history(
        self, location: str, start: datetime, end: datetime
    ) -> list[AuditRecord]: ...


class TokenValidator(Protocol):
    """Contrato mínimo que necesita el borde de decisión."""

    def is_valid_token(self, card_id: str, token: str) -> bool: ...
