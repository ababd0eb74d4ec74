"""
===============================================================================
TARJETA CRC — schemas/audit.py
===============================================================================

Módulo:
    Schemas HTTP para consultas de auditoría

Responsabilidades:
    - DTOs de response para historial por tarjeta y por ubicación.

Colaboradores:
    - domain.audit.AuditRecord
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class AuditRecordRes(BaseModel):
    """Registro de auditoría serializable (sin id real de tarjeta)."""

    id: UUID
    event_type: str
    location: str | None = None
    actor_id: str | None = None
    outcome: bool
    timestamp: datetime
    details: dict[str, str] = Field(default_factory=dict)


class AuditRecordsRes(BaseModel):
    records: list[AuditRecordRes]
