"""
===============================================================================
TARJETA CRC — domain/audit.py
===============================================================================

Módulo:
    Modelos de Auditoría (Dominio)

Responsabilidades:
    - Definir el catálogo de eventos (AuditEventType).
    - Definir el registro inmutable (AuditRecord) salvo sus details.
    - Formatear la línea durable (append-only) de un registro.

Colaboradores:
    - application.audit_logger: crea y consulta registros.
    - infrastructure.audit_sink: persiste format_audit_line(record).

Notas:
    - Auditoría es append-only (no se edita ni se borra).
    - details es flexible (str -> str) y solo crece.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4


class AuditEventType(str, Enum):
    ACCESS_ATTEMPT = "ACCESS_ATTEMPT"
    CARD_CREATION = "CARD_CREATION"
    CARD_MODIFICATION = "CARD_MODIFICATION"
    CARD_REVOCATION = "CARD_REVOCATION"


@dataclass(frozen=True, slots=True)
class AuditRecord:
    """Registro de auditoría (inmutable salvo details)."""

    event_type: AuditEventType
    card_id: str
    outcome: bool
    timestamp: datetime
    location: str | None = None
    actor_id: str | None = None
    details: dict[str, str] = field(default_factory=dict)
    id: UUID = field(default_factory=uuid4)

    def add_detail(self, key: str, value: str) -> None:
        self.details[key] = value


def format_audit_line(record: AuditRecord) -> str:
    """
    yyyy-MM-dd HH:mm:ss | EVENT | Card: id | [Location: x |] [User: u |]
    Outcome: SUCCESS|FAILURE[ | key: value]*
    """
    parts = [
        f"{record.timestamp:%Y-%m-%d %H:%M:%S}",
        record.event_type.value,
        f"Card: {record.card_id}",
    ]
    if record.location:
        parts.append(f"Location: {record.location}")
    if record.actor_id:
        parts.append(f"User: {record.actor_id}")
    parts.append(f"Outcome: {'SUCCESS' if record.outcome else 'FAILURE'}")
    parts.extend(f"{key}: {value}" for key, value in record.details.items())
    return " | ".join(parts)
