"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/interfaces.
    - Mantener estable el "surface area" del dominio.

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .audit import AuditEventType, AuditRecord, format_audit_line
from .cards import AccessCard, CardIdentifier
from .floor_policy import (
    FloorAccessPolicy,
    HighFloorAccessPolicy,
    LowFloorAccessPolicy,
    MediumFloorAccessPolicy,
)
from .floors import Floor, parse_floor
from .permissions import Permission, SimplePermission, TimeLimitedPermission
from .repositories import AccessLedger, AuditSink, CardRepository
from .services import AuditLogger, TokenValidator

__all__ = [
    "AccessCard",
    "AccessLedger",
    "AuditEventType",
    "AuditLogger",
    "AuditRecord",
    "AuditSink",
    "CardIdentifier",
    "CardRepository",
    "Floor",
    "FloorAccessPolicy",
    "HighFloorAccessPolicy",
    "LowFloorAccessPolicy",
    "MediumFloorAccessPolicy",
    "Permission",
    "SimplePermission",
    "TimeLimitedPermission",
    "TokenValidator",
    "format_audit_line",
    "parse_floor",
]
