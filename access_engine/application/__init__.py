"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone los puntos de entrada estables de la capa de aplicación:
  - AccessControlService: Decision API (grant_access)
  - FloorAccessService: políticas por piso + restricciones horarias
  - CardFactory / CardManagementService: emisión y ciclo de vida
  - InMemoryAuditLogger + decoradores: registro de auditoría
  - DailyAccessLedger: cupo diario de pisos HIGH
===============================================================================
"""

from .access_control import AccessControlService
from .audit_logger import (
    AuditLoggerDecorator,
    DetailedAuditLoggerDecorator,
    InMemoryAuditLogger,
    MetricsAuditLoggerDecorator,
)
from .card_factory import CardFactory, build_card_factory
from .card_management import CardManagementService
from .daily_quota import DailyAccessLedger
from .floor_access import FloorAccessService, TimeRestriction, build_floor_access_service

__all__ = [
    "AccessControlService",
    "AuditLoggerDecorator",
    "CardFactory",
    "CardManagementService",
    "DailyAccessLedger",
    "DetailedAuditLoggerDecorator",
    "FloorAccessService",
    "InMemoryAuditLogger",
    "MetricsAuditLoggerDecorator",
    "TimeRestriction",
    "build_card_factory",
    "build_floor_access_service",
]
