"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias y helpers comunes)
===============================================================================

Responsabilidades:
  - Resolver el Container de la app (app.state.container) para Depends.
  - Normalizar timestamps del borde a la zona del sitio.
  - Convertir PermissionReq -> Permission del dominio.
  - Resolver facade id -> tarjeta (404 si no existe).

Patrones aplicados:
  - DRY: helpers chicos, reutilizables entre routers.
  - Fail-fast: validar temprano (input inválido -> 422, nunca "denegado").

Colaboradores:
  - container.Container
  - crosscutting.error_responses (RFC7807 factories)
  - domain.floors.parse_floor / domain.permissions
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, time

from fastapi import Request

from ....container import Container
from ....crosscutting.config import Settings
from ....crosscutting.error_responses import not_found
from ....domain.cards import AccessCard
from ....domain.floors import parse_floor
from ....domain.permissions import Permission, SimplePermission, TimeLimitedPermission
from .schemas.cards import PermissionReq


def get_container(request: Request) -> Container:
    return request.app.state.container


def to_site_time(value: datetime, settings: Settings) -> datetime:
    """Timestamps sin zona se interpretan en la zona horaria del sitio."""
    if value.tzinfo is None:
        return value.replace(tzinfo=settings.site_tz())
    return value


def to_permission(req: PermissionReq, settings: Settings) -> Permission:
    floors = frozenset(parse_floor(f) for f in req.floors)
    rooms = frozenset(r.strip() for r in req.rooms if r.strip())
    if req.kind == "simple":
        return SimplePermission(floors, rooms)
    return TimeLimitedPermission(
        floors,
        rooms,
        to_site_time(req.valid_from, settings),
        to_site_time(req.valid_until, settings),
    )


def issue_datetime(value, settings: Settings) -> datetime:
    """date | None -> datetime (medianoche en la zona del sitio)."""
    if value is None:
        return settings.now()
    return datetime.combine(value, time(0, 0), tzinfo=settings.site_tz())


def require_card(container: Container, facade_id: str) -> AccessCard:
    card = container.card_management.find_card_by_facade_id(facade_id)
    if card is None:
        raise not_found("Tarjeta", facade_id)
    return card
