"""
===============================================================================
TARJETA CRC — domain/permissions.py
===============================================================================

Módulo:
    Permisos de tarjeta (valor inmutable)

Responsabilidades:
    - Responder pertenencia de pisos/salas (set membership puro).
    - Responder validez temporal (siempre / ventana inclusiva).
    - Describirse en texto corto para el detalle de auditoría.

Colaboradores:
    - domain.cards.AccessCard: conjuga active + permisos + tiempo.
    - application.card_management: reemplaza permisos (nueva tarjeta).

Reglas:
    - Sets vacíos niegan todo.
    - Un permiso temporal NO niega pisos/salas fuera de su ventana:
      quien llama conjuga can_access_floor con is_valid_for_time.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Protocol, runtime_checkable

from ..crosscutting.exceptions import InvalidTimeError
from .floors import Floor


@runtime_checkable
class Permission(Protocol):
    """Contrato de permisos (puro, sin efectos)."""

    def can_access_floor(self, floor: Floor) -> bool: ...

    def can_access_room(self, room: str) -> bool: ...

    def is_valid_for_time(self, t: datetime) -> bool: ...

    def describe(self) -> str: ...


def _names(floors: Iterable[Floor]) -> str:
    return ",".join(sorted(f.name for f in floors)) or "-"


@dataclass(frozen=True, slots=True)
class SimplePermission:
    """Permiso incondicional en el tiempo."""

    allowed_floors: frozenset[Floor] = field(default_factory=frozenset)
    allowed_rooms: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_floors", frozenset(self.allowed_floors))
        object.__setattr__(self, "allowed_rooms", frozenset(self.allowed_rooms))

    def can_access_floor(self, floor: Floor) -> bool:
        return floor in self.allowed_floors

    def can_access_room(self, room: str) -> bool:
        return room in self.allowed_rooms

    def is_valid_for_time(self, t: datetime) -> bool:
        return True

    def describe(self) -> str:
        rooms = ",".join(sorted(self.allowed_rooms)) or "-"
        return f"simple floors={_names(self.allowed_floors)} rooms={rooms}"


@dataclass(frozen=True, slots=True)
class TimeLimitedPermission:
    """
    Permiso válido en [valid_from, valid_until] (ambos inclusive).

    Raises:
        InvalidTimeError: si valid_from > valid_until, o si alguno de los
            extremos no tiene zona horaria.
    """

    allowed_floors: frozenset[Floor]
    allowed_rooms: frozenset[str]
    valid_from: datetime
    valid_until: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_floors", frozenset(self.allowed_floors))
        object.__setattr__(self, "allowed_rooms", frozenset(self.allowed_rooms))
        if self.valid_from.tzinfo is None or self.valid_until.tzinfo is None:
            raise InvalidTimeError("La ventana de validez requiere fechas con zona horaria")
        if self.valid_from > self.valid_until:
            raise InvalidTimeError("valid_from no puede ser posterior a valid_until")

    def can_access_floor(self, floor: Floor) -> bool:
        return floor in self.allowed_floors

    def can_access_room(self, room: str) -> bool:
        return room in self.allowed_rooms

    def is_valid_for_time(self, t: datetime) -> bool:
        return self.valid_from <= t <= self.valid_until

    def describe(self) -> str:
        rooms = ",".join(sorted(self.allowed_rooms)) or "-"
        return (
            f"time-limited floors={_names(self.allowed_floors)} rooms={rooms} "
            f"from={self.valid_from.isoformat()} until={self.valid_until.isoformat()}"
        )
