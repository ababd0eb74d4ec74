"""
===============================================================================
TARJETA CRC — domain/floor_policy.py
===============================================================================

Módulo:
    Políticas de acceso por piso (Strategy)

Responsabilidades:
    - Definir el contrato FloorAccessPolicy.validate(card, floor, t).
    - LOW: tarjeta activa + piso permitido.
    - MEDIUM: LOW + franja horaria inclusiva (default 08:00-18:00).
    - HIGH: LOW + piso HIGH + franja (09:00-17:00) + día permitido (Lun-Vie)
      + cupo diario por tarjeta (default 5).

Colaboradores:
    - domain.cards.AccessCard (solo lectura; la política nunca la muta).
    - domain.repositories.AccessLedger: cupo diario (HIGH).
    - application.floor_access.FloorAccessService: elige la política por piso.

Reglas:
    - Franjas horarias inclusivas en ambos extremos.
    - Hora/día se leen del propio timestamp (su zona horaria).
    - HIGH registra el acceso en el ledger SOLO si todas las reglas pasan.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Protocol

from .cards import AccessCard
from .floors import Floor
from .repositories import AccessLedger

DEFAULT_MEDIUM_WINDOW: tuple[time, time] = (time(8, 0), time(18, 0))
DEFAULT_HIGH_WINDOW: tuple[time, time] = (time(9, 0), time(17, 0))
DEFAULT_HIGH_DAYS: frozenset[int] = frozenset({0, 1, 2, 3, 4})  # Lun-Vie
DEFAULT_MAX_DAILY_ACCESSES = 5


def within_window(t: time, start: time, end: time) -> bool:
    """start <= t <= end (inclusivo)."""
    return start <= t <= end


class FloorAccessPolicy(Protocol):
    """Estrategia de decisión por piso."""

    def validate(self, card: AccessCard, floor: Floor, t: datetime) -> bool: ...


@dataclass(frozen=True)
class LowFloorAccessPolicy:
    """Acceso básico: activa + piso permitido."""

    def validate(self, card: AccessCard, floor: Floor, t: datetime) -> bool:
        return card.active and card.has_floor_permission(floor)


@dataclass(frozen=True)
class MediumFloorAccessPolicy:
    """Acceso básico + franja horaria."""

    start: time = DEFAULT_MEDIUM_WINDOW[0]
    end: time = DEFAULT_MEDIUM_WINDOW[1]

    def validate(self, card: AccessCard, floor: Floor, t: datetime) -> bool:
        if not (card.active and card.has_floor_permission(floor)):
            return False
        return within_window(t.time(), self.start, self.end)


@dataclass(frozen=True)
class HighFloorAccessPolicy:
    """
    Acceso a pisos HIGH con franja, días permitidos y cupo diario.

    allowed_weekdays usa datetime.weekday() (0=lunes).
    """

    ledger: AccessLedger
    start: time = DEFAULT_HIGH_WINDOW[0]
    end: time = DEFAULT_HIGH_WINDOW[1]
    allowed_weekdays: frozenset[int] = field(default=DEFAULT_HIGH_DAYS)
    max_daily_accesses: int = DEFAULT_MAX_DAILY_ACCESSES

    def validate(self, card: AccessCard, floor: Floor, t: datetime) -> bool:
        if not (card.active and card.has_floor_permission(floor)):
            return False
        if floor is not Floor.HIGH:
            return False
        if not within_window(t.time(), self.start, self.end):
            return False
        if t.weekday() not in self.allowed_weekdays:
            return False
        # Chequeo + registro atómicos en el ledger
        return self.ledger.try_record(card.real_id, t, self.max_daily_accesses)
