"""
===============================================================================
TARJETA CRC — application/floor_access.py
===============================================================================

Componente:
  FloorAccessService (+ build_floor_access_service)

Responsabilidades:
  - Elegir la política por piso y aplicar restricciones horarias globales.
  - Conjugar la política con la vigencia temporal del permiso de la tarjeta
    y registrar el uso (card.validate_access).
  - Auditar TODO intento (una vez) con location "Floor: <PISO>" y un
    detalle `reason` en las denegaciones.
  - Permitir reemplazo en caliente de políticas/restricciones
    (copy-on-write, último escritor gana).

Orden de evaluación:
  1. Sin política para el piso       -> deny (reason=no_policy)
  2. Restricción horaria y fuera      -> deny (reason=time_restriction)
  3. Permiso no vigente en t          -> deny (reason=permission_expired)
  4. Política                         -> deny (reason=policy)
  5. card.validate_access             -> deny (reason=card_rejected)

Colaboradores:
  - domain.floor_policy: Low/Medium/High
  - application.daily_quota.DailyAccessLedger (cupo HIGH)
  - domain.services.AuditLogger
  - crosscutting.metrics / crosscutting.logger
===============================================================================
"""

from __future__ import annotations

import threading
import time as _time
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import Callable, Mapping

from ..crosscutting.config import Settings
from ..crosscutting.exceptions import InvalidTimeError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_access_decision
from ..domain.cards import AccessCard
from ..domain.floor_policy import (
    FloorAccessPolicy,
    HighFloorAccessPolicy,
    LowFloorAccessPolicy,
    MediumFloorAccessPolicy,
    within_window,
)
from ..domain.floors import Floor, parse_floor
from ..domain.services import AuditLogger
from .daily_quota import DailyAccessLedger

Clock = Callable[[], datetime]

DEFAULT_RESTRICTION = (time(9, 0), time(17, 0))


def floor_location(floor: Floor) -> str:
    return f"Floor: {floor.name}"


@dataclass(frozen=True, slots=True)
class TimeRestriction:
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidTimeError("La restricción horaria tiene inicio posterior al fin")

    def allows(self, t: time) -> bool:
        return within_window(t, self.start, self.end)


def default_policies(ledger: DailyAccessLedger | None = None) -> dict[Floor, FloorAccessPolicy]:
    return {
        Floor.LOW: LowFloorAccessPolicy(),
        Floor.MEDIUM: MediumFloorAccessPolicy(),
        Floor.HIGH: HighFloorAccessPolicy(ledger=ledger or DailyAccessLedger()),
    }


def default_restrictions() -> dict[Floor, TimeRestriction]:
    return {
        Floor.MEDIUM: TimeRestriction(*DEFAULT_RESTRICTION),
        Floor.HIGH: TimeRestriction(*DEFAULT_RESTRICTION),
    }


class FloorAccessService:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      FloorAccessService

    Responsabilidades:
      - check_access(card, floor, t=None) -> bool
      - set_access_policy / set_time_restriction / clear_time_restriction

    Colaboradores:
      - FloorAccessPolicy (Strategy)
      - AuditLogger
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        audit_logger: AuditLogger,
        *,
        policies: Mapping[Floor, FloorAccessPolicy] | None = None,
        restrictions: Mapping[Floor, TimeRestriction] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._audit_logger = audit_logger
        self._policies: dict[Floor, FloorAccessPolicy] = dict(
            default_policies() if policies is None else policies
        )
        self._restrictions: dict[Floor, TimeRestriction] = dict(
            default_restrictions() if restrictions is None else restrictions
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Configuración en caliente (copy-on-write)
    # ------------------------------------------------------------------
    def set_access_policy(self, floor: Floor, policy: FloorAccessPolicy) -> None:
        floor = parse_floor(floor)
        with self._write_lock:
            policies = dict(self._policies)
            policies[floor] = policy
            self._policies = policies
        logger.info(
            "Política de piso reemplazada",
            extra={"floor": floor.name, "policy": type(policy).__name__},
        )

    def set_time_restriction(self, floor: Floor, start: time, end: time) -> None:
        floor = parse_floor(floor)
        restriction = TimeRestriction(start, end)
        with self._write_lock:
            restrictions = dict(self._restrictions)
            restrictions[floor] = restriction
            self._restrictions = restrictions
        logger.info(
            "Restricción horaria actualizada",
            extra={"floor": floor.name, "start": start.isoformat(), "end": end.isoformat()},
        )

    def clear_time_restriction(self, floor: Floor) -> None:
        floor = parse_floor(floor)
        with self._write_lock:
            restrictions = dict(self._restrictions)
            restrictions.pop(floor, None)
            self._restrictions = restrictions

    def get_policy(self, floor: Floor) -> FloorAccessPolicy | None:
        return self._policies.get(parse_floor(floor))

    def get_time_restriction(self, floor: Floor) -> TimeRestriction | None:
        return self._restrictions.get(parse_floor(floor))

    # ------------------------------------------------------------------
    # Decisión
    # ------------------------------------------------------------------
    def check_access(
        self, card: AccessCard, floor: Floor, t: datetime | None = None
    ) -> bool:
        floor = parse_floor(floor)
        t = t or self._clock()
        if t.tzinfo is None:
            raise InvalidTimeError("El instante de acceso requiere zona horaria")
        started = _time.perf_counter()

        # Snapshots (lecturas sin lock sobre mapas inmutables de hecho)
        policy = self._policies.get(floor)
        restriction = self._restrictions.get(floor)

        reason = self._evaluate(card, floor, t, policy, restriction)
        granted = reason is None

        details = {} if granted else {"reason": reason}
        self._audit_logger.log_access_attempt(
            card.real_id, floor_location(floor), granted, t, details
        )

        record_access_decision(
            floor.name,
            granted,
            reason=reason or "granted",
            seconds=_time.perf_counter() - started,
        )
        logger.info(
            "Decisión de acceso",
            extra={
                "floor": floor.name,
                "granted": granted,
                "reason": reason or "granted",
                "facade_id": card.primary_facade_id,
            },
        )
        return granted

    @staticmethod
    def _evaluate(
        card: AccessCard,
        floor: Floor,
        t: datetime,
        policy: FloorAccessPolicy | None,
        restriction: TimeRestriction | None,
    ) -> str | None:
        """Devuelve None si se concede, o el motivo de denegación."""
        if policy is None:
            return "no_policy"
        if restriction is not None and not restriction.allows(t.time()):
            return "time_restriction"
        if not card.permission.is_valid_for_time(t):
            return "permission_expired"
        if not policy.validate(card, floor, t):
            return "policy"
        if not card.validate_access(floor, t):
            return "card_rejected"
        return None


def build_floor_access_service(
    settings: Settings, audit_logger: AuditLogger, *, clock: Clock | None = None
) -> FloorAccessService:
    ledger = DailyAccessLedger(retention_days=settings.quota_retention_days)
    policies: dict[Floor, FloorAccessPolicy] = {
        Floor.LOW: LowFloorAccessPolicy(),
        Floor.MEDIUM: MediumFloorAccessPolicy(
            start=settings.medium_start_time, end=settings.medium_end_time
        ),
        Floor.HIGH: HighFloorAccessPolicy(
            ledger=ledger,
            start=settings.high_start_time,
            end=settings.high_end_time,
            allowed_weekdays=settings.high_allowed_weekdays(),
            max_daily_accesses=settings.high_max_daily_accesses,
        ),
    }
    restrictions = {
        Floor[name]: TimeRestriction(start, end)
        for name, (start, end) in settings.parsed_time_restrictions().items()
    }
    return FloorAccessService(
        audit_logger,
        policies=policies,
        restrictions=restrictions,
        clock=clock or settings.now,
    )
