"""
===============================================================================
USE CASE: Grant Access (borde de decisión)
===============================================================================

Business Goal:
    Decidir si una tarjeta presentada por su facade id puede entrar a un
    piso (y opcionalmente a una sala) con un token vigente.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    AccessControlService

Responsibilities:
    - Validar input en el borde (piso): input inválido != denegado.
    - Resolver facade id -> tarjeta (desconocida => denegado y auditado).
    - Validar token contra el id real (inválido => denegado y auditado).
    - Validar sala si se pidió (sin permiso => denegado y auditado).
    - Delegar la decisión de piso a FloorAccessService (que audita).

Collaborators:
    - application.card_management.CardManagementService (lookup)
    - domain.services.TokenValidator (identity.tokens.TokenService)
    - application.floor_access.FloorAccessService
    - domain.services.AuditLogger

-------------------------------------------------------------------------------
FLOW
-------------------------------------------------------------------------------
1) parse_floor(floor) -> InvalidFloorError si es inválido (se propaga).
   Instante sin zona horaria -> InvalidTimeError (se propaga).
2) Lookup por facade id. Si no existe -> deny (reason=unknown_card).
3) Token. Si no valida -> deny (reason=invalid_token).
4) Sala. Si no está permitida -> deny (reason=room_not_permitted).
5) FloorAccessService.check_access(card, floor, t).

El instante de la decisión es siempre el reloj del motor: quien pide acceso
no puede elegir `t` (ventanas y vencimientos no se esquivan desde afuera).
===============================================================================
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from ..crosscutting.exceptions import InvalidTimeError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_access_decision
from ..domain.floors import Floor, parse_floor
from ..domain.services import AuditLogger, TokenValidator
from .card_management import CardManagementService
from .floor_access import FloorAccessService, floor_location

Clock = Callable[[], datetime]


class AccessControlService:
    """Decision API."""

    def __init__(
        self,
        cards: CardManagementService,
        tokens: TokenValidator,
        floor_access: FloorAccessService,
        audit_logger: AuditLogger,
        *,
        clock: Clock,
    ) -> None:
        self._cards = cards
        self._tokens = tokens
        self._floor_access = floor_access
        self._audit = audit_logger
        self._clock = clock

    def grant_access(
        self,
        facade_id: str,
        floor: Floor | str,
        room: str | None,
        token: str,
    ) -> bool:
        target = parse_floor(floor)
        t = self._clock()
        if t.tzinfo is None:
            raise InvalidTimeError("Instante de decisión sin zona horaria")

        card = self._cards.find_card_by_facade_id(facade_id)
        if card is None:
            # El id real no existe: se audita contra el facade presentado.
            return self._deny(facade_id, target, t, "unknown_card", room)

        if not self._tokens.is_valid_token(card.real_id, token):
            return self._deny(card.real_id, target, t, "invalid_token", room)

        if room and not card.has_room_permission(room):
            return self._deny(card.real_id, target, t, "room_not_permitted", room)

        return self._floor_access.check_access(card, target, t)

    def _deny(
        self, card_id: str, floor: Floor, t: datetime, reason: str, room: str | None
    ) -> bool:
        details = {"reason": reason}
        if room:
            details["room"] = room
        self._audit.log_access_attempt(card_id, floor_location(floor), False, t, details)
        record_access_decision(floor.name, False, reason=reason)
        logger.info(
            "Access denied at decision boundary",
            extra={"floor": floor.name, "reason": reason},
        )
        return False
