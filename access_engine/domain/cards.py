"""
===============================================================================
TARJETA CRC — domain/cards.py
===============================================================================

Módulo:
    Tarjetas de acceso (CardIdentifier + AccessCard)

Responsabilidades:
    - CardIdentifier: identidad de emisión (emisor + serie + fecha) y su
      id real derivado (ISS-serie-yyyyMMdd).
    - AccessCard: estado de una credencial física (activa, último uso) y
      conjunción active + permiso + tiempo en validate_access.
    - Operaciones de identidad fachada (pseudo-cifrado / validación).

Colaboradores:
    - domain.permissions.Permission (compartido, nunca mutado).
    - identity.facade_ids: encrypt_id / daily_key_matches.
    - application.card_factory: construye tarjetas.
    - application.floor_access: invoca validate_access tras la política.

Invariantes:
    - real_id y facade_ids nunca cambian (no se regeneran).
    - last_used_at >= created_at.
    - validate_access actualiza last_used_at sii devuelve True.
===============================================================================
"""

from __future__ import annotations

import hmac
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..identity.facade_ids import daily_key_matches, encrypt_id
from .floors import Floor
from .permissions import Permission


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, order=True)
class CardIdentifier:
    """
    Identidad de emisión.

    Igualdad y orden por (issuer_id, serial_number); la fecha de emisión no
    participa.
    """

    issuer_id: str
    serial_number: str
    issue_date: datetime = field(compare=False)

    def to_card_id(self) -> str:
        issuer = self.issuer_id[:3].upper()
        return f"{issuer}-{self.serial_number}-{self.issue_date:%Y%m%d}"

    def __str__(self) -> str:
        return (
            f"Card[{self.serial_number}, Issuer:{self.issuer_id}, "
            f"Issued:{self.issue_date.date().isoformat()}]"
        )


class AccessCard:
    """Credencial física con estado (activa / último uso)."""

    __slots__ = (
        "_real_id",
        "_facade_ids",
        "_permission",
        "_created_at",
        "_active",
        "_last_used_at",
        "_lock",
    )

    def __init__(
        self,
        real_id: str,
        facade_ids: tuple[str, ...] | list[str],
        permission: Permission,
        *,
        created_at: datetime | None = None,
        active: bool = True,
        last_used_at: datetime | None = None,
    ):
        if not facade_ids:
            raise ValueError("a card needs at least one facade id")
        self._real_id = real_id
        self._facade_ids = tuple(facade_ids)
        self._permission = permission
        self._created_at = created_at or _utcnow()
        self._active = active
        self._last_used_at = max(last_used_at or self._created_at, self._created_at)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------
    @property
    def real_id(self) -> str:
        return self._real_id

    @property
    def facade_ids(self) -> tuple[str, ...]:
        return self._facade_ids

    @property
    def primary_facade_id(self) -> str:
        return self._facade_ids[0]

    @property
    def permission(self) -> Permission:
        return self._permission

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def active(self) -> bool:
        return self._active

    @property
    def last_used_at(self) -> datetime:
        return self._last_used_at

    # ------------------------------------------------------------------
    # Permisos
    # ------------------------------------------------------------------
    def has_floor_permission(self, floor: Floor) -> bool:
        return self._active and self._permission.can_access_floor(floor)

    def has_room_permission(self, room: str) -> bool:
        return self._active and self._permission.can_access_room(room)

    def validate_access(self, floor: Floor, t: datetime) -> bool:
        """active AND piso permitido AND permiso vigente en t. Si True, registra uso."""
        with self._lock:
            granted = (
                self._active
                and self._permission.can_access_floor(floor)
                and self._permission.is_valid_for_time(t)
            )
            if granted:
                self._last_used_at = max(t, self._created_at)
            return granted

    def set_active(self, active: bool) -> None:
        with self._lock:
            self._active = active

    def with_permission(self, permission: Permission) -> AccessCard:
        """Nueva tarjeta con la misma identidad y estado, y otro permiso."""
        with self._lock:
            return AccessCard(
                self._real_id,
                self._facade_ids,
                permission,
                created_at=self._created_at,
                active=self._active,
                last_used_at=self._last_used_at,
            )

    # ------------------------------------------------------------------
    # Identidad fachada (obfuscación, no autenticación)
    # ------------------------------------------------------------------
    def encrypt_id(self, t: datetime) -> str:
        return encrypt_id(self._real_id, t)

    def validate_facade_id(self, candidate: str, t: datetime) -> bool:
        if candidate not in self._facade_ids:
            return False
        return daily_key_matches(candidate, t)

    def verify_external_facade_id(self, candidate: str, t: datetime) -> bool:
        fresh = encrypt_id(self._real_id, t)
        if hmac.compare_digest(fresh.encode("utf-8"), candidate.encode("utf-8")):
            return True
        return self.validate_facade_id(candidate, t)

    def __repr__(self) -> str:
        # Nunca exponer el id real en logs/repr.
        return (
            f"AccessCard(facade={self.primary_facade_id[:12]}…, "
            f"active={self._active})"
        )
