# =============================================================================
# FILE: application/daily_quota.py
# =============================================================================
"""
===============================================================================
SERVICE: Daily Access Ledger (cupo diario de pisos HIGH)
===============================================================================

Qué es:
    Registro en memoria de accesos exitosos por (tarjeta, día), usado por la
    política HIGH para limitar accesos diarios.

Arquitectura:
    - Capa: Application
    - Patrón: Fixed Window Counter (ventana = día calendario del timestamp)
    - Retención acotada: días viejos se compactan al registrar un día nuevo

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Component: DailyAccessLedger
Responsibilities:
  - Contar accesos por tarjeta/día
  - Registrar de forma atómica si hay cupo (try_record)
  - Compactar días fuera de la ventana de retención
Collaborators:
  - domain.floor_policy.HighFloorAccessPolicy
  - Settings: quota_retention_days
===============================================================================
"""

from __future__ import annotations

import threading
from datetime import date, datetime, time, timedelta
from typing import Dict, Final, List, Tuple

from ..crosscutting.logger import logger

_DEFAULT_RETENTION_DAYS: Final[int] = 2


class DailyAccessLedger:
    """
    Ledger en memoria, thread-safe.

    Nota: estado local del proceso (no se comparte entre workers).
    """

    def __init__(self, retention_days: int = _DEFAULT_RETENTION_DAYS) -> None:
        if retention_days < 1:
            raise ValueError("retention_days must be >= 1")
        self._retention_days = retention_days
        self._entries: Dict[Tuple[str, date], List[time]] = {}
        self._latest_day: date | None = None
        self._lock = threading.Lock()

    def count_for_day(self, card_id: str, day: date) -> int:
        with self._lock:
            return len(self._entries.get((card_id, day), ()))

    def accesses_for_day(self, card_id: str, day: date) -> List[time]:
        with self._lock:
            return list(self._entries.get((card_id, day), ()))

    def record(self, card_id: str, at: datetime) -> int:
        with self._lock:
            return self._append(card_id, at)

    def try_record(self, card_id: str, at: datetime, limit: int) -> bool:
        with self._lock:
            if len(self._entries.get((card_id, at.date()), ())) >= limit:
                logger.info(
                    "Daily access quota exhausted",
                    extra={"day": at.date().isoformat(), "limit": limit},
                )
                return False
            self._append(card_id, at)
            return True

    def compact(self, before: date) -> int:
        """Elimina días anteriores a `before`. Retorna entradas eliminadas."""
        with self._lock:
            return self._compact_locked(before)

    # =========================================================================
    # Helpers (requieren el lock tomado)
    # =========================================================================

    def _append(self, card_id: str, at: datetime) -> int:
        day = at.date()
        self._entries.setdefault((card_id, day), []).append(at.time())

        if self._latest_day is None or day > self._latest_day:
            self._latest_day = day
            self._compact_locked(day - timedelta(days=self._retention_days - 1))

        return len(self._entries[(card_id, day)])

    def _compact_locked(self, before: date) -> int:
        stale = [key for key in self._entries if key[1] < before]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(
                "Daily access ledger compacted",
                extra={"removed": len(stale), "before": before.isoformat()},
            )
        return len(stale)
