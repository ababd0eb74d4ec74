"""
===============================================================================
TARJETA CRC — identity/tokens.py
===============================================================================

Responsabilidades:
  - Emitir tokens de acceso opacos ligados a una tarjeta (id real).
  - Validar tokens: existencia, igualdad exacta (tiempo constante) y
    vigencia (now < expires_at).
  - Mantener a lo sumo UN token vigente por tarjeta (reemisión sobrescribe).

Colaboradores:
  - application.access_control: valida el token presentado en cada decisión.
  - interfaces.api.http.routers.access: emite tokens por facade id.
  - crosscutting.config: token_secret, token_ttl_seconds.

Notas:
  - Sin expiración deslizante y sin single-use: el token se puede reusar
    hasta que expira.
  - Sin barrido en background: la expiración se evalúa al validar.
===============================================================================
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from ..crosscutting.logger import logger

DEFAULT_TOKEN_TTL = timedelta(minutes=5)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """Token emitido (valor opaco + dueño + vigencia)."""

    value: str
    card_id: str
    issued_at: datetime
    expires_at: datetime
    token_id: str

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class TokenService:
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      TokenService

    Responsabilidades:
      - generate_token(card_id) -> str
      - is_valid_token(card_id, token) -> bool
      - get_token(card_id) -> IssuedToken | None

    Colaboradores:
      - Clock inyectable (tests determinísticos)
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        secret_key: str,
        *,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Clock | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key is required")
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._secret_key = secret_key
        self._ttl = ttl
        self._clock = clock or _utcnow
        self._store: dict[str, IssuedToken] = {}
        self._lock = threading.Lock()

    def generate_token(self, card_id: str) -> str:
        now = self._clock()
        token_id = str(uuid.uuid4())
        value = self._digest(f"{card_id}{self._secret_key}{token_id}{now.isoformat()}")
        issued = IssuedToken(
            value=value,
            card_id=card_id,
            issued_at=now,
            expires_at=now + self._ttl,
            token_id=token_id,
        )
        with self._lock:
            self._store[card_id] = issued

        logger.info(
            "Token emitido",
            extra={"token_id": token_id, "expires_at": issued.expires_at.isoformat()},
        )
        return value

    def is_valid_token(self, card_id: str, token: str) -> bool:
        with self._lock:
            issued = self._store.get(card_id)
        if issued is None or not token:
            return False
        if not hmac.compare_digest(issued.value.encode(), token.encode()):
            return False
        return not issued.is_expired(self._clock())

    def get_token(self, card_id: str) -> IssuedToken | None:
        with self._lock:
            return self._store.get(card_id)

    @staticmethod
    def _digest(data: str) -> str:
        raw = hashlib.sha256(data.encode("utf-8")).digest()
        return base64.urlsafe_b64encode(raw).decode("ascii")
