"""
===============================================================================
TARJETA CRC — identity/facade_ids.py
===============================================================================

Módulo:
    Identificadores fachada (pseudónimos de tarjeta)

Responsabilidades:
    - Derivar facade ids determinísticos desde el id real (digest hex).
    - Sufijo "seguro" (obfuscación) para ids de tarjetas seguras.
    - Pseudo-cifrado con clave temporal (demostrativo, NO autenticación).
    - Chequear la clave diaria (DDDYYYY) embebida en un id pseudo-cifrado.

Colaboradores:
    - application.card_factory: genera real/facade ids.
    - domain.cards.AccessCard: validate_facade_id / verify_external_facade_id.

Notas de seguridad:
    - Esto es obfuscación/lookup. Un id forjado con el día/año correcto pasa
      el chequeo de clave diaria. Nunca se usa como factor de autenticación.
===============================================================================
"""

from __future__ import annotations

import base64
import hashlib
import time
import uuid
from datetime import datetime

from ..crosscutting.exceptions import DigestUnavailableError
from ..crosscutting.logger import logger

DEFAULT_ALGORITHM = "sha256"
_SECURE_SUFFIX_LEN = 12
# El sufijo seguro no sigue el algoritmo configurable de los facade ids.
_SECURE_SUFFIX_ALGORITHM = "sha256"


def _digest(data: str, algorithm: str) -> bytes:
    try:
        hasher = hashlib.new(algorithm)
    except ValueError as exc:
        raise DigestUnavailableError(
            f"Algoritmo de hash no disponible: {algorithm}", original_error=exc
        )
    hasher.update(data.encode("utf-8"))
    return hasher.digest()


def derive_facade_id(real_id: str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Digest hex (minúsculas) del id real. Determinístico.

    Raises:
        DigestUnavailableError: el algoritmo no existe (fatal para la creación).
    """
    return _digest(real_id, algorithm).hex()


def derive_facade_ids(
    real_id: str, count: int = 1, algorithm: str = DEFAULT_ALGORITHM
) -> tuple[str, ...]:
    """
    1..N facade ids. El primero es derive_facade_id(real_id); el i-ésimo
    extra es el digest de "real_id:i".
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    ids = [derive_facade_id(real_id, algorithm)]
    ids.extend(derive_facade_id(f"{real_id}:{i}", algorithm) for i in range(1, count))
    return tuple(ids)


def obfuscate_id(identifier: str) -> str:
    """
    id + "-" + primeros 12 chars de base64(sha256(id)).

    Si el digest no está disponible, usa id + "-SECURE-" + epoch millis
    y loguea un warning (fallback documentado).
    """
    try:
        digest = _digest(identifier, _SECURE_SUFFIX_ALGORITHM)
    except DigestUnavailableError:
        logger.warning(
            "Digest no disponible para sufijo seguro; usando fallback temporal",
            extra={"algorithm": _SECURE_SUFFIX_ALGORITHM},
        )
        return f"{identifier}-SECURE-{int(time.time() * 1000)}"

    suffix = base64.b64encode(digest).decode("ascii")[:_SECURE_SUFFIX_LEN]
    return f"{identifier}-{suffix}"


def daily_key(t: datetime) -> str:
    """DDDYYYY (día del año con 3 dígitos + año con 4)."""
    return f"{t.timetuple().tm_yday:03d}{t.year:04d}"


def encrypt_id(identifier: str, t: datetime, *, nonce: str | None = None) -> str:
    """
    id_HHMM(hex)_DDDYYYY_rand8.

    `nonce` permite fijar el sufijo aleatorio (tests).
    """
    time_signature = f"{t.hour:02x}{t.minute:02x}"
    rand = nonce if nonce is not None else uuid.uuid4().hex[:8]
    return f"{identifier}_{time_signature}_{daily_key(t)}_{rand}"


def daily_key_matches(candidate: str, t: datetime) -> bool:
    """
    Si el candidato tiene formato pseudo-cifrado (>= 3 partes separadas por
    "_"), exige que su DDDYYYY coincida con el de `t`. Formato no
    reconocible o no parseable -> True (solo cuenta la pertenencia).
    """
    if "_" not in candidate:
        return True
    parts = candidate.split("_")
    if len(parts) < 3:
        return True
    key = parts[2]
    try:
        stored_day = int(key[:3])
        stored_year = int(key[3:])
    except ValueError:
        return True
    return stored_day == t.timetuple().tm_yday and stored_year == t.year
