# access_engine/crosscutting/exceptions.py
"""
===============================================================================
MÓDULO: Excepciones tipadas del motor de acceso
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message "humana" (sin filtrar identificadores reales)

Taxonomía
---------
- not-found (tarjeta/facade desconocida): NO es excepción; se resuelve como
  "acceso denegado" en el borde de decisión.
- invalid-input (piso o fecha mal formados): InvalidInputError y derivadas.
  Se rechazan ANTES de evaluar políticas y no se confunden con "denegado".
  CardAlreadyExistsError: re-emisión de un id real ya registrado (409).
- primitive-unavailability (hash inexistente): DigestUnavailableError, fatal
  para la creación de tarjetas.
- durable-sink failure: AuditSinkError, se loguea y nunca afecta la decisión.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AccessEngineError + subclases

Colaboradores:
  - api/exception_handlers.py (mapea a AppHTTPException)
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class AccessEngineError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      AccessEngineError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    error_code: str = "ACCESS_ENGINE_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class InvalidInputError(AccessEngineError):
    """Input mal formado detectado en el borde (antes de evaluar políticas)."""

    error_code: str = "INVALID_INPUT"


class InvalidFloorError(InvalidInputError):
    """Nombre de piso desconocido o tipo inválido."""

    error_code: str = "INVALID_FLOOR"


class InvalidTimeError(InvalidInputError):
    """Timestamp u horario mal formado."""

    error_code: str = "INVALID_TIME"


class DigestUnavailableError(AccessEngineError):
    """El algoritmo de hash requerido no existe en este intérprete."""

    error_code: str = "DIGEST_UNAVAILABLE"


class AuditSinkError(AccessEngineError):
    """Falla de escritura en el sink durable de auditoría (no fatal)."""

    error_code: str = "AUDIT_SINK_ERROR"


class CardAlreadyExistsError(InvalidInputError):
    """Ya existe una tarjeta con el mismo identificador de emisión."""

    error_code: str = "CARD_ALREADY_EXISTS"
