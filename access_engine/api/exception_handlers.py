"""
===============================================================================
TARJETA CRC — access_engine/api/exception_handlers.py (Manejo Centralizado)
===============================================================================

Responsabilidades:
  - Traducir excepciones del motor a respuestas HTTP RFC7807.
  - Distinguir "input inválido" (422) de "acceso denegado" (200 granted=false).
  - Emisión duplicada de una tarjeta -> 409 CONFLICT (sin exponer el id real).
  - Centralizar logging de errores con request_id + error_id.
  - Evitar filtrar detalles internos en errores no controlados.

Patrones aplicados:
  - Exception Mapping (Presentation Layer).
  - Fail-safe: cualquier excepción no tipada -> INTERNAL_ERROR (con logging).

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, ErrorCode, app_exception_handler
  - crosscutting.exceptions: AccessEngineError y derivadas
  - crosscutting.config.get_settings (para decidir nivel de detalle)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
)
from ..crosscutting.exceptions import (
    AccessEngineError,
    CardAlreadyExistsError,
    DigestUnavailableError,
    InvalidFloorError,
    InvalidInputError,
    InvalidTimeError,
)
from ..crosscutting.logger import logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _handle_engine_error(
    request: Request,
    *,
    exc: AccessEngineError,
    code: ErrorCode,
    status_code: int,
) -> JSONResponse:
    """Helper común para errores tipados del motor."""
    request_id = _request_id_from(request)

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Error del motor de acceso",
        extra={
            "code": code.value,
            "error_id": exc.error_id,
            "error_message": exc.message,
            "request_id": request_id,
        },
    )

    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=[{"error_id": exc.error_id}],
    )
    return await app_exception_handler(request, app_exc)


async def card_conflict_handler(
    request: Request, exc: CardAlreadyExistsError
) -> JSONResponse:
    return await _handle_engine_error(
        request, exc=exc, code=ErrorCode.CONFLICT, status_code=409
    )


async def invalid_floor_handler(request: Request, exc: InvalidFloorError) -> JSONResponse:
    return await _handle_engine_error(
        request, exc=exc, code=ErrorCode.INVALID_FLOOR, status_code=422
    )


async def invalid_time_handler(request: Request, exc: InvalidTimeError) -> JSONResponse:
    return await _handle_engine_error(
        request, exc=exc, code=ErrorCode.INVALID_TIME, status_code=422
    )


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return await _handle_engine_error(
        request, exc=exc, code=ErrorCode.VALIDATION_ERROR, status_code=422
    )


async def digest_unavailable_handler(
    request: Request, exc: DigestUnavailableError
) -> JSONResponse:
    return await _handle_engine_error(
        request, exc=exc, code=ErrorCode.DIGEST_UNAVAILABLE, status_code=500
    )


async def engine_error_handler(request: Request, exc: AccessEngineError) -> JSONResponse:
    return await _handle_engine_error(
        request, exc=exc, code=ErrorCode.INTERNAL_ERROR, status_code=500
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Errores de shape/tipo del body o query -> 422 RFC7807."""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        }
        for err in exc.errors()
    ]
    app_exc = AppHTTPException(
        status_code=422,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Request inválido",
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta genérica (evita filtrar internos).
    """
    request_id = _request_id_from(request)
    settings = get_settings()

    logger.error(
        "Excepción no controlada",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = str(exc) if not settings.is_production() else "Error interno."

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    Importante:
      - Starlette resuelve por MRO: las subclases ganan sobre la base.
      - Exception genérica se registra al final como fallback.
    """
    app.add_exception_handler(CardAlreadyExistsError, card_conflict_handler)
    app.add_exception_handler(InvalidFloorError, invalid_floor_handler)
    app.add_exception_handler(InvalidTimeError, invalid_time_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(DigestUnavailableError, digest_unavailable_handler)
    app.add_exception_handler(AccessEngineError, engine_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
