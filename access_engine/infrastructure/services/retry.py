"""access_engine.infrastructure.services.retry

Name: Retry Helper with Exponential Backoff + Jitter

Qué es
------
Utilidad de **resiliencia** para la escritura durable de auditoría.
Implementa:
  - Clasificación de errores de I/O: **transient** (reintentar) vs **permanent** (fail-fast)
  - Decorator de `tenacity` para aplicar **exponential backoff + jitter**
  - Logging estructurado de intentos de retry

Patrones de diseño
------------------
- **Decorator**: `create_retry_decorator()` retorna un decorator que envuelve una función.
- **Policy Object** (implícito): `is_transient_error()` es la política de clasificación.
- **Fail-fast**: errores permanentes (permisos, ruta inexistente) no se reintentan.

CRC (Component Card)
--------------------
Component: retry helper
Responsibilities:
  - Decidir qué errores de I/O son reintentables
  - Proveer un decorator estándar (tenacity) con backoff+jitter
  - Loguear intentos
Collaborators:
  - tenacity (motor de retry)
  - crosscutting.config.get_settings (config de attempts/delays)
  - crosscutting.logger (logging estructurado)
  - infrastructure.audit_sink.FileAuditSink (consumidor)
"""

from __future__ import annotations

import errno
from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...crosscutting.config import get_settings
from ...crosscutting.logger import logger

T = TypeVar("T")


# R: Errores de filesystem que no se arreglan reintentando.
PERMANENT_OS_ERRORS: tuple[type[OSError], ...] = (
    PermissionError,
    FileNotFoundError,
    IsADirectoryError,
    NotADirectoryError,
)

# R: errno que suelen ser transitorios (recurso ocupado, interrupción, I/O).
TRANSIENT_ERRNOS: frozenset[int] = frozenset(
    {
        errno.EAGAIN,
        errno.EINTR,
        errno.EBUSY,
        errno.EIO,
        errno.ENOSPC,
        errno.ETIMEDOUT,
    }
)


def is_transient_error(exception: BaseException) -> bool:
    """R: Decide si un error de I/O es transitorio (reintentar) o permanente.

    Reglas (en orden):
      1) Errores de permisos/ruta → False.
      2) TimeoutError → True.
      3) OSError con errno transitorio → True.
      4) OSError sin errno (errores ad-hoc de I/O) → True.
      5) Default: fail-fast (False).
    """
    if isinstance(exception, PERMANENT_OS_ERRORS):
        return False

    if isinstance(exception, TimeoutError):
        return True

    if isinstance(exception, OSError):
        if exception.errno is None:
            return True
        return exception.errno in TRANSIENT_ERRNOS

    return False


def _log_retry(retry_state: RetryCallState) -> None:
    """R: Loguea cada intento antes de dormir (before_sleep)."""
    fn = getattr(retry_state, "fn", None)
    fn_name = getattr(fn, "__name__", "unknown")
    attempt = getattr(retry_state, "attempt_number", 0)
    wait_time = (
        retry_state.next_action.sleep
        if getattr(retry_state, "next_action", None) is not None
        else 0
    )

    exc: Optional[BaseException] = None
    if getattr(retry_state, "outcome", None) is not None:
        exc = retry_state.outcome.exception()

    logger.warning(
        "Retrying audit write",
        extra={
            "function": fn_name,
            "attempt": attempt,
            "wait_seconds": round(float(wait_time), 3),
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """R: Crea un decorator `tenacity` con exponential backoff + jitter.

    Config:
      - stop: `stop_after_attempt(max_attempts)`
      - wait: `wait_exponential_jitter(initial=base_delay, max=max_delay)`
      - retry: solo si `is_transient_error(exception)`
      - before_sleep: `_log_retry`
      - reraise: True (propaga la última excepción)
    """
    settings = get_settings()

    _max_attempts = (
        settings.retry_max_attempts if max_attempts is None else max_attempts
    )
    _base_delay = (
        settings.retry_base_delay_seconds if base_delay is None else float(base_delay)
    )
    _max_delay = (
        settings.retry_max_delay_seconds if max_delay is None else float(max_delay)
    )

    if _max_attempts <= 0:
        raise ValueError("max_attempts must be > 0")
    if _base_delay < 0:
        raise ValueError("base_delay must be >= 0")
    if _max_delay <= 0:
        raise ValueError("max_delay must be > 0")

    return retry(
        stop=stop_after_attempt(_max_attempts),
        wait=wait_exponential_jitter(
            initial=_base_delay,
            max=_max_delay,
            jitter=_base_delay,
        ),
        retry=retry_if_exception(is_transient_error),
        before_sleep=_log_retry,
        reraise=True,
    )
