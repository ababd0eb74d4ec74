"""
===============================================================================
TARJETA CRC — infrastructure/audit_sink.py
===============================================================================

Componente:
  FileAuditSink

Responsabilidades:
  - Persistir cada registro de auditoría como UNA línea en un archivo
    append-only (format_audit_line).
  - Desacoplar la decisión de la escritura: append() encola y retorna;
    un hilo de fondo escribe.
  - Reintentar errores transitorios de I/O (tenacity) y loguear/contar las
    fallas finales sin propagarlas.
  - Con la cola llena, descartar el registro con log de error (nunca bloquear
    el camino de decisión).

Colaboradores:
  - domain.audit.format_audit_line
  - infrastructure.services.retry.create_retry_decorator
  - crosscutting.metrics.record_audit_sink_failure
  - crosscutting.logger

Ciclo de vida:
  - flush(timeout) espera a que se escriba lo encolado.
  - close(timeout) drena, detiene el hilo y rechaza nuevos registros.
===============================================================================
"""

from __future__ import annotations

import queue
import threading
import time
from pathlib import Path
from typing import Callable

from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_audit_sink_failure
from ..domain.audit import AuditRecord, format_audit_line
from .services.retry import create_retry_decorator

_STOP = object()


class FileAuditSink:
    """Sink durable append-only con escritor en background."""

    def __init__(
        self,
        path: str | Path,
        *,
        queue_size: int = 10_000,
        retry_decorator: Callable | None = None,
    ) -> None:
        if queue_size <= 0:
            raise ValueError("queue_size must be > 0")
        self._path = Path(path)
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._closed = False
        decorator = retry_decorator or create_retry_decorator()
        self._write_with_retry = decorator(self._write_line)
        self._thread = threading.Thread(
            target=self._run, name="audit-sink-writer", daemon=True
        )
        self._thread.start()

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: AuditRecord) -> None:
        if self._closed:
            logger.warning(
                "Audit sink cerrado; registro descartado",
                extra={"event_type": record.event_type.value},
            )
            record_audit_sink_failure("closed")
            return
        try:
            self._queue.put_nowait(record)
        except queue.Full:
            record_audit_sink_failure("queue_full")
            logger.error(
                "Cola del audit sink llena; registro descartado",
                extra={
                    "event_type": record.event_type.value,
                    "queue_size": self._queue.maxsize,
                },
            )

    def flush(self, timeout: float | None = None) -> bool:
        """Espera a que la cola se vacíe. False si venció el timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._queue.all_tasks_done:
            while self._queue.unfinished_tasks:
                if deadline is None:
                    self._queue.all_tasks_done.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._queue.all_tasks_done.wait(remaining)
        return True

    def close(self, timeout: float = 5.0) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.error("No se pudo detener el audit sink: cola llena")
            return
        self._thread.join(timeout)

    # ------------------------------------------------------------------
    # Writer thread
    # ------------------------------------------------------------------
    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._write_record(item)
            finally:
                self._queue.task_done()

    def _write_record(self, record: AuditRecord) -> None:
        try:
            self._write_with_retry(format_audit_line(record))
        except Exception as exc:
            record_audit_sink_failure("write")
            logger.error(
                "Falló la escritura durable de auditoría",
                extra={
                    "event_type": record.event_type.value,
                    "audit_path": str(self._path),
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )

    def _write_line(self, line: str) -> None:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
