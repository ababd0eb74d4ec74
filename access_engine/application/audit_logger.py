"""
===============================================================================
TARJETA CRC — application/audit_logger.py (Registro de auditoría)
===============================================================================

Responsabilidades:
  - Crear registros de auditoría con formato consistente (evento/tarjeta/
    ubicación/actor/resultado/detalles).
  - Mantener el historial en memoria (orden de inserción) y consultarlo por
    tarjeta o por ubicación + rango temporal.
  - Reenviar cada registro a un sink durable (best-effort: si falla, NO
    rompe la decisión).
  - Decoradores componibles: pass-through, detallado (contexto de entorno)
    y métricas.

Colaboradores:
  - domain.audit.AuditRecord / AuditEventType
  - domain.repositories.AuditSink (infrastructure.audit_sink.FileAuditSink)
  - context.get_context_dict (request_id / terminal_id)
  - crosscutting.metrics / crosscutting.logger

Patrones aplicados:
  - Decorator (AuditLoggerDecorator y derivados)
  - Best-effort logging (no interrumpe la decisión)
===============================================================================
"""

from __future__ import annotations

import dataclasses
import os
import socket
import threading
from datetime import datetime

from ..context import get_context_dict
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_audit_event, record_audit_sink_failure
from ..domain.audit import AuditEventType, AuditRecord, format_audit_line
from ..domain.repositories import AuditSink
from ..domain.services import AuditLogger


class InMemoryAuditLogger:
    """
    Implementación base: lista ordenada protegida por lock + sink opcional.

    Nota: el historial vive en memoria del proceso; el sink es la única
    persistencia.
    """

    def __init__(self, sink: AuditSink | None = None) -> None:
        self._records: list[AuditRecord] = []
        self._lock = threading.Lock()
        self._sink = sink

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------
    def log_access_attempt(
        self,
        card_id: str,
        location: str,
        granted: bool,
        timestamp: datetime,
        details: dict[str, str] | None = None,
    ) -> AuditRecord:
        record = AuditRecord(
            event_type=AuditEventType.ACCESS_ATTEMPT,
            card_id=card_id,
            location=location,
            outcome=granted,
            timestamp=timestamp,
            details=dict(details or {}),
        )
        return self._store(record)

    def log_card_creation(
        self, card_id: str, created_by: str, timestamp: datetime
    ) -> AuditRecord:
        record = AuditRecord(
            event_type=AuditEventType.CARD_CREATION,
            card_id=card_id,
            actor_id=created_by,
            outcome=True,
            timestamp=timestamp,
        )
        return self._store(record)

    def log_card_modification(
        self, card_id: str, modified_by: str, modification: str, timestamp: datetime
    ) -> AuditRecord:
        record = AuditRecord(
            event_type=AuditEventType.CARD_MODIFICATION,
            card_id=card_id,
            actor_id=modified_by,
            outcome=True,
            timestamp=timestamp,
        )
        record.add_detail("modification", modification)
        return self._store(record)

    def log_card_revocation(
        self, card_id: str, revoked_by: str, timestamp: datetime
    ) -> AuditRecord:
        record = AuditRecord(
            event_type=AuditEventType.CARD_REVOCATION,
            card_id=card_id,
            actor_id=revoked_by,
            outcome=True,
            timestamp=timestamp,
        )
        return self._store(record)

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    def get_access_history(self, card_id: str) -> list[AuditRecord]:
        with self._lock:
            return [r for r in self._records if r.card_id == card_id]

    def get_location_history(
        self, location: str, start: datetime, end: datetime
    ) -> list[AuditRecord]:
        with self._lock:
            return [
                r
                for r in self._records
                if r.event_type is AuditEventType.ACCESS_ATTEMPT
                and r.location == location
                and start <= r.timestamp <= end
            ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _store(self, record: AuditRecord) -> AuditRecord:
        with self._lock:
            self._records.append(record)

        if self._sink is not None:
            try:
                self._sink.append(record)
            except Exception as exc:
                # Best-effort: logueamos y seguimos.
                record_audit_sink_failure("append")
                logger.warning(
                    "Falló el envío del registro al sink de auditoría",
                    extra={"event_type": record.event_type.value, "error": str(exc)},
                )
        return record


class AuditLoggerDecorator:
    """Decorador base: reenvía cada llamada sin cambios al logger interno."""

    def __init__(self, inner: AuditLogger) -> None:
        self._inner = inner

    @property
    def inner(self) -> AuditLogger:
        return self._inner

    def log_access_attempt(
        self,
        card_id: str,
        location: str,
        granted: bool,
        timestamp: datetime,
        details: dict[str, str] | None = None,
    ) -> AuditRecord:
        return self._after(
            self._inner.log_access_attempt(card_id, location, granted, timestamp, details)
        )

    def log_card_creation(
        self, card_id: str, created_by: str, timestamp: datetime
    ) -> AuditRecord:
        return self._after(self._inner.log_card_creation(card_id, created_by, timestamp))

    def log_card_modification(
        self, card_id: str, modified_by: str, modification: str, timestamp: datetime
    ) -> AuditRecord:
        return self._after(
            self._inner.log_card_modification(
                card_id, modified_by, modification, timestamp
            )
        )

    def log_card_revocation(
        self, card_id: str, revoked_by: str, timestamp: datetime
    ) -> AuditRecord:
        return self._after(self._inner.log_card_revocation(card_id, revoked_by, timestamp))

    def get_access_history(self, card_id: str) -> list[AuditRecord]:
        return self._inner.get_access_history(card_id)

    def get_location_history(
        self, location: str, start: datetime, end: datetime
    ) -> list[AuditRecord]:
        return self._inner.get_location_history(location, start, end)

    def _after(self, record: AuditRecord) -> AuditRecord:
        """Hook para subclases. Debe devolver el registro sin alterarlo."""
        return record


class DetailedAuditLoggerDecorator(AuditLoggerDecorator):
    """
    Emite al log estructurado una copia enriquecida de cada registro
    (host, pid, hilo, request_id, terminal_id). El registro original que
    guarda el logger interno no se modifica.
    """

    def __init__(self, inner: AuditLogger, *, host: str | None = None) -> None:
        super().__init__(inner)
        self._host = host or socket.gethostname()
        self._pid = os.getpid()

    def enrich(self, record: AuditRecord) -> AuditRecord:
        details = dict(record.details)
        details["host"] = self._host
        details["pid"] = str(self._pid)
        details["thread"] = threading.current_thread().name
        for key, value in get_context_dict().items():
            details[key] = value
        return dataclasses.replace(record, details=details)

    def _after(self, record: AuditRecord) -> AuditRecord:
        enriched = self.enrich(record)
        logger.info(
            "Audit: " + format_audit_line(enriched),
            extra={
                "audit_record_id": str(enriched.id),
                "event_type": enriched.event_type.value,
                "outcome": enriched.outcome,
            },
        )
        return record


class MetricsAuditLoggerDecorator(AuditLoggerDecorator):
    """Cuenta eventos de auditoría por tipo (Prometheus)."""

    def _after(self, record: AuditRecord) -> AuditRecord:
        record_audit_event(record.event_type.value)
        return record
