"""
===============================================================================
ARCHIVO: crosscutting/metrics.py
===============================================================================

CRC CARD (Módulo)
-------------------------------------------------------------------------------
Nombre:
    Métricas (Prometheus) — Observabilidad de bajo acoplamiento

Responsabilidades:
    - Definir métricas Prometheus en un registry propio.
    - Proveer funciones pequeñas y estables para registrar eventos/duraciones.
    - Cuidar cardinalidad (NO card_id, NO facade_id, NO tokens).
    - Exponer helpers para generar la respuesta /metrics.

Colaboradores:
    - crosscutting.middleware: latencia y conteo HTTP.
    - application.floor_access: decisiones por piso/resultado.
    - application.audit_logger.MetricsAuditLoggerDecorator: eventos por tipo.
    - infrastructure.audit_sink: fallas de escritura durable.
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# ------------------------
# HTTP
# ------------------------
_requests_total = Counter(
    "access_requests_total",
    "Total de requests HTTP",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "access_request_latency_seconds",
    "Latencia de requests HTTP (segundos)",
    ["endpoint", "method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
    registry=_registry,
)

# ------------------------
# Decisiones
# ------------------------
_access_decisions_total = Counter(
    "access_decisions_total",
    "Decisiones de acceso por piso y resultado",
    ["floor", "outcome", "reason"],
    registry=_registry,
)

_decision_latency = Histogram(
    "access_decision_latency_seconds",
    "Latencia de evaluación de políticas (segundos)",
    ["floor"],
    buckets=(0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.01),
    registry=_registry,
)

# ------------------------
# Auditoría
# ------------------------
_audit_events_total = Counter(
    "access_audit_events_total",
    "Eventos de auditoría registrados por tipo",
    ["event_type"],
    registry=_registry,
)

_audit_sink_failures_total = Counter(
    "access_audit_sink_failures_total",
    "Registros que no pudieron escribirse en el sink durable",
    ["reason"],
    registry=_registry,
)


# -----------------------------------------------------------------------------
# API pública (helpers de registro)
# -----------------------------------------------------------------------------


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """Registra métricas HTTP (endpoint normalizado, status agrupado)."""
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized, method=method, status=_status_bucket(status_code)
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_access_decision(
    floor: str, granted: bool, *, reason: str = "policy", seconds: float | None = None
) -> None:
    """Cuenta una decisión de acceso. `reason` debe ser de baja cardinalidad."""
    outcome = "granted" if granted else "denied"
    _access_decisions_total.labels(floor=floor, outcome=outcome, reason=reason).inc()
    if seconds is not None:
        _decision_latency.labels(floor=floor).observe(seconds)


def record_audit_event(event_type: str) -> None:
    _audit_events_total.labels(event_type=event_type).inc()


def record_audit_sink_failure(reason: str) -> None:
    _audit_sink_failures_total.labels(reason=reason).inc()


# -----------------------------------------------------------------------------
# Helpers internos
# -----------------------------------------------------------------------------

# Segmentos dinámicos (facade ids hex, uuids) -> placeholder
_DYNAMIC_SEGMENT = re.compile(r"^[0-9a-fA-F-]{16,}$|^[A-Za-z0-9+/=_-]{24,}$")


def _normalize_endpoint(path: str) -> str:
    parts = [p for p in (path or "/").split("/") if p]
    normalized = [":id" if _DYNAMIC_SEGMENT.match(p) else p for p in parts]
    return "/" + "/".join(normalized)


def _status_bucket(code: int) -> str:
    if 200 <= code < 300:
        return "2xx"
    if 300 <= code < 400:
        return "3xx"
    if 400 <= code < 500:
        return "4xx"
    return "5xx"


def get_metrics_response() -> tuple[bytes, str]:
    """Genera el body y content-type para /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
