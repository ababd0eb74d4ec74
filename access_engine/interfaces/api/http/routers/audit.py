"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/audit.py
===============================================================================

Name:
    Audit Router

Responsibilities:
    - Historial de auditoría por tarjeta (facade id).
    - Historial de intentos de acceso por ubicación y rango (inclusivo).
    - Validaciones de borde (rango de fechas).

Collaborators:
    - domain.services.AuditLogger (cadena de decoradores del container)
    - schemas.audit
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from .....container import Container
from .....crosscutting.error_responses import validation_error
from .....domain.audit import AuditRecord
from ..dependencies import get_container, require_card, to_site_time
from ..schemas.audit import AuditRecordRes, AuditRecordsRes

router = APIRouter()


def _to_audit_record_res(record: AuditRecord) -> AuditRecordRes:
    return AuditRecordRes(
        id=record.id,
        event_type=record.event_type.value,
        location=record.location,
        actor_id=record.actor_id,
        outcome=record.outcome,
        timestamp=record.timestamp,
        details=dict(record.details),
    )


@router.get("/audit/cards/{facade_id}", response_model=AuditRecordsRes, tags=["audit"])
def card_history(facade_id: str, container: Container = Depends(get_container)):
    card = require_card(container, facade_id)
    records = container.audit_logger.get_access_history(card.real_id)
    return AuditRecordsRes(records=[_to_audit_record_res(r) for r in records])


@router.get("/audit/locations", response_model=AuditRecordsRes, tags=["audit"])
def location_history(
    location: str = Query(..., min_length=1, max_length=128),
    start: datetime = Query(...),
    end: datetime = Query(...),
    container: Container = Depends(get_container),
):
    start_at = to_site_time(start, container.settings)
    end_at = to_site_time(end, container.settings)
    if start_at > end_at:
        raise validation_error("start debe ser anterior o igual a end")

    records = container.audit_logger.get_location_history(location, start_at, end_at)
    return AuditRecordsRes(records=[_to_audit_record_res(r) for r in records])
