"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/cards.py
===============================================================================

Name:
    Cards Router

Responsibilities:
    - Emitir tarjetas (response solo con facade ids).
    - Consultar estado, reemplazar permisos, revocar y reactivar por facade id.

Collaborators:
    - application.card_management.CardManagementService
    - dependencies (container, conversión de permisos)
    - schemas.cards
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from .....container import Container
from .....crosscutting.error_responses import not_found
from .....domain.cards import AccessCard, CardIdentifier
from ..dependencies import get_container, issue_datetime, require_card, to_permission
from ..schemas.cards import (
    CardActionReq,
    CardActionRes,
    CardRes,
    IssueCardReq,
    ModifyPermissionsReq,
)

router = APIRouter()


def _to_card_res(card: AccessCard) -> CardRes:
    return CardRes(
        facade_ids=list(card.facade_ids),
        active=card.active,
        permission=card.permission.describe(),
        created_at=card.created_at,
        last_used_at=card.last_used_at,
    )


@router.post(
    "/cards",
    response_model=CardRes,
    status_code=status.HTTP_201_CREATED,
    tags=["cards"],
)
def issue_card(req: IssueCardReq, container: Container = Depends(get_container)):
    settings = container.settings
    identifier = CardIdentifier(
        issuer_id=req.issuer_id,
        serial_number=req.serial_number,
        issue_date=issue_datetime(req.issue_date, settings),
    )
    card = container.card_management.issue_card(
        identifier, to_permission(req.permission, settings), issued_by=req.issued_by
    )
    return _to_card_res(card)


@router.get("/cards/{facade_id}", response_model=CardRes, tags=["cards"])
def get_card(facade_id: str, container: Container = Depends(get_container)):
    return _to_card_res(require_card(container, facade_id))


@router.put("/cards/{facade_id}/permissions", response_model=CardRes, tags=["cards"])
def modify_permissions(
    facade_id: str,
    req: ModifyPermissionsReq,
    container: Container = Depends(get_container),
):
    card = require_card(container, facade_id)
    updated = container.card_management.modify_permissions(
        card.real_id,
        to_permission(req.permission, container.settings),
        modified_by=req.modified_by,
    )
    if updated is None:
        # Eliminada entre el lookup y la modificación.
        raise not_found("Tarjeta", facade_id)
    return _to_card_res(updated)


@router.post("/cards/{facade_id}/revoke", response_model=CardActionRes, tags=["cards"])
def revoke_card(
    facade_id: str, req: CardActionReq, container: Container = Depends(get_container)
):
    card = require_card(container, facade_id)
    ok = container.card_management.revoke_card(card.real_id, revoked_by=req.actor)
    return CardActionRes(ok=ok)


@router.post(
    "/cards/{facade_id}/reactivate", response_model=CardActionRes, tags=["cards"]
)
def reactivate_card(
    facade_id: str, req: CardActionReq, container: Container = Depends(get_container)
):
    card = require_card(container, facade_id)
    ok = container.card_management.reactivate_card(card.real_id, modified_by=req.actor)
    return CardActionRes(ok=ok)
