"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/access.py
===============================================================================

Name:
    Access Router

Responsibilities:
    - Emitir tokens de acceso por facade id.
    - Exponer la Decision API (grant_access).
    - Validaciones de borde: piso inválido -> 422, tarjeta desconocida
      en emisión de token -> 404; en decisión -> granted=false.

Collaborators:
    - application.access_control.AccessControlService
    - identity.tokens.TokenService
    - dependencies (container, tiempo del sitio)
    - schemas.access
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .....container import Container
from ..dependencies import get_container, require_card
from ..schemas.access import AccessDecisionReq, AccessDecisionRes, TokenReq, TokenRes

router = APIRouter()


@router.post("/tokens", response_model=TokenRes, tags=["access"])
def issue_token(req: TokenReq, container: Container = Depends(get_container)):
    card = require_card(container, req.facade_id)
    value = container.tokens.generate_token(card.real_id)
    issued = container.tokens.get_token(card.real_id)
    return TokenRes(token=value, expires_at=issued.expires_at)


@router.post("/access/decisions", response_model=AccessDecisionRes, tags=["access"])
def decide_access(req: AccessDecisionReq, container: Container = Depends(get_container)):
    granted = container.access_control.grant_access(
        req.facade_id, req.floor, req.room, req.token
    )
    return AccessDecisionRes(granted=granted)
