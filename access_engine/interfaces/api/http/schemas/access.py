"""
===============================================================================
TARJETA CRC — schemas/access.py
===============================================================================

Módulo:
    Schemas HTTP para tokens y decisiones de acceso

Responsabilidades:
    - Validar shape de requests (pydantic).
    - DTOs de response estables (el id real nunca se expone).

Colaboradores:
    - routers/access.py
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TokenReq(BaseModel):
    facade_id: str = Field(..., min_length=1, max_length=256)


class TokenRes(BaseModel):
    token: str
    expires_at: datetime


class AccessDecisionReq(BaseModel):
    """
    Pedido de decisión.

    `floor` llega como texto y se valida en el borde (422 si es inválido).
    El instante lo fija el reloj del motor, no el cliente.
    """

    facade_id: str = Field(..., min_length=1, max_length=256)
    floor: str = Field(..., min_length=1, max_length=32)
    room: str | None = Field(None, max_length=128)
    token: str = Field(..., min_length=1, max_length=512)


class AccessDecisionRes(BaseModel):
    granted: bool
