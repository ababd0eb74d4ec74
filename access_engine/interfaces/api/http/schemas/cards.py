"""
===============================================================================
TARJETA CRC — schemas/cards.py
===============================================================================

Módulo:
    Schemas HTTP para gestión de tarjetas

Responsabilidades:
    - Requests de emisión / cambio de permisos / revocación.
    - Response de tarjeta SOLO con facade ids (sin id real).

Colaboradores:
    - routers/cards.py
    - domain.permissions (SimplePermission / TimeLimitedPermission)
===============================================================================
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class PermissionReq(BaseModel):
    """Permiso simple o con ventana temporal (inclusiva)."""

    kind: Literal["simple", "time_limited"] = "simple"
    floors: list[str] = Field(default_factory=list)
    rooms: list[str] = Field(default_factory=list)
    valid_from: datetime | None = None
    valid_until: datetime | None = None

    @model_validator(mode="after")
    def window_required_for_time_limited(self):
        if self.kind == "time_limited" and (
            self.valid_from is None or self.valid_until is None
        ):
            raise ValueError("time_limited permissions require valid_from and valid_until")
        return self


class IssueCardReq(BaseModel):
    issuer_id: str = Field(..., min_length=1, max_length=64)
    serial_number: str = Field(..., min_length=1, max_length=64)
    issue_date: date | None = None
    permission: PermissionReq
    issued_by: str | None = Field(None, max_length=128)


class ModifyPermissionsReq(BaseModel):
    permission: PermissionReq
    modified_by: str = Field(..., min_length=1, max_length=128)


class CardActionReq(BaseModel):
    actor: str = Field(..., min_length=1, max_length=128)


class CardRes(BaseModel):
    facade_ids: list[str]
    active: bool
    permission: str
    created_at: datetime
    last_used_at: datetime


class CardActionRes(BaseModel):
    ok: bool
