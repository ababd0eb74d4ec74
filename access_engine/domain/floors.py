"""
===============================================================================
TARJETA CRC — domain/floors.py
===============================================================================

Módulo:
    Zonas de seguridad (pisos)

Responsabilidades:
    - Definir el catálogo cerrado de pisos (LOW/MEDIUM/HIGH).
    - Parsear nombres de piso en el borde (input inválido != denegado).

Colaboradores:
    - domain.permissions: sets de pisos permitidos.
    - domain.floor_policy / application.floor_access: política por piso.

Notas:
    - security_level es informativo/orden; las decisiones nunca hacen
      aritmética con niveles.
===============================================================================
"""

from __future__ import annotations

from enum import Enum

from ..crosscutting.exceptions import InvalidFloorError


class Floor(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def security_level(self) -> int:
        return _SECURITY_LEVELS[self]


_SECURITY_LEVELS: dict[Floor, int] = {Floor.LOW: 1, Floor.MEDIUM: 2, Floor.HIGH: 3}


def parse_floor(value: Floor | str) -> Floor:
    """
    Acepta un Floor o su nombre (case-insensitive, sin espacios).

    Raises:
        InvalidFloorError: nombre desconocido o tipo inválido.
    """
    if isinstance(value, Floor):
        return value
    if not isinstance(value, str):
        raise InvalidFloorError(f"Piso inválido: {value!r}")
    try:
        return Floor[value.strip().upper()]
    except KeyError as exc:
        raise InvalidFloorError(f"Piso desconocido: {value!r}", original_error=exc)
