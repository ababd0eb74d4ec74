"""
============================================================
TARJETA CRC — infrastructure/repositories/__init__.py
============================================================
Module: infrastructure.repositories (Public Export Surface)

Responsibilities:
  - Exponer una API pública y estable de repositorios de infraestructura.

Policy:
  - Solo re-exporta símbolos; no debe tener side effects.
============================================================
"""

from .in_memory import InMemoryCardRepository

__all__ = ["InMemoryCardRepository"]
