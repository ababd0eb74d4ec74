from .access import router as access_router
from .audit import router as audit_router
from .cards import router as cards_router

__all__ = ["access_router", "audit_router", "cards_router"]
