"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI application (create_app factory)
  - Own the engine Container for the app lifetime (app.state.container)
  - Configure middleware (request context)
  - Mount the router with access/cards/audit endpoints under /v1
  - Expose health check and metrics endpoints

Collaborators:
  - container.build_container: composition root
  - RequestContextMiddleware: request id, terminal id and logging context
  - interfaces.api.http.router: business endpoints
  - api.exception_handlers: RFC 7807 mapping

Notes:
  - /v1 prefix allows API versioning
  - /healthz follows Kubernetes health check convention
  - /metrics exposes Prometheus metrics
  - Shutdown drains the durable audit sink
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from ..container import Container, build_container
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import RequestContextMiddleware
from ..interfaces.api.http.router import router
from .exception_handlers import register_exception_handlers


def create_app(
    settings: Settings | None = None, container: Container | None = None
) -> FastAPI:
    """
    Build a FastAPI app bound to its own Container.

    Tests pass their own settings (or a prebuilt container) to get an
    isolated engine per app.
    """
    settings = settings or get_settings()
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Access engine API starting up",
            extra={
                "app_env": settings.app_env,
                "token_ttl_seconds": settings.token_ttl_seconds,
                "secure_card_ids": settings.secure_card_ids,
            },
        )
        try:
            yield
        finally:
            app.state.container.close()
            logger.info("Access engine API shutting down")

    app = FastAPI(
        title="Access Engine API",
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "access", "description": "Tokens and access decisions"},
            {"name": "cards", "description": "Card issuance and lifecycle"},
            {"name": "audit", "description": "Audit trail queries"},
        ],
    )
    app.state.container = container

    app.add_middleware(RequestContextMiddleware)

    app.include_router(router, prefix="/v1")

    register_exception_handlers(app)

    @app.get("/healthz")
    def healthz(request: Request):
        engine = request.app.state.container
        return {
            "ok": True,
            "durable_audit": engine.audit_sink is not None,
            "request_id": getattr(request.state, "request_id", None),
        }

    @app.get("/metrics")
    def metrics():
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    return app
