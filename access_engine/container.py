"""
===============================================================================
TARJETA CRC — access_engine/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (audit chain, fábrica, políticas, tokens, repos)
    siguiendo DIP.
  - Centralizar decisiones runtime basadas en Settings (config).
  - Ser dueño de cada instancia: sin singletons de proceso; la app HTTP
    guarda el Container en app.state y los tests crean el suyo.

Colaboradores:
  - crosscutting.config.Settings
  - application.* (servicios)
  - infrastructure.* (sink durable, repos en memoria, retry)
  - identity.tokens.TokenService

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (servicios dependen de puertos)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .application.access_control import AccessControlService, Clock
from .application.audit_logger import (
    DetailedAuditLoggerDecorator,
    InMemoryAuditLogger,
    MetricsAuditLoggerDecorator,
)
from .application.card_factory import CardFactory, build_card_factory
from .application.card_management import CardManagementService
from .application.floor_access import FloorAccessService, build_floor_access_service
from .crosscutting.config import Settings, get_settings
from .crosscutting.logger import logger
from .domain.services import AuditLogger
from .identity.tokens import TokenService
from .infrastructure.audit_sink import FileAuditSink
from .infrastructure.repositories.in_memory import InMemoryCardRepository
from .infrastructure.services.retry import create_retry_decorator


@dataclass
class Container:
    """Grafo de objetos de una instancia del motor."""

    settings: Settings
    audit_logger: AuditLogger
    audit_sink: FileAuditSink | None
    card_factory: CardFactory
    card_repository: InMemoryCardRepository
    card_management: CardManagementService
    floor_access: FloorAccessService
    tokens: TokenService
    access_control: AccessControlService

    def close(self) -> None:
        """Drena y detiene el sink durable (shutdown)."""
        if self.audit_sink is not None:
            self.audit_sink.flush(timeout=5.0)
            self.audit_sink.close()


def build_audit_logger(
    settings: Settings,
) -> tuple[AuditLogger, FileAuditSink | None]:
    """Detailed(Metrics(InMemory(sink)))."""
    sink: FileAuditSink | None = None
    if settings.audit_log_path:
        sink = FileAuditSink(
            settings.audit_log_path,
            queue_size=settings.audit_queue_size,
            retry_decorator=create_retry_decorator(
                max_attempts=settings.retry_max_attempts,
                base_delay=settings.retry_base_delay_seconds,
                max_delay=settings.retry_max_delay_seconds,
            ),
        )
    base = InMemoryAuditLogger(sink=sink)
    return DetailedAuditLoggerDecorator(MetricsAuditLoggerDecorator(base)), sink


def build_container(
    settings: Settings | None = None, *, clock: Clock | None = None
) -> Container:
    """
    Arma el grafo de servicios. `clock` reemplaza al reloj del sitio
    (settings.now) en todos los servicios que dependen del tiempo.
    """
    settings = settings or get_settings()
    clock = clock or settings.now

    audit_logger, sink = build_audit_logger(settings)
    factory = build_card_factory(settings, audit_logger)
    repository = InMemoryCardRepository()
    card_management = CardManagementService(
        repository, factory, audit_logger, clock=clock
    )
    floor_access = build_floor_access_service(settings, audit_logger, clock=clock)
    tokens = TokenService(
        settings.token_secret,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
        clock=clock,
    )
    access_control = AccessControlService(
        card_management, tokens, floor_access, audit_logger, clock=clock
    )

    logger.info(
        "Access engine container built",
        extra={
            "app_env": settings.app_env,
            "secure_card_ids": settings.secure_card_ids,
            "site_timezone": settings.site_timezone,
            "durable_audit": sink is not None,
        },
    )

    return Container(
        settings=settings,
        audit_logger=audit_logger,
        audit_sink=sink,
        card_factory=factory,
        card_repository=repository,
        card_management=card_management,
        floor_access=floor_access,
        tokens=tokens,
        access_control=access_control,
    )
