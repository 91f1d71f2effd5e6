"""Application bootstrap.

Wires repository, clock, domain event bus, integration bridge, publisher,
handlers and dispatcher from ``Settings``.  The handler map is built once
here and handed to the ``Dispatcher`` by reference; nothing is looked up
globally at dispatch time.

Deployment mode follows configuration:

- no ``database.url``  → in-memory repository
- no ``broker.redis_url`` → no-op publisher
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine

from .application.dispatcher import Dispatcher, HandlerRegistry
from .application.handlers import (
    CreateProductHandler,
    DeleteProductHandler,
    GetProductByIdHandler,
    ListProductsHandler,
    UpdateProductHandler,
)
from .application.intents import (
    CreateProductCommand,
    DeleteProductCommand,
    GetProductByIdQuery,
    ListProductsQuery,
    UpdateProductCommand,
)
from .core.clock import IClock, WallClock
from .core.config import Settings, load_settings
from .core.enums import PublisherBackend, StorageBackend
from .core.errors import ConfigError
from .domain.repositories import IProductRepository
from .messaging.bridge import IntegrationEventBridge
from .messaging.event_bus import InMemoryDomainEventBus
from .messaging.publishers import IMessagePublisher, NoOpPublisher, RedisStreamsPublisher
from .observability.logger import setup_logging
from .storage.memory import InMemoryProductRepository

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Everything a transport needs to serve requests."""

    settings: Settings
    dispatcher: Dispatcher
    repository: IProductRepository
    event_bus: InMemoryDomainEventBus
    publisher: IMessagePublisher
    clock: IClock
    engine: AsyncEngine | None = None
    _started: bool = field(default=False, repr=False)

    async def start(self) -> None:
        """Open process-lifetime resources (broker connection, tables)."""
        if self._started:
            return
        if self.engine is not None and self.settings.database.create_tables:
            from .storage.postgres import create_all

            await create_all(self.engine)
        await self.publisher.start()
        self._started = True
        logger.info(
            "Application started (storage=%s, publisher=%s)",
            self.settings.storage_backend.value,
            self.settings.publisher_backend.value,
        )

    async def stop(self) -> None:
        if not self._started:
            return
        try:
            await self.publisher.stop()
        finally:
            if self.engine is not None:
                await self.engine.dispose()
            self._started = False
            logger.info("Application stopped")


def build_dispatcher(
    repository: IProductRepository,
    event_bus: InMemoryDomainEventBus,
    clock: IClock,
    max_page_size: int = 100,
) -> Dispatcher:
    """Bind one handler per intent type and freeze the map."""
    registry = HandlerRegistry()
    registry.register(
        CreateProductCommand, CreateProductHandler(repository, event_bus, clock),
    )
    registry.register(
        UpdateProductCommand, UpdateProductHandler(repository, event_bus, clock),
    )
    registry.register(
        DeleteProductCommand, DeleteProductHandler(repository, event_bus, clock),
    )
    registry.register(GetProductByIdQuery, GetProductByIdHandler(repository))
    registry.register(
        ListProductsQuery, ListProductsHandler(repository, max_page_size),
    )
    return registry.build()


def build_repository(settings: Settings) -> tuple[IProductRepository, AsyncEngine | None]:
    if settings.storage_backend == StorageBackend.MEMORY:
        logger.info("No database configured; using in-memory repository")
        return InMemoryProductRepository(), None

    from .storage.postgres import (
        SqlAlchemyProductRepository,
        create_engine,
        create_session_factory,
    )

    url = settings.database.url
    if not url:
        raise ConfigError("SQL storage selected but database.url is not set")
    engine = create_engine(
        url,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        echo=settings.database.echo,
    )
    return SqlAlchemyProductRepository(create_session_factory(engine)), engine


def build_publisher(settings: Settings) -> IMessagePublisher:
    if settings.publisher_backend == PublisherBackend.NOOP:
        return NoOpPublisher()
    redis_url = settings.broker.redis_url
    if not redis_url:
        raise ConfigError("Redis publisher selected but broker.redis_url is not set")
    return RedisStreamsPublisher(
        redis_url=redis_url,
        max_stream_length=settings.broker.max_stream_length,
    )


def build_application(
    settings: Settings | None = None,
    *,
    repository: IProductRepository | None = None,
    publisher: IMessagePublisher | None = None,
    clock: IClock | None = None,
    event_bus: InMemoryDomainEventBus | None = None,
    configure_logging: bool = False,
) -> Application:
    """Wire the full pipeline.

    *repository*, *publisher*, *clock* and *event_bus* override what
    *settings* would select (tests, embedding).  The default bus keeps no
    event history.
    """
    settings = settings or Settings()
    settings.validate_consistency()

    if configure_logging:
        setup_logging(
            level=settings.observability.log_level,
            format=settings.observability.log_format,
            service=settings.service_name,
        )

    clock = clock or WallClock()
    engine: AsyncEngine | None = None
    if repository is None:
        repository, engine = build_repository(settings)
    publisher = publisher or build_publisher(settings)

    event_bus = event_bus or InMemoryDomainEventBus()
    IntegrationEventBridge(publisher, settings.broker.exchange, clock).attach(event_bus)

    dispatcher = build_dispatcher(
        repository, event_bus, clock, settings.pagination.max_page_size,
    )
    return Application(
        settings=settings,
        dispatcher=dispatcher,
        repository=repository,
        event_bus=event_bus,
        publisher=publisher,
        clock=clock,
        engine=engine,
    )


def application_from_config(
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> Application:
    """Load settings (TOML + env) and wire the pipeline with logging configured."""
    settings = load_settings(config_path=config_path, overrides=overrides)
    return build_application(settings, configure_logging=True)
