from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from recipebox.config import Config
from recipebox.errors import StoreUnavailableError

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    from recipebox.core.modules.access.service import AccessService  # noqa: PLC0415
    from recipebox.core.modules.admin.service import AdminService  # noqa: PLC0415
    from recipebox.core.modules.recipe.service import RecipeService  # noqa: PLC0415
    from recipebox.core.modules.token.service import TokenService  # noqa: PLC0415

    admin: AdminService
    token: TokenService
    access: AccessService
    recipe: RecipeService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters: the admin identity must be reconciled before anything serves requests
        service_configs = [
            ("admin", "recipebox.core.modules.admin.service", "AdminService"),
            ("token", "recipebox.core.modules.token.service", "TokenService"),
            ("access", "recipebox.core.modules.access.service", "AccessService"),
            ("recipe", "recipebox.core.modules.recipe.service", "RecipeService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services that have cleanup logic."""
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, database, and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    services: Services

    def __init__(self, config: Config, mongo_client: AsyncMongoClient[dict[str, Any]] | None = None) -> None:
        """Initialize core with config, MongoDB, and auto-register services."""
        self.config = config
        if mongo_client is None:
            mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard")
        self.mongo_client = mongo_client
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def ensure_database_reachable(self) -> None:
        """Ping MongoDB, raise StoreUnavailableError if it does not answer."""
        try:
            await self.database.command("ping")
        except PyMongoError as e:
            logger.error("database_unreachable", database_url=_redact_url(self.config.database_url), error=str(e))
            raise StoreUnavailableError(f"Database is not reachable: {e}") from e

    async def on_start(self) -> None:
        """Check the database, then start all services."""
        await self.ensure_database_reachable()
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        await self.mongo_client.aclose()


def _redact_url(url: str) -> str:
    """Drop credentials from a connection URL before logging it."""
    parsed = urlparse(url)
    if parsed.password is None:
        return url
    host = parsed.netloc.rsplit("@", 1)[1]
    return parsed._replace(netloc=f"{parsed.username}:***@{host}").geturl()
