from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import cast

from agora.config import Config
from agora.core.modules.store.base import SessionStore
from agora.core.modules.store.mongo import MongoSessionStore


class Service:
    """Base class for services with direct session store access."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store
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

    from agora.core.modules.action.service import ActionService  # noqa: PLC0415
    from agora.core.modules.code.service import CodeService  # noqa: PLC0415
    from agora.core.modules.session.service import SessionService  # noqa: PLC0415
    from agora.core.modules.sweep.service import SweepService  # noqa: PLC0415

    code: CodeService
    session: SessionService
    action: ActionService
    sweep: SweepService

    def __init__(self, store: SessionStore) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters: the sweep starts last and stops first
        service_configs = [
            ("code", "agora.core.modules.code.service", "CodeService"),
            ("session", "agora.core.modules.session.service", "SessionService"),
            ("action", "agora.core.modules.action.service", "ActionService"),
            ("sweep", "agora.core.modules.sweep.service", "SweepService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(store)
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
        """Stop all services in reverse start order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, the session store, and all service instances."""

    config: Config
    store: SessionStore
    services: Services

    def __init__(self, config: Config, store: SessionStore | None = None) -> None:
        """Initialize core with config and a store (MongoDB unless one is given)."""
        self.config = config
        self.store = store if store is not None else MongoSessionStore.from_url(config.database_url)
        self.services = Services(self.store)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Prepare the store, then start all services."""
        await self.store.on_start()
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services, then release the store."""
        await self.services.stop_all()
        await self.store.on_stop()
