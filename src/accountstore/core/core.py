from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from accountstore.config import Config

if TYPE_CHECKING:
    from accountstore.core.modules.account.service import AccountStore


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""


class Core:
    """Container owning the MongoDB client and the account store built on it."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    accounts: AccountStore

    def __init__(self, config: Config) -> None:
        from accountstore.core.modules.account.service import AccountStore  # noqa: PLC0415

        self.config = config
        self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard")
        self.database = self.mongo_client.get_database(config.resolved_database_name)
        self.accounts = AccountStore(self.database)
        self._services: list[Service] = [self.accounts]

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        for service in self._services:
            await service.on_start()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        for service in self._services:
            await service.on_stop()
        await self.mongo_client.aclose()
