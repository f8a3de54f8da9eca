# schooldesk/services/tenant_pool.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from schooldesk.core.database import Database
from schooldesk.core.errors import InvalidArgument, NotConnected
from schooldesk.core.logging import logger
from schooldesk.models.base import TENANT_SCHEMA


class TenantConnectionPool:
    """
    Per-process cache of tenant handles keyed by database name.

    A handle is the primary engine with a schema translation applied, so every
    tenant shares the primary engine's connection pool and creating a handle
    never opens a network connection. Handles are not re-created when the
    primary connection drops; the database middleware reconnects the engine
    and cached handles keep working through it.
    """

    def __init__(self, database: Database):
        self._database = database
        self._handles: Dict[str, AsyncEngine] = {}

    def get_tenant_handle(self, database_name: str) -> AsyncEngine:
        if not database_name:
            raise InvalidArgument("Database name is required")
        if not self._database.is_connected:
            raise NotConnected()

        handle = self._handles.get(database_name)
        if handle is None:
            handle = self._database.engine.execution_options(
                schema_translate_map={TENANT_SCHEMA: database_name}
            )
            self._handles[database_name] = handle
            logger.debug(f"Created tenant handle for {database_name}")
        return handle

    @asynccontextmanager
    async def session(self, database_name: str) -> AsyncGenerator[AsyncSession, None]:
        """Session whose tenant tables resolve to ``database_name``"""
        handle = self.get_tenant_handle(database_name)
        async with self._database.session(bind=handle) as session:
            yield session

    def clear(self) -> None:
        self._handles.clear()

    def __contains__(self, database_name: str) -> bool:
        return database_name in self._handles

    def __len__(self) -> int:
        return len(self._handles)
