import asyncio
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from schooldesk.core.config import get_database_url, settings
from schooldesk.core.errors import InvalidArgument, ServiceUnavailable
from schooldesk.core.logging import logger
from schooldesk.models import TENANT_SCHEMA, Base, TenantBase


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool configuration for the primary engine"""
    if make_url(url).get_backend_name() == "sqlite":
        # One shared connection, so attached tenant databases stay visible
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }

    return {
        "pool_pre_ping": True,                  # Connection health check
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_TIMEOUT_SECONDS,
        "pool_recycle": 1800,                   # Recycle connections after 30 minutes
        "connect_args": {
            "timeout": settings.DB_TIMEOUT_SECONDS,
            "command_timeout": settings.DB_TIMEOUT_SECONDS,
        },
    }


def validate_database_name(database_name: str) -> str:
    if not database_name or not database_name.replace("_", "").isalnum():
        raise InvalidArgument(f"Invalid database name: {database_name!r}")
    return database_name


class Database:
    """
    Owns the primary engine and its connected state.

    Tenant handles are derived from ``engine`` by the tenant connection pool;
    this class never hands out per-tenant engines itself.
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or get_database_url()
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=settings.DB_ECHO if echo is None else echo,
            **_engine_options(self.url)
        )
        self._connected = False
        self._reconnect_lock: Optional[asyncio.Lock] = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def connect(self) -> None:
        """Establish the primary connection, retrying transient failures"""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(settings.DB_CONNECT_ATTEMPTS),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            retry=retry_if_exception_type((OperationalError, DBAPIError, OSError)),
            reraise=True,
        ):
            with attempt:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))

        self._connected = True
        logger.info("Primary database connection established")

    async def ensure_connected(self) -> None:
        """Reconnect when marked disconnected; concurrent callers share one attempt"""
        if self._connected:
            return
        if self._reconnect_lock is None:
            self._reconnect_lock = asyncio.Lock()
        async with self._reconnect_lock:
            if not self._connected:
                await self.connect()

    def mark_disconnected(self) -> None:
        if self._connected:
            logger.warning("Primary database connection lost; will reconnect on next request")
        self._connected = False

    async def disconnect(self) -> None:
        self._connected = False
        await self.engine.dispose()
        logger.info("Primary database connection closed")

    async def init_models(self) -> None:
        """Create platform tables"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def create_tenant_database(self, database_name: str) -> None:
        """Create the logical database of a school and all tenant tables in it"""
        validate_database_name(database_name)

        async with self.engine.begin() as conn:
            if self.dialect_name == "sqlite":
                attached = await conn.execute(text("PRAGMA database_list"))
                if database_name not in {row[1] for row in attached}:
                    await conn.execute(
                        text(f"ATTACH DATABASE :path AS \"{database_name}\""),
                        {"path": self._sqlite_attach_path(database_name)}
                    )
            else:
                await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{database_name}"'))

            tenant_conn = await conn.execution_options(
                schema_translate_map={TENANT_SCHEMA: database_name}
            )
            await tenant_conn.run_sync(TenantBase.metadata.create_all)

        logger.info(f"Tenant database ready: {database_name}")

    async def drop_tenant_database(self, database_name: str) -> None:
        """Remove a logical database whose school was never registered"""
        validate_database_name(database_name)

        async with self.engine.begin() as conn:
            if self.dialect_name == "sqlite":
                attached = await conn.execute(text("PRAGMA database_list"))
                if database_name in {row[1] for row in attached}:
                    await conn.execute(text(f"DETACH DATABASE \"{database_name}\""))
            else:
                await conn.execute(text(f'DROP SCHEMA IF EXISTS "{database_name}" CASCADE'))

        logger.warning(f"Dropped tenant database {database_name}")

    def _sqlite_attach_path(self, database_name: str) -> str:
        main_path = make_url(self.url).database
        if not main_path or main_path == ":memory:":
            return ":memory:"
        return os.path.join(os.path.dirname(os.path.abspath(main_path)), f"{database_name}.db")

    @asynccontextmanager
    async def session(self, bind: Optional[AsyncEngine] = None) -> AsyncGenerator[AsyncSession, None]:
        """
        Session bound to the primary engine, or to a tenant handle when given.
        Usage: async with database.session() as session:
        """
        session = AsyncSession(
            bind=bind or self.engine,
            expire_on_commit=False,    # Don't expire objects after commit
            autoflush=False            # Explicit flush management
        )
        try:
            yield session
        except (OperationalError, TimeoutError, asyncio.TimeoutError) as e:
            self.mark_disconnected()
            raise ServiceUnavailable() from e
        except DBAPIError as e:
            if e.connection_invalidated:
                self.mark_disconnected()
                raise ServiceUnavailable() from e
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
