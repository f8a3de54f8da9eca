import pytest
from sqlalchemy import select

from schooldesk.core.database import Database
from schooldesk.core.errors import InvalidArgument, NotConnected
from schooldesk.models import Teacher
from schooldesk.services.tenant_pool import TenantConnectionPool


async def test_handle_is_cached_per_database(tenant_pool):
    first = tenant_pool.get_tenant_handle("school_alpha_00001")
    second = tenant_pool.get_tenant_handle("school_alpha_00001")
    other = tenant_pool.get_tenant_handle("school_beta_00002")

    assert first is second
    assert first is not other
    assert len(tenant_pool) == 2
    assert "school_alpha_00001" in tenant_pool


async def test_handles_share_the_primary_pool(database, tenant_pool):
    handle = tenant_pool.get_tenant_handle("school_alpha_00001")

    assert handle.sync_engine.pool is database.engine.sync_engine.pool


async def test_empty_database_name_is_invalid(tenant_pool):
    with pytest.raises(InvalidArgument):
        tenant_pool.get_tenant_handle("")


async def test_requires_connected_primary():
    database = Database("sqlite+aiosqlite://")
    pool = TenantConnectionPool(database)

    with pytest.raises(NotConnected):
        pool.get_tenant_handle("school_alpha_00001")
    assert len(pool) == 0
    await database.disconnect()


async def test_sessions_are_isolated_per_tenant(database, directory, tenant_pool, seeded):
    name_a = await directory.resolve_database_name(seeded["school_a"])
    name_b = await directory.resolve_database_name(seeded["school_b"])

    async with tenant_pool.session(name_a) as session:
        teachers_a = (await session.execute(select(Teacher))).scalars().all()
    async with tenant_pool.session(name_b) as session:
        teachers_b = (await session.execute(select(Teacher))).scalars().all()

    assert [t.email for t in teachers_a] == ["tom@greenvalley.edu"]
    assert teachers_b == []
