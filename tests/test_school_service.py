import pytest
from sqlalchemy import select, text

from schooldesk.core.errors import DuplicateResource
from schooldesk.models import School
from schooldesk.schemas.school import SchoolCreate
from schooldesk.services.school_service import SchoolService


async def attached_databases(database):
    async with database.engine.connect() as conn:
        result = await conn.execute(text("PRAGMA database_list"))
        return {row[1] for row in result}


async def test_failed_registration_removes_the_tenant_database(database, directory, monkeypatch):
    before = await attached_databases(database)

    async def lost_race(self, conflict_message="Resource already exists"):
        await self.db.rollback()
        raise DuplicateResource(conflict_message)

    monkeypatch.setattr(SchoolService, "_commit", lost_race)

    with pytest.raises(DuplicateResource):
        async with database.session() as db:
            await SchoolService(db, database, directory).create_school(SchoolCreate(school_name="Hill Top"))

    assert await attached_databases(database) == before
    async with database.session() as db:
        assert (await db.execute(select(School))).scalars().all() == []


async def test_registration_keeps_the_tenant_database(database, directory):
    async with database.session() as db:
        school = await SchoolService(db, database, directory).create_school(SchoolCreate(school_name="Hill Top"))

    assert school.database_name in await attached_databases(database)
