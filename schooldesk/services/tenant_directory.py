# schooldesk/services/tenant_directory.py
from typing import Awaitable, Callable, Dict, Optional

from sqlalchemy import select

from schooldesk.core.database import Database
from schooldesk.core.errors import InvalidArgument, TenantNotFound
from schooldesk.core.logging import logger
from schooldesk.models.school import School

SchoolLookup = Callable[[str], Awaitable[Optional[School]]]


class TenantDirectory:
    """
    Resolves a school id to the name of the logical database holding the
    school's data.

    Only the ``school_id -> database_name`` mapping is cached; it never
    changes once a school is provisioned. School status is mutable, so
    ``get_record`` always reads through to the store.
    """

    def __init__(self, database: Optional[Database] = None, lookup: Optional[SchoolLookup] = None):
        if lookup is None and database is None:
            raise ValueError("TenantDirectory needs a database or a lookup function")
        self._database = database
        self._lookup = lookup or self._lookup_school
        self._cache: Dict[str, str] = {}

    async def _lookup_school(self, school_id: str) -> Optional[School]:
        async with self._database.session() as session:
            result = await session.execute(select(School).where(School.school_id == school_id))
            return result.scalar_one_or_none()

    async def resolve_database_name(self, school_id: Optional[str]) -> str:
        if not school_id:
            raise InvalidArgument("School ID is required")

        cached = self._cache.get(school_id)
        if cached is not None:
            return cached

        school = await self._lookup(school_id)
        if school is None or not school.database_name:
            logger.info(f"No tenant directory entry for school {school_id}")
            raise TenantNotFound(details={"schoolId": school_id})

        # Concurrent misses may both land here; they store the same value
        self._cache[school_id] = school.database_name
        return school.database_name

    async def get_record(self, school_id: Optional[str]) -> School:
        if not school_id:
            raise InvalidArgument("School ID is required")

        school = await self._lookup(school_id)
        if school is None:
            raise TenantNotFound(details={"schoolId": school_id})

        if school.database_name:
            self._cache.setdefault(school_id, school.database_name)
        return school

    def clear(self, school_id: Optional[str] = None) -> None:
        if school_id is None:
            self._cache.clear()
        else:
            self._cache.pop(school_id, None)

    def __contains__(self, school_id: str) -> bool:
        return school_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)
