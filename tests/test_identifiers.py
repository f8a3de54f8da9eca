import pytest

from schooldesk.models import School
from schooldesk.utils.identifiers import (
    generate_sequential_id,
    next_sequential_id,
    normalize_email,
    slugify_database_name,
)


@pytest.mark.parametrize("last_id,expected", [
    (None, "ADM00001"),
    ("ADM00007", "ADM00008"),
    ("ADM99999", "ADM100000"),
    ("garbage", "ADM00001"),
])
def test_next_sequential_id(last_id, expected):
    assert next_sequential_id("ADM", last_id) == expected


def test_slugify_database_name():
    assert slugify_database_name("Green Valley High!", "SCHL00004") == "school_green_valley_high_00004"
    assert slugify_database_name("***", "SCHL00001") == "school_tenant_00001"


def test_normalize_email():
    assert normalize_email("  Tom@Example.COM ") == "tom@example.com"
    assert normalize_email(None) == ""


async def test_generate_sequential_id_orders_by_length(database):
    async with database.session() as db:
        for school_id in ("SCHL99999", "SCHL100000"):
            db.add(School(school_id=school_id, database_name=f"school_x_{school_id}", school_name=school_id))
        await db.commit()

        assert await generate_sequential_id(db, School.school_id, "SCHL") == "SCHL100001"
