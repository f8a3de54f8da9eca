import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("LOG_TO_FILES", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from contextlib import asynccontextmanager

import httpx
import pytest

from schooldesk import create_app
from schooldesk.core.database import Database
from schooldesk.core.dependencies import TenantContext
from schooldesk.core.security import create_access_token
from schooldesk.schemas.academics import ClassCreate, SectionCreate, SubjectCreate
from schooldesk.schemas.auth import CreateAdminRequest, SessionClaims
from schooldesk.schemas.parents import ParentCreate
from schooldesk.schemas.school import SchoolAdminCreate, SchoolCreate
from schooldesk.schemas.student import StudentCreate
from schooldesk.schemas.teacher import TeacherCreate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.admin_service import AdminService
from schooldesk.services.class_service import ClassService
from schooldesk.services.parent_service import ParentService
from schooldesk.services.school_admin_service import SchoolAdminService
from schooldesk.services.school_service import SchoolService
from schooldesk.services.student_service import StudentService
from schooldesk.services.subject_service import SubjectService
from schooldesk.services.teacher_service import TeacherService
from schooldesk.services.tenant_directory import TenantDirectory
from schooldesk.services.tenant_pool import TenantConnectionPool

PASSWORD = "secret123"


@pytest.fixture
async def database():
    db = Database("sqlite+aiosqlite://")
    await db.connect()
    await db.init_models()
    yield db
    await db.disconnect()


@pytest.fixture
def directory(database):
    return TenantDirectory(database)


@pytest.fixture
def tenant_pool(database):
    return TenantConnectionPool(database)


@pytest.fixture
def tenant_context(database, directory, tenant_pool):
    """Open a service context for a school, the way tenant routes get one"""

    @asynccontextmanager
    async def open_context(school_id: str, role: UserRoleEnum = UserRoleEnum.SCHOOL_ADMIN):
        database_name = await directory.resolve_database_name(school_id)
        claims = SessionClaims(account_id="SEED", email="seed@example.com", role=role, school_id=school_id)
        async with tenant_pool.session(database_name) as session:
            yield TenantContext(
                school_id=school_id,
                database_name=database_name,
                session=session,
                claims=claims
            )

    return open_context


async def provision_school(database, directory, name: str) -> str:
    async with database.session() as db:
        school = await SchoolService(db, database, directory).create_school(
            SchoolCreate(school_name=name, email=f"office@{name.lower().replace(' ', '')}.edu")
        )
    return school.school_id


@pytest.fixture
async def seeded(database, directory, tenant_context):
    """
    Two schools with one account of every role in the first and a school
    admin in the second.
    """
    async with database.session() as db:
        admin = await AdminService(db).create_admin(
            CreateAdminRequest(username="root", email="root@platform.io", password="rootpass123")
        )

    school_a = await provision_school(database, directory, "Green Valley")
    school_b = await provision_school(database, directory, "Blue Hill")

    async with database.session() as db:
        service = SchoolAdminService(db)
        admin_a = await service.create_user(SchoolAdminCreate(
            username="gvadmin", email="admin@greenvalley.edu", password=PASSWORD,
            school_id=school_a, first_name="Grace", last_name="Otieno"
        ))
        admin_b = await service.create_user(SchoolAdminCreate(
            username="bhadmin", email="admin@bluehill.edu", password=PASSWORD,
            school_id=school_b, first_name="Brian", last_name="Mwangi"
        ))

    async with tenant_context(school_a) as context:
        subject = await SubjectService(context).create_subject(
            SubjectCreate(name="Mathematics", code="math")
        )
        teacher = await TeacherService(context).create_teacher(TeacherCreate(
            first_name="Tom", last_name="Kariuki", email="tom@greenvalley.edu", password=PASSWORD,
            department="Science", subjects=[subject.subject_id], classes=[]
        ))
        class_ = await ClassService(context).create_class(ClassCreate(
            name="Grade 5", sections=[SectionCreate(name="East", class_teacher_id=teacher.teacher_id)]
        ))
        parent = await ParentService(context).create_parent(ParentCreate(
            first_name="Paula", last_name="Njeri", email="paula@example.com", password=PASSWORD,
            phone="0700000000", relationship="mother"
        ))
        student = await StudentService(context).create_student(StudentCreate(**{
            "firstName": "Sam",
            "lastName": "Njeri",
            "email": "sam@greenvalley.edu",
            "password": PASSWORD,
            "class": class_.class_id,
            "section": class_.sections[0]["sectionId"],
            "rollNumber": "7",
            "parentId": parent.parent_id,
        }))

    return {
        "admin": admin,
        "school_a": school_a,
        "school_b": school_b,
        "admin_a": admin_a,
        "admin_b": admin_b,
        "teacher": teacher,
        "student": student,
        "parent": parent,
        "class": class_,
        "subject": subject,
    }


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


def make_token(role: UserRoleEnum, school_id=None, account_id="ACC00001", email="user@example.com") -> str:
    return create_access_token(
        SessionClaims(account_id=account_id, email=email, role=role, school_id=school_id)
    )


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def login(client, email: str, password: str = PASSWORD) -> str:
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]
