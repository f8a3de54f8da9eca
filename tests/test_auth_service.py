import asyncio

import pytest

from schooldesk.core.errors import (
    InvalidCredentials,
    MissingCredentials,
    ServiceUnavailable,
    TenantInactive,
)
from schooldesk.core.security import verify_session_token
from schooldesk.models import Admin
from schooldesk.schemas.common import RecordStatus
from schooldesk.schemas.school import SchoolAdminUpdate
from schooldesk.schemas.student import StudentUpdate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.auth_service import AuthService
from schooldesk.services.school_admin_service import SchoolAdminService
from schooldesk.services.school_service import SchoolService
from schooldesk.services.student_service import StudentService

from .conftest import PASSWORD


@pytest.fixture
def auth_service(database, directory, tenant_pool):
    return AuthService(database, directory, tenant_pool)


async def deactivate_school(database, directory, school_id):
    async with database.session() as db:
        await SchoolService(db, database, directory).set_status(school_id, RecordStatus.INACTIVE)


async def test_teacher_login_carries_subject_names(auth_service, seeded):
    token, user = await auth_service.login("tom@greenvalley.edu", PASSWORD)
    claims = verify_session_token(token)

    assert claims.role == UserRoleEnum.TEACHER
    assert claims.school_id == seeded["school_a"]
    assert claims.database_name.startswith("school_green_valley_")
    assert claims.subject_names == ["Mathematics"]
    assert claims.department == "Science"
    assert user["userId"] == seeded["teacher"].teacher_id
    assert user["schoolName"] == "Green Valley"
    assert "databaseName" not in user


async def test_student_login_resolves_class_names(auth_service, seeded):
    token, _ = await auth_service.login("sam@greenvalley.edu", PASSWORD)
    claims = verify_session_token(token)

    assert claims.role == UserRoleEnum.STUDENT
    assert claims.class_id == seeded["class"].class_id
    assert claims.class_name == "Grade 5"
    assert claims.section_name == "East"
    assert claims.roll_number == "7"


async def test_parent_login_lists_children(auth_service, seeded):
    token, _ = await auth_service.login("paula@example.com", PASSWORD)
    claims = verify_session_token(token)

    assert claims.role == UserRoleEnum.PARENT
    assert claims.student_ids == [seeded["student"].student_id]


async def test_school_admin_login(auth_service, seeded):
    token, user = await auth_service.login("admin@greenvalley.edu", PASSWORD)
    claims = verify_session_token(token)

    assert claims.role == UserRoleEnum.SCHOOL_ADMIN
    assert claims.school_id == seeded["school_a"]
    assert claims.username == "gvadmin"
    assert user["role"] == "sch_admin"


async def test_super_admin_login_has_no_school(auth_service, seeded):
    token, _ = await auth_service.login("root@platform.io", "rootpass123")
    claims = verify_session_token(token)

    assert claims.role == UserRoleEnum.SUPER_ADMIN
    assert claims.school_id is None


async def test_super_admin_with_unset_status_may_log_in(database, auth_service, seeded):
    async with database.session() as db:
        admin = await db.get(Admin, seeded["admin"].id)
        admin.status = None
        await db.commit()

    token, _ = await auth_service.login("root@platform.io", "rootpass123")
    assert verify_session_token(token).role == UserRoleEnum.SUPER_ADMIN


async def test_email_is_normalized(auth_service, seeded):
    token, _ = await auth_service.login("  Tom@GreenValley.EDU ", PASSWORD)

    assert verify_session_token(token).email == "tom@greenvalley.edu"


async def test_wrong_password_matches_unknown_email(auth_service, seeded):
    with pytest.raises(InvalidCredentials) as wrong_password:
        await auth_service.login("tom@greenvalley.edu", "wrong-password")
    with pytest.raises(InvalidCredentials) as unknown_email:
        await auth_service.login("nobody@greenvalley.edu", PASSWORD)

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.error_code == unknown_email.value.error_code
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


@pytest.mark.parametrize("email,password", [(None, PASSWORD), ("tom@greenvalley.edu", None), ("", ""), ("  ", "x")])
async def test_missing_credentials(auth_service, email, password):
    with pytest.raises(MissingCredentials):
        await auth_service.login(email, password)


async def test_inactive_school_blocks_teacher(database, directory, auth_service, seeded):
    await deactivate_school(database, directory, seeded["school_a"])

    with pytest.raises(TenantInactive) as exc_info:
        await auth_service.login("tom@greenvalley.edu", PASSWORD)
    assert exc_info.value.status_code == 403


async def test_inactive_school_blocks_school_admin(database, directory, auth_service, seeded):
    await deactivate_school(database, directory, seeded["school_a"])

    with pytest.raises(TenantInactive):
        await auth_service.login("admin@greenvalley.edu", PASSWORD)


async def test_inactive_school_does_not_affect_other_school(database, directory, auth_service, seeded):
    await deactivate_school(database, directory, seeded["school_a"])

    token, _ = await auth_service.login("admin@bluehill.edu", PASSWORD)
    assert verify_session_token(token).school_id == seeded["school_b"]


async def test_deactivated_account_cannot_log_in(database, auth_service, seeded):
    async with database.session() as db:
        await SchoolAdminService(db).update_user(
            seeded["admin_a"].user_id, SchoolAdminUpdate(status=RecordStatus.INACTIVE)
        )

    with pytest.raises(InvalidCredentials):
        await auth_service.login("admin@greenvalley.edu", PASSWORD)


async def test_graduated_student_cannot_log_in(auth_service, tenant_context, seeded):
    async with tenant_context(seeded["school_a"]) as context:
        await StudentService(context).update_student(
            seeded["student"].student_id, StudentUpdate(status="graduated")
        )

    with pytest.raises(InvalidCredentials):
        await auth_service.login("sam@greenvalley.edu", PASSWORD)


async def test_subject_lookup_failure_degrades_to_empty(auth_service, seeded):
    names = await auth_service.resolve_subject_names("school_missing_99999", ["SUB00001"])

    assert names == []


async def test_unknown_database_falls_back_to_raw_ids(auth_service, seeded):
    class_name, section_name = await auth_service.resolve_class_names(
        "school_missing_99999", "CLS00001", "SEC00001"
    )

    assert (class_name, section_name) == ("CLS00001", "SEC00001")


async def test_slow_lookup_surfaces_as_service_unavailable(database, directory, tenant_pool, seeded, monkeypatch):
    service = AuthService(database, directory, tenant_pool, timeout=0.05)

    async def stalled(email, password):
        await asyncio.sleep(1)

    monkeypatch.setattr(service, "_authenticate", stalled)

    with pytest.raises(ServiceUnavailable):
        await service.login("tom@greenvalley.edu", PASSWORD)


async def test_login_is_repeatable(auth_service, seeded):
    first, _ = await auth_service.login("tom@greenvalley.edu", PASSWORD)
    second, _ = await auth_service.login("tom@greenvalley.edu", PASSWORD)

    assert verify_session_token(first).account_id == verify_session_token(second).account_id


@pytest.fixture
def verify_calls(monkeypatch):
    """Record every bcrypt verification made through the shared context"""
    from schooldesk.core import security

    calls = []
    original = security.pwd_context.verify

    def spy(secret, hashed, **kwargs):
        calls.append(hashed)
        return original(secret, hashed, **kwargs)

    monkeypatch.setattr(security.pwd_context, "verify", spy)
    return calls


async def test_unknown_email_still_runs_bcrypt(auth_service, seeded, verify_calls):
    with pytest.raises(InvalidCredentials):
        await auth_service.login("nobody@greenvalley.edu", PASSWORD)

    assert len(verify_calls) == 1
    assert verify_calls[0].startswith("$2")


async def test_inactive_account_still_runs_bcrypt(database, auth_service, seeded, verify_calls):
    async with database.session() as db:
        await SchoolAdminService(db).update_user(
            seeded["admin_a"].user_id, SchoolAdminUpdate(status=RecordStatus.INACTIVE)
        )

    with pytest.raises(InvalidCredentials):
        await auth_service.login("admin@greenvalley.edu", PASSWORD)

    assert len(verify_calls) == 1


async def test_wrong_password_runs_bcrypt_once(auth_service, seeded, verify_calls):
    with pytest.raises(InvalidCredentials):
        await auth_service.login("tom@greenvalley.edu", "wrong-password")

    assert len(verify_calls) == 1


async def test_password_check_does_not_block_the_event_loop(auth_service, seeded):
    gaps = []
    done = asyncio.Event()

    async def ticker():
        loop = asyncio.get_running_loop()
        last = loop.time()
        while not done.is_set():
            await asyncio.sleep(0.005)
            now = loop.time()
            gaps.append(now - last)
            last = now

    task = asyncio.create_task(ticker())
    try:
        with pytest.raises(InvalidCredentials):
            await auth_service.login("tom@greenvalley.edu", "wrong-password")
        with pytest.raises(InvalidCredentials):
            await auth_service.login("nobody@greenvalley.edu", "wrong-password")
    finally:
        done.set()
        await task

    assert gaps
    assert max(gaps) < 0.05
