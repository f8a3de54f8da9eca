import pytest

from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.email_registry_service import EmailRegistryService

from .conftest import PASSWORD, auth_header, login, make_token


@pytest.fixture
async def root(client, seeded):
    return auth_header(await login(client, "root@platform.io", "rootpass123"))


async def test_create_school_provisions_tenant(client, root, directory):
    response = await client.post(
        "/api/platform/schools",
        json={"schoolName": "Sunrise Academy", "email": "info@sunrise.edu"},
        headers=root
    )

    assert response.status_code == 201
    school = response.json()["data"]
    assert school["schoolId"] == "SCHL00003"
    assert school["databaseName"] == "school_sunrise_academy_00003"
    assert school["status"] == "active"

    admin = await client.post(
        "/api/platform/users",
        json={
            "username": "sunadmin",
            "email": "admin@sunrise.edu",
            "password": PASSWORD,
            "schoolId": school["schoolId"],
        },
        headers=root
    )
    assert admin.status_code == 201

    token = auth_header(await login(client, "admin@sunrise.edu"))
    teachers = await client.get(f"/api/school/{school['schoolId']}/teachers", headers=token)
    assert teachers.status_code == 200
    assert teachers.json()["count"] == 0


async def test_duplicate_school_name_is_rejected(client, root):
    response = await client.post("/api/platform/schools", json={"schoolName": "green valley"}, headers=root)

    assert response.status_code == 400
    assert response.json()["message"] == "School with this name already exists"


async def test_platform_routes_require_super_admin(client, seeded):
    school_admin = auth_header(await login(client, "admin@greenvalley.edu"))

    response = await client.get("/api/platform/schools", headers=school_admin)

    assert response.status_code == 403
    assert response.json()["errorKind"] == "Forbidden"


async def test_list_and_get_schools(client, root, seeded):
    listed = await client.get("/api/platform/schools", headers=root)
    fetched = await client.get(f"/api/platform/schools/{seeded['school_b']}", headers=root)
    missing = await client.get("/api/platform/schools/SCHL99999", headers=root)

    assert listed.json()["count"] == 2
    assert fetched.json()["data"]["schoolName"] == "Blue Hill"
    assert missing.status_code == 404


async def test_dashboard_stats(client, root, seeded):
    await client.patch(
        f"/api/platform/schools/{seeded['school_b']}/status", json={"status": "inactive"}, headers=root
    )

    response = await client.get("/api/platform/dashboard/stats", headers=root)

    assert response.json()["data"] == {
        "totalSchools": 2,
        "activeSchools": 1,
        "inactiveSchools": 1,
        "totalUsers": 2,
        "activeUsers": 2,
    }


async def test_school_admin_for_unknown_school(client, root):
    response = await client.post(
        "/api/platform/users",
        json={"username": "lost", "email": "lost@nowhere.edu", "password": PASSWORD, "schoolId": "SCHL99999"},
        headers=root
    )

    assert response.status_code == 404


async def test_delete_school_admin_deactivates_registry(client, root, seeded, database):
    user_id = seeded["admin_a"].user_id

    response = await client.delete(f"/api/platform/users/{user_id}", headers=root)
    assert response.status_code == 200

    async with database.session() as db:
        entry = await EmailRegistryService(db).get("admin@greenvalley.edu")
    assert entry.status == "inactive"


async def test_update_school_admin(client, root, seeded):
    user_id = seeded["admin_a"].user_id

    response = await client.put(
        f"/api/platform/users/{user_id}", json={"contactNumber": "0799999999"}, headers=root
    )

    assert response.json()["data"]["contactNumber"] == "0799999999"


async def test_menus_by_role(client, root, seeded):
    await client.post(
        "/api/platform/menus",
        json={"menuName": "Dashboard", "menuUrl": "/dashboard", "menuAccessRoles": ["teacher", "sch_admin"]},
        headers=root
    )
    await client.post(
        "/api/platform/menus",
        json={"menuName": "Timetable", "menuAccessRoles": ["teacher"], "schoolId": seeded["school_b"]},
        headers=root
    )

    teacher = auth_header(make_token(UserRoleEnum.TEACHER, seeded["school_a"]))
    response = await client.get("/api/platform/menus/teacher", headers=teacher)

    assert response.status_code == 200
    assert [menu["menuName"] for menu in response.json()["data"]] == ["Dashboard"]
    assert response.json()["data"][0]["menuOrder"] == ["T1", "A1"]


async def test_menus_of_another_role_are_forbidden(client, root, seeded):
    await client.post(
        "/api/platform/menus",
        json={"menuName": "Schools", "menuAccessRoles": ["super_admin"]},
        headers=root
    )
    student = auth_header(make_token(UserRoleEnum.STUDENT, seeded["school_a"]))

    response = await client.get("/api/platform/menus/super_admin", headers=student)
    assert response.status_code == 403

    response = await client.get("/api/platform/menus/student", headers=student)
    assert response.status_code == 200

    # Super admins may inspect any role's menus
    response = await client.get("/api/platform/menus/student", headers=root)
    assert response.status_code == 200
