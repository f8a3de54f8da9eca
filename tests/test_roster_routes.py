import pytest

from schooldesk.schemas.user import UserRoleEnum

from .conftest import PASSWORD, auth_header, login, make_token


@pytest.fixture
async def school_admin(client, seeded):
    return auth_header(await login(client, "admin@greenvalley.edu"))


async def test_teacher_crud(client, seeded, school_admin):
    school_id = seeded["school_a"]
    created = await client.post(
        f"/api/school/{school_id}/teachers",
        json={
            "firstName": "Nora",
            "lastName": "Wanjiru",
            "email": "Nora@GreenValley.edu",
            "password": PASSWORD,
            "department": "Languages",
        },
        headers=school_admin
    )
    assert created.status_code == 201
    teacher = created.json()["data"]
    assert teacher["teacherId"] == "TCH00002"
    assert teacher["email"] == "nora@greenvalley.edu"

    listed = await client.get(f"/api/school/{school_id}/teachers?department=Languages", headers=school_admin)
    assert listed.json()["count"] == 1

    updated = await client.put(
        f"/api/school/{school_id}/teachers/{teacher['teacherId']}",
        json={"phone": "0711111111"},
        headers=school_admin
    )
    assert updated.json()["data"]["phone"] == "0711111111"

    login_response = await client.post(
        "/api/auth/login", json={"email": "nora@greenvalley.edu", "password": PASSWORD}
    )
    assert login_response.status_code == 200


async def test_soft_delete_blocks_login(client, seeded, school_admin):
    school_id = seeded["school_a"]
    teacher_id = seeded["teacher"].teacher_id

    deleted = await client.delete(f"/api/school/{school_id}/teachers/{teacher_id}", headers=school_admin)
    assert deleted.status_code == 200
    assert deleted.json()["data"]["status"] == "inactive"

    fetched = await client.get(f"/api/school/{school_id}/teachers/{teacher_id}", headers=school_admin)
    assert fetched.json()["data"]["status"] == "inactive"

    response = await client.post("/api/auth/login", json={"email": "tom@greenvalley.edu", "password": PASSWORD})
    assert response.status_code == 401


async def test_email_change_moves_login(client, seeded, school_admin):
    school_id = seeded["school_a"]
    teacher_id = seeded["teacher"].teacher_id

    await client.put(
        f"/api/school/{school_id}/teachers/{teacher_id}",
        json={"email": "tom.k@greenvalley.edu"},
        headers=school_admin
    )

    old = await client.post("/api/auth/login", json={"email": "tom@greenvalley.edu", "password": PASSWORD})
    new = await client.post("/api/auth/login", json={"email": "tom.k@greenvalley.edu", "password": PASSWORD})
    assert old.status_code == 401
    assert new.status_code == 200


async def test_duplicate_email_across_schools_is_rejected(client, seeded):
    other_admin = auth_header(await login(client, "admin@bluehill.edu"))

    response = await client.post(
        f"/api/school/{seeded['school_b']}/teachers",
        json={"firstName": "Tom", "lastName": "Copy", "email": "tom@greenvalley.edu", "password": PASSWORD},
        headers=other_admin
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Email already exists"


async def test_cross_school_access_is_forbidden(client, seeded):
    other_admin = auth_header(await login(client, "admin@bluehill.edu"))

    response = await client.get(f"/api/school/{seeded['school_a']}/teachers", headers=other_admin)

    assert response.status_code == 403
    assert response.json()["message"] == "Access denied to this school"


async def test_role_whitelist_is_enforced(client, seeded):
    teacher = auth_header(await login(client, "tom@greenvalley.edu"))
    school_id = seeded["school_a"]

    assert (await client.get(f"/api/school/{school_id}/teachers", headers=teacher)).status_code == 403
    assert (await client.get(
        f"/api/school/{school_id}/teachers/{seeded['teacher'].teacher_id}", headers=teacher
    )).status_code == 200
    assert (await client.get(f"/api/school/{school_id}/students", headers=teacher)).status_code == 200


async def test_tenant_routes_require_token(client, seeded):
    response = await client.get(f"/api/school/{seeded['school_a']}/students")

    assert response.status_code == 401


async def test_unknown_school_is_not_found(client, seeded):
    token = make_token(UserRoleEnum.SUPER_ADMIN)

    response = await client.get("/api/school/SCHL99999/students", headers=auth_header(token))

    assert response.status_code == 404
    assert response.json()["errorKind"] == "TenantNotFound"


async def test_student_list_includes_parent_name(client, seeded, school_admin):
    response = await client.get(f"/api/school/{seeded['school_a']}/students", headers=school_admin)

    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["parentName"] == "Paula Njeri"
    assert body["data"][0]["class"] == seeded["class"].class_id


async def test_student_can_read_own_record(client, seeded):
    student = auth_header(await login(client, "sam@greenvalley.edu"))
    student_id = seeded["student"].student_id

    response = await client.get(f"/api/school/{seeded['school_a']}/students/{student_id}", headers=student)

    assert response.status_code == 200
    assert response.json()["data"]["studentId"] == student_id


async def test_student_search(client, seeded):
    token = auth_header(make_token(UserRoleEnum.SUPER_ADMIN))

    found = await client.get(f"/api/school/{seeded['school_a']}/students/search?q=sam", headers=token)
    too_short = await client.get(f"/api/school/{seeded['school_a']}/students/search?q=s", headers=token)

    assert found.json()["count"] == 1
    assert too_short.json()["count"] == 0


async def test_parent_student_links(client, seeded, school_admin):
    school_id = seeded["school_a"]
    student_id = seeded["student"].student_id

    created = await client.post(
        f"/api/school/{school_id}/parents",
        json={
            "firstName": "Peter",
            "lastName": "Njeri",
            "email": "peter@example.com",
            "password": PASSWORD,
            "phone": "0722222222",
            "relationship": "father",
            "studentIds": [student_id],
        },
        headers=school_admin
    )
    assert created.status_code == 201
    new_parent_id = created.json()["data"]["parentId"]

    student = await client.get(f"/api/school/{school_id}/students/{student_id}", headers=school_admin)
    assert student.json()["data"]["parentId"] == new_parent_id

    previous = await client.get(
        f"/api/school/{school_id}/parents/{seeded['parent'].parent_id}", headers=school_admin
    )
    assert previous.json()["data"]["studentIds"] == []

    by_student = await client.get(f"/api/school/{school_id}/parents/student/{student_id}", headers=school_admin)
    assert [p["parentId"] for p in by_student.json()["data"]] == [new_parent_id]


async def test_parent_requires_existing_students(client, seeded, school_admin):
    response = await client.post(
        f"/api/school/{seeded['school_a']}/parents",
        json={
            "firstName": "Ghost",
            "lastName": "Parent",
            "email": "ghost.parent@example.com",
            "password": PASSWORD,
            "phone": "0733333333",
            "relationship": "guardian",
            "studentIds": ["STU99999"],
        },
        headers=school_admin
    )

    assert response.status_code == 404


async def test_class_sections(client, seeded, school_admin):
    school_id = seeded["school_a"]
    class_id = seeded["class"].class_id

    added = await client.post(
        f"/api/school/{school_id}/classes/{class_id}/sections", json={"name": "West"}, headers=school_admin
    )
    assert added.status_code == 201
    sections = added.json()["data"]["sections"]
    assert [s["name"] for s in sections] == ["East", "West"]

    duplicate = await client.post(
        f"/api/school/{school_id}/classes/{class_id}/sections", json={"name": "west"}, headers=school_admin
    )
    assert duplicate.status_code == 400

    west_id = sections[1]["sectionId"]
    assigned = await client.put(
        f"/api/school/{school_id}/classes/{class_id}/sections/{west_id}/teacher",
        json={"teacherId": seeded["teacher"].teacher_id},
        headers=school_admin
    )
    assert assigned.json()["data"]["sections"][1]["classTeacherId"] == seeded["teacher"].teacher_id

    removed = await client.delete(
        f"/api/school/{school_id}/classes/{class_id}/sections/{west_id}", headers=school_admin
    )
    assert [s["name"] for s in removed.json()["data"]["sections"]] == ["East"]


async def test_subjects(client, seeded, school_admin):
    school_id = seeded["school_a"]

    created = await client.post(
        f"/api/school/{school_id}/subjects", json={"name": "Physics", "code": "phy"}, headers=school_admin
    )
    assert created.status_code == 201
    assert created.json()["data"]["code"] == "PHY"

    duplicate = await client.post(
        f"/api/school/{school_id}/subjects", json={"name": "Chemistry", "code": "PHY"}, headers=school_admin
    )
    assert duplicate.status_code == 400

    parent = auth_header(await login(client, "paula@example.com"))
    listed = await client.get(f"/api/school/{school_id}/subjects", headers=parent)
    assert [s["name"] for s in listed.json()["data"]] == ["Mathematics", "Physics"]


async def test_validation_errors_use_error_shape(client, seeded, school_admin):
    response = await client.post(
        f"/api/school/{seeded['school_a']}/teachers", json={"firstName": "Only"}, headers=school_admin
    )

    assert response.status_code == 422
    assert response.json()["success"] is False
    assert response.json()["errorKind"] == "ValidationError"


async def test_section_ids_are_not_reused_after_removal(client, seeded, school_admin):
    school_id = seeded["school_a"]
    class_id = seeded["class"].class_id
    url = f"/api/school/{school_id}/classes/{class_id}/sections"

    added = await client.post(url, json={"name": "West"}, headers=school_admin)
    west_id = added.json()["data"]["sections"][1]["sectionId"]
    assert west_id == "SEC00002"

    await client.delete(f"{url}/{west_id}", headers=school_admin)
    added = await client.post(url, json={"name": "North"}, headers=school_admin)

    assert added.status_code == 201
    assert [s["sectionId"] for s in added.json()["data"]["sections"]] == ["SEC00001", "SEC00003"]
