from schooldesk.schemas.teacher import TeacherCreate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.teacher_service import TeacherService

from .conftest import PASSWORD, auth_header, make_token

CONFIG = {
    "academicYear": "2025-2026",
    "workingDays": ["monday", "tuesday"],
    "periods": [
        {"periodNumber": 1, "name": "P1", "startTime": "08:00", "endTime": "08:40"},
        {"periodNumber": 2, "name": "Break", "startTime": "08:40", "endTime": "09:00", "type": "break"},
        {"periodNumber": 3, "name": "P3", "startTime": "09:00", "endTime": "09:40"},
    ],
}


def admin_headers(seeded):
    return auth_header(make_token(UserRoleEnum.SCHOOL_ADMIN, seeded["school_a"]))


def entry_body(seeded, **overrides):
    body = {
        "classId": seeded["class"].class_id,
        "sectionId": seeded["class"].sections[0]["sectionId"],
        "subjectId": seeded["subject"].subject_id,
        "teacherId": seeded["teacher"].teacher_id,
        "dayOfWeek": "monday",
        "periodNumber": 1,
        "roomId": "R1",
    }
    body.update(overrides)
    return body


async def add_teacher(tenant_context, seeded, email="lucy@greenvalley.edu"):
    async with tenant_context(seeded["school_a"]) as context:
        teacher = await TeacherService(context).create_teacher(TeacherCreate(
            first_name="Lucy", last_name="Wanjiru", email=email, password=PASSWORD, subjects=[], classes=[]
        ))
    return teacher.teacher_id


async def test_config_lifecycle(client, seeded):
    base = f"/api/school/{seeded['school_a']}/timetable"
    response = await client.post(f"{base}/config", json=CONFIG, headers=admin_headers(seeded))
    assert response.status_code == 201, response.text
    first = response.json()["data"]
    assert first["isActive"] is True
    assert first["periods"][0]["startTime"] == "08:00:00"

    duplicate = await client.post(f"{base}/config", json=CONFIG, headers=admin_headers(seeded))
    assert duplicate.status_code == 400

    second = await client.post(
        f"{base}/config", json={**CONFIG, "academicYear": "2026-2027"}, headers=admin_headers(seeded)
    )
    assert second.status_code == 201

    # Creating a config deactivates the others
    active = await client.get(f"{base}/config/active", headers=admin_headers(seeded))
    assert active.json()["data"]["academicYear"] == "2026-2027"

    await client.put(f"{base}/config/{first['configId']}/activate", headers=admin_headers(seeded))
    active = await client.get(f"{base}/config/active", headers=admin_headers(seeded))
    assert active.json()["data"]["configId"] == first["configId"]

    listed = await client.get(f"{base}/config", headers=admin_headers(seeded))
    assert listed.json()["count"] == 2
    assert sum(config["isActive"] for config in listed.json()["data"]) == 1


async def test_active_config_missing_is_not_found(client, seeded):
    response = await client.get(
        f"/api/school/{seeded['school_a']}/timetable/config/active", headers=admin_headers(seeded)
    )
    assert response.status_code == 404


async def test_entry_conflicts_are_reported(client, seeded, tenant_context):
    base = f"/api/school/{seeded['school_a']}/timetable"
    created = await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))
    assert created.status_code == 201, created.text

    # Same teacher, same room, same section in the same slot
    response = await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))
    assert response.status_code == 409
    body = response.json()
    assert body["errorKind"] == "ScheduleConflict"
    kinds = {conflict["type"] for conflict in body["details"]["conflicts"]}
    assert kinds == {"teacher", "room", "class"}

    # Another teacher in another room still collides with the section
    other_teacher = await add_teacher(tenant_context, seeded)
    response = await client.post(
        f"{base}/entries",
        json=entry_body(seeded, teacherId=other_teacher, roomId="R2"),
        headers=admin_headers(seeded)
    )
    assert response.status_code == 409
    assert [c["type"] for c in response.json()["details"]["conflicts"]] == ["class"]


async def test_update_excludes_the_entry_itself(client, seeded):
    base = f"/api/school/{seeded['school_a']}/timetable"
    created = await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))
    entry_id = created.json()["data"]["entryId"]

    response = await client.put(
        f"{base}/entries/{entry_id}", json={"notes": "Bring calculators"}, headers=admin_headers(seeded)
    )
    assert response.status_code == 200, response.text
    assert response.json()["data"]["notes"] == "Bring calculators"


async def test_bulk_create_reports_failures(client, seeded):
    base = f"/api/school/{seeded['school_a']}/timetable"
    response = await client.post(
        f"{base}/entries/bulk",
        json={"entries": [
            entry_body(seeded),
            entry_body(seeded, periodNumber=3),
            entry_body(seeded, roomId="R9"),
        ]},
        headers=admin_headers(seeded)
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    assert len(data["created"]) == 2
    assert [failure["index"] for failure in data["failed"]] == [2]
    assert data["failed"][0]["conflicts"]


async def test_deleted_entry_frees_the_slot(client, seeded):
    base = f"/api/school/{seeded['school_a']}/timetable"
    created = await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))
    entry_id = created.json()["data"]["entryId"]

    deleted = await client.delete(f"{base}/entries/{entry_id}", headers=admin_headers(seeded))
    assert deleted.json()["data"]["status"] == "inactive"

    again = await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))
    assert again.status_code == 201


async def test_class_and_teacher_views_carry_names(client, seeded):
    base = f"/api/school/{seeded['school_a']}/timetable"
    await client.post(f"{base}/config", json=CONFIG, headers=admin_headers(seeded))
    await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))

    student_token = make_token(UserRoleEnum.STUDENT, seeded["school_a"], account_id=seeded["student"].student_id)
    view = await client.get(f"{base}/class/{seeded['class'].class_id}", headers=auth_header(student_token))
    assert view.status_code == 200, view.text
    data = view.json()["data"]
    assert data["config"]["academicYear"] == "2025-2026"
    assert data["entries"][0]["teacherName"] == "Tom Kariuki"
    assert data["entries"][0]["subjectName"] == "Mathematics"

    teacher_token = make_token(UserRoleEnum.TEACHER, seeded["school_a"], account_id=seeded["teacher"].teacher_id)
    view = await client.get(f"{base}/teacher/{seeded['teacher'].teacher_id}", headers=auth_header(teacher_token))
    entry = view.json()["data"]["entries"][0]
    assert entry["className"] == "Grade 5"
    assert entry["sectionName"] == "East"

    by_day = await client.get(f"{base}/day/monday", headers=admin_headers(seeded))
    assert by_day.json()["count"] == 1

    # Students cannot read a teacher's timetable
    denied = await client.get(f"{base}/teacher/{seeded['teacher'].teacher_id}", headers=auth_header(student_token))
    assert denied.status_code == 403


async def test_free_periods_and_free_teachers(client, seeded, tenant_context):
    base = f"/api/school/{seeded['school_a']}/timetable"
    teacher_id = seeded["teacher"].teacher_id

    missing = await client.get(f"{base}/teacher/{teacher_id}/free-periods", headers=admin_headers(seeded))
    assert missing.status_code == 404

    await client.post(f"{base}/config", json=CONFIG, headers=admin_headers(seeded))
    await client.post(f"{base}/entries", json=entry_body(seeded), headers=admin_headers(seeded))
    other_teacher = await add_teacher(tenant_context, seeded)

    response = await client.get(f"{base}/teacher/{teacher_id}/free-periods", headers=admin_headers(seeded))
    free = response.json()["data"]["freePeriods"]
    # Breaks are never free periods
    assert [p["periodNumber"] for p in free["monday"]] == [3]
    assert [p["periodNumber"] for p in free["tuesday"]] == [1, 3]

    response = await client.get(
        f"{base}/free-teachers", params={"dayOfWeek": "monday", "periodNumber": 1}, headers=admin_headers(seeded)
    )
    assert [t["teacherId"] for t in response.json()["data"]] == [other_teacher]


async def test_conflict_report_groups_double_bookings(client, seeded, tenant_context):
    from schooldesk.models.timetable import TimetableEntry

    # Seed a clash directly, the way an import outside the API could leave one
    async with tenant_context(seeded["school_a"]) as context:
        for entry_id, section in (("TTE00001", "SEC00001"), ("TTE00002", "SEC00002")):
            context.session.add(TimetableEntry(
                entry_id=entry_id, class_id=seeded["class"].class_id, section_id=section,
                subject_id=seeded["subject"].subject_id, teacher_id=seeded["teacher"].teacher_id,
                day_of_week="monday", period_number=1, room_id="LAB"
            ))
        await context.session.commit()

    response = await client.get(
        f"/api/school/{seeded['school_a']}/timetable/conflicts", headers=admin_headers(seeded)
    )
    report = response.json()["data"]
    assert report["totalConflicts"] == 2
    by_type = {conflict["type"]: conflict for conflict in report["conflicts"]}
    assert by_type["teacher"]["entries"] == ["TTE00001", "TTE00002"]
    assert by_type["room"]["description"] == 'Room "LAB" double-booked'
    assert by_type["room"]["dayOfWeek"] == "monday"


async def test_timetable_writes_are_admin_only(client, seeded):
    teacher_token = make_token(UserRoleEnum.TEACHER, seeded["school_a"], account_id=seeded["teacher"].teacher_id)
    response = await client.post(
        f"/api/school/{seeded['school_a']}/timetable/entries",
        json=entry_body(seeded),
        headers=auth_header(teacher_token)
    )
    assert response.status_code == 403
