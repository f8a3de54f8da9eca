from datetime import date, timedelta

from sqlalchemy import select

from schooldesk.models.notification import Notification
from schooldesk.schemas.user import UserRoleEnum

from .conftest import auth_header, make_token


def teacher_headers(seeded):
    return auth_header(make_token(UserRoleEnum.TEACHER, seeded["school_a"], account_id=seeded["teacher"].teacher_id))


def student_headers(seeded, student_id=None):
    return auth_header(make_token(
        UserRoleEnum.STUDENT, seeded["school_a"], account_id=student_id or seeded["student"].student_id
    ))


def homework_body(seeded, **overrides):
    body = {
        "classId": seeded["class"].class_id,
        "sectionId": seeded["class"].sections[0]["sectionId"],
        "subjectId": seeded["subject"].subject_id,
        "title": "Fractions",
        "description": "Exercise 4.2",
        "dueDate": (date.today() + timedelta(days=3)).isoformat(),
    }
    body.update(overrides)
    return body


async def create_homework(client, seeded, headers=None, **overrides):
    response = await client.post(
        f"/api/school/{seeded['school_a']}/homework",
        json=homework_body(seeded, **overrides),
        headers=headers or teacher_headers(seeded)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_teacher_assigns_as_themselves_and_notifies_class(client, seeded, tenant_context):
    homework = await create_homework(client, seeded)
    assert homework["teacherId"] == seeded["teacher"].teacher_id
    assert homework["status"] == "active"
    assert homework["assignedDate"] == date.today().isoformat()

    async with tenant_context(seeded["school_a"]) as context:
        result = await context.session.execute(
            select(Notification).where(Notification.reference_id == homework["homeworkId"])
        )
        recipients = sorted((n.user_id, n.user_role) for n in result.scalars().all())
    assert recipients == sorted([
        (seeded["student"].student_id, "student"),
        (seeded["parent"].parent_id, "parent"),
    ])


async def test_school_admin_must_name_the_teacher(client, seeded):
    admin_headers = auth_header(make_token(UserRoleEnum.SCHOOL_ADMIN, seeded["school_a"]))
    response = await client.post(
        f"/api/school/{seeded['school_a']}/homework", json=homework_body(seeded), headers=admin_headers
    )
    assert response.status_code == 400

    homework = await create_homework(
        client, seeded, headers=admin_headers, teacherId=seeded["teacher"].teacher_id
    )
    assert homework["teacherId"] == seeded["teacher"].teacher_id


async def test_unknown_section_is_rejected(client, seeded):
    response = await client.post(
        f"/api/school/{seeded['school_a']}/homework",
        json=homework_body(seeded, sectionId="SEC00099"),
        headers=teacher_headers(seeded)
    )
    assert response.status_code == 404


async def test_class_listing_filters(client, seeded):
    await create_homework(client, seeded)
    whole_class = await create_homework(client, seeded, sectionId=None, title="Reading")
    base = f"/api/school/{seeded['school_a']}/homework/class/{seeded['class'].class_id}"

    everything = await client.get(base, headers=teacher_headers(seeded))
    assert everything.json()["count"] == 2

    await client.delete(
        f"/api/school/{seeded['school_a']}/homework/{whole_class['homeworkId']}", headers=teacher_headers(seeded)
    )
    active = await client.get(base, params={"status": "active"}, headers=teacher_headers(seeded))
    assert [item["title"] for item in active.json()["data"]] == ["Fractions"]
    assert active.json()["data"][0]["subjectName"] == "Mathematics"


async def test_student_sees_own_and_upcoming_homework(client, seeded):
    await create_homework(client, seeded, title="Later", dueDate=(date.today() + timedelta(days=9)).isoformat())
    await create_homework(client, seeded, title="Sooner", dueDate=(date.today() + timedelta(days=1)).isoformat())
    await create_homework(client, seeded, title="Past", dueDate=(date.today() - timedelta(days=1)).isoformat())
    base = f"/api/school/{seeded['school_a']}/homework/student/{seeded['student'].student_id}"

    listed = await client.get(base, headers=student_headers(seeded))
    assert listed.status_code == 200, listed.text
    assert listed.json()["count"] == 3
    overdue = {item["title"]: item["isOverdue"] for item in listed.json()["data"]}
    assert overdue["Past"] is True and overdue["Sooner"] is False

    upcoming = await client.get(f"{base}/upcoming", params={"limit": 5}, headers=student_headers(seeded))
    assert [item["title"] for item in upcoming.json()["data"]] == ["Sooner", "Later"]


async def test_student_cannot_read_another_students_homework(client, seeded):
    response = await client.get(
        f"/api/school/{seeded['school_a']}/homework/student/{seeded['student'].student_id}",
        headers=student_headers(seeded, student_id="STU09999")
    )
    assert response.status_code == 403


async def test_parent_reads_their_childs_homework(client, seeded):
    await create_homework(client, seeded)
    parent_headers = auth_header(make_token(UserRoleEnum.PARENT, seeded["school_a"], account_id=seeded["parent"].parent_id))
    response = await client.get(
        f"/api/school/{seeded['school_a']}/homework/student/{seeded['student'].student_id}",
        headers=parent_headers
    )
    assert response.status_code == 200
    assert response.json()["count"] == 1

    stranger = auth_header(make_token(UserRoleEnum.PARENT, seeded["school_a"], account_id="PRT09999"))
    response = await client.get(
        f"/api/school/{seeded['school_a']}/homework/student/{seeded['student'].student_id}",
        headers=stranger
    )
    assert response.status_code == 403


async def test_only_the_author_or_admin_can_edit(client, seeded):
    homework = await create_homework(client, seeded)
    url = f"/api/school/{seeded['school_a']}/homework/{homework['homeworkId']}"

    other_teacher = auth_header(make_token(UserRoleEnum.TEACHER, seeded["school_a"], account_id="TCH09999"))
    response = await client.put(url, json={"title": "Changed"}, headers=other_teacher)
    assert response.status_code == 403

    response = await client.put(url, json={"title": "Decimals"}, headers=teacher_headers(seeded))
    assert response.json()["data"]["title"] == "Decimals"

    admin_headers = auth_header(make_token(UserRoleEnum.SCHOOL_ADMIN, seeded["school_a"]))
    response = await client.delete(url, headers=admin_headers)
    assert response.json()["data"]["status"] == "cancelled"

    details = await client.get(url, headers=student_headers(seeded))
    assert details.json()["data"]["teacherName"] == "Tom Kariuki"


async def test_teacher_listing(client, seeded):
    await create_homework(client, seeded)
    response = await client.get(
        f"/api/school/{seeded['school_a']}/homework/teacher/{seeded['teacher'].teacher_id}",
        headers=teacher_headers(seeded)
    )
    assert response.json()["count"] == 1
    assert response.json()["data"][0]["className"] == "Grade 5"
