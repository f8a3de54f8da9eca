from datetime import date, timedelta

from schooldesk.schemas.user import UserRoleEnum

from .conftest import auth_header, make_token


def headers_for(seeded, role, account_id=None):
    return auth_header(make_token(role, seeded["school_a"], account_id=account_id or "USR00001"))


def admin_headers(seeded):
    return headers_for(seeded, UserRoleEnum.SCHOOL_ADMIN)


def teacher_headers(seeded):
    return headers_for(seeded, UserRoleEnum.TEACHER, seeded["teacher"].teacher_id)


def student_headers(seeded):
    return headers_for(seeded, UserRoleEnum.STUDENT, seeded["student"].student_id)


def parent_headers(seeded):
    return headers_for(seeded, UserRoleEnum.PARENT, seeded["parent"].parent_id)


async def announce(client, seeded, headers=None, **body):
    payload = {"title": "Sports day", "content": "Friday on the main field", **body}
    response = await client.post(
        f"/api/school/{seeded['school_a']}/announcements", json=payload, headers=headers or admin_headers(seeded)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def titles(client, seeded, headers):
    response = await client.get(f"/api/school/{seeded['school_a']}/announcements", headers=headers)
    assert response.status_code == 200, response.text
    return {item["title"] for item in response.json()["data"]}


async def test_teachers_may_only_target_classes(client, seeded):
    response = await client.post(
        f"/api/school/{seeded['school_a']}/announcements",
        json={"title": "Staff", "content": "Hello", "targetAudience": "all"},
        headers=teacher_headers(seeded)
    )
    assert response.status_code == 403

    created = await announce(
        client, seeded, headers=teacher_headers(seeded),
        title="Grade 5 trip", targetAudience="specific_class", targetClasses=[seeded["class"].class_id]
    )
    assert created["createdBy"] == seeded["teacher"].teacher_id
    assert created["createdByRole"] == "teacher"


async def test_specific_class_requires_classes(client, seeded):
    response = await client.post(
        f"/api/school/{seeded['school_a']}/announcements",
        json={"title": "Trip", "content": "Hello", "targetAudience": "specific_class"},
        headers=admin_headers(seeded)
    )
    assert response.status_code == 422


async def test_listing_is_filtered_by_audience(client, seeded):
    await announce(client, seeded, title="Everyone")
    await announce(client, seeded, title="Staff only", targetAudience="teachers")
    await announce(client, seeded, title="Parents only", targetAudience="parents")
    await announce(
        client, seeded, title="Grade 5",
        targetAudience="specific_class", targetClasses=[seeded["class"].class_id]
    )
    await announce(client, seeded, title="Other class", targetAudience="specific_class", targetClasses=["CLS09999"])
    await announce(
        client, seeded, title="Expired",
        expiryDate=(date.today() - timedelta(days=1)).isoformat(),
        publishDate=(date.today() - timedelta(days=5)).isoformat()
    )

    assert await titles(client, seeded, student_headers(seeded)) == {"Everyone", "Grade 5"}
    assert await titles(client, seeded, parent_headers(seeded)) == {"Everyone", "Parents only", "Grade 5"}
    assert await titles(client, seeded, teacher_headers(seeded)) == {"Everyone", "Staff only"}
    assert await titles(client, seeded, admin_headers(seeded)) == {
        "Everyone", "Staff only", "Parents only", "Grade 5", "Other class"
    }


async def test_listing_is_paginated(client, seeded):
    for number in range(3):
        await announce(client, seeded, title=f"Notice {number}")
    response = await client.get(
        f"/api/school/{seeded['school_a']}/announcements",
        params={"page": 2, "limit": 2},
        headers=admin_headers(seeded)
    )
    body = response.json()
    assert body["total"] == 3
    assert body["pages"] == 2
    assert body["count"] == 1


async def test_audience_receives_notifications(client, seeded):
    await announce(client, seeded, title="Parents evening", targetAudience="parents")
    response = await client.get(f"/api/school/{seeded['school_a']}/notifications", headers=parent_headers(seeded))
    assert [item["title"] for item in response.json()["data"]] == ["New Announcement: Parents evening"]

    response = await client.get(f"/api/school/{seeded['school_a']}/notifications", headers=student_headers(seeded))
    assert response.json()["total"] == 0


async def test_my_announcements_and_ownership(client, seeded):
    created = await announce(
        client, seeded, headers=teacher_headers(seeded),
        targetAudience="specific_class", targetClasses=[seeded["class"].class_id]
    )
    url = f"/api/school/{seeded['school_a']}/announcements/{created['announcementId']}"

    mine = await client.get(f"/api/school/{seeded['school_a']}/announcements/my", headers=teacher_headers(seeded))
    assert mine.json()["count"] == 1

    other_teacher = headers_for(seeded, UserRoleEnum.TEACHER, "TCH09999")
    assert (await client.put(url, json={"title": "Changed"}, headers=other_teacher)).status_code == 403

    updated = await client.put(url, json={"priority": "urgent"}, headers=teacher_headers(seeded))
    assert updated.json()["data"]["priority"] == "urgent"

    archived = await client.delete(url, headers=admin_headers(seeded))
    assert archived.json()["data"]["status"] == "archived"
    assert await titles(client, seeded, student_headers(seeded)) == set()


async def test_hidden_announcement_reads_as_not_found(client, seeded):
    created = await announce(client, seeded, title="Staff only", targetAudience="teachers")
    response = await client.get(
        f"/api/school/{seeded['school_a']}/announcements/{created['announcementId']}",
        headers=student_headers(seeded)
    )
    assert response.status_code == 404
