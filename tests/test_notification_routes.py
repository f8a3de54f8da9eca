from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.notification_service import NotificationService

from .conftest import auth_header, make_token


async def seed_notifications(tenant_context, seeded, count=3):
    async with tenant_context(seeded["school_a"]) as context:
        service = NotificationService(context)
        for number in range(count):
            await service.notify_many(
                [(seeded["student"].student_id, "student"), (seeded["parent"].parent_id, "parent")],
                notification_type="announcement" if number % 2 == 0 else "homework_assigned",
                title=f"Notice {number}",
                message="Hello",
                extra={"number": number}
            )


def student_headers(seeded):
    return auth_header(make_token(UserRoleEnum.STUDENT, seeded["school_a"], account_id=seeded["student"].student_id))


async def test_bulk_notifications_get_sequential_ids(tenant_context, seeded):
    async with tenant_context(seeded["school_a"]) as context:
        service = NotificationService(context)
        sent = await service.notify_many(
            [("STU00001", "student"), ("STU00001", "student"), ("PRT00001", "parent"), (None, "parent")],
            notification_type="announcement",
            title="Hi",
            message="Hello"
        )
        assert sent == 2
        sent = await service.notify_many([("STU00002", "student")], notification_type="announcement", title="Hi", message="Hello")
        assert sent == 1

    async with tenant_context(seeded["school_a"], role=UserRoleEnum.STUDENT) as context:
        context.claims.account_id = "STU00002"
        listed = await NotificationService(context).list_notifications()
    assert [n.notification_id for n in listed["items"]] == ["NTF00000003"]


async def test_listing_is_per_account_and_filtered(client, seeded, tenant_context):
    await seed_notifications(tenant_context, seeded)
    base = f"/api/school/{seeded['school_a']}/notifications"

    response = await client.get(base, headers=student_headers(seeded))
    body = response.json()
    assert body["total"] == 3
    assert all(item["userId"] == seeded["student"].student_id for item in body["data"])
    assert "metadata" in body["data"][0]

    response = await client.get(base, params={"type": "announcement"}, headers=student_headers(seeded))
    assert response.json()["total"] == 2

    response = await client.get(base, params={"limit": 2, "page": 2}, headers=student_headers(seeded))
    assert response.json()["count"] == 1
    assert response.json()["pages"] == 2


async def test_read_flags_and_unread_count(client, seeded, tenant_context):
    await seed_notifications(tenant_context, seeded)
    base = f"/api/school/{seeded['school_a']}/notifications"

    unread = await client.get(f"{base}/unread-count", headers=student_headers(seeded))
    assert unread.json()["data"]["unreadCount"] == 3

    first = (await client.get(base, headers=student_headers(seeded))).json()["data"][0]
    marked = await client.put(f"{base}/{first['notificationId']}/read", headers=student_headers(seeded))
    assert marked.json()["data"]["isRead"] is True
    assert marked.json()["data"]["readAt"] is not None

    unread_only = await client.get(base, params={"isRead": "false"}, headers=student_headers(seeded))
    assert unread_only.json()["total"] == 2

    all_read = await client.put(f"{base}/read-all", headers=student_headers(seeded))
    assert all_read.json()["data"]["updated"] == 2

    unread = await client.get(f"{base}/unread-count", headers=student_headers(seeded))
    assert unread.json()["data"]["unreadCount"] == 0

    # The parent's copies are untouched
    parent = auth_header(make_token(UserRoleEnum.PARENT, seeded["school_a"], account_id=seeded["parent"].parent_id))
    unread = await client.get(f"{base}/unread-count", headers=parent)
    assert unread.json()["data"]["unreadCount"] == 3


async def test_cannot_touch_someone_elses_notification(client, seeded, tenant_context):
    await seed_notifications(tenant_context, seeded, count=1)
    base = f"/api/school/{seeded['school_a']}/notifications"
    parent = auth_header(make_token(UserRoleEnum.PARENT, seeded["school_a"], account_id=seeded["parent"].parent_id))
    theirs = (await client.get(base, headers=parent)).json()["data"][0]

    response = await client.put(f"{base}/{theirs['notificationId']}/read", headers=student_headers(seeded))
    assert response.status_code == 404
    response = await client.delete(f"{base}/{theirs['notificationId']}", headers=student_headers(seeded))
    assert response.status_code == 404

    response = await client.delete(f"{base}/{theirs['notificationId']}", headers=parent)
    assert response.status_code == 200
    assert (await client.get(base, headers=parent)).json()["total"] == 0
