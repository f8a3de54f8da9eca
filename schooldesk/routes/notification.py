from typing import Optional

from fastapi import APIRouter, Depends, Query

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.base import APIResponse, PaginatedResponse
from schooldesk.schemas.common import NotificationType
from schooldesk.schemas.notification import MarkedRead, NotificationResponse, UnreadCount
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.notification_service import NotificationService

router = APIRouter(
    prefix="/school/{school_id}/notifications",
    tags=["Notifications"],
    responses={
        404: {"description": "Not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

member_access = tenant_access(
    UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER, UserRoleEnum.STUDENT, UserRoleEnum.PARENT
)


@router.get("", response_model=PaginatedResponse[NotificationResponse])
async def list_notifications(
    is_read: Optional[bool] = Query(None, alias="isRead"),
    notification_type: Optional[NotificationType] = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    context: TenantContext = Depends(member_access)
):
    result = await NotificationService(context).list_notifications(
        is_read=is_read,
        notification_type=notification_type.value if notification_type else None,
        page=page,
        limit=limit
    )
    return PaginatedResponse[NotificationResponse](
        count=len(result["items"]),
        data=[NotificationResponse.model_validate(item) for item in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        pages=result["pages"]
    )


@router.get("/unread-count", response_model=APIResponse[UnreadCount])
async def unread_count(context: TenantContext = Depends(member_access)):
    count = await NotificationService(context).unread_count()
    return APIResponse[UnreadCount](data=UnreadCount(unread_count=count))


@router.put("/read-all", response_model=APIResponse[MarkedRead])
async def mark_all_read(context: TenantContext = Depends(member_access)):
    updated = await NotificationService(context).mark_all_read()
    return APIResponse[MarkedRead](
        message="All notifications marked as read",
        data=MarkedRead(updated=updated)
    )


@router.put("/{notification_id}/read", response_model=APIResponse[NotificationResponse])
async def mark_read(notification_id: str, context: TenantContext = Depends(member_access)):
    notification = await NotificationService(context).mark_read(notification_id)
    return APIResponse[NotificationResponse](
        message="Notification marked as read",
        data=NotificationResponse.model_validate(notification)
    )


@router.delete("/{notification_id}", response_model=APIResponse[dict])
async def delete_notification(notification_id: str, context: TenantContext = Depends(member_access)):
    await NotificationService(context).delete_notification(notification_id)
    return APIResponse[dict](message="Notification deleted successfully", data={"notificationId": notification_id})
