from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate
from schooldesk.schemas.base import APIResponse, ListResponse, PaginatedResponse
from schooldesk.schemas.common import AnnouncementPriority
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.announcement_service import AnnouncementService

router = APIRouter(
    prefix="/school/{school_id}/announcements",
    tags=["Announcements"],
    responses={
        404: {"description": "Not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

author_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
teacher_access = tenant_access(UserRoleEnum.TEACHER)
member_access = tenant_access(
    UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER, UserRoleEnum.STUDENT, UserRoleEnum.PARENT
)


@router.post("", response_model=APIResponse[AnnouncementResponse], status_code=status.HTTP_201_CREATED)
async def create_announcement(data: AnnouncementCreate, context: TenantContext = Depends(author_access)):
    announcement = await AnnouncementService(context).create_announcement(data)
    return APIResponse[AnnouncementResponse](
        message="Announcement created successfully",
        data=AnnouncementResponse.model_validate(announcement)
    )


@router.get("", response_model=PaginatedResponse[AnnouncementResponse])
async def list_announcements(
    category: Optional[str] = None,
    priority: Optional[AnnouncementPriority] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    context: TenantContext = Depends(member_access)
):
    result = await AnnouncementService(context).list_announcements(
        category=category,
        priority=priority.value if priority else None,
        page=page,
        limit=limit
    )
    return PaginatedResponse[AnnouncementResponse](
        count=len(result["items"]),
        data=[AnnouncementResponse.model_validate(item) for item in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        pages=result["pages"]
    )


@router.get("/my", response_model=ListResponse[AnnouncementResponse])
async def my_announcements(context: TenantContext = Depends(teacher_access)):
    announcements = await AnnouncementService(context).my_announcements()
    return ListResponse[AnnouncementResponse](
        count=len(announcements),
        data=[AnnouncementResponse.model_validate(item) for item in announcements]
    )


@router.get("/{announcement_id}", response_model=APIResponse[AnnouncementResponse])
async def get_announcement(announcement_id: str, context: TenantContext = Depends(member_access)):
    announcement = await AnnouncementService(context).get_visible_announcement(announcement_id)
    return APIResponse[AnnouncementResponse](data=AnnouncementResponse.model_validate(announcement))


@router.put("/{announcement_id}", response_model=APIResponse[AnnouncementResponse])
async def update_announcement(
    announcement_id: str,
    data: AnnouncementUpdate,
    context: TenantContext = Depends(author_access)
):
    announcement = await AnnouncementService(context).update_announcement(announcement_id, data)
    return APIResponse[AnnouncementResponse](
        message="Announcement updated successfully",
        data=AnnouncementResponse.model_validate(announcement)
    )


@router.delete("/{announcement_id}", response_model=APIResponse[AnnouncementResponse])
async def delete_announcement(announcement_id: str, context: TenantContext = Depends(author_access)):
    announcement = await AnnouncementService(context).delete_announcement(announcement_id)
    return APIResponse[AnnouncementResponse](
        message="Announcement archived successfully",
        data=AnnouncementResponse.model_validate(announcement)
    )
