from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import HomeworkStatus
from schooldesk.schemas.homework import HomeworkCreate, HomeworkResponse, HomeworkUpdate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.homework_service import HomeworkService

router = APIRouter(
    prefix="/school/{school_id}/homework",
    tags=["Homework"],
    responses={
        404: {"description": "Not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

staff_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
member_access = tenant_access(
    UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER, UserRoleEnum.STUDENT, UserRoleEnum.PARENT
)


@router.post("", response_model=APIResponse[HomeworkResponse], status_code=status.HTTP_201_CREATED)
async def create_homework(data: HomeworkCreate, context: TenantContext = Depends(staff_access)):
    homework = await HomeworkService(context).create_homework(data)
    return APIResponse[HomeworkResponse](
        message="Homework created successfully",
        data=HomeworkResponse.model_validate(homework)
    )


@router.get("/class/{class_id}", response_model=ListResponse[HomeworkResponse])
async def list_class_homework(
    class_id: str,
    section_id: Optional[str] = Query(None, alias="sectionId"),
    status_filter: Optional[HomeworkStatus] = Query(None, alias="status"),
    subject_id: Optional[str] = Query(None, alias="subjectId"),
    context: TenantContext = Depends(staff_access)
):
    items = await HomeworkService(context).list_for_class(
        class_id,
        section_id=section_id,
        status=status_filter.value if status_filter else None,
        subject_id=subject_id
    )
    return ListResponse[HomeworkResponse](count=len(items), data=items)


@router.get("/student/{student_id}", response_model=ListResponse[HomeworkResponse])
async def list_student_homework(
    student_id: str,
    status_filter: Optional[HomeworkStatus] = Query(None, alias="status"),
    subject_id: Optional[str] = Query(None, alias="subjectId"),
    context: TenantContext = Depends(member_access)
):
    items = await HomeworkService(context).list_for_student(
        student_id,
        status=status_filter.value if status_filter else None,
        subject_id=subject_id
    )
    return ListResponse[HomeworkResponse](count=len(items), data=items)


@router.get("/student/{student_id}/upcoming", response_model=ListResponse[HomeworkResponse])
async def upcoming_student_homework(
    student_id: str,
    limit: int = Query(5, ge=1, le=50),
    context: TenantContext = Depends(member_access)
):
    items = await HomeworkService(context).upcoming_for_student(student_id, limit=limit)
    return ListResponse[HomeworkResponse](count=len(items), data=items)


@router.get("/teacher/{teacher_id}", response_model=ListResponse[HomeworkResponse])
async def list_teacher_homework(
    teacher_id: str,
    status_filter: Optional[HomeworkStatus] = Query(None, alias="status"),
    class_id: Optional[str] = Query(None, alias="classId"),
    context: TenantContext = Depends(staff_access)
):
    items = await HomeworkService(context).list_for_teacher(
        teacher_id,
        status=status_filter.value if status_filter else None,
        class_id=class_id
    )
    return ListResponse[HomeworkResponse](count=len(items), data=items)


@router.get("/{homework_id}", response_model=APIResponse[HomeworkResponse])
async def get_homework(homework_id: str, context: TenantContext = Depends(member_access)):
    homework = await HomeworkService(context).get_homework_details(homework_id)
    return APIResponse[HomeworkResponse](data=homework)


@router.put("/{homework_id}", response_model=APIResponse[HomeworkResponse])
async def update_homework(homework_id: str, data: HomeworkUpdate, context: TenantContext = Depends(staff_access)):
    homework = await HomeworkService(context).update_homework(homework_id, data)
    return APIResponse[HomeworkResponse](
        message="Homework updated successfully",
        data=HomeworkResponse.model_validate(homework)
    )


@router.delete("/{homework_id}", response_model=APIResponse[HomeworkResponse])
async def delete_homework(homework_id: str, context: TenantContext = Depends(staff_access)):
    homework = await HomeworkService(context).delete_homework(homework_id)
    return APIResponse[HomeworkResponse](
        message="Homework deleted successfully",
        data=HomeworkResponse.model_validate(homework)
    )
