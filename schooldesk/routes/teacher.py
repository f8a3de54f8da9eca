from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import RecordStatus
from schooldesk.schemas.teacher import TeacherCreate, TeacherResponse, TeacherUpdate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.teacher_service import TeacherService

router = APIRouter(
    prefix="/school/{school_id}/teachers",
    tags=["Teachers"],
    responses={
        404: {"description": "Teacher not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

admin_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN)
staff_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)


@router.post("", response_model=APIResponse[TeacherResponse], status_code=status.HTTP_201_CREATED)
async def create_teacher(data: TeacherCreate, context: TenantContext = Depends(admin_access)):
    teacher = await TeacherService(context).create_teacher(data)
    return APIResponse[TeacherResponse](
        message="Teacher created successfully",
        data=TeacherResponse.model_validate(teacher)
    )


@router.get("", response_model=ListResponse[TeacherResponse])
async def list_teachers(
    department: Optional[str] = None,
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    context: TenantContext = Depends(admin_access)
):
    teachers = await TeacherService(context).list_teachers(
        department=department,
        status=status_filter.value if status_filter else None
    )
    return ListResponse[TeacherResponse](
        count=len(teachers),
        data=[TeacherResponse.model_validate(teacher) for teacher in teachers]
    )


@router.get("/{teacher_id}", response_model=APIResponse[TeacherResponse])
async def get_teacher(teacher_id: str, context: TenantContext = Depends(staff_access)):
    teacher = await TeacherService(context).get(teacher_id)
    return APIResponse[TeacherResponse](data=TeacherResponse.model_validate(teacher))


@router.put("/{teacher_id}", response_model=APIResponse[TeacherResponse])
async def update_teacher(teacher_id: str, data: TeacherUpdate, context: TenantContext = Depends(admin_access)):
    teacher = await TeacherService(context).update_teacher(teacher_id, data)
    return APIResponse[TeacherResponse](
        message="Teacher updated successfully",
        data=TeacherResponse.model_validate(teacher)
    )


@router.delete("/{teacher_id}", response_model=APIResponse[TeacherResponse])
async def delete_teacher(teacher_id: str, context: TenantContext = Depends(admin_access)):
    teacher = await TeacherService(context).delete_teacher(teacher_id)
    return APIResponse[TeacherResponse](
        message="Teacher deactivated successfully",
        data=TeacherResponse.model_validate(teacher)
    )
