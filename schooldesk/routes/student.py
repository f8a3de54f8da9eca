from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.models.student import Student
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import StudentStatus
from schooldesk.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.student_service import StudentService

router = APIRouter(
    prefix="/school/{school_id}/students",
    tags=["Students"],
    responses={
        404: {"description": "Student not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

admin_access = tenant_access(UserRoleEnum.SUPER_ADMIN, UserRoleEnum.SCHOOL_ADMIN)
staff_access = tenant_access(UserRoleEnum.SUPER_ADMIN, UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
member_access = tenant_access(*UserRoleEnum)


async def _with_parent_names(service: StudentService, students: List[Student]) -> List[StudentResponse]:
    names = await service.parent_names(students)
    responses = []
    for student in students:
        response = StudentResponse.model_validate(student)
        response.parent_name = names.get(student.parent_id)
        responses.append(response)
    return responses


@router.get("/search", response_model=ListResponse[StudentResponse])
async def search_students(
    query: Optional[str] = Query(None, alias="q"),
    limit: int = Query(10, ge=1, le=50),
    context: TenantContext = Depends(admin_access)
):
    students = await StudentService(context).search(query, limit)
    return ListResponse[StudentResponse](
        count=len(students),
        data=[StudentResponse.model_validate(student) for student in students]
    )


@router.post("", response_model=APIResponse[StudentResponse], status_code=status.HTTP_201_CREATED)
async def create_student(data: StudentCreate, context: TenantContext = Depends(admin_access)):
    student = await StudentService(context).create_student(data)
    return APIResponse[StudentResponse](
        message="Student created successfully",
        data=StudentResponse.model_validate(student)
    )


@router.get("", response_model=ListResponse[StudentResponse])
async def list_students(
    class_id: Optional[str] = Query(None, alias="class"),
    section: Optional[str] = None,
    parent_id: Optional[str] = Query(None, alias="parentId"),
    status_filter: Optional[StudentStatus] = Query(None, alias="status"),
    context: TenantContext = Depends(staff_access)
):
    service = StudentService(context)
    students = await service.list_students(
        class_id=class_id,
        section=section,
        status=status_filter.value if status_filter else None,
        parent_id=parent_id
    )
    return ListResponse[StudentResponse](
        count=len(students),
        data=await _with_parent_names(service, students)
    )


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
async def get_student(student_id: str, context: TenantContext = Depends(member_access)):
    service = StudentService(context)
    student = await service.get(student_id)
    data = await _with_parent_names(service, [student])
    return APIResponse[StudentResponse](data=data[0])


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
async def update_student(student_id: str, data: StudentUpdate, context: TenantContext = Depends(admin_access)):
    student = await StudentService(context).update_student(student_id, data)
    return APIResponse[StudentResponse](
        message="Student updated successfully",
        data=StudentResponse.model_validate(student)
    )


@router.delete("/{student_id}", response_model=APIResponse[StudentResponse])
async def delete_student(student_id: str, context: TenantContext = Depends(admin_access)):
    student = await StudentService(context).delete_student(student_id)
    return APIResponse[StudentResponse](
        message="Student deactivated successfully",
        data=StudentResponse.model_validate(student)
    )
