from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.academics import (
    ClassCreate,
    ClassResponse,
    ClassTeacherAssignment,
    ClassUpdate,
    SectionCreate,
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
)
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import RecordStatus
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.class_service import ClassService
from schooldesk.services.subject_service import SubjectService

router = APIRouter(
    prefix="/school/{school_id}",
    tags=["Academics"],
    responses={
        404: {"description": "Not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

admin_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN)
staff_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
curriculum_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER, UserRoleEnum.PARENT)


# Classes
@router.post("/classes", response_model=APIResponse[ClassResponse], status_code=status.HTTP_201_CREATED)
async def create_class(data: ClassCreate, context: TenantContext = Depends(admin_access)):
    class_ = await ClassService(context).create_class(data)
    return APIResponse[ClassResponse](
        message="Class created successfully",
        data=ClassResponse.model_validate(class_)
    )


@router.get("/classes", response_model=ListResponse[ClassResponse])
async def list_classes(
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    context: TenantContext = Depends(staff_access)
):
    classes = await ClassService(context).list_classes(status_filter.value if status_filter else None)
    return ListResponse[ClassResponse](
        count=len(classes),
        data=[ClassResponse.model_validate(class_) for class_ in classes]
    )


@router.get("/classes/{class_id}", response_model=APIResponse[ClassResponse])
async def get_class(class_id: str, context: TenantContext = Depends(staff_access)):
    class_ = await ClassService(context).get_class(class_id)
    return APIResponse[ClassResponse](data=ClassResponse.model_validate(class_))


@router.put("/classes/{class_id}", response_model=APIResponse[ClassResponse])
async def update_class(class_id: str, data: ClassUpdate, context: TenantContext = Depends(admin_access)):
    class_ = await ClassService(context).update_class(class_id, data)
    return APIResponse[ClassResponse](
        message="Class updated successfully",
        data=ClassResponse.model_validate(class_)
    )


@router.delete("/classes/{class_id}", response_model=APIResponse[ClassResponse])
async def delete_class(class_id: str, context: TenantContext = Depends(admin_access)):
    class_ = await ClassService(context).delete_class(class_id)
    return APIResponse[ClassResponse](
        message="Class deactivated successfully",
        data=ClassResponse.model_validate(class_)
    )


@router.post(
    "/classes/{class_id}/sections",
    response_model=APIResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED
)
async def add_section(class_id: str, data: SectionCreate, context: TenantContext = Depends(admin_access)):
    class_ = await ClassService(context).add_section(class_id, data)
    return APIResponse[ClassResponse](
        message="Section added successfully",
        data=ClassResponse.model_validate(class_)
    )


@router.delete("/classes/{class_id}/sections/{section_id}", response_model=APIResponse[ClassResponse])
async def remove_section(class_id: str, section_id: str, context: TenantContext = Depends(admin_access)):
    class_ = await ClassService(context).remove_section(class_id, section_id)
    return APIResponse[ClassResponse](
        message="Section removed successfully",
        data=ClassResponse.model_validate(class_)
    )


@router.put("/classes/{class_id}/sections/{section_id}/teacher", response_model=APIResponse[ClassResponse])
async def assign_class_teacher(
    class_id: str,
    section_id: str,
    data: ClassTeacherAssignment,
    context: TenantContext = Depends(admin_access)
):
    class_ = await ClassService(context).assign_class_teacher(class_id, section_id, data.teacher_id)
    return APIResponse[ClassResponse](
        message="Class teacher assigned successfully",
        data=ClassResponse.model_validate(class_)
    )


# Subjects
@router.post("/subjects", response_model=APIResponse[SubjectResponse], status_code=status.HTTP_201_CREATED)
async def create_subject(data: SubjectCreate, context: TenantContext = Depends(admin_access)):
    subject = await SubjectService(context).create_subject(data)
    return APIResponse[SubjectResponse](
        message="Subject created successfully",
        data=SubjectResponse.model_validate(subject)
    )


@router.get("/subjects", response_model=ListResponse[SubjectResponse])
async def list_subjects(
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    context: TenantContext = Depends(curriculum_access)
):
    subjects = await SubjectService(context).list_subjects(status_filter.value if status_filter else None)
    return ListResponse[SubjectResponse](
        count=len(subjects),
        data=[SubjectResponse.model_validate(subject) for subject in subjects]
    )


@router.get("/subjects/{subject_id}", response_model=APIResponse[SubjectResponse])
async def get_subject(subject_id: str, context: TenantContext = Depends(staff_access)):
    subject = await SubjectService(context).get_subject(subject_id)
    return APIResponse[SubjectResponse](data=SubjectResponse.model_validate(subject))


@router.put("/subjects/{subject_id}", response_model=APIResponse[SubjectResponse])
async def update_subject(subject_id: str, data: SubjectUpdate, context: TenantContext = Depends(admin_access)):
    subject = await SubjectService(context).update_subject(subject_id, data)
    return APIResponse[SubjectResponse](
        message="Subject updated successfully",
        data=SubjectResponse.model_validate(subject)
    )


@router.delete("/subjects/{subject_id}", response_model=APIResponse[SubjectResponse])
async def delete_subject(subject_id: str, context: TenantContext = Depends(admin_access)):
    subject = await SubjectService(context).delete_subject(subject_id)
    return APIResponse[SubjectResponse](
        message="Subject deactivated successfully",
        data=SubjectResponse.model_validate(subject)
    )
