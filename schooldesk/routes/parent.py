from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import RecordStatus
from schooldesk.schemas.parents import ParentCreate, ParentRelationship, ParentResponse, ParentUpdate
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.parent_service import ParentService

router = APIRouter(
    prefix="/school/{school_id}/parents",
    tags=["Parents"],
    responses={
        404: {"description": "Parent not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"}
    }
)

admin_access = tenant_access(UserRoleEnum.SUPER_ADMIN, UserRoleEnum.SCHOOL_ADMIN)
staff_access = tenant_access(UserRoleEnum.SUPER_ADMIN, UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
family_access = tenant_access(UserRoleEnum.SUPER_ADMIN, UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.PARENT)


@router.get("/search", response_model=ListResponse[ParentResponse])
async def search_parents(
    query: Optional[str] = Query(None, alias="q"),
    limit: int = Query(10, ge=1, le=50),
    context: TenantContext = Depends(staff_access)
):
    parents = await ParentService(context).search(query, limit)
    return ListResponse[ParentResponse](
        count=len(parents),
        data=[ParentResponse.model_validate(parent) for parent in parents]
    )


@router.get("/student/{student_id}", response_model=ListResponse[ParentResponse])
async def list_parents_of_student(student_id: str, context: TenantContext = Depends(staff_access)):
    parents = await ParentService(context).list_by_student(student_id)
    return ListResponse[ParentResponse](
        count=len(parents),
        data=[ParentResponse.model_validate(parent) for parent in parents]
    )


@router.post("", response_model=APIResponse[ParentResponse], status_code=status.HTTP_201_CREATED)
async def create_parent(data: ParentCreate, context: TenantContext = Depends(staff_access)):
    parent = await ParentService(context).create_parent(data)
    return APIResponse[ParentResponse](
        message="Parent created successfully",
        data=ParentResponse.model_validate(parent)
    )


@router.get("", response_model=ListResponse[ParentResponse])
async def list_parents(
    relationship: Optional[ParentRelationship] = None,
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    context: TenantContext = Depends(staff_access)
):
    parents = await ParentService(context).list_parents(
        status=status_filter.value if status_filter else None,
        relationship=relationship.value if relationship else None
    )
    return ListResponse[ParentResponse](
        count=len(parents),
        data=[ParentResponse.model_validate(parent) for parent in parents]
    )


@router.get("/{parent_id}", response_model=APIResponse[ParentResponse])
async def get_parent(parent_id: str, context: TenantContext = Depends(family_access)):
    parent = await ParentService(context).get(parent_id)
    return APIResponse[ParentResponse](data=ParentResponse.model_validate(parent))


@router.put("/{parent_id}", response_model=APIResponse[ParentResponse])
async def update_parent(parent_id: str, data: ParentUpdate, context: TenantContext = Depends(admin_access)):
    parent = await ParentService(context).update_parent(parent_id, data)
    return APIResponse[ParentResponse](
        message="Parent updated successfully",
        data=ParentResponse.model_validate(parent)
    )


@router.delete("/{parent_id}", response_model=APIResponse[ParentResponse])
async def delete_parent(parent_id: str, context: TenantContext = Depends(admin_access)):
    parent = await ParentService(context).delete_parent(parent_id)
    return APIResponse[ParentResponse](
        message="Parent deactivated successfully",
        data=ParentResponse.model_validate(parent)
    )
