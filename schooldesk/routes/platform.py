from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.database import Database
from schooldesk.core.dependencies import get_database, get_db, get_tenant_directory
from schooldesk.core.errors import Forbidden
from schooldesk.core.permissions import require_any_role, require_super_admin
from schooldesk.schemas.auth import SessionClaims
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import RecordStatus
from schooldesk.schemas.menu import MenuCreate, MenuResponse, MenuUpdate
from schooldesk.schemas.school import (
    DashboardStats,
    SchoolAdminCreate,
    SchoolAdminResponse,
    SchoolAdminUpdate,
    SchoolCreate,
    SchoolResponse,
    SchoolStatusUpdate,
)
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.menu_service import MenuService
from schooldesk.services.school_admin_service import SchoolAdminService
from schooldesk.services.school_service import SchoolService
from schooldesk.services.tenant_directory import TenantDirectory

router = APIRouter(
    prefix="/platform",
    tags=["Platform Administration"],
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"}
    }
)


def get_school_service(
    db: AsyncSession = Depends(get_db),
    database: Database = Depends(get_database),
    directory: TenantDirectory = Depends(get_tenant_directory)
) -> SchoolService:
    return SchoolService(db, database, directory)


# Schools
@router.post(
    "/schools",
    response_model=APIResponse[SchoolResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_super_admin)]
)
async def create_school(data: SchoolCreate, service: SchoolService = Depends(get_school_service)):
    school = await service.create_school(data)
    return APIResponse[SchoolResponse](
        message="School created successfully",
        data=SchoolResponse.model_validate(school)
    )


@router.get(
    "/schools",
    response_model=ListResponse[SchoolResponse],
    dependencies=[Depends(require_super_admin)]
)
async def list_schools(
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    service: SchoolService = Depends(get_school_service)
):
    schools = await service.list_schools(status_filter.value if status_filter else None)
    return ListResponse[SchoolResponse](
        count=len(schools),
        data=[SchoolResponse.model_validate(school) for school in schools]
    )


@router.get(
    "/schools/{school_id}",
    response_model=APIResponse[SchoolResponse],
    dependencies=[Depends(require_super_admin)]
)
async def get_school(school_id: str, service: SchoolService = Depends(get_school_service)):
    school = await service.get_school(school_id)
    return APIResponse[SchoolResponse](data=SchoolResponse.model_validate(school))


@router.patch(
    "/schools/{school_id}/status",
    response_model=APIResponse[SchoolResponse],
    dependencies=[Depends(require_super_admin)]
)
async def update_school_status(
    school_id: str,
    data: SchoolStatusUpdate,
    service: SchoolService = Depends(get_school_service)
):
    school = await service.set_status(school_id, data.status)
    return APIResponse[SchoolResponse](
        message="School status updated successfully",
        data=SchoolResponse.model_validate(school)
    )


@router.get(
    "/dashboard/stats",
    response_model=APIResponse[DashboardStats],
    dependencies=[Depends(require_super_admin)]
)
async def dashboard_stats(service: SchoolService = Depends(get_school_service)):
    return APIResponse[DashboardStats](data=await service.dashboard_stats())


# School admins
@router.post(
    "/users",
    response_model=APIResponse[SchoolAdminResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_super_admin)]
)
async def create_user(data: SchoolAdminCreate, db: AsyncSession = Depends(get_db)):
    user = await SchoolAdminService(db).create_user(data)
    return APIResponse[SchoolAdminResponse](
        message="User created successfully",
        data=SchoolAdminResponse.model_validate(user)
    )


@router.get(
    "/users",
    response_model=ListResponse[SchoolAdminResponse],
    dependencies=[Depends(require_super_admin)]
)
async def list_users(
    school_id: Optional[str] = Query(None, alias="schoolId"),
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
):
    users = await SchoolAdminService(db).list_users(
        school_id=school_id,
        status=status_filter.value if status_filter else None
    )
    return ListResponse[SchoolAdminResponse](
        count=len(users),
        data=[SchoolAdminResponse.model_validate(user) for user in users]
    )


@router.get(
    "/users/{user_id}",
    response_model=APIResponse[SchoolAdminResponse],
    dependencies=[Depends(require_super_admin)]
)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await SchoolAdminService(db).get(user_id)
    return APIResponse[SchoolAdminResponse](data=SchoolAdminResponse.model_validate(user))


@router.put(
    "/users/{user_id}",
    response_model=APIResponse[SchoolAdminResponse],
    dependencies=[Depends(require_super_admin)]
)
async def update_user(user_id: str, data: SchoolAdminUpdate, db: AsyncSession = Depends(get_db)):
    user = await SchoolAdminService(db).update_user(user_id, data)
    return APIResponse[SchoolAdminResponse](
        message="User updated successfully",
        data=SchoolAdminResponse.model_validate(user)
    )


@router.delete(
    "/users/{user_id}",
    response_model=APIResponse[SchoolAdminResponse],
    dependencies=[Depends(require_super_admin)]
)
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await SchoolAdminService(db).delete_user(user_id)
    return APIResponse[SchoolAdminResponse](
        message="User deactivated successfully",
        data=SchoolAdminResponse.model_validate(user)
    )


# Menus
@router.post(
    "/menus",
    response_model=APIResponse[MenuResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_super_admin)]
)
async def create_menu(data: MenuCreate, db: AsyncSession = Depends(get_db)):
    menu = await MenuService(db).create_menu(data)
    return APIResponse[MenuResponse](
        message="Menu created successfully",
        data=MenuResponse.model_validate(menu)
    )


@router.get("/menus/{role}", response_model=ListResponse[MenuResponse])
async def menus_for_role(
    role: UserRoleEnum,
    db: AsyncSession = Depends(get_db),
    claims: SessionClaims = Depends(require_any_role)
):
    """
    Menus visible to ``role``; school menus come from the caller's own school.
    Only super admins may read the menus of a role other than their own.
    """
    if claims.role != UserRoleEnum.SUPER_ADMIN and role != claims.role:
        raise Forbidden()
    menus = await MenuService(db).menus_for_role(role, claims.school_id)
    return ListResponse[MenuResponse](
        count=len(menus),
        data=[MenuResponse.model_validate(menu) for menu in menus]
    )


@router.put(
    "/menus/{menu_id}",
    response_model=APIResponse[MenuResponse],
    dependencies=[Depends(require_super_admin)]
)
async def update_menu(menu_id: str, data: MenuUpdate, db: AsyncSession = Depends(get_db)):
    menu = await MenuService(db).update_menu(menu_id, data)
    return APIResponse[MenuResponse](
        message="Menu updated successfully",
        data=MenuResponse.model_validate(menu)
    )


@router.delete(
    "/menus/{menu_id}",
    response_model=APIResponse[MenuResponse],
    dependencies=[Depends(require_super_admin)]
)
async def delete_menu(menu_id: str, db: AsyncSession = Depends(get_db)):
    menu = await MenuService(db).delete_menu(menu_id)
    return APIResponse[MenuResponse](
        message="Menu deactivated successfully",
        data=MenuResponse.model_validate(menu)
    )
