from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import DayOfWeek
from schooldesk.schemas.timetable import (
    BulkEntryResult,
    BulkTimetableEntries,
    ConflictReport,
    FreeTeacher,
    TeacherFreePeriods,
    TimetableConfigCreate,
    TimetableConfigResponse,
    TimetableConfigUpdate,
    TimetableEntryCreate,
    TimetableEntryResponse,
    TimetableEntryUpdate,
    TimetableView,
)
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.timetable_service import TimetableService

router = APIRouter(
    prefix="/school/{school_id}/timetable",
    tags=["Timetable"],
    responses={
        404: {"description": "Not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"},
        409: {"description": "Schedule conflict"}
    }
)

admin_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN)
staff_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
class_view_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER, UserRoleEnum.STUDENT)


# Configuration
@router.post("/config", response_model=APIResponse[TimetableConfigResponse], status_code=status.HTTP_201_CREATED)
async def create_config(data: TimetableConfigCreate, context: TenantContext = Depends(admin_access)):
    config = await TimetableService(context).create_config(data)
    return APIResponse[TimetableConfigResponse](
        message="Timetable configuration created successfully",
        data=TimetableConfigResponse.model_validate(config)
    )


@router.get("/config", response_model=ListResponse[TimetableConfigResponse])
async def list_configs(context: TenantContext = Depends(admin_access)):
    configs = await TimetableService(context).list_configs()
    return ListResponse[TimetableConfigResponse](
        count=len(configs),
        data=[TimetableConfigResponse.model_validate(config) for config in configs]
    )


@router.get("/config/active", response_model=APIResponse[TimetableConfigResponse])
async def get_active_config(context: TenantContext = Depends(class_view_access)):
    config = await TimetableService(context).get_active_config()
    return APIResponse[TimetableConfigResponse](data=TimetableConfigResponse.model_validate(config))


@router.put("/config/{config_id}/activate", response_model=APIResponse[TimetableConfigResponse])
async def activate_config(config_id: str, context: TenantContext = Depends(admin_access)):
    config = await TimetableService(context).activate_config(config_id)
    return APIResponse[TimetableConfigResponse](
        message="Timetable configuration activated",
        data=TimetableConfigResponse.model_validate(config)
    )


@router.put("/config/{config_id}", response_model=APIResponse[TimetableConfigResponse])
async def update_config(config_id: str, data: TimetableConfigUpdate, context: TenantContext = Depends(admin_access)):
    config = await TimetableService(context).update_config(config_id, data)
    return APIResponse[TimetableConfigResponse](
        message="Timetable configuration updated successfully",
        data=TimetableConfigResponse.model_validate(config)
    )


# Entries
@router.post("/entries", response_model=APIResponse[TimetableEntryResponse], status_code=status.HTTP_201_CREATED)
async def create_entry(data: TimetableEntryCreate, context: TenantContext = Depends(admin_access)):
    entry = await TimetableService(context).create_entry(data)
    return APIResponse[TimetableEntryResponse](
        message="Timetable entry created successfully",
        data=TimetableEntryResponse.model_validate(entry)
    )


@router.post("/entries/bulk", response_model=APIResponse[BulkEntryResult], status_code=status.HTTP_201_CREATED)
async def bulk_create_entries(data: BulkTimetableEntries, context: TenantContext = Depends(admin_access)):
    result = await TimetableService(context).bulk_create_entries(data.entries)
    return APIResponse[BulkEntryResult](
        message=f"Created {len(result['created'])} entries, {len(result['failed'])} failed",
        data=BulkEntryResult(
            created=[TimetableEntryResponse.model_validate(entry) for entry in result["created"]],
            failed=result["failed"]
        )
    )


@router.put("/entries/{entry_id}", response_model=APIResponse[TimetableEntryResponse])
async def update_entry(entry_id: str, data: TimetableEntryUpdate, context: TenantContext = Depends(admin_access)):
    entry = await TimetableService(context).update_entry(entry_id, data)
    return APIResponse[TimetableEntryResponse](
        message="Timetable entry updated successfully",
        data=TimetableEntryResponse.model_validate(entry)
    )


@router.delete("/entries/{entry_id}", response_model=APIResponse[TimetableEntryResponse])
async def delete_entry(entry_id: str, context: TenantContext = Depends(admin_access)):
    entry = await TimetableService(context).delete_entry(entry_id)
    return APIResponse[TimetableEntryResponse](
        message="Timetable entry deleted successfully",
        data=TimetableEntryResponse.model_validate(entry)
    )


# Views
@router.get("/class/{class_id}", response_model=APIResponse[TimetableView])
async def class_timetable(
    class_id: str,
    section_id: Optional[str] = Query(None, alias="sectionId"),
    context: TenantContext = Depends(class_view_access)
):
    view = await TimetableService(context).class_timetable(class_id, section_id)
    return APIResponse[TimetableView](data=TimetableView.model_validate(view))


@router.get("/teacher/{teacher_id}", response_model=APIResponse[TimetableView])
async def teacher_timetable(teacher_id: str, context: TenantContext = Depends(staff_access)):
    view = await TimetableService(context).teacher_timetable(teacher_id)
    return APIResponse[TimetableView](data=TimetableView.model_validate(view))


@router.get("/teacher/{teacher_id}/free-periods", response_model=APIResponse[TeacherFreePeriods])
async def teacher_free_periods(teacher_id: str, context: TenantContext = Depends(staff_access)):
    free_periods = await TimetableService(context).teacher_free_periods(teacher_id)
    return APIResponse[TeacherFreePeriods](
        data=TeacherFreePeriods(teacher_id=teacher_id, free_periods=free_periods)
    )


@router.get("/day/{day_of_week}", response_model=ListResponse[TimetableEntryResponse])
async def entries_by_day(day_of_week: DayOfWeek, context: TenantContext = Depends(admin_access)):
    entries = await TimetableService(context).entries_by_day(day_of_week.value)
    return ListResponse[TimetableEntryResponse](count=len(entries), data=entries)


@router.get("/free-teachers", response_model=ListResponse[FreeTeacher])
async def free_teachers(
    day_of_week: DayOfWeek = Query(..., alias="dayOfWeek"),
    period_number: int = Query(..., alias="periodNumber", ge=1),
    context: TenantContext = Depends(admin_access)
):
    teachers = await TimetableService(context).free_teachers(day_of_week.value, period_number)
    data: List[FreeTeacher] = [
        FreeTeacher(teacher_id=teacher.teacher_id, name=teacher.full_name, email=teacher.email)
        for teacher in teachers
    ]
    return ListResponse[FreeTeacher](count=len(data), data=data)


@router.get("/conflicts", response_model=APIResponse[ConflictReport])
async def conflict_report(context: TenantContext = Depends(admin_access)):
    report = await TimetableService(context).conflict_report()
    return APIResponse[ConflictReport](data=ConflictReport.model_validate(report))
