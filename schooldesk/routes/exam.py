from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.permissions import tenant_access
from schooldesk.schemas.base import APIResponse, ListResponse
from schooldesk.schemas.common import ExamStatus
from schooldesk.schemas.exam import (
    ExamCreate,
    ExamResponse,
    ExamResultResponse,
    ExamScheduleCreate,
    ExamScheduleResponse,
    GradingSystemCreate,
    GradingSystemResponse,
    MarksSubmission,
    MarksSubmissionResult,
    PublishResultsRequest,
    ReportCard,
)
from schooldesk.schemas.user import UserRoleEnum
from schooldesk.services.exam_service import ExamService

router = APIRouter(
    prefix="/school/{school_id}/exams",
    tags=["Exams"],
    responses={
        404: {"description": "Not found"},
        403: {"description": "Forbidden"},
        401: {"description": "Unauthorized"},
        409: {"description": "Schedule conflict"}
    }
)

admin_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN)
staff_access = tenant_access(UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER)
member_access = tenant_access(
    UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.TEACHER, UserRoleEnum.STUDENT, UserRoleEnum.PARENT
)


# Grading systems
@router.post("/grading-systems", response_model=APIResponse[GradingSystemResponse], status_code=status.HTTP_201_CREATED)
async def create_grading_system(data: GradingSystemCreate, context: TenantContext = Depends(admin_access)):
    grading_system = await ExamService(context).create_grading_system(data)
    return APIResponse[GradingSystemResponse](
        message="Grading system created successfully",
        data=GradingSystemResponse.model_validate(grading_system)
    )


@router.get("/grading-systems", response_model=ListResponse[GradingSystemResponse])
async def list_grading_systems(context: TenantContext = Depends(member_access)):
    grading_systems = await ExamService(context).list_grading_systems()
    return ListResponse[GradingSystemResponse](
        count=len(grading_systems),
        data=[GradingSystemResponse.model_validate(item) for item in grading_systems]
    )


# Report cards
@router.get("/report-card/{student_id}", response_model=APIResponse[ReportCard])
async def report_card(
    student_id: str,
    academic_year: Optional[str] = Query(None, alias="academicYear"),
    context: TenantContext = Depends(member_access)
):
    card = await ExamService(context).report_card(student_id, academic_year)
    return APIResponse[ReportCard](data=ReportCard.model_validate(card))


# Exams
@router.post("", response_model=APIResponse[ExamResponse], status_code=status.HTTP_201_CREATED)
async def create_exam(data: ExamCreate, context: TenantContext = Depends(admin_access)):
    exam = await ExamService(context).create_exam(data)
    return APIResponse[ExamResponse](
        message="Exam created successfully",
        data=ExamResponse.model_validate(exam)
    )


@router.get("", response_model=ListResponse[ExamResponse])
async def list_exams(
    academic_year: Optional[str] = Query(None, alias="academicYear"),
    status_filter: Optional[ExamStatus] = Query(None, alias="status"),
    context: TenantContext = Depends(member_access)
):
    exams = await ExamService(context).list_exams(academic_year, status_filter.value if status_filter else None)
    return ListResponse[ExamResponse](count=len(exams), data=[ExamResponse.model_validate(exam) for exam in exams])


@router.get("/{exam_id}", response_model=APIResponse[ExamResponse])
async def get_exam(exam_id: str, context: TenantContext = Depends(member_access)):
    exam = await ExamService(context).get_exam(exam_id)
    return APIResponse[ExamResponse](data=ExamResponse.model_validate(exam))


@router.post(
    "/{exam_id}/schedule",
    response_model=APIResponse[ExamScheduleResponse],
    status_code=status.HTTP_201_CREATED
)
async def schedule_subject(exam_id: str, data: ExamScheduleCreate, context: TenantContext = Depends(admin_access)):
    schedule = await ExamService(context).schedule_subject(exam_id, data)
    return APIResponse[ExamScheduleResponse](
        message="Exam scheduled successfully",
        data=ExamScheduleResponse.model_validate(schedule)
    )


@router.get("/{exam_id}/schedule", response_model=ListResponse[ExamScheduleResponse])
async def get_schedule(
    exam_id: str,
    class_id: Optional[str] = Query(None, alias="classId"),
    context: TenantContext = Depends(member_access)
):
    schedules = await ExamService(context).get_schedule(exam_id, class_id)
    return ListResponse[ExamScheduleResponse](count=len(schedules), data=schedules)


@router.post("/{exam_id}/marks", response_model=APIResponse[MarksSubmissionResult])
async def submit_marks(exam_id: str, data: MarksSubmission, context: TenantContext = Depends(staff_access)):
    result = await ExamService(context).submit_marks(exam_id, data)
    return APIResponse[MarksSubmissionResult](
        message=f"Processed {result['processed']} results",
        data=MarksSubmissionResult(**result)
    )


@router.get("/{exam_id}/results/{subject_id}", response_model=ListResponse[ExamResultResponse])
async def subject_results(
    exam_id: str,
    subject_id: str,
    class_id: Optional[str] = Query(None, alias="classId"),
    context: TenantContext = Depends(staff_access)
):
    results = await ExamService(context).subject_results(exam_id, subject_id, class_id)
    return ListResponse[ExamResultResponse](count=len(results), data=results)


@router.post("/{exam_id}/publish", response_model=APIResponse[dict])
async def publish_results(
    exam_id: str,
    data: Optional[PublishResultsRequest] = None,
    context: TenantContext = Depends(admin_access)
):
    published = await ExamService(context).publish_results(exam_id, data.class_id if data else None)
    return APIResponse[dict](
        message="Results published successfully",
        data={"published": published}
    )
