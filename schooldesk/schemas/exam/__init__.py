from .requests import (
    ExamCreate,
    ExamScheduleCreate,
    GradeBand,
    GradingSystemCreate,
    MarkEntry,
    MarksSubmission,
    PublishResultsRequest,
)
from .responses import (
    ExamResponse,
    ExamResultResponse,
    ExamScheduleResponse,
    GradeBandResponse,
    GradingSystemResponse,
    MarksSubmissionResult,
    ReportCard,
    ReportCardExam,
    ReportCardLine,
    ReportCardStudent,
)

__all__ = [
    "ExamCreate",
    "ExamScheduleCreate",
    "GradeBand",
    "GradingSystemCreate",
    "MarkEntry",
    "MarksSubmission",
    "PublishResultsRequest",
    "ExamResponse",
    "ExamResultResponse",
    "ExamScheduleResponse",
    "GradeBandResponse",
    "GradingSystemResponse",
    "MarksSubmissionResult",
    "ReportCard",
    "ReportCardExam",
    "ReportCardLine",
    "ReportCardStudent",
]
