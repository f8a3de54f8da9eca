# schooldesk/utils/identifiers.py
import re
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

ID_WIDTH = 5

# Public id prefixes
ADMIN_PREFIX = "ADM"
USER_PREFIX = "USR"
SCHOOL_PREFIX = "SCHL"
TEACHER_PREFIX = "TCH"
STUDENT_PREFIX = "STU"
PARENT_PREFIX = "PRT"
CLASS_PREFIX = "CLS"
SECTION_PREFIX = "SEC"
SUBJECT_PREFIX = "SUB"
MENU_PREFIX = "M"
TIMETABLE_CONFIG_PREFIX = "TTC"
TIMETABLE_ENTRY_PREFIX = "TTE"
HOMEWORK_PREFIX = "HW"
GRADING_SYSTEM_PREFIX = "GRD"
EXAM_PREFIX = "EXM"
EXAM_SCHEDULE_PREFIX = "EXS"
ANNOUNCEMENT_PREFIX = "ANN"
NOTIFICATION_PREFIX = "NTF"
NOTIFICATION_ID_WIDTH = 8


def next_sequential_id(prefix: str, last_id: Optional[str], width: int = ID_WIDTH) -> str:
    """
    Next id after ``last_id``: ``ADM00007`` -> ``ADM00008``.
    Starts at 1 when there is no previous id or it cannot be parsed.
    """
    last_number = 0
    if last_id and last_id.startswith(prefix):
        try:
            last_number = int(last_id[len(prefix):])
        except ValueError:
            last_number = 0
    return f"{prefix}{str(last_number + 1).zfill(width)}"


async def generate_sequential_id(session: AsyncSession, column, prefix: str, width: int = ID_WIDTH) -> str:
    """Allocate the next id for ``column`` by reading the current maximum"""
    stmt = (
        select(column)
        .where(column.like(f"{prefix}%"))
        # Longer ids are larger once the counter outgrows the padding
        .order_by(func.length(column).desc(), column.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return next_sequential_id(prefix, result.scalar_one_or_none(), width)


def slugify_database_name(school_name: str, school_id: str) -> str:
    """``Green Valley High`` + ``SCHL00004`` -> ``school_green_valley_high_00004``"""
    slug = re.sub(r"[^a-z0-9]+", "_", school_name.lower()).strip("_")[:40] or "tenant"
    suffix = school_id[len(SCHOOL_PREFIX):] if school_id.startswith(SCHOOL_PREFIX) else school_id.lower()
    return f"school_{slug}_{suffix}"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()
