# announcement_service.py
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import or_, select

from schooldesk.core.errors import Forbidden, NotFoundError
from schooldesk.models.announcement import Announcement
from schooldesk.models.parent import Parent
from schooldesk.models.student import Student
from schooldesk.models.teacher import Teacher
from schooldesk.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from schooldesk.schemas.common.status import AnnouncementAudience, AnnouncementStatus, NotificationType, RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import TenantService, dump_values
from schooldesk.services.notification_service import NotificationService, Recipient
from schooldesk.utils.identifiers import ANNOUNCEMENT_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.announcement")

PREVIEW_LENGTH = 100

# Audiences each role sees besides "all" and class-targeted announcements
ROLE_AUDIENCES = {
    UserRoleEnum.STUDENT: AnnouncementAudience.STUDENTS.value,
    UserRoleEnum.PARENT: AnnouncementAudience.PARENTS.value,
    UserRoleEnum.TEACHER: AnnouncementAudience.TEACHERS.value,
}


def preview(content: str) -> str:
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[:PREVIEW_LENGTH] + "..."


class AnnouncementService(TenantService):

    async def create_announcement(self, data: AnnouncementCreate) -> Announcement:
        claims = self.context.claims
        if claims.role == UserRoleEnum.TEACHER and data.target_audience != AnnouncementAudience.SPECIFIC_CLASS:
            raise Forbidden("Teachers can only create announcements for specific classes")

        values = dump_values(data)
        values["publish_date"] = values.get("publish_date") or date.today()
        announcement = Announcement(
            announcement_id=await generate_sequential_id(self.db, Announcement.announcement_id, ANNOUNCEMENT_PREFIX),
            **values,
            created_by=claims.account_id,
            created_by_role=claims.role.value,
            created_by_name=" ".join(part for part in (claims.first_name, claims.last_name) if part) or None,
            status=AnnouncementStatus.ACTIVE.value
        )
        self.db.add(announcement)
        await self._commit()
        logger.info(
            f"Announcement {announcement.announcement_id} for '{announcement.target_audience}' "
            f"created by {claims.account_id}"
        )

        await self._notify_audience(announcement)
        return announcement

    async def _recipients(self, announcement: Announcement) -> List[Recipient]:
        audience = announcement.target_audience
        recipients: List[Recipient] = []
        student_ids: Set[str] = set()

        if audience in (AnnouncementAudience.ALL.value, AnnouncementAudience.STUDENTS.value,
                        AnnouncementAudience.SPECIFIC_CLASS.value):
            stmt = select(Student.student_id).where(Student.status == RecordStatus.ACTIVE.value)
            if audience == AnnouncementAudience.SPECIFIC_CLASS.value:
                stmt = stmt.where(Student.class_id.in_(announcement.target_classes or []))
            student_ids = set((await self.db.execute(stmt)).scalars().all())
            recipients += [(student_id, UserRoleEnum.STUDENT.value) for student_id in sorted(student_ids)]

        if audience in (AnnouncementAudience.ALL.value, AnnouncementAudience.PARENTS.value,
                        AnnouncementAudience.SPECIFIC_CLASS.value):
            parents = (await self.db.execute(
                select(Parent).where(Parent.status == RecordStatus.ACTIVE.value)
            )).scalars().all()
            for parent in parents:
                # Class-targeted announcements reach only the parents of those students
                if audience == AnnouncementAudience.SPECIFIC_CLASS.value and not student_ids.intersection(
                    parent.student_ids or []
                ):
                    continue
                recipients.append((parent.parent_id, UserRoleEnum.PARENT.value))

        if audience in (AnnouncementAudience.ALL.value, AnnouncementAudience.TEACHERS.value):
            teacher_ids = (await self.db.execute(
                select(Teacher.teacher_id).where(Teacher.status == RecordStatus.ACTIVE.value)
            )).scalars().all()
            recipients += [(teacher_id, UserRoleEnum.TEACHER.value) for teacher_id in teacher_ids]

        return recipients

    async def _notify_audience(self, announcement: Announcement) -> None:
        try:
            await NotificationService(self.context).try_notify_many(
                await self._recipients(announcement),
                notification_type=NotificationType.ANNOUNCEMENT.value,
                title=f"New Announcement: {announcement.title}",
                message=preview(announcement.content),
                reference_id=announcement.announcement_id,
                reference_type="announcement",
                extra={"priority": announcement.priority, "category": announcement.category}
            )
        except Exception as e:
            logger.error(f"Error notifying about announcement {announcement.announcement_id}: {str(e)}")

    async def _visible_classes(self) -> Set[str]:
        """Classes whose targeted announcements the caller may read"""
        claims = self.context.claims
        if claims.role == UserRoleEnum.STUDENT:
            stmt = select(Student.class_id).where(Student.student_id == claims.account_id)
        elif claims.role == UserRoleEnum.PARENT:
            parent = (await self.db.execute(
                select(Parent).where(Parent.parent_id == claims.account_id)
            )).scalar_one_or_none()
            children = (parent.student_ids or []) if parent is not None else []
            stmt = select(Student.class_id).where(
                or_(Student.parent_id == claims.account_id, Student.student_id.in_(children))
            )
        else:
            return set()
        return {class_id for class_id in (await self.db.execute(stmt)).scalars().all() if class_id}

    def _is_visible(self, announcement: Announcement, classes: Set[str]) -> bool:
        claims = self.context.claims
        if claims.role in (UserRoleEnum.SCHOOL_ADMIN, UserRoleEnum.SUPER_ADMIN):
            return True
        audience = announcement.target_audience
        if audience == AnnouncementAudience.ALL.value or audience == ROLE_AUDIENCES.get(claims.role):
            return True
        if claims.role == UserRoleEnum.TEACHER:
            return announcement.created_by == claims.account_id
        return (
            audience == AnnouncementAudience.SPECIFIC_CLASS.value
            and bool(classes.intersection(announcement.target_classes or []))
        )

    async def list_announcements(
        self,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Dict[str, Any]:
        today = date.today()
        stmt = select(Announcement).where(
            Announcement.status == AnnouncementStatus.ACTIVE.value,
            Announcement.publish_date <= today,
            or_(Announcement.expiry_date.is_(None), Announcement.expiry_date >= today)
        )
        if category:
            stmt = stmt.where(Announcement.category == category)
        if priority:
            stmt = stmt.where(Announcement.priority == priority)
        rows = (await self.db.execute(
            stmt.order_by(Announcement.publish_date.desc(), Announcement.announcement_id.desc())
        )).scalars().all()

        # Class targets live in a JSON list, so audience filtering happens here
        classes = await self._visible_classes()
        visible = [row for row in rows if self._is_visible(row, classes)]
        start = (page - 1) * limit
        return {
            "items": visible[start:start + limit],
            "total": len(visible),
            "page": page,
            "limit": limit,
            "pages": math.ceil(len(visible) / limit) if limit else 0,
        }

    async def my_announcements(self) -> List[Announcement]:
        result = await self.db.execute(
            select(Announcement)
            .where(Announcement.created_by == self.context.claims.account_id)
            .order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc())
        )
        return list(result.scalars().all())

    async def get_announcement(self, announcement_id: str) -> Announcement:
        result = await self.db.execute(
            select(Announcement).where(Announcement.announcement_id == announcement_id)
        )
        announcement = result.scalar_one_or_none()
        if announcement is None:
            raise NotFoundError("Announcement not found", details={"announcement_id": announcement_id})
        return announcement

    async def get_visible_announcement(self, announcement_id: str) -> Announcement:
        announcement = await self.get_announcement(announcement_id)
        if not self._is_visible(announcement, await self._visible_classes()):
            raise NotFoundError("Announcement not found", details={"announcement_id": announcement_id})
        return announcement

    async def _get_editable(self, announcement_id: str) -> Announcement:
        announcement = await self.get_announcement(announcement_id)
        claims = self.context.claims
        if claims.role != UserRoleEnum.SCHOOL_ADMIN and announcement.created_by != claims.account_id:
            raise Forbidden("You don't have permission to change this announcement")
        return announcement

    async def update_announcement(self, announcement_id: str, data: AnnouncementUpdate) -> Announcement:
        announcement = await self._get_editable(announcement_id)
        for field, value in dump_values(data, exclude_unset=True, exclude_none=True).items():
            setattr(announcement, field, value)
        await self._commit()
        return announcement

    async def delete_announcement(self, announcement_id: str) -> Announcement:
        announcement = await self._get_editable(announcement_id)
        announcement.status = AnnouncementStatus.ARCHIVED.value
        await self._commit()
        logger.info(f"Announcement {announcement_id} archived by {self.context.claims.account_id}")
        return announcement
