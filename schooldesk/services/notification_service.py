# notification_service.py
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select, update

from schooldesk.core.errors import NotFoundError
from schooldesk.models.base import utcnow
from schooldesk.models.notification import Notification
from schooldesk.services.base_service import TenantService
from schooldesk.utils.identifiers import (
    NOTIFICATION_ID_WIDTH,
    NOTIFICATION_PREFIX,
    generate_sequential_id,
    next_sequential_id,
)

logger = logging.getLogger("schooldesk.services.notification")

# (account id, role) of a recipient
Recipient = Tuple[str, str]


class NotificationService(TenantService):

    async def notify_many(
        self,
        recipients: Iterable[Recipient],
        notification_type: str,
        title: str,
        message: str,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> int:
        """Create one notification per distinct recipient and commit them"""
        unique: List[Recipient] = list(dict.fromkeys(r for r in recipients if r[0]))
        if not unique:
            return 0

        notification_id = await generate_sequential_id(
            self.db, Notification.notification_id, NOTIFICATION_PREFIX, NOTIFICATION_ID_WIDTH
        )
        for user_id, user_role in unique:
            self.db.add(Notification(
                notification_id=notification_id,
                user_id=user_id,
                user_role=user_role,
                type=notification_type,
                title=title,
                message=message,
                reference_id=reference_id,
                reference_type=reference_type,
                extra=extra or {},
            ))
            notification_id = next_sequential_id(NOTIFICATION_PREFIX, notification_id, NOTIFICATION_ID_WIDTH)
        await self._commit()
        logger.info(f"Sent {len(unique)} '{notification_type}' notifications in school {self.school_id}")
        return len(unique)

    async def try_notify_many(self, recipients: Iterable[Recipient], **kwargs: Any) -> int:
        """Best-effort variant: failures are logged and never reach the caller"""
        try:
            return await self.notify_many(recipients, **kwargs)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error sending notifications: {str(e)}")
            return 0

    def _own(self, stmt):
        return stmt.where(Notification.user_id == self.context.claims.account_id)

    async def list_notifications(
        self,
        is_read: Optional[bool] = None,
        notification_type: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Dict[str, Any]:
        stmt = self._own(select(Notification))
        if is_read is not None:
            stmt = stmt.where(Notification.is_read == is_read)
        if notification_type:
            stmt = stmt.where(Notification.type == notification_type)

        total = (await self.db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
        result = await self.db.execute(
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return {
            "items": list(result.scalars().all()),
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0,
        }

    async def unread_count(self) -> int:
        stmt = self._own(select(func.count(Notification.id))).where(Notification.is_read.is_(False))
        return (await self.db.execute(stmt)).scalar_one()

    async def _get_own(self, notification_id: str) -> Notification:
        result = await self.db.execute(
            self._own(select(Notification)).where(Notification.notification_id == notification_id)
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification not found", details={"notification_id": notification_id})
        return notification

    async def mark_read(self, notification_id: str) -> Notification:
        notification = await self._get_own(notification_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await self._commit()
        return notification

    async def mark_all_read(self) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == self.context.claims.account_id,
                Notification.is_read.is_(False)
            )
            .values(is_read=True, read_at=utcnow())
        )
        await self._commit()
        return result.rowcount or 0

    async def delete_notification(self, notification_id: str) -> None:
        notification = await self._get_own(notification_id)
        await self.db.delete(notification)
        await self._commit()
