# schooldesk/services/email_registry_service.py
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.errors import DuplicateResource
from schooldesk.core.logging import logger
from schooldesk.models.email_registry import EmailRegistryEntry
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.utils.identifiers import normalize_email


class EmailRegistryService:
    """Keeps the global email index in step with account changes.

    Methods only stage changes on the session; the calling service commits
    them together with the account row.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, email: str) -> Optional[EmailRegistryEntry]:
        result = await self.db.execute(
            select(EmailRegistryEntry).where(EmailRegistryEntry.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_active(self, email: str) -> Optional[EmailRegistryEntry]:
        result = await self.db.execute(
            select(EmailRegistryEntry).where(
                EmailRegistryEntry.email == normalize_email(email),
                EmailRegistryEntry.status == RecordStatus.ACTIVE.value
            )
        )
        return result.scalar_one_or_none()

    async def ensure_available(self, email: str) -> str:
        normalized = normalize_email(email)
        if await self.get(normalized) is not None:
            raise DuplicateResource("Email already exists", details={"email": normalized})
        return normalized

    async def register(
        self,
        email: str,
        role: UserRoleEnum,
        school_id: Optional[str],
        account_id: str,
        status: str = RecordStatus.ACTIVE.value
    ) -> EmailRegistryEntry:
        entry = EmailRegistryEntry(
            email=normalize_email(email),
            role=UserRoleEnum(role).value,
            school_id=school_id,
            account_id=account_id,
            status=status
        )
        self.db.add(entry)
        logger.debug(f"Registered {entry.role} account {account_id} in email registry")
        return entry

    async def change_email(self, old_email: Optional[str], new_email: str) -> str:
        old_normalized = normalize_email(old_email)
        new_normalized = normalize_email(new_email)
        if old_normalized == new_normalized:
            return new_normalized

        await self.ensure_available(new_normalized)
        entry = await self.get(old_normalized) if old_normalized else None
        if entry is not None:
            entry.email = new_normalized
        return new_normalized

    async def set_status(self, email: Optional[str], status: str) -> None:
        if not email:
            return
        entry = await self.get(email)
        if entry is not None:
            entry.status = status
