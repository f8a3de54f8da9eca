# base.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, MetaData, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Placeholder schema of every tenant table. Each tenant handle rewrites it to
# the school's own database name through schema_translate_map.
TENANT_SCHEMA = "tenant"

# Platform-wide tables (tenant directory, email registry, admins, menus)
Base = declarative_base()

# Tables that exist once per school
TenantBase = declarative_base(metadata=MetaData(schema=TENANT_SCHEMA))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Python-side defaults are written back to the instance at flush
class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)


class AccountMixin(TimestampMixin):
    """Columns shared by every login-capable account"""
    email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    status = Column(String(20), nullable=True, default="active")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
