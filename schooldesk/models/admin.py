from sqlalchemy import Column, Integer, String

from .base import AccountMixin, Base


class Admin(AccountMixin, Base):
    """Platform super admin"""
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True)
    admin_id = Column(String(20), nullable=False, unique=True, index=True)
    username = Column(String(50), nullable=False, unique=True)
    # Rows created before statuses existed have none; treated as active
    status = Column(String(20), nullable=True)

    def __repr__(self):
        return f"<Admin(admin_id='{self.admin_id}', username='{self.username}')>"
