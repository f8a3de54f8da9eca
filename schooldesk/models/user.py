from sqlalchemy import Column, Integer, String

from .base import AccountMixin, Base


class User(AccountMixin, Base):
    """School admin; stored globally and bound to one school"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(20), nullable=False, unique=True, index=True)
    username = Column(String(50), nullable=False)
    school_id = Column(String(20), nullable=False, index=True)
    contact_number = Column(String(20), nullable=True)

    def __repr__(self):
        return f"<User(user_id='{self.user_id}', school_id='{self.school_id}')>"
