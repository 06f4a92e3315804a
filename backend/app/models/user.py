"""
User database model.

Donors and staff share this table. Donors own entries, advance payments
and previous outstanding records; staff act on them.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from backend.app.db.session import Base, utcnow
from backend.app.models.enums import UserRole


class User(Base):
    """
    User model.

    The row is also the per-donor lock target: operations that spend a
    donor's advance credit lock it with SELECT ... FOR UPDATE.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    mobile = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    role = Column(Enum(UserRole), default=UserRole.VIEWER, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role.value}')>"
