"""User model."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from clubhouse.db.base import Base, utcnow


class SystemRoleEnum(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """Platform account. ``system_role`` is global; club permissions live on ClubMember."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    system_role = Column(Enum(SystemRoleEnum), default=SystemRoleEnum.USER, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    memberships = relationship("ClubMember", back_populates="user", cascade="all, delete-orphan")
