"""Club and ClubMember models."""

import enum

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from clubhouse.db.base import Base, utcnow


class ClubRoleEnum(str, enum.Enum):
    LEADER = "LEADER"
    WRITER = "WRITER"
    READER = "READER"


class MemberTierEnum(str, enum.Enum):
    JUNIOR = "JUNIOR"
    SENIOR = "SENIOR"
    MANAGER = "MANAGER"


# Display order for member listings.
ROLE_ORDER = [ClubRoleEnum.LEADER, ClubRoleEnum.WRITER, ClubRoleEnum.READER]


def club_name_key(name: str) -> str:
    """Normalised form used for case-insensitive name uniqueness."""
    return name.strip().casefold()


class Club(Base):
    """A club. ``name_key`` carries the unique index, ``name`` keeps the display casing."""
    __tablename__ = "clubs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    name_key = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(String(200), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    members = relationship("ClubMember", back_populates="club", cascade="all, delete-orphan")
    schedules = relationship("Schedule", back_populates="club", cascade="all, delete-orphan")
    posts = relationship("Post", back_populates="club", cascade="all, delete-orphan")


class ClubMember(Base):
    """Membership of a user in a club.

    ``approved = False`` is a pending join request; such rows are always READER/JUNIOR.
    """
    __tablename__ = "club_members"
    __table_args__ = (
        UniqueConstraint("user_id", "club_id", name="uq_club_members_user_club"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    approved = Column(Boolean, default=False, nullable=False)
    role = Column(Enum(ClubRoleEnum), default=ClubRoleEnum.READER, nullable=False)
    tier = Column(Enum(MemberTierEnum), default=MemberTierEnum.JUNIOR, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    club = relationship("Club", back_populates="members")
    user = relationship("User", back_populates="memberships", lazy="joined")
