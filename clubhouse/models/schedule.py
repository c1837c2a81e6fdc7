"""Schedule model."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from clubhouse.db.base import Base, utcnow


class Schedule(Base):
    """A club event spanning ``[start_at, end_at]``, both inclusive.

    Owned by the club; no author is tracked. ``end_at >= start_at`` always holds.
    """
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    start_at = Column(DateTime, nullable=False, index=True)
    end_at = Column(DateTime, nullable=False, index=True)
    content = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    club = relationship("Club", back_populates="schedules")
