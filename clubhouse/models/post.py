"""Post and Comment models."""

import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from clubhouse.db.base import Base, utcnow
from clubhouse.models.club import MemberTierEnum


class PostVisibilityEnum(str, enum.Enum):
    ALL = "ALL"
    JUNIOR = "JUNIOR"
    SENIOR = "SENIOR"
    MANAGER = "MANAGER"


class Post(Base):
    """Club board post.

    ``author_tier`` is a snapshot of the author's tier when the post was written. It is
    an audit record and is never recomputed when the author's membership changes.
    """
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    visibility = Column(Enum(PostVisibilityEnum), default=PostVisibilityEnum.ALL, nullable=False)
    author_tier = Column(Enum(MemberTierEnum), nullable=True)
    is_notice = Column(Boolean, default=False, nullable=False, index=True)
    view_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    club = relationship("Club", back_populates="posts")
    author = relationship("User", lazy="joined")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")


class Comment(Base):
    """Comment on a post. Visible to anyone who can read the post."""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    post = relationship("Post", back_populates="comments")
    author = relationship("User", lazy="joined")
