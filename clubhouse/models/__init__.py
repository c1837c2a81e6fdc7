"""Models package — import all models so create_all can discover them."""

from clubhouse.models.user import User, SystemRoleEnum
from clubhouse.models.club import Club, ClubMember, ClubRoleEnum, MemberTierEnum
from clubhouse.models.schedule import Schedule
from clubhouse.models.post import Post, Comment, PostVisibilityEnum

__all__ = [
    "User", "SystemRoleEnum",
    "Club", "ClubMember", "ClubRoleEnum", "MemberTierEnum",
    "Schedule",
    "Post", "Comment", "PostVisibilityEnum",
]
