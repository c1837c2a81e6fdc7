"""Authorization gates for club-scoped operations.

Each gate reads the stored membership and either returns it or raises
AuthorizationError. No gate mutates state, so they can be combined freely.

A system ADMIN only bypasses ``require_leader_or_system_admin`` (join-request review).
Reads and role/tier administration stay club-local.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from clubhouse.core.config import settings
from clubhouse.core.exceptions import AuthorizationError
from clubhouse.models.club import ClubMember, ClubRoleEnum, MemberTierEnum
from clubhouse.models.post import Post
from clubhouse.models.user import SystemRoleEnum

logger = logging.getLogger("clubhouse")

NOTICE_TIERS = frozenset({MemberTierEnum.SENIOR, MemberTierEnum.MANAGER})
SCHEDULE_EDITOR_ROLES = frozenset({ClubRoleEnum.LEADER, ClubRoleEnum.WRITER})


def find_membership(db: Session, user_id: int, club_id: int) -> Optional[ClubMember]:
    return (
        db.query(ClubMember)
        .filter(ClubMember.user_id == user_id, ClubMember.club_id == club_id)
        .first()
    )


def _deny(message: str, user_id: int, club_id: int) -> AuthorizationError:
    logger.debug("Denied user=%s club=%s: %s", user_id, club_id, message)
    return AuthorizationError(message)


def require_approved_member(db: Session, user_id: int, club_id: int) -> ClubMember:
    """Baseline gate for any club-scoped read."""
    membership = find_membership(db, user_id, club_id)
    if membership is None or not membership.approved:
        raise _deny("Only approved members of this club can access it", user_id, club_id)
    return membership


def require_leader_or_system_admin(
    db: Session, club_id: int, user_id: int, system_role: SystemRoleEnum,
) -> None:
    """Gate for reviewing join requests."""
    if system_role == SystemRoleEnum.ADMIN:
        return
    membership = find_membership(db, user_id, club_id)
    if membership is None or not membership.approved or membership.role != ClubRoleEnum.LEADER:
        raise _deny("Only the club leader or a system admin can do this", user_id, club_id)


def require_writer_or_leader(db: Session, user_id: int, club_id: int) -> ClubMember:
    """Gate for schedule create/update/delete."""
    membership = require_approved_member(db, user_id, club_id)
    if membership.role not in SCHEDULE_EDITOR_ROLES:
        raise _deny("Only a LEADER or WRITER can manage schedules", user_id, club_id)
    return membership


def require_leader(db: Session, user_id: int, club_id: int) -> ClubMember:
    """Gate for member role/tier administration and removal."""
    membership = require_approved_member(db, user_id, club_id)
    if membership.role != ClubRoleEnum.LEADER:
        raise _deny("Only a LEADER can manage members", user_id, club_id)
    return membership


def can_set_notice(role: ClubRoleEnum, tier: Optional[MemberTierEnum]) -> bool:
    """Whether a member may mark a post as a notice or unmark it."""
    return role == ClubRoleEnum.LEADER or tier in NOTICE_TIERS


def can_modify_post(post: Post, membership: ClubMember) -> bool:
    """Whether ``membership`` may edit or delete ``post`` under the unified policy.

    The author always may. With FEATURE_UNIFIED_POST_OWNERSHIP the club LEADER may too.
    """
    if post.user_id == membership.user_id:
        return True
    return settings.FEATURE_UNIFIED_POST_OWNERSHIP and membership.role == ClubRoleEnum.LEADER
