"""Club service — club lifecycle, join-request workflow, member administration."""

import logging
from typing import Optional, Dict, Any, List

from sqlalchemy import case
from sqlalchemy.orm import Session

from clubhouse.db.session import atomic
from clubhouse.models.club import (
    Club, ClubMember, ClubRoleEnum, MemberTierEnum, ROLE_ORDER, club_name_key,
)
from clubhouse.models.user import SystemRoleEnum
from clubhouse.core.exceptions import (
    AlreadyApprovedError, AlreadyMemberError, AlreadyRequestedError,
    CannotModifyLeaderError, CannotRemoveLeaderError, ClubNameTakenError,
    ResourceNotFoundError, ValidationError,
)
from clubhouse.services import permissions

logger = logging.getLogger("clubhouse")

_role_rank = case(
    *[(ClubMember.role == role, rank) for rank, role in enumerate(ROLE_ORDER)],
    else_=len(ROLE_ORDER),
)

ROLE_TIER_FIELDS = ("role", "tier")


def member_view(member: ClubMember) -> Dict[str, Any]:
    """Public shape of an approved membership."""
    return {
        "id": member.id,
        "user_id": member.user_id,
        "name": member.user.name if member.user else None,
        "email": member.user.email if member.user else None,
        "role": member.role,
        "tier": member.tier,
        "joined_at": member.created_at,
    }


class ClubService:
    """Manages clubs and the memberships inside them."""

    @staticmethod
    def list_all(db: Session) -> List[Club]:
        """List every club by name."""
        return db.query(Club).order_by(Club.name.asc(), Club.id.asc()).all()

    @staticmethod
    def list_my(db: Session, user_id: int) -> List[Dict[str, Any]]:
        """Clubs the user is an approved member of, with their role and tier."""
        memberships = (
            db.query(ClubMember)
            .join(Club, ClubMember.club_id == Club.id)
            .filter(ClubMember.user_id == user_id, ClubMember.approved == True)
            .order_by(Club.name.asc(), Club.id.asc())
            .all()
        )
        return [
            {
                "id": m.club.id,
                "name": m.club.name,
                "description": m.club.description,
                "role": m.role,
                "tier": m.tier,
            }
            for m in memberships
        ]

    @staticmethod
    def get_club(db: Session, club_id: int) -> Club:
        """Get a club by id."""
        club = db.query(Club).filter(Club.id == club_id).first()
        if not club:
            raise ResourceNotFoundError(f"Club {club_id} not found")
        return club

    @staticmethod
    def create_club(
        db: Session,
        name: str,
        creator_user_id: int,
        description: Optional[str] = None,
    ) -> Club:
        """Create a club and enrol its creator as approved LEADER/MANAGER.

        Raises:
            ValidationError: If the name is blank.
            ClubNameTakenError: If a club with the same name (ignoring case) exists.
        """
        display_name = (name or "").strip()
        if not display_name:
            raise ValidationError("Club name is required")
        key = club_name_key(display_name)

        if db.query(Club.id).filter(Club.name_key == key).first():
            raise ClubNameTakenError(display_name)

        with atomic(db):
            club = Club(name=display_name, name_key=key, description=description)
            club.members.append(
                ClubMember(
                    user_id=creator_user_id,
                    approved=True,
                    role=ClubRoleEnum.LEADER,
                    tier=MemberTierEnum.MANAGER,
                )
            )
            db.add(club)
        db.refresh(club)
        logger.info("Club %s '%s' created by user %s", club.id, club.name, creator_user_id)
        return club

    @staticmethod
    def request_join(db: Session, club_id: int, user_id: int) -> Dict[str, Any]:
        """File a pending join request."""
        ClubService.get_club(db, club_id)

        existing = permissions.find_membership(db, user_id, club_id)
        if existing:
            if not existing.approved:
                raise AlreadyRequestedError()
            raise AlreadyMemberError()

        with atomic(db):
            request = ClubMember(
                user_id=user_id,
                club_id=club_id,
                approved=False,
                role=ClubRoleEnum.READER,
                tier=MemberTierEnum.JUNIOR,
            )
            db.add(request)
        db.refresh(request)
        logger.info("User %s requested to join club %s", user_id, club_id)
        return {"message": "Join request submitted", "request": request}

    @staticmethod
    def list_join_requests(
        db: Session, club_id: int, requester_id: int, requester_role: SystemRoleEnum,
    ) -> List[ClubMember]:
        """Pending requests, oldest first."""
        permissions.require_leader_or_system_admin(db, club_id, requester_id, requester_role)
        return (
            db.query(ClubMember)
            .filter(ClubMember.club_id == club_id, ClubMember.approved == False)
            .order_by(ClubMember.created_at.asc(), ClubMember.id.asc())
            .all()
        )

    @staticmethod
    def _get_request(db: Session, club_id: int, member_id: int) -> ClubMember:
        member = db.query(ClubMember).filter(ClubMember.id == member_id).first()
        if not member or member.club_id != club_id:
            raise ResourceNotFoundError(f"Member {member_id} not found in club {club_id}")
        return member

    @staticmethod
    def approve_member(
        db: Session,
        club_id: int,
        member_id: int,
        requester_id: int,
        requester_role: SystemRoleEnum,
    ) -> ClubMember:
        """Approve a pending request. Role and tier keep their request-time defaults.

        The pending -> approved transition is one conditional UPDATE, so of two
        concurrent approvals exactly one changes the row; the other sees zero
        affected rows and gets AlreadyApprovedError.
        """
        permissions.require_leader_or_system_admin(db, club_id, requester_id, requester_role)
        member = ClubService._get_request(db, club_id, member_id)
        if member.approved:
            raise AlreadyApprovedError()

        with atomic(db):
            changed = (
                db.query(ClubMember)
                .filter(ClubMember.id == member_id, ClubMember.approved == False)
                .update({ClubMember.approved: True})
            )
            if changed == 0:
                raise AlreadyApprovedError()
        db.refresh(member)
        logger.info("Member %s approved in club %s by user %s", member_id, club_id, requester_id)
        return member

    @staticmethod
    def reject_member(
        db: Session,
        club_id: int,
        member_id: int,
        requester_id: int,
        requester_role: SystemRoleEnum,
    ) -> Dict[str, bool]:
        """Reject (delete) a pending request."""
        permissions.require_leader_or_system_admin(db, club_id, requester_id, requester_role)
        member = ClubService._get_request(db, club_id, member_id)
        if member.approved:
            raise AlreadyApprovedError("Approved members cannot be rejected")

        with atomic(db):
            deleted = (
                db.query(ClubMember)
                .filter(ClubMember.id == member_id, ClubMember.approved == False)
                .delete()
            )
            if deleted == 0:
                raise AlreadyApprovedError("Approved members cannot be rejected")
        logger.info("Member %s rejected in club %s by user %s", member_id, club_id, requester_id)
        return {"success": True}

    @staticmethod
    def _get_approved_member(db: Session, club_id: int, member_id: int) -> ClubMember:
        member = (
            db.query(ClubMember)
            .filter(
                ClubMember.id == member_id,
                ClubMember.club_id == club_id,
                ClubMember.approved == True,
            )
            .first()
        )
        if not member:
            raise ResourceNotFoundError(f"Member {member_id} not found in club {club_id}")
        return member

    @staticmethod
    def get_member_detail(
        db: Session, requester_id: int, club_id: int, member_id: int,
    ) -> Dict[str, Any]:
        """Any approved member may look up another approved member."""
        permissions.require_approved_member(db, requester_id, club_id)
        return member_view(ClubService._get_approved_member(db, club_id, member_id))

    @staticmethod
    def update_member_role_tier(
        db: Session,
        requester_id: int,
        club_id: int,
        member_id: int,
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Patch a member's role and/or tier.

        Only keys present in ``changes`` are applied. Neither field is nullable.
        """
        permissions.require_leader(db, requester_id, club_id)
        member = ClubService._get_approved_member(db, club_id, member_id)
        if member.role == ClubRoleEnum.LEADER:
            raise CannotModifyLeaderError()

        unknown = set(changes) - set(ROLE_TIER_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        updates = {}
        for field, enum_cls in (("role", ClubRoleEnum), ("tier", MemberTierEnum)):
            if field not in changes:
                continue
            value = changes[field]
            if value is None:
                raise ValidationError(f"{field} cannot be null")
            try:
                updates[field] = enum_cls(value)
            except ValueError:
                raise ValidationError(f"Invalid {field}: {value}")

        with atomic(db):
            for field, value in updates.items():
                setattr(member, field, value)
        db.refresh(member)
        logger.info(
            "Member %s in club %s updated by user %s: %s",
            member_id, club_id, requester_id, {k: v.value for k, v in updates.items()},
        )
        return member_view(member)

    @staticmethod
    def remove_member(
        db: Session, requester_id: int, club_id: int, member_id: int,
    ) -> Dict[str, bool]:
        """Remove a non-LEADER member."""
        permissions.require_leader(db, requester_id, club_id)
        member = (
            db.query(ClubMember)
            .filter(ClubMember.id == member_id, ClubMember.club_id == club_id)
            .first()
        )
        if not member:
            raise ResourceNotFoundError(f"Member {member_id} not found in club {club_id}")
        if member.role == ClubRoleEnum.LEADER:
            raise CannotRemoveLeaderError()

        with atomic(db):
            db.delete(member)
        logger.info("Member %s removed from club %s by user %s", member_id, club_id, requester_id)
        return {"success": True}

    @staticmethod
    def list_members(db: Session, club_id: int, requester_id: int) -> List[Dict[str, Any]]:
        """Approved members, LEADER first, then WRITER, READER; earliest joiners first."""
        permissions.require_approved_member(db, requester_id, club_id)
        members = (
            db.query(ClubMember)
            .filter(ClubMember.club_id == club_id, ClubMember.approved == True)
            .order_by(_role_rank, ClubMember.created_at.asc(), ClubMember.id.asc())
            .all()
        )
        return [member_view(m) for m in members]


club_service = ClubService()
