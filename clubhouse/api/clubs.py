"""Clubs API router — clubs, join requests, members."""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clubhouse.db.session import get_db
from clubhouse.schemas.schemas import (
    ClubCreate, ClubOut, MyClubOut, JoinResponse, JoinRequestOut,
    MembershipOut, MemberOut, MemberRoleTierUpdate, SuccessResponse,
)
from clubhouse.services.club_service import club_service
from clubhouse.core.security import Principal, get_current_principal

router = APIRouter(prefix="/clubs", tags=["clubs"])


@router.get("/", response_model=List[ClubOut])
async def list_clubs(db: Session = Depends(get_db)):
    """List all clubs."""
    return club_service.list_all(db)


@router.get("/my", response_model=List[MyClubOut])
async def list_my_clubs(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Clubs the current user has been approved into."""
    return club_service.list_my(db, principal.user_id)


@router.post("/", response_model=ClubOut, status_code=201)
async def create_club(
    body: ClubCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Create a club; the creator becomes its leader."""
    return club_service.create_club(db, body.name, principal.user_id, body.description)


@router.get("/{club_id}", response_model=ClubOut)
async def get_club(club_id: int, db: Session = Depends(get_db)):
    return club_service.get_club(db, club_id)


@router.post("/{club_id}/join", response_model=JoinResponse, status_code=201)
async def request_join(
    club_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Ask to join a club."""
    return club_service.request_join(db, club_id, principal.user_id)


@router.get("/{club_id}/join-requests", response_model=List[JoinRequestOut])
async def list_join_requests(
    club_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Pending join requests, oldest first (leader or system admin)."""
    requests = club_service.list_join_requests(db, club_id, principal.user_id, principal.system_role)
    return [
        JoinRequestOut(
            **MembershipOut.model_validate(m).model_dump(),
            name=m.user.name if m.user else None,
            email=m.user.email if m.user else None,
        )
        for m in requests
    ]


@router.post("/{club_id}/join-requests/{member_id}/approve", response_model=MembershipOut)
async def approve_member(
    club_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return club_service.approve_member(db, club_id, member_id, principal.user_id, principal.system_role)


@router.post("/{club_id}/join-requests/{member_id}/reject", response_model=SuccessResponse)
async def reject_member(
    club_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return club_service.reject_member(db, club_id, member_id, principal.user_id, principal.system_role)


@router.get("/{club_id}/members", response_model=List[MemberOut])
async def list_members(
    club_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Approved members of a club."""
    return club_service.list_members(db, club_id, principal.user_id)


@router.get("/{club_id}/members/{member_id}", response_model=MemberOut)
async def get_member(
    club_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return club_service.get_member_detail(db, principal.user_id, club_id, member_id)


@router.patch("/{club_id}/members/{member_id}", response_model=MemberOut)
async def update_member(
    club_id: int,
    member_id: int,
    body: MemberRoleTierUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Change a member's role and/or tier (leader only)."""
    return club_service.update_member_role_tier(
        db, principal.user_id, club_id, member_id, body.model_dump(exclude_unset=True),
    )


@router.delete("/{club_id}/members/{member_id}", response_model=SuccessResponse)
async def remove_member(
    club_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Remove a non-leader member (leader only)."""
    return club_service.remove_member(db, principal.user_id, club_id, member_id)
