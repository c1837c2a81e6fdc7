"""Schedules API router."""

from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from clubhouse.db.session import get_db
from clubhouse.schemas.schemas import ScheduleCreate, ScheduleUpdate, ScheduleOut, UserScheduleOut
from clubhouse.services.schedule_service import schedule_service
from clubhouse.core.security import Principal, get_current_principal

router = APIRouter(tags=["schedules"])


@router.get("/clubs/{club_id}/schedules", response_model=List[ScheduleOut])
async def list_schedules(
    club_id: int,
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Schedules overlapping ``[from, to]``, earliest first."""
    return schedule_service.list_by_club(db, club_id, principal.user_id, date_from, date_to, limit)


@router.post("/clubs/{club_id}/schedules", response_model=ScheduleOut, status_code=201)
async def create_schedule(
    club_id: int,
    body: ScheduleCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Create a schedule (leader or writer)."""
    return schedule_service.create_schedule(
        db, club_id, principal.user_id, body.title, body.start_at, body.end_at, body.content,
    )


@router.patch("/clubs/{club_id}/schedules/{schedule_id}", response_model=ScheduleOut)
async def update_schedule(
    club_id: int,
    schedule_id: int,
    body: ScheduleUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Partially update a schedule; also used for drag-to-reschedule."""
    return schedule_service.update_schedule(
        db, schedule_id, principal.user_id, body.model_dump(exclude_unset=True), club_id=club_id,
    )


@router.delete("/clubs/{club_id}/schedules/{schedule_id}", status_code=204)
async def delete_schedule(
    club_id: int,
    schedule_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    schedule_service.delete_schedule(db, schedule_id, principal.user_id, club_id=club_id)
    return Response(status_code=204)


@router.get("/schedules/my", response_model=List[UserScheduleOut])
async def list_my_schedules(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Calendar across every club the user belongs to."""
    return schedule_service.list_for_user(db, principal.user_id, date_from, date_to, limit)
