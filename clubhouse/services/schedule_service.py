"""Schedule service — per-club events and date-range overlap queries."""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy.orm import Session

from clubhouse.db.session import atomic
from clubhouse.models.club import Club, ClubMember
from clubhouse.models.schedule import Schedule
from clubhouse.core.exceptions import InvalidRangeError, ResourceNotFoundError, ValidationError
from clubhouse.services import permissions

logger = logging.getLogger("clubhouse")

SCHEDULE_FIELDS = ("title", "start_at", "end_at", "content")
NULLABLE_FIELDS = ("content",)


def to_utc_naive(value: datetime) -> datetime:
    """Normalise to the naive-UTC form stored in DateTime columns.

    Aware values are converted to UTC; naive values are taken to already be UTC.
    """
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _check_range(start_at: datetime, end_at: datetime) -> None:
    if end_at < start_at:
        raise InvalidRangeError()


def _check_limit(limit: Optional[int]) -> None:
    if limit is not None and limit <= 0:
        raise ValidationError("limit must be a positive integer")


def _overlapping(query, date_from: Optional[datetime], date_to: Optional[datetime]):
    """Keep schedules whose [start_at, end_at] intersects [date_from, date_to].

    Either bound may be open. An event that starts before ``date_from`` but is still
    running at ``date_from`` matches.
    """
    if date_from is not None:
        query = query.filter(Schedule.end_at >= to_utc_naive(date_from))
    if date_to is not None:
        query = query.filter(Schedule.start_at <= to_utc_naive(date_to))
    return query


class ScheduleService:
    """Manages club schedules."""

    @staticmethod
    def list_by_club(
        db: Session,
        club_id: int,
        user_id: int,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Schedule]:
        """Schedules of one club overlapping the window, earliest start first."""
        permissions.require_approved_member(db, user_id, club_id)
        _check_limit(limit)

        query = _overlapping(db.query(Schedule).filter(Schedule.club_id == club_id), date_from, date_to)
        query = query.order_by(Schedule.start_at.asc(), Schedule.id.asc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def list_for_user(
        db: Session,
        user_id: int,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Calendar view: schedules of every club the user is an approved member of."""
        _check_limit(limit)

        query = (
            db.query(Schedule, Club.name)
            .join(Club, Schedule.club_id == Club.id)
            .join(ClubMember, ClubMember.club_id == Club.id)
            .filter(ClubMember.user_id == user_id, ClubMember.approved == True)
        )
        query = _overlapping(query, date_from, date_to)
        query = query.order_by(Schedule.start_at.asc(), Schedule.id.asc())
        if limit is not None:
            query = query.limit(limit)

        return [
            {
                "id": s.id,
                "club_id": s.club_id,
                "club_name": club_name,
                "title": s.title,
                "start_at": s.start_at,
                "end_at": s.end_at,
                "content": s.content,
                "created_at": s.created_at,
                "updated_at": s.updated_at,
            }
            for s, club_name in query.all()
        ]

    @staticmethod
    def _get(db: Session, schedule_id: int, club_id: Optional[int] = None) -> Schedule:
        schedule = db.query(Schedule).filter(Schedule.id == schedule_id).first()
        if not schedule or (club_id is not None and schedule.club_id != club_id):
            raise ResourceNotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    @staticmethod
    def get_schedule(db: Session, schedule_id: int, user_id: int) -> Schedule:
        """Get one schedule; any approved member of its club may read it."""
        schedule = ScheduleService._get(db, schedule_id)
        permissions.require_approved_member(db, user_id, schedule.club_id)
        return schedule

    @staticmethod
    def create_schedule(
        db: Session,
        club_id: int,
        user_id: int,
        title: str,
        start_at: datetime,
        end_at: datetime,
        content: Optional[str] = None,
    ) -> Schedule:
        """Create a schedule. Requires a LEADER or WRITER of the club."""
        permissions.require_writer_or_leader(db, user_id, club_id)
        if not title or not title.strip():
            raise ValidationError("title is required")
        start_at, end_at = to_utc_naive(start_at), to_utc_naive(end_at)
        _check_range(start_at, end_at)

        with atomic(db):
            schedule = Schedule(
                club_id=club_id,
                title=title.strip(),
                start_at=start_at,
                end_at=end_at,
                content=content,
            )
            db.add(schedule)
        db.refresh(schedule)
        logger.info("Schedule %s created in club %s by user %s", schedule.id, club_id, user_id)
        return schedule

    @staticmethod
    def update_schedule(
        db: Session,
        schedule_id: int,
        user_id: int,
        changes: Dict[str, Any],
        club_id: Optional[int] = None,
    ) -> Schedule:
        """Apply a partial patch.

        Keys absent from ``changes`` are left alone. ``content=None`` clears the
        content; ``None`` for title or either bound is rejected. Permission is checked
        against the club that owns the schedule, never a caller-supplied one.
        """
        schedule = ScheduleService._get(db, schedule_id, club_id)
        permissions.require_writer_or_leader(db, user_id, schedule.club_id)

        unknown = set(changes) - set(SCHEDULE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(f"{field} cannot be null")

        updates = dict(changes)
        if "title" in updates:
            if not updates["title"].strip():
                raise ValidationError("title is required")
            updates["title"] = updates["title"].strip()
        for field in ("start_at", "end_at"):
            if field in updates:
                updates[field] = to_utc_naive(updates[field])

        # Drag-to-reschedule sends both bounds; a single moved bound is checked
        # against the stored one so the record never ends before it starts.
        _check_range(
            updates.get("start_at", schedule.start_at),
            updates.get("end_at", schedule.end_at),
        )

        with atomic(db):
            for field, value in updates.items():
                setattr(schedule, field, value)
        db.refresh(schedule)
        logger.info("Schedule %s updated by user %s: %s", schedule_id, user_id, sorted(updates))
        return schedule

    @staticmethod
    def delete_schedule(
        db: Session, schedule_id: int, user_id: int, club_id: Optional[int] = None,
    ) -> None:
        """Hard-delete a schedule."""
        schedule = ScheduleService._get(db, schedule_id, club_id)
        permissions.require_writer_or_leader(db, user_id, schedule.club_id)

        with atomic(db):
            db.delete(schedule)
        logger.info("Schedule %s deleted by user %s", schedule_id, user_id)


schedule_service = ScheduleService()
