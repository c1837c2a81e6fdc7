"""Seed a demo club with a member, a schedule, and a notice."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session
from clubhouse.models.club import Club, club_name_key
from clubhouse.models.user import User, SystemRoleEnum
from clubhouse.services.auth_service import auth_service
from clubhouse.services.club_service import club_service
from clubhouse.services.schedule_service import schedule_service
from clubhouse.services.post_service import post_service

DEMO_CLUB = "Chess Club"
DEMO_LEADER = ("leader@clubhouse.local", "Demo Leader")
DEMO_MEMBER = ("member@clubhouse.local", "Demo Member")
DEMO_PASSWORD = "password123"


def _user(db: Session, email: str, name: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    return user or auth_service.register(db, email, DEMO_PASSWORD, name)


def seed_sample_data(db: Session) -> None:
    """Insert the demo club unless it already exists."""
    if db.query(Club).filter(Club.name_key == club_name_key(DEMO_CLUB)).first():
        print(f"ℹ️  '{DEMO_CLUB}' already exists, skipping sample data.")
        return

    leader = _user(db, *DEMO_LEADER)
    member = _user(db, *DEMO_MEMBER)

    club = club_service.create_club(db, DEMO_CLUB, leader.id, "Weekly games and tournaments")
    request = club_service.request_join(db, club.id, member.id)["request"]
    club_service.approve_member(db, club.id, request.id, leader.id, SystemRoleEnum.USER)

    start = datetime.now(timezone.utc).replace(hour=18, minute=0, second=0, microsecond=0) + timedelta(days=7)
    schedule_service.create_schedule(
        db, club.id, leader.id, "Spring tournament", start, start + timedelta(days=2),
        "Swiss system, five rounds",
    )
    post_service.create_post(
        db, club.id, leader.id, "Welcome", "Read the club rules before the first meeting.",
        is_notice=True,
    )
    print(f"✅ Seeded '{DEMO_CLUB}' with 2 members, 1 schedule, 1 notice")
