"""Seed the system admin user from env vars."""

from sqlalchemy.orm import Session
from clubhouse.models.user import User, SystemRoleEnum
from clubhouse.services.auth_service import auth_service
from clubhouse.core.config import settings


def seed_admin(db: Session) -> User:
    """Create the system admin if not already present."""
    existing = db.query(User).filter(User.email == settings.ADMIN_EMAIL.lower()).first()
    if existing:
        print(f"ℹ️  Admin '{settings.ADMIN_EMAIL}' already exists, skipping.")
        return existing

    admin = auth_service.register(
        db,
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD,
        name=settings.ADMIN_NAME,
        system_role=SystemRoleEnum.ADMIN,
    )
    print(f"✅ Created admin: {settings.ADMIN_EMAIL}")
    return admin
