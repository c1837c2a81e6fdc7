"""Auth service — registration, login, and user lookup."""

import logging
from typing import Dict, Any

from sqlalchemy.orm import Session

from clubhouse.db.session import atomic
from clubhouse.models.user import User, SystemRoleEnum
from clubhouse.core.security import hash_password, verify_password, create_access_token
from clubhouse.core.exceptions import (
    AuthenticationError, ResourceConflictError, ResourceNotFoundError,
)

logger = logging.getLogger("clubhouse")


class AuthService:
    """Issues credentials that resolve to ``(user_id, system_role)``."""

    @staticmethod
    def register(
        db: Session,
        email: str,
        password: str,
        name: str,
        system_role: SystemRoleEnum = SystemRoleEnum.USER,
    ) -> User:
        """Create a new user."""
        email = email.strip().lower()
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            raise ResourceConflictError(f"User with email {email} already exists")

        with atomic(db):
            user = User(
                email=email,
                hashed_password=hash_password(password),
                name=name,
                system_role=system_role,
            )
            db.add(user)
        db.refresh(user)
        logger.info("User %s registered (%s)", user.id, user.system_role.value)
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Dict[str, Any]:
        """Check credentials and return a bearer token.

        Raises:
            AuthenticationError: If credentials are invalid.
        """
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")

        return {
            "access_token": create_access_token(user.id, user.system_role),
            "token_type": "bearer",
            "user": user,
        }

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        """Get a user by id."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError(f"User {user_id} not found")
        return user


auth_service = AuthService()
