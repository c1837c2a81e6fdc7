"""Auth API router — register, login, me."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clubhouse.db.session import get_db
from clubhouse.schemas.schemas import LoginRequest, RegisterRequest, TokenResponse, UserOut
from clubhouse.services.auth_service import auth_service
from clubhouse.core.security import Principal, get_current_principal

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user."""
    return auth_service.register(db, body.email, body.password, body.name)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate and return a bearer token."""
    return auth_service.authenticate(db, body.email, body.password)


@router.get("/me", response_model=UserOut)
async def get_me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Get current user profile."""
    return auth_service.get_user(db, principal.user_id)
