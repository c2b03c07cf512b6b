"""
User registration and session API routes
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlalchemy.orm import Session

from addressbook.core.auth import SESSION_COOKIE, get_current_user
from addressbook.core.config import get_settings
from addressbook.core.database import get_db
from addressbook.core.errors import Unauthorized
from addressbook.core.logging_config import LoggingConfig
from addressbook.models.user import User
from addressbook.services.auth_service import AuthService

logger = LoggingConfig.get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
PASSWORD_MAX_BYTES = 72


# Request/Response models
class CredentialsRequest(BaseModel):
    """Registration and login request"""
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"must be at most {PASSWORD_MAX_BYTES} bytes long")
        return value


class UserResponse(BaseModel):
    """User response model"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class LoginResponse(BaseModel):
    """Login response model"""
    token: str
    user: UserResponse
    expires_at: datetime


def _auth_service(db: Session) -> AuthService:
    return AuthService(db, session_duration_hours=get_settings().session_duration_hours)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request: CredentialsRequest, db: Session = Depends(get_db)):
    """Register a new user"""
    user = _auth_service(db).register_user(email=request.email, password=request.password)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(request: CredentialsRequest, response: Response, db: Session = Depends(get_db)):
    """Login and create a session"""
    auth_service = _auth_service(db)

    user = auth_service.authenticate(request.email, request.password)
    if not user:
        raise Unauthorized("Email or password is wrong")

    session = auth_service.create_session(user.id)

    settings = get_settings()
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        max_age=settings.session_duration_hours * 60 * 60
    )

    return LoginResponse(
        token=session.token,
        user=UserResponse.model_validate(user),
        expires_at=session.expires_at
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Logout and invalidate the presented session"""
    _auth_service(db).logout(request.state.session_token)
    response.delete_cookie(key=SESSION_COOKIE)
    logger.info(f"User {current_user.id} logged out")
    return None


@router.get("/current", response_model=UserResponse)
def current(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return UserResponse.model_validate(current_user)
