"""
Authentication service for user management and sessions
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from addressbook.core.errors import Conflict
from addressbook.core.logging_config import LoggingConfig
from addressbook.core.metrics import auth_attempts_total
from addressbook.models.user import Session as UserSession
from addressbook.models.user import User

logger = LoggingConfig.get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands timestamps back naive; they are stored in UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Service for user authentication and session management"""

    def __init__(self, db: Session, session_duration_hours: int = 24):
        self.db = db
        self.session_duration_hours = session_duration_hours

    def register_user(self, email: str, password: str) -> User:
        """
        Register a new user

        Args:
            email: Email address (unique, compared case-insensitively)
            password: Plain text password

        Returns:
            Created User object

        Raises:
            Conflict: If the email is already registered
        """
        email = email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise Conflict("Email in use")

        user = User(
            email=email,
            password_hash=self._hash_password(password),
            is_active=True
        )

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.db.rollback()
            raise Conflict("Email in use")
        self.db.refresh(user)

        logger.info(f"Registered new user {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password

        Returns:
            User object if authentication successful, None otherwise
        """
        user = self.db.query(User).filter(User.email == email.lower()).first()

        if not user or not user.is_active or not self._verify_password(password, user.password_hash):
            logger.warning("Authentication failed", extra={"reason": "unknown_user" if not user else "rejected"})
            auth_attempts_total.labels(kind="login", outcome="rejected").inc()
            return None

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()

        auth_attempts_total.labels(kind="login", outcome="ok").inc()
        logger.info(f"User {user.id} authenticated successfully")
        return user

    def create_session(self, user_id: UUID, duration_hours: Optional[int] = None) -> UserSession:
        """
        Create a new session (bearer token) for a user

        Args:
            user_id: User ID
            duration_hours: Session duration in hours (default: service setting)
        """
        duration = duration_hours or self.session_duration_hours
        session = UserSession(
            user_id=user_id,
            token=secrets.token_urlsafe(32),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=duration)
        )

        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"Created session for user {user_id}")
        return session

    def resolve_identity(self, token: str) -> Optional[User]:
        """
        Validate a session token and return the associated active user

        Expired sessions are removed on sight.
        """
        session = self.db.query(UserSession).filter(UserSession.token == token).first()

        if not session:
            auth_attempts_total.labels(kind="token", outcome="rejected").inc()
            return None

        now = datetime.now(timezone.utc)
        if _as_utc(session.expires_at) < now:
            logger.info(f"Session {session.id} expired")
            self.db.delete(session)
            self.db.commit()
            auth_attempts_total.labels(kind="token", outcome="expired").inc()
            return None

        session.last_activity = now
        self.db.commit()

        user = self.db.query(User).filter(User.id == session.user_id).first()
        if not user or not user.is_active:
            auth_attempts_total.labels(kind="token", outcome="rejected").inc()
            return None

        auth_attempts_total.labels(kind="token", outcome="ok").inc()
        return user

    def logout(self, token: str) -> bool:
        """
        Logout by invalidating a session

        Returns:
            True if session was found and deleted, False otherwise
        """
        session = self.db.query(UserSession).filter(UserSession.token == token).first()

        if session:
            session_id = session.id
            self.db.delete(session)
            self.db.commit()
            logger.info(f"Session {session_id} invalidated")
            return True

        return False

    def cleanup_expired_sessions(self) -> int:
        """
        Remove all expired sessions from the database

        Returns:
            Number of sessions deleted
        """
        count = self.db.query(UserSession).filter(
            UserSession.expires_at < datetime.now(timezone.utc)
        ).delete(synchronize_session=False)
        self.db.commit()

        if count > 0:
            logger.info(f"Cleaned up {count} expired sessions")
        return count

    def _hash_password(self, password: str) -> str:
        """Hash a password using bcrypt"""
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        return hashed.decode('utf-8')

    def _verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash"""
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
