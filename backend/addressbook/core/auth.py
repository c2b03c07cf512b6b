"""
Access guard: resolves the caller identity for a request
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from addressbook.core.config import get_settings
from addressbook.core.database import get_db
from addressbook.core.errors import Unauthorized
from addressbook.core.logging_config import LoggingConfig
from addressbook.models.user import User
from addressbook.services.auth_service import AuthService

logger = LoggingConfig.get_logger(__name__)

SESSION_COOKIE = "session_token"

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None
) -> Optional[str]:
    """Bearer token from the Authorization header, falling back to the session cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Require authentication: return the caller or raise Unauthorized

    On success the caller id and token are attached to ``request.state`` and the
    caller id is added to the logging context of the request.
    """
    token = extract_token(request, credentials)
    if not token:
        raise Unauthorized()

    auth_service = AuthService(db, session_duration_hours=get_settings().session_duration_hours)
    user = await run_in_threadpool(auth_service.resolve_identity, token)
    if not user:
        logger.info("Rejected request with invalid or expired token")
        raise Unauthorized()

    request.state.caller_id = user.id
    request.state.session_token = token
    LoggingConfig.set_context(user_id=str(user.id))
    return user
