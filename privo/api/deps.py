"""Common API dependencies: caller identity from the bearer token."""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from privo.config import settings
from privo.database import get_session
from privo.models.user import User
from privo.utils.security import decode_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

DEV_TOKEN = "dev-token"
DEV_USER_ID = "dev-user-id"


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Extract the caller's user id from a signed session token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
        )

    token = credentials.credentials
    if settings.environment == "development" and token == DEV_TOKEN:
        logger.debug("Using development token bypass")
        return DEV_USER_ID

    try:
        payload = decode_token(token)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token content",
        )
    return sub


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> User:
    """Require the caller to have a synced user record."""
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user
