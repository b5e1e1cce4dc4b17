"""Invite code allocation.

General circle codes and limited-link codes share one namespace, so a
code is only handed out when neither table already holds it.
"""

import logging

from sqlmodel import Session, select

from privo.config import settings
from privo.errors import CodeGenerationExhausted
from privo.models.circle import Circle, CircleInviteLink
from privo.utils.security import generate_code

logger = logging.getLogger(__name__)


def code_in_use(session: Session, code: str) -> bool:
    """Check whether a code is held by any circle or limited link."""
    if session.exec(select(Circle.id).where(Circle.invite_code == code)).first():
        return True
    if session.exec(select(CircleInviteLink.id).where(CircleInviteLink.code == code)).first():
        return True
    return False


def generate_unique_code(session: Session) -> str:
    """Generate a code not yet in use, retrying on collision."""
    attempts = settings.code_generation_attempts
    for attempt in range(1, attempts + 1):
        code = generate_code()
        if not code_in_use(session, code):
            return code
        logger.warning("Invite code collision (attempt %d/%d)", attempt, attempts)

    raise CodeGenerationExhausted()
