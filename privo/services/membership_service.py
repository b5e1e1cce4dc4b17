"""Join workflow and owner-side membership approval.

A join resolves a code against limited links first, then against circle
general codes. Limited links are pre-vetted by the owner, so their joins
are ACTIVE immediately; general-code joins wait for approval as PENDING.

The used_count bound of a limited link is enforced by one conditional
UPDATE executed in the same transaction as the membership insert, so
concurrent joiners can never oversell a link.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, col, select

from privo.config import settings
from privo.errors import (
    AlreadyMember,
    CannotRemoveOwner,
    InvalidCode,
    LinkDisabled,
    LinkExhausted,
    LinkRevoked,
    NotFound,
)
from privo.models.circle import Circle, CircleInviteLink, CircleMember
from privo.models.user import User
from privo.services.circle_service import (
    get_circle,
    get_member,
    members_with_users,
    require_owner,
)

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    member: CircleMember
    circle_id: str


def join_by_code(session: Session, code: str, user_id: str) -> JoinResult:
    """Join the circle behind a general code or a limited link.

    Storage contention is retried a bounded number of times; every attempt
    re-validates the code from scratch.
    """
    attempts = settings.join_retry_attempts
    for attempt in range(1, attempts + 1):
        try:
            return _join_once(session, code, user_id)
        except OperationalError as e:
            session.rollback()
            if attempt == attempts:
                logger.error("Join with code gave up after %d attempts: %s", attempts, e)
                raise
            logger.warning("Join contention (attempt %d/%d): %s", attempt, attempts, e)


def _join_once(session: Session, code: str, user_id: str) -> JoinResult:
    link = session.exec(select(CircleInviteLink).where(CircleInviteLink.code == code)).first()

    if link is not None:
        if link.revoked_at is not None:
            raise LinkRevoked()
        if link.used_count >= link.max_uses:
            raise LinkExhausted()
        circle_id = link.circle_id
        status = "ACTIVE"
    else:
        circle = session.exec(select(Circle).where(Circle.invite_code == code)).first()
        if circle is None:
            raise InvalidCode()
        if not circle.is_invite_link_enabled:
            raise LinkDisabled()
        circle_id = circle.id
        status = "PENDING"

    existing = get_member(session, circle_id, user_id)
    if existing is not None:
        if existing.status == "ACTIVE":
            raise AlreadyMember()
        return JoinResult(member=existing, circle_id=circle_id)

    if link is not None:
        _consume_link_use(session, link.id)

    member = CircleMember(
        circle_id=circle_id,
        user_id=user_id,
        role="MEMBER",
        status=status,
    )
    session.add(member)
    try:
        session.commit()
    except IntegrityError:
        # Same user joined concurrently; the link use above is rolled back too
        session.rollback()
        winner = get_member(session, circle_id, user_id)
        if winner is None:
            raise
        if winner.status == "ACTIVE":
            raise AlreadyMember()
        return JoinResult(member=winner, circle_id=circle_id)

    session.refresh(member)
    logger.info(
        "User %s joined circle %s as %s via %s",
        user_id, circle_id, status, "limited link" if link else "general code",
    )
    return JoinResult(member=member, circle_id=circle_id)


def _consume_link_use(session: Session, link_id: str) -> None:
    """Atomically take one use of a link, or fail if none is left."""
    result = session.execute(
        update(CircleInviteLink)
        .where(
            CircleInviteLink.id == link_id,
            CircleInviteLink.used_count < CircleInviteLink.max_uses,
            col(CircleInviteLink.revoked_at).is_(None),
        )
        .values(used_count=CircleInviteLink.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return

    session.rollback()
    link = session.get(CircleInviteLink, link_id)
    if link is not None and link.revoked_at is not None:
        raise LinkRevoked()
    raise LinkExhausted()


# --- Owner-side approval ---

def list_pending(session: Session, circle_id: str, requester_id: str) -> list[tuple[CircleMember, User]]:
    require_owner(session, circle_id, requester_id, "view pending members")
    return members_with_users(session, circle_id, "PENDING")


def approve(session: Session, circle_id: str, user_id: str, requester_id: str) -> CircleMember:
    """Move a pending member to ACTIVE. Approving an active member is a no-op."""
    require_owner(session, circle_id, requester_id, "approve members")

    member = get_member(session, circle_id, user_id)
    if member is None:
        raise NotFound("No pending member found")
    if member.status == "ACTIVE":
        return member

    member.status = "ACTIVE"
    session.add(member)
    session.commit()
    session.refresh(member)
    logger.info("Member %s approved in circle %s", user_id, circle_id)
    return member


def remove(session: Session, circle_id: str, user_id: str, requester_id: str) -> None:
    """Reject a pending member or remove an active one. Owner only."""
    circle = require_owner(session, circle_id, requester_id, "remove members")
    if user_id == circle.owner_id:
        raise CannotRemoveOwner()

    member = get_member(session, circle_id, user_id)
    if member is None:
        raise NotFound("Member not found")

    session.delete(member)
    session.commit()
    logger.info("Member %s (%s) removed from circle %s", user_id, member.status, circle_id)


def leave(session: Session, circle_id: str, user_id: str) -> None:
    """A member removes themselves. The owner has to delete the circle instead."""
    circle = get_circle(session, circle_id)
    if user_id == circle.owner_id:
        raise CannotRemoveOwner("The owner cannot leave their own circle")

    member = get_member(session, circle_id, user_id)
    if member is None:
        raise NotFound("You are not a member of this circle")

    session.delete(member)
    session.commit()
    logger.info("Member %s left circle %s", user_id, circle_id)
