"""Invite link registry: the general circle code and limited-use links.

All operations are owner-only; ownership is read from the circle row at
call time.
"""

import logging
from datetime import datetime, timezone

from sqlmodel import Session, col, select

from privo.errors import InvalidArgument, NotFound
from privo.models.circle import CircleInviteLink
from privo.services.circle_service import require_owner, touch
from privo.services.code_service import generate_unique_code

logger = logging.getLogger(__name__)


def regenerate_general_code(session: Session, circle_id: str, requester_id: str) -> str:
    """Replace the circle's general code. The old code stops working immediately."""
    circle = require_owner(session, circle_id, requester_id, "regenerate the invite code")

    circle.invite_code = generate_unique_code(session)
    touch(circle)
    session.add(circle)
    session.commit()
    session.refresh(circle)

    logger.info("Invite code regenerated for circle %s", circle_id)
    return circle.invite_code


def set_link_enabled(session: Session, circle_id: str, requester_id: str, enabled: bool) -> bool:
    circle = require_owner(session, circle_id, requester_id, "update circle settings")

    circle.is_invite_link_enabled = enabled
    touch(circle)
    session.add(circle)
    session.commit()

    logger.info("General invite link %s for circle %s", "enabled" if enabled else "disabled", circle_id)
    return enabled


def create_limited_link(session: Session, circle_id: str, requester_id: str, max_uses) -> CircleInviteLink:
    """Create a link that admits at most max_uses members, auto-approved."""
    require_owner(session, circle_id, requester_id, "create invite links")

    if isinstance(max_uses, bool) or not isinstance(max_uses, int) or max_uses < 1:
        raise InvalidArgument("Max uses must be an integer of at least 1")

    link = CircleInviteLink(
        circle_id=circle_id,
        code=generate_unique_code(session),
        max_uses=max_uses,
        creator_id=requester_id,
    )
    session.add(link)
    session.commit()
    session.refresh(link)

    logger.info("Limited invite link %s (%d uses) created for circle %s", link.id, max_uses, circle_id)
    return link


def revoke_limited_link(session: Session, link_id: str, requester_id: str, circle_id: str | None = None) -> CircleInviteLink:
    """Make a link unusable regardless of remaining uses. Revoking twice is harmless."""
    link = session.get(CircleInviteLink, link_id)
    if link is None or (circle_id is not None and link.circle_id != circle_id):
        raise NotFound("Invite link not found")

    require_owner(session, link.circle_id, requester_id, "revoke invite links")

    if link.revoked_at is None:
        link.revoked_at = datetime.now(timezone.utc)
        session.add(link)
        session.commit()
        session.refresh(link)
        logger.info("Limited invite link %s revoked", link_id)
    return link


def list_links(session: Session, circle_id: str, requester_id: str, include_inactive: bool = False) -> list[CircleInviteLink]:
    """Links of a circle, newest first. Only usable ones unless include_inactive."""
    require_owner(session, circle_id, requester_id, "view invite links")

    query = select(CircleInviteLink).where(CircleInviteLink.circle_id == circle_id)
    if not include_inactive:
        query = query.where(
            col(CircleInviteLink.revoked_at).is_(None),
            CircleInviteLink.used_count < CircleInviteLink.max_uses,
        )
    return list(session.exec(query.order_by(col(CircleInviteLink.created_at).desc())).all())
