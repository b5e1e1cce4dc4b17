"""Circle lifecycle: creation, listing, details, preview and deletion."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlmodel import Session, col, func, select

from privo.errors import InvalidArgument, NotFound, Unauthorized
from privo.models.circle import Circle, CircleInviteLink, CircleMember
from privo.models.event import RSVP, Invite
from privo.models.user import User
from privo.services.code_service import generate_unique_code
from privo.utils.storage import remove_media_file

logger = logging.getLogger(__name__)


@dataclass
class CircleDetails:
    circle: Circle
    owner: User
    current_user_status: str
    members: list[tuple[CircleMember, User]] = field(default_factory=list)
    invites: list[tuple[Invite, int]] = field(default_factory=list)


# --- Lookups shared by the other services ---

def get_circle(session: Session, circle_id: str) -> Circle:
    circle = session.get(Circle, circle_id)
    if not circle:
        raise NotFound("Circle not found")
    return circle


def require_owner(session: Session, circle_id: str, requester_id: str, action: str = "manage this circle") -> Circle:
    """Load the circle and check the requester is its owner of record."""
    circle = get_circle(session, circle_id)
    if circle.owner_id != requester_id:
        raise Unauthorized(f"Only the owner can {action}")
    return circle


def get_member(session: Session, circle_id: str, user_id: str) -> CircleMember | None:
    return session.exec(
        select(CircleMember).where(
            CircleMember.circle_id == circle_id,
            CircleMember.user_id == user_id,
        )
    ).first()


def is_active_member(session: Session, circle_id: str, user_id: str) -> bool:
    member = get_member(session, circle_id, user_id)
    return member is not None and member.status == "ACTIVE"


def active_member_count(session: Session, circle_id: str) -> int:
    return session.exec(
        select(func.count()).select_from(CircleMember).where(
            CircleMember.circle_id == circle_id,
            CircleMember.status == "ACTIVE",
        )
    ).one()


def members_with_users(session: Session, circle_id: str, status: str) -> list[tuple[CircleMember, User]]:
    rows = session.exec(
        select(CircleMember, User)
        .join(User, User.id == CircleMember.user_id)
        .where(CircleMember.circle_id == circle_id, CircleMember.status == status)
        .order_by(col(CircleMember.joined_at).asc())
    ).all()
    return list(rows)


# --- Operations ---

def create_circle(session: Session, owner_id: str, name: str, description: str | None = None) -> Circle:
    """Create a circle and its owner membership in one transaction."""
    name = name.strip()
    if not name:
        raise InvalidArgument("Circle name is required")

    circle = Circle(
        name=name,
        description=description,
        owner_id=owner_id,
        invite_code=generate_unique_code(session),
    )
    session.add(circle)
    session.flush()

    owner = CircleMember(
        circle_id=circle.id,
        user_id=owner_id,
        role="OWNER",
        status="ACTIVE",
    )
    session.add(owner)
    session.commit()
    session.refresh(circle)

    logger.info("Circle %s created by %s", circle.id, owner_id)
    return circle


def list_circles(session: Session, user_id: str) -> list[Circle]:
    """Circles where the user is an active member."""
    circles = session.exec(
        select(Circle)
        .join(CircleMember, CircleMember.circle_id == Circle.id)
        .where(CircleMember.user_id == user_id, CircleMember.status == "ACTIVE")
        .order_by(col(Circle.created_at).desc())
    ).all()
    return list(circles)


def get_circle_details(session: Session, circle_id: str, user_id: str) -> CircleDetails:
    """Circle view for a member. Pending members only see the circle and its owner."""
    circle = get_circle(session, circle_id)
    member = get_member(session, circle_id, user_id)
    if member is None:
        raise Unauthorized("You are not a member of this circle")

    owner = session.get(User, circle.owner_id)
    details = CircleDetails(circle=circle, owner=owner, current_user_status=member.status)
    if member.status == "PENDING":
        return details

    details.members = members_with_users(session, circle_id, "ACTIVE")

    rsvp_count = (
        select(func.count())
        .select_from(RSVP)
        .where(RSVP.invite_id == Invite.id)
        .scalar_subquery()
    )
    rows = session.exec(
        select(Invite, rsvp_count)
        .where(Invite.circle_id == circle_id)
        .order_by(col(Invite.event_date).desc())
    ).all()
    details.invites = [(invite, count) for invite, count in rows]
    return details


def preview_by_code(session: Session, code: str) -> tuple[Circle, User, int]:
    """Public preview of the circle behind a general code or a live limited link."""
    circle = session.exec(select(Circle).where(Circle.invite_code == code)).first()
    if circle is None:
        link = session.exec(select(CircleInviteLink).where(CircleInviteLink.code == code)).first()
        if link is None or link.state != "active":
            raise NotFound("Circle not found")
        circle = get_circle(session, link.circle_id)

    owner = session.get(User, circle.owner_id)
    return circle, owner, active_member_count(session, circle.id)


def delete_circle(session: Session, circle_id: str, requester_id: str) -> None:
    """Delete a circle with its members, links and events. Owner only."""
    from privo.services.event_service import purge_invite

    circle = require_owner(session, circle_id, requester_id, "delete a circle")

    media_files = []
    for invite in session.exec(select(Invite).where(Invite.circle_id == circle_id)).all():
        media_files.extend(purge_invite(session, invite))
    for link in session.exec(select(CircleInviteLink).where(CircleInviteLink.circle_id == circle_id)).all():
        session.delete(link)
    for member in session.exec(select(CircleMember).where(CircleMember.circle_id == circle_id)).all():
        session.delete(member)
    session.flush()

    session.delete(circle)
    session.commit()
    for path in media_files:
        remove_media_file(path)
    logger.info("Circle %s deleted by %s", circle_id, requester_id)


def touch(circle: Circle) -> None:
    circle.updated_at = datetime.now(timezone.utc)
