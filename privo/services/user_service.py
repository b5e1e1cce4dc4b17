"""User identity sync, profiles and activity stats."""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy import distinct, or_
from sqlmodel import Session, col, func, select

from privo.errors import InvalidArgument, NotFound, Unauthorized
from privo.models.circle import Circle, CircleMember
from privo.models.event import RSVP, FeedItem, Invite
from privo.models.user import User

logger = logging.getLogger(__name__)

PROFILE_VISIBILITIES = {"PUBLIC", "PRIVATE", "CIRCLES_ONLY"}


@dataclass
class UserStats:
    circles_owned: int
    circles_joined: int
    events_created: int
    events_attended: int
    rsvp_response_rate: float
    posts_shared: int

    def to_dict(self) -> dict:
        return asdict(self)


def sync_user(
    session: Session,
    token_sub: str,
    user_id: str,
    email: str,
    name: str | None = None,
    image: str | None = None,
    email_verified: datetime | None = None,
) -> User:
    """Upsert the user record for a signed-in identity, keyed by email."""
    if user_id != token_sub:
        raise Unauthorized("Cannot sync another user's identity")
    if not user_id or not email:
        raise InvalidArgument("Missing required fields")

    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        user = session.get(User, user_id)
    if user is None:
        user = User(id=user_id, email=email)
        logger.info("New user %s synced", user_id)
    elif user.id != user_id:
        raise InvalidArgument("Email is already bound to another account")

    user.email = email
    user.name = name
    user.image = image
    user.email_verified = email_verified
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def shares_active_circle(session: Session, user_a: str, user_b: str) -> bool:
    circles_a = select(CircleMember.circle_id).where(
        CircleMember.user_id == user_a, CircleMember.status == "ACTIVE",
    )
    shared = session.exec(
        select(CircleMember.id).where(
            CircleMember.user_id == user_b,
            CircleMember.status == "ACTIVE",
            col(CircleMember.circle_id).in_(circles_a),
        )
    ).first()
    return shared is not None


def get_visible_user(session: Session, user_id: str, viewer_id: str) -> User:
    """Load a user, enforcing their profile visibility against the viewer."""
    user = get_user(session, user_id)
    if user_id == viewer_id:
        return user
    if user.profile_visibility == "PRIVATE":
        raise Unauthorized("This profile is private")
    if user.profile_visibility == "CIRCLES_ONLY" and not shares_active_circle(session, user_id, viewer_id):
        raise Unauthorized("This profile is only visible to circle members")
    return user


def get_stats(session: Session, user_id: str) -> UserStats:
    circles_owned = session.exec(
        select(func.count()).select_from(Circle).where(Circle.owner_id == user_id)
    ).one()

    circles_joined = session.exec(
        select(func.count(distinct(CircleMember.circle_id)))
        .join(Circle, Circle.id == CircleMember.circle_id)
        .where(
            CircleMember.user_id == user_id,
            CircleMember.status == "ACTIVE",
            Circle.owner_id != user_id,
        )
    ).one()

    events_created = session.exec(
        select(func.count()).select_from(Invite).where(Invite.sender_id == user_id)
    ).one()

    events_attended = session.exec(
        select(func.count()).select_from(RSVP).where(RSVP.user_id == user_id, RSVP.status == "YES")
    ).one()
    # Invites from others the user can see: circle-less ones and those of their active circles
    active_circles = select(CircleMember.circle_id).where(
        CircleMember.user_id == user_id, CircleMember.status == "ACTIVE",
    )
    received = (
        Invite.sender_id != user_id,
        or_(col(Invite.circle_id).is_(None), col(Invite.circle_id).in_(active_circles)),
    )
    total_invites = session.exec(
        select(func.count()).select_from(Invite).where(*received)
    ).one()
    total_responses = session.exec(
        select(func.count())
        .select_from(RSVP)
        .join(Invite, Invite.id == RSVP.invite_id)
        .where(RSVP.user_id == user_id, *received)
    ).one()

    posts_shared = session.exec(
        select(func.count()).select_from(FeedItem).where(FeedItem.user_id == user_id)
    ).one()

    rate = (total_responses / total_invites * 100) if total_invites > 0 else 0.0
    return UserStats(
        circles_owned=circles_owned,
        circles_joined=circles_joined,
        events_created=events_created,
        events_attended=events_attended,
        rsvp_response_rate=round(rate, 1),
        posts_shared=posts_shared,
    )


def update_profile(
    session: Session,
    user_id: str,
    viewer_id: str,
    name: str | None = None,
    bio: str | None = None,
    profile_visibility: str | None = None,
) -> User:
    """Update the caller's own profile. Fields left as None are unchanged."""
    if user_id != viewer_id:
        raise Unauthorized("You can only update your own profile")
    if profile_visibility is not None and profile_visibility not in PROFILE_VISIBILITIES:
        raise InvalidArgument("Invalid profile visibility value")

    user = get_user(session, user_id)
    if name is not None:
        user.name = name
    if bio is not None:
        user.bio = bio
    if profile_visibility is not None:
        user.profile_visibility = profile_visibility

    session.add(user)
    session.commit()
    session.refresh(user)
    return user
