"""Event invites, RSVPs, feed posts and memory-vault media.

Media is only ever returned once the vault for the event has unlocked;
the check runs here, not in the client.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import or_
from sqlmodel import Session, col, func, select

from privo.config import settings
from privo.errors import InvalidArgument, NotFound, Unauthorized, VaultLocked
from privo.models.circle import Circle, CircleMember
from privo.models.event import RSVP, FeedItem, Invite, MediaItem
from privo.models.user import User
from privo.services.circle_service import is_active_member
from privo.services.vault_service import as_utc, is_unlocked, unlocks_at
from privo.utils.image import inspect_image
from privo.utils.storage import get_media_storage_path, remove_media_file

logger = logging.getLogger(__name__)

RSVP_STATUSES = {"YES", "NO", "MAYBE"}
POST_TYPES = {"UPDATE", "CHAT"}

IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

VIDEO_TYPES = {
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}


@dataclass
class InviteDetails:
    invite: Invite
    sender: User
    circle: Circle | None
    is_vault_unlocked: bool
    vault_unlocks_at: datetime
    rsvps: list[tuple[RSVP, User]] = field(default_factory=list)
    feed: list[tuple[FeedItem, User]] = field(default_factory=list)
    media: list[MediaItem] = field(default_factory=list)


# --- Access ---

def get_invite(session: Session, invite_id: str) -> Invite:
    invite = session.get(Invite, invite_id)
    if not invite:
        raise NotFound("Invite not found")
    return invite


def can_view(session: Session, invite: Invite, user_id: str) -> bool:
    """Sender, active circle members, and anyone for invites outside a circle."""
    if invite.sender_id == user_id or invite.circle_id is None:
        return True
    return is_active_member(session, invite.circle_id, user_id)


def get_visible_invite(session: Session, invite_id: str, user_id: str) -> Invite:
    invite = get_invite(session, invite_id)
    if not can_view(session, invite, user_id):
        raise Unauthorized("You are not invited to this event")
    return invite


# --- Invites ---

def create_invite(
    session: Session,
    sender_id: str,
    title: str,
    event_date: datetime,
    description: str | None = None,
    location: str | None = None,
    circle_id: str | None = None,
) -> Invite:
    title = title.strip()
    if not title:
        raise InvalidArgument("Title is required")

    if circle_id is not None:
        if session.get(Circle, circle_id) is None:
            raise NotFound("Circle not found")
        if not is_active_member(session, circle_id, sender_id):
            raise Unauthorized("Only active members can create events in this circle")

    invite = Invite(
        title=title,
        description=description,
        location=location,
        event_date=as_utc(event_date),
        sender_id=sender_id,
        circle_id=circle_id,
    )
    session.add(invite)
    session.commit()
    session.refresh(invite)
    logger.info("Invite %s created by %s (circle=%s)", invite.id, sender_id, circle_id)
    return invite


def list_invites(session: Session, user_id: str) -> list[tuple[Invite, User, Circle | None, int]]:
    """Invites sent by the user or shared in their active circles, soonest first."""
    active_circles = select(CircleMember.circle_id).where(
        CircleMember.user_id == user_id,
        CircleMember.status == "ACTIVE",
    )
    rsvp_count = (
        select(func.count())
        .select_from(RSVP)
        .where(RSVP.invite_id == Invite.id)
        .scalar_subquery()
    )
    rows = session.exec(
        select(Invite, User, Circle, rsvp_count)
        .join(User, User.id == Invite.sender_id)
        .join(Circle, Circle.id == Invite.circle_id, isouter=True)
        .where(
            or_(
                Invite.sender_id == user_id,
                col(Invite.circle_id).in_(active_circles),
            )
        )
        .order_by(col(Invite.event_date).asc())
    ).all()
    return [(invite, sender, circle, count) for invite, sender, circle, count in rows]


def get_invite_details(session: Session, invite_id: str, user_id: str, now: datetime | None = None) -> InviteDetails:
    invite = get_visible_invite(session, invite_id, user_id)
    unlocked = is_unlocked(invite.event_date, now)

    details = InviteDetails(
        invite=invite,
        sender=session.get(User, invite.sender_id),
        circle=session.get(Circle, invite.circle_id) if invite.circle_id else None,
        is_vault_unlocked=unlocked,
        vault_unlocks_at=unlocks_at(invite.event_date),
    )
    details.rsvps = list(session.exec(
        select(RSVP, User)
        .join(User, User.id == RSVP.user_id)
        .where(RSVP.invite_id == invite_id)
        .order_by(col(RSVP.created_at).asc())
    ).all())
    details.feed = _feed_rows(session, invite_id)
    if unlocked:
        details.media = _media_rows(session, invite_id)
    return details


def rsvp(
    session: Session,
    invite_id: str,
    user_id: str,
    status: str,
    guest_count: int = 0,
    dietary: str | None = None,
    note: str | None = None,
) -> RSVP:
    """Create or update the user's RSVP for an event."""
    if status not in RSVP_STATUSES:
        raise InvalidArgument("RSVP status must be YES, NO or MAYBE")
    if guest_count < 0:
        raise InvalidArgument("Guest count cannot be negative")

    get_visible_invite(session, invite_id, user_id)

    record = session.exec(
        select(RSVP).where(RSVP.invite_id == invite_id, RSVP.user_id == user_id)
    ).first()
    if record is None:
        record = RSVP(invite_id=invite_id, user_id=user_id, status=status)
    record.status = status
    record.guest_count = guest_count
    record.dietary = dietary
    record.note = note
    record.updated_at = datetime.now(timezone.utc)

    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def purge_invite(session: Session, invite: Invite) -> list[str]:
    """Delete an invite's RSVPs, feed, media rows and the invite itself.

    Flushes but does not commit. Returns the media file paths, which the
    caller removes once the commit has succeeded.
    """
    media_files = []
    for item in session.exec(select(MediaItem).where(MediaItem.invite_id == invite.id)).all():
        media_files.append(item.file_path)
        session.delete(item)
    for item in session.exec(select(FeedItem).where(FeedItem.invite_id == invite.id)).all():
        session.delete(item)
    for item in session.exec(select(RSVP).where(RSVP.invite_id == invite.id)).all():
        session.delete(item)
    session.flush()
    session.delete(invite)
    session.flush()
    return media_files


def delete_invite(session: Session, invite_id: str, requester_id: str) -> None:
    invite = get_invite(session, invite_id)
    if invite.sender_id != requester_id:
        raise Unauthorized("Only the sender can delete this invite")

    media_files = purge_invite(session, invite)
    session.commit()
    for path in media_files:
        remove_media_file(path)
    logger.info("Invite %s deleted by %s", invite_id, requester_id)


# --- Feed ---

def _feed_rows(session: Session, invite_id: str) -> list[tuple[FeedItem, User]]:
    return list(session.exec(
        select(FeedItem, User)
        .join(User, User.id == FeedItem.user_id)
        .where(FeedItem.invite_id == invite_id)
        .order_by(col(FeedItem.created_at).desc())
    ).all())


def create_post(session: Session, invite_id: str, user_id: str, content: str, type: str = "UPDATE") -> FeedItem:
    if type not in POST_TYPES:
        raise InvalidArgument("Post type must be UPDATE or CHAT")
    content = content.strip()
    if not content:
        raise InvalidArgument("Content is required")

    get_visible_invite(session, invite_id, user_id)

    item = FeedItem(invite_id=invite_id, user_id=user_id, content=content, type=type)
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def get_feed(session: Session, invite_id: str, user_id: str) -> list[tuple[FeedItem, User]]:
    get_visible_invite(session, invite_id, user_id)
    return _feed_rows(session, invite_id)


# --- Media (memory vault) ---

def _media_rows(session: Session, invite_id: str) -> list[MediaItem]:
    return list(session.exec(
        select(MediaItem)
        .where(MediaItem.invite_id == invite_id)
        .order_by(col(MediaItem.created_at).asc())
    ).all())


def upload_media(
    session: Session,
    invite_id: str,
    user_id: str,
    file_data: bytes,
    filename: str,
    content_type: str,
    caption: str | None = None,
) -> MediaItem:
    """Store a photo or video in the event's vault. Uploading is allowed while locked."""
    get_visible_invite(session, invite_id, user_id)

    if not file_data:
        raise InvalidArgument("Empty file")
    if len(file_data) > settings.max_upload_bytes:
        raise InvalidArgument(f"File too large (max {settings.max_upload_bytes // (1024 * 1024)}MB)")

    width, height = None, None
    if content_type in VIDEO_TYPES:
        media_type = "VIDEO"
        ext = VIDEO_TYPES[content_type]
    elif content_type in IMAGE_TYPES:
        media_type = "IMAGE"
        ext = IMAGE_TYPES[content_type]
        try:
            width, height, _ = inspect_image(file_data)
        except ValueError as e:
            raise InvalidArgument(str(e)) from e
    else:
        raise InvalidArgument(f"Unsupported media type: {content_type}")

    item = MediaItem(
        invite_id=invite_id,
        user_id=user_id,
        file_path="",
        type=media_type,
        content_type=content_type,
        file_size=len(file_data),
        width=width,
        height=height,
        caption=caption,
    )
    file_path = get_media_storage_path(invite_id) / f"{item.id}{ext}"
    file_path.write_bytes(file_data)
    item.file_path = str(file_path)

    session.add(item)
    try:
        session.commit()
    except Exception:
        session.rollback()
        remove_media_file(str(file_path))
        raise
    session.refresh(item)
    logger.info("Media %s (%s, %d bytes) uploaded to invite %s from %s", item.id, media_type, len(file_data), invite_id, filename)
    return item


def list_media(session: Session, invite_id: str, user_id: str, now: datetime | None = None) -> list[MediaItem]:
    invite = get_visible_invite(session, invite_id, user_id)
    if not is_unlocked(invite.event_date, now):
        raise VaultLocked(f"The memory vault unlocks at {unlocks_at(invite.event_date).isoformat()}")
    return _media_rows(session, invite_id)


def get_media_file(session: Session, media_id: str, user_id: str, now: datetime | None = None) -> tuple[MediaItem, Path]:
    """Resolve a media file for download, applying the same vault check."""
    item = session.get(MediaItem, media_id)
    if item is None:
        raise NotFound("Media not found")

    invite = get_visible_invite(session, item.invite_id, user_id)
    if not is_unlocked(invite.event_date, now):
        raise VaultLocked()

    path = Path(item.file_path)
    if not path.exists():
        raise NotFound("Media file missing")
    return item, path
