"""Privo Club Database Models."""

from privo.models.user import User
from privo.models.circle import Circle, CircleInviteLink, CircleMember
from privo.models.event import RSVP, FeedItem, Invite, MediaItem

__all__ = [
    "User",
    "Circle",
    "CircleMember",
    "CircleInviteLink",
    "Invite",
    "RSVP",
    "FeedItem",
    "MediaItem",
]
