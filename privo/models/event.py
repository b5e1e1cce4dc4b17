"""Event invite, RSVP, feed and media models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Invite(SQLModel, table=True):
    __tablename__ = "invites"

    id: str = Field(default_factory=lambda: f"inv_{secrets.token_hex(6)}", primary_key=True)
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    event_date: datetime = Field(index=True)
    sender_id: str = Field(foreign_key="users.id", index=True)
    circle_id: Optional[str] = Field(default=None, foreign_key="circles.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RSVP(SQLModel, table=True):
    __tablename__ = "rsvps"
    __table_args__ = (UniqueConstraint("invite_id", "user_id", name="uq_rsvp"),)

    id: str = Field(default_factory=lambda: f"rsv_{secrets.token_hex(6)}", primary_key=True)
    invite_id: str = Field(foreign_key="invites.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    status: str  # 'YES' | 'NO' | 'MAYBE'
    guest_count: int = Field(default=0)
    dietary: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FeedItem(SQLModel, table=True):
    __tablename__ = "feed_items"

    id: str = Field(default_factory=lambda: f"fed_{secrets.token_hex(6)}", primary_key=True)
    invite_id: str = Field(foreign_key="invites.id", index=True)
    user_id: str = Field(foreign_key="users.id")
    content: str
    type: str = Field(default="UPDATE")  # 'UPDATE' | 'CHAT'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MediaItem(SQLModel, table=True):
    __tablename__ = "media_items"

    id: str = Field(default_factory=lambda: f"med_{secrets.token_hex(6)}", primary_key=True)
    invite_id: str = Field(foreign_key="invites.id", index=True)
    user_id: str = Field(foreign_key="users.id")
    file_path: str
    type: str = Field(default="IMAGE")  # 'IMAGE' | 'VIDEO'
    content_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    caption: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
