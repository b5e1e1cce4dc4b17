"""Event invite, RSVP, feed and media schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from privo.schemas.circle import UserSummary


class InviteCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    event_date: datetime
    circle_id: Optional[str] = None


class InviteCreateResponse(BaseModel):
    id: str


class CircleRef(BaseModel):
    id: str
    name: str


class InviteResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    location: Optional[str]
    event_date: str
    sender: UserSummary
    circle: Optional[CircleRef]
    rsvp_count: int


class RSVPRequest(BaseModel):
    status: str  # 'YES' | 'NO' | 'MAYBE'
    guest_count: int = 0
    dietary: Optional[str] = None
    note: Optional[str] = None


class RSVPResponse(BaseModel):
    id: str
    user_id: str
    status: str
    guest_count: int
    dietary: Optional[str]
    note: Optional[str]
    user: Optional[UserSummary] = None


class FeedPostRequest(BaseModel):
    invite_id: str
    content: str = Field(min_length=1, max_length=2000)
    type: str = "UPDATE"  # 'UPDATE' | 'CHAT'


class FeedItemResponse(BaseModel):
    id: str
    invite_id: str
    user_id: str
    content: str
    type: str
    created_at: str
    user: Optional[UserSummary] = None


class MediaItemResponse(BaseModel):
    id: str
    invite_id: str
    user_id: str
    url: str
    type: str  # 'IMAGE' | 'VIDEO'
    content_type: str
    width: Optional[int]
    height: Optional[int]
    caption: Optional[str]
    created_at: str


class MediaListResponse(BaseModel):
    media: list[MediaItemResponse]
    total: int


class InviteDetailResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    location: Optional[str]
    event_date: str
    sender: UserSummary
    circle: Optional[CircleRef]
    rsvps: list[RSVPResponse]
    feed_items: list[FeedItemResponse]
    is_vault_unlocked: bool
    vault_unlocks_at: str
    media_items: list[MediaItemResponse]
