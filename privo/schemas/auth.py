"""Identity sync and user profile schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SyncUserRequest(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    email_verified: Optional[datetime] = None


class UserProfileResponse(BaseModel):
    id: str
    name: Optional[str]
    email: Optional[str]
    image: Optional[str]
    bio: Optional[str]
    profile_visibility: str
    created_at: str


class UserStatsResponse(BaseModel):
    circles_owned: int
    circles_joined: int
    events_created: int
    events_attended: int
    rsvp_response_rate: float
    posts_shared: int


class UserProfileWithStatsResponse(UserProfileResponse):
    stats: UserStatsResponse


class UserUpdateRequest(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    profile_visibility: Optional[str] = None  # 'PUBLIC' | 'PRIVATE' | 'CIRCLES_ONLY'
