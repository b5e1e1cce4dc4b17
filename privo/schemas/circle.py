"""Circle, membership and invite link schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    id: str
    name: Optional[str]
    email: Optional[str] = None
    image: Optional[str]


class CircleCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class CircleCreateResponse(BaseModel):
    id: str
    invite_code: str


class CircleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    owner: UserSummary
    member_count: int
    created_at: str


class CircleSettingsRequest(BaseModel):
    is_invite_link_enabled: Optional[bool] = None


class CircleSettingsResponse(BaseModel):
    is_invite_link_enabled: bool


class InviteCodeResponse(BaseModel):
    invite_code: str


class MemberResponse(BaseModel):
    id: str
    user_id: str
    role: str
    status: str
    joined_at: str
    user: UserSummary


class CircleEventSummary(BaseModel):
    id: str
    title: str
    location: Optional[str]
    event_date: str
    rsvp_count: int


class CircleDetailResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    owner: UserSummary
    invite_code: Optional[str]  # hidden from pending members
    is_invite_link_enabled: bool
    current_user_status: str
    members: list[MemberResponse]
    invites: list[CircleEventSummary]
    created_at: str


class CirclePreviewResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    owner: UserSummary
    member_count: int


class JoinResponse(BaseModel):
    success: bool = True
    circle_id: str
    status: str  # 'PENDING' | 'ACTIVE'


class InviteLinkCreateRequest(BaseModel):
    max_uses: Any  # passed through unconverted, the service rejects non-integers


class InviteLinkResponse(BaseModel):
    id: str
    circle_id: str
    code: str
    max_uses: int
    used_count: int
    state: str  # 'active' | 'exhausted' | 'revoked'
    creator_id: str
    created_at: str
    revoked_at: Optional[str]


class SuccessResponse(BaseModel):
    success: bool = True
