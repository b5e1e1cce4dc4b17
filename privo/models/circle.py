"""Circle, membership and limited invite link models."""

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Circle(SQLModel, table=True):
    __tablename__ = "circles"

    id: str = Field(default_factory=lambda: f"cir_{secrets.token_hex(6)}", primary_key=True)
    name: str
    description: Optional[str] = None
    owner_id: str = Field(foreign_key="users.id", index=True)
    invite_code: str = Field(unique=True, index=True)
    is_invite_link_enabled: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CircleMember(SQLModel, table=True):
    __tablename__ = "circle_members"
    __table_args__ = (UniqueConstraint("circle_id", "user_id", name="uq_circle_member"),)

    id: str = Field(default_factory=lambda: f"mem_{secrets.token_hex(6)}", primary_key=True)
    circle_id: str = Field(foreign_key="circles.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    role: str = Field(default="MEMBER")  # 'OWNER' | 'MEMBER'
    status: str = Field(default="PENDING")  # 'PENDING' | 'ACTIVE'
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CircleInviteLink(SQLModel, table=True):
    __tablename__ = "circle_invite_links"

    id: str = Field(default_factory=lambda: f"lnk_{secrets.token_hex(6)}", primary_key=True)
    circle_id: str = Field(foreign_key="circles.id", index=True)
    code: str = Field(unique=True, index=True)
    max_uses: int
    used_count: int = Field(default=0)
    creator_id: str = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    revoked_at: Optional[datetime] = None

    @property
    def state(self) -> str:
        if self.revoked_at is not None:
            return "revoked"
        if self.used_count >= self.max_uses:
            return "exhausted"
        return "active"
