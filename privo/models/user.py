"""User model."""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    # Subject claim issued by the identity provider
    id: str = Field(primary_key=True)
    name: Optional[str] = None
    email: str = Field(unique=True, index=True)
    email_verified: Optional[datetime] = None
    image: Optional[str] = None
    bio: Optional[str] = None
    profile_visibility: str = Field(default="PUBLIC")  # 'PUBLIC' | 'PRIVATE' | 'CIRCLES_ONLY'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
