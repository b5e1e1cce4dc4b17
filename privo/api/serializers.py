"""Model -> response conversion shared by the routers."""

from datetime import datetime

from privo.models.user import User
from privo.schemas.circle import UserSummary
from privo.services.vault_service import as_utc


def iso(dt: datetime | None) -> str | None:
    """ISO-8601 in UTC."""
    if dt is None:
        return None
    return as_utc(dt).isoformat()


def user_summary(user: User, include_email: bool = False) -> UserSummary:
    return UserSummary(
        id=user.id,
        name=user.name,
        email=user.email if include_email else None,
        image=user.image,
    )
