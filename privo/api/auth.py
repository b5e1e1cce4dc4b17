"""Identity sync API endpoint.

Sessions are issued by the identity provider; this server only records
the signed-in user so memberships and invites can reference it.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from privo.api.deps import get_current_user_id
from privo.api.users import profile_to_response
from privo.database import get_session
from privo.schemas.auth import SyncUserRequest, UserProfileResponse
from privo.services import user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sync", response_model=UserProfileResponse)
def sync_user(
    request: SyncUserRequest,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    """Create or update the caller's user record after sign-in."""
    user = user_service.sync_user(
        session,
        token_sub=user_id,
        user_id=request.id,
        email=request.email,
        name=request.name,
        image=request.image,
        email_verified=request.email_verified,
    )
    return profile_to_response(user)
