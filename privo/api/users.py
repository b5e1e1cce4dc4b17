"""User profile API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from privo.api.deps import get_current_user
from privo.api.serializers import iso
from privo.database import get_session
from privo.models.user import User
from privo.schemas.auth import (
    UserProfileResponse,
    UserProfileWithStatsResponse,
    UserStatsResponse,
    UserUpdateRequest,
)
from privo.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


def profile_to_response(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        image=user.image,
        bio=user.bio,
        profile_visibility=user.profile_visibility,
        created_at=iso(user.created_at),
    )


@router.get("/{user_id}/profile", response_model=UserProfileWithStatsResponse)
def get_profile(
    user_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Profile with activity stats, subject to the profile's visibility."""
    target = user_service.get_visible_user(session, user_id, user.id)
    stats = user_service.get_stats(session, user_id)
    return UserProfileWithStatsResponse(
        **profile_to_response(target).model_dump(),
        stats=UserStatsResponse(**stats.to_dict()),
    )


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
def get_stats(
    user_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    user_service.get_visible_user(session, user_id, user.id)
    return UserStatsResponse(**user_service.get_stats(session, user_id).to_dict())


@router.put("/{user_id}/profile", response_model=UserProfileResponse)
def update_profile(
    user_id: str,
    request: UserUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Update the caller's own profile."""
    updated = user_service.update_profile(
        session,
        user_id,
        user.id,
        name=request.name,
        bio=request.bio,
        profile_visibility=request.profile_visibility,
    )
    return profile_to_response(updated)
