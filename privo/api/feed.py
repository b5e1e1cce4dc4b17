"""Event feed API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from privo.api.deps import get_current_user
from privo.api.invites import feed_to_response
from privo.database import get_session
from privo.models.user import User
from privo.schemas.event import FeedItemResponse, FeedPostRequest
from privo.services import event_service

router = APIRouter(prefix="/feed", tags=["feed"])


@router.post("", response_model=FeedItemResponse, status_code=201)
def create_post(
    request: FeedPostRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Post an update or chat message to an event feed."""
    item = event_service.create_post(session, request.invite_id, user.id, request.content, request.type)
    return feed_to_response(item, user)


@router.get("/{invite_id}", response_model=list[FeedItemResponse])
def get_feed(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Event feed, newest first."""
    rows = event_service.get_feed(session, invite_id, user.id)
    return [feed_to_response(item, author) for item, author in rows]
