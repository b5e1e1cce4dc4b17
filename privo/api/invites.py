"""Event invite & RSVP API endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from privo.api.deps import get_current_user
from privo.api.media import media_to_response
from privo.api.serializers import iso, user_summary
from privo.database import get_session
from privo.models.event import RSVP, FeedItem
from privo.models.user import User
from privo.schemas.circle import SuccessResponse
from privo.schemas.event import (
    CircleRef,
    FeedItemResponse,
    InviteCreateRequest,
    InviteCreateResponse,
    InviteDetailResponse,
    InviteResponse,
    MediaListResponse,
    RSVPRequest,
    RSVPResponse,
)
from privo.services import event_service

router = APIRouter(prefix="/invites", tags=["invites"])


def rsvp_to_response(record: RSVP, user: User | None = None) -> RSVPResponse:
    return RSVPResponse(
        id=record.id,
        user_id=record.user_id,
        status=record.status,
        guest_count=record.guest_count,
        dietary=record.dietary,
        note=record.note,
        user=user_summary(user) if user else None,
    )


def feed_to_response(item: FeedItem, user: User | None = None) -> FeedItemResponse:
    return FeedItemResponse(
        id=item.id,
        invite_id=item.invite_id,
        user_id=item.user_id,
        content=item.content,
        type=item.type,
        created_at=iso(item.created_at),
        user=user_summary(user) if user else None,
    )


@router.post("", response_model=InviteCreateResponse, status_code=201)
def create_invite(
    request: InviteCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create an event invite, optionally inside a circle."""
    invite = event_service.create_invite(
        session,
        sender_id=user.id,
        title=request.title,
        event_date=request.event_date,
        description=request.description,
        location=request.location,
        circle_id=request.circle_id,
    )
    return InviteCreateResponse(id=invite.id)


@router.get("", response_model=list[InviteResponse])
def list_invites(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Invites the caller sent or received through their circles."""
    rows = event_service.list_invites(session, user.id)
    return [
        InviteResponse(
            id=invite.id,
            title=invite.title,
            description=invite.description,
            location=invite.location,
            event_date=iso(invite.event_date),
            sender=user_summary(sender),
            circle=CircleRef(id=circle.id, name=circle.name) if circle else None,
            rsvp_count=count,
        )
        for invite, sender, circle, count in rows
    ]


@router.get("/{invite_id}", response_model=InviteDetailResponse)
def get_invite(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Event details. Media items are empty until the memory vault unlocks."""
    details = event_service.get_invite_details(session, invite_id, user.id)
    invite = details.invite
    return InviteDetailResponse(
        id=invite.id,
        title=invite.title,
        description=invite.description,
        location=invite.location,
        event_date=iso(invite.event_date),
        sender=user_summary(details.sender),
        circle=CircleRef(id=details.circle.id, name=details.circle.name) if details.circle else None,
        rsvps=[rsvp_to_response(r, u) for r, u in details.rsvps],
        feed_items=[feed_to_response(f, u) for f, u in details.feed],
        is_vault_unlocked=details.is_vault_unlocked,
        vault_unlocks_at=iso(details.vault_unlocks_at),
        media_items=[media_to_response(m) for m in details.media],
    )


@router.delete("/{invite_id}", response_model=SuccessResponse)
def delete_invite(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Delete an invite. Sender only."""
    event_service.delete_invite(session, invite_id, user.id)
    return SuccessResponse()


@router.post("/{invite_id}/rsvp", response_model=RSVPResponse)
def rsvp(
    invite_id: str,
    request: RSVPRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create or update the caller's RSVP."""
    record = event_service.rsvp(
        session,
        invite_id,
        user.id,
        status=request.status,
        guest_count=request.guest_count,
        dietary=request.dietary,
        note=request.note,
    )
    return rsvp_to_response(record)


@router.get("/{invite_id}/media", response_model=MediaListResponse)
def list_media(
    invite_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Vault contents. Fails with 423 until 24h after the event starts."""
    items = event_service.list_media(session, invite_id, user.id)
    return MediaListResponse(media=[media_to_response(m) for m in items], total=len(items))
