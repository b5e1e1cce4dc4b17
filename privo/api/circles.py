"""Circle, membership and invite link API endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from privo.api.deps import get_current_user
from privo.api.serializers import iso, user_summary
from privo.database import get_session
from privo.models.circle import Circle, CircleInviteLink, CircleMember
from privo.models.user import User
from privo.schemas.circle import (
    CircleCreateRequest,
    CircleCreateResponse,
    CircleDetailResponse,
    CircleEventSummary,
    CirclePreviewResponse,
    CircleResponse,
    CircleSettingsRequest,
    CircleSettingsResponse,
    InviteCodeResponse,
    InviteLinkCreateRequest,
    InviteLinkResponse,
    JoinResponse,
    MemberResponse,
    SuccessResponse,
)
from privo.services import circle_service, invite_link_service, membership_service

router = APIRouter(prefix="/circles", tags=["circles"])


def _member_to_response(member: CircleMember, user: User) -> MemberResponse:
    return MemberResponse(
        id=member.id,
        user_id=member.user_id,
        role=member.role,
        status=member.status,
        joined_at=iso(member.joined_at),
        user=user_summary(user, include_email=True),
    )


def _link_to_response(link: CircleInviteLink) -> InviteLinkResponse:
    return InviteLinkResponse(
        id=link.id,
        circle_id=link.circle_id,
        code=link.code,
        max_uses=link.max_uses,
        used_count=link.used_count,
        state=link.state,
        creator_id=link.creator_id,
        created_at=iso(link.created_at),
        revoked_at=iso(link.revoked_at),
    )


def _circle_to_response(circle: Circle, session: Session) -> CircleResponse:
    owner = session.get(User, circle.owner_id)
    return CircleResponse(
        id=circle.id,
        name=circle.name,
        description=circle.description,
        owner=user_summary(owner),
        member_count=circle_service.active_member_count(session, circle.id),
        created_at=iso(circle.created_at),
    )


# --- Circles ---

@router.post("", response_model=CircleCreateResponse, status_code=status.HTTP_201_CREATED)
def create_circle(
    request: CircleCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a circle owned by the caller."""
    circle = circle_service.create_circle(session, user.id, request.name, request.description)
    return CircleCreateResponse(id=circle.id, invite_code=circle.invite_code)


@router.get("", response_model=list[CircleResponse])
def list_circles(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List circles where the caller is an active member."""
    circles = circle_service.list_circles(session, user.id)
    return [_circle_to_response(c, session) for c in circles]


@router.get("/invite/{code}", response_model=CirclePreviewResponse)
def preview_circle(code: str, session: Session = Depends(get_session)):
    """Public preview of the circle behind an invite code. No auth required."""
    circle, owner, member_count = circle_service.preview_by_code(session, code)
    return CirclePreviewResponse(
        id=circle.id,
        name=circle.name,
        description=circle.description,
        owner=user_summary(owner),
        member_count=member_count,
    )


@router.post("/join/{code}", response_model=JoinResponse)
def join_circle(
    code: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Join a circle by general code (pending approval) or limited link (immediate)."""
    result = membership_service.join_by_code(session, code, user.id)
    return JoinResponse(circle_id=result.circle_id, status=result.member.status)


@router.get("/{circle_id}", response_model=CircleDetailResponse)
def get_circle(
    circle_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Circle details. Pending members only see the circle and its owner."""
    details = circle_service.get_circle_details(session, circle_id, user.id)
    circle = details.circle
    is_active = details.current_user_status == "ACTIVE"
    return CircleDetailResponse(
        id=circle.id,
        name=circle.name,
        description=circle.description,
        owner=user_summary(details.owner),
        invite_code=circle.invite_code if is_active else None,
        is_invite_link_enabled=circle.is_invite_link_enabled,
        current_user_status=details.current_user_status,
        members=[_member_to_response(m, u) for m, u in details.members],
        invites=[
            CircleEventSummary(
                id=invite.id,
                title=invite.title,
                location=invite.location,
                event_date=iso(invite.event_date),
                rsvp_count=count,
            )
            for invite, count in details.invites
        ],
        created_at=iso(circle.created_at),
    )


@router.delete("/{circle_id}", response_model=SuccessResponse)
def delete_circle(
    circle_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Delete a circle and everything in it. Owner only."""
    circle_service.delete_circle(session, circle_id, user.id)
    return SuccessResponse()


# --- General invite code ---

@router.post("/{circle_id}/regenerate", response_model=InviteCodeResponse)
def regenerate_invite_code(
    circle_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Replace the general invite code. Owner only."""
    code = invite_link_service.regenerate_general_code(session, circle_id, user.id)
    return InviteCodeResponse(invite_code=code)


@router.patch("/{circle_id}/settings", response_model=CircleSettingsResponse)
def update_settings(
    circle_id: str,
    request: CircleSettingsRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Toggle the general invite link. Owner only."""
    if request.is_invite_link_enabled is None:
        circle = circle_service.require_owner(session, circle_id, user.id, "update circle settings")
        return CircleSettingsResponse(is_invite_link_enabled=circle.is_invite_link_enabled)

    enabled = invite_link_service.set_link_enabled(
        session, circle_id, user.id, request.is_invite_link_enabled,
    )
    return CircleSettingsResponse(is_invite_link_enabled=enabled)


# --- Membership ---

@router.get("/{circle_id}/pending", response_model=list[MemberResponse])
def list_pending_members(
    circle_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Members waiting for approval. Owner only."""
    rows = membership_service.list_pending(session, circle_id, user.id)
    return [_member_to_response(m, u) for m, u in rows]


@router.post("/{circle_id}/members/{user_id}/approve", response_model=SuccessResponse)
def approve_member(
    circle_id: str,
    user_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    membership_service.approve(session, circle_id, user_id, user.id)
    return SuccessResponse()


@router.delete("/{circle_id}/members/{user_id}", response_model=SuccessResponse)
def remove_member(
    circle_id: str,
    user_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Reject a pending member or remove an active one. Owner only."""
    membership_service.remove(session, circle_id, user_id, user.id)
    return SuccessResponse()


@router.post("/{circle_id}/leave", response_model=SuccessResponse)
def leave_circle(
    circle_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    membership_service.leave(session, circle_id, user.id)
    return SuccessResponse()


# --- Limited invite links ---

@router.post("/{circle_id}/invites", response_model=InviteLinkResponse, status_code=status.HTTP_201_CREATED)
def create_invite_link(
    circle_id: str,
    request: InviteLinkCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a limited-use invite link. Owner only."""
    link = invite_link_service.create_limited_link(session, circle_id, user.id, request.max_uses)
    return _link_to_response(link)


@router.get("/{circle_id}/invites", response_model=list[InviteLinkResponse])
def list_invite_links(
    circle_id: str,
    include_inactive: bool = Query(default=False),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    links = invite_link_service.list_links(session, circle_id, user.id, include_inactive)
    return [_link_to_response(link) for link in links]


@router.delete("/{circle_id}/invites/{link_id}", response_model=SuccessResponse)
def revoke_invite_link(
    circle_id: str,
    link_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Revoke a limited link regardless of remaining uses. Owner only."""
    invite_link_service.revoke_limited_link(session, link_id, user.id, circle_id=circle_id)
    return SuccessResponse()
