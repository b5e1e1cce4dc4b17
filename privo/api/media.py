"""Memory vault media API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlmodel import Session

from privo.api.deps import get_current_user
from privo.api.serializers import iso
from privo.database import get_session
from privo.models.event import MediaItem
from privo.models.user import User
from privo.schemas.event import MediaItemResponse
from privo.services import event_service

router = APIRouter(prefix="/media", tags=["media"])


def media_to_response(item: MediaItem) -> MediaItemResponse:
    return MediaItemResponse(
        id=item.id,
        invite_id=item.invite_id,
        user_id=item.user_id,
        url=f"/api/v1/media/{item.id}/file",
        type=item.type,
        content_type=item.content_type,
        width=item.width,
        height=item.height,
        caption=item.caption,
        created_at=iso(item.created_at),
    )


@router.post("", response_model=MediaItemResponse, status_code=201)
def upload(
    file: UploadFile = File(...),
    invite_id: str = Form(...),
    caption: Optional[str] = Form(default=None),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Upload a photo or video into an event's memory vault."""
    item = event_service.upload_media(
        session,
        invite_id=invite_id,
        user_id=user.id,
        file_data=file.file.read(),
        filename=file.filename or "media",
        content_type=file.content_type or "application/octet-stream",
        caption=caption,
    )
    return media_to_response(item)


@router.get("/{media_id}/file")
def get_media_file(
    media_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Serve a vault file once the vault has unlocked."""
    item, path = event_service.get_media_file(session, media_id, user.id)
    return FileResponse(str(path), media_type=item.content_type)
