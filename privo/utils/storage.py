"""Storage utilities: media path management."""

from pathlib import Path

from privo.config import settings


def get_media_storage_path(invite_id: str) -> Path:
    """Directory for an event's vault media: uploads/<invite_id>/"""
    path = settings.upload_dir / invite_id
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_media_file(file_path: str) -> None:
    Path(file_path).unlink(missing_ok=True)
