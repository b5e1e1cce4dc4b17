"""Memory vault: unlock boundary and gating of media access."""

from datetime import datetime, timedelta, timezone
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from privo.config import settings
from privo.errors import VaultLocked
from privo.services import event_service, vault_service

EVENT = datetime(2026, 3, 14, 18, 0, tzinfo=timezone.utc)


def _png(width=32, height=16) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color=(200, 80, 40)).save(buf, format="PNG")
    return buf.getvalue()


# --- Unlock policy ---

def test_unlocks_exactly_24h_after_start():
    assert vault_service.unlocks_at(EVENT) == EVENT + timedelta(hours=24)
    assert not vault_service.is_unlocked(EVENT, now=EVENT + timedelta(hours=23, minutes=59))
    assert vault_service.is_unlocked(EVENT, now=EVENT + timedelta(hours=24))
    assert vault_service.is_unlocked(EVENT, now=EVENT + timedelta(days=30))


def test_locked_before_event_starts():
    assert not vault_service.is_unlocked(EVENT, now=EVENT - timedelta(days=1))


def test_naive_datetimes_are_treated_as_utc():
    naive = EVENT.replace(tzinfo=None)
    assert vault_service.unlocks_at(naive) == EVENT + timedelta(hours=24)
    assert vault_service.is_unlocked(naive, now=(EVENT + timedelta(hours=24)).replace(tzinfo=None))


def test_other_timezones_compare_by_instant():
    plus_two = timezone(timedelta(hours=2))
    now = (EVENT + timedelta(hours=24)).astimezone(plus_two)
    assert vault_service.is_unlocked(EVENT, now=now)
    assert not vault_service.is_unlocked(EVENT, now=now - timedelta(seconds=1))


# --- Media access through the API ---

@pytest.fixture
def past_event(session, owner):
    return event_service.create_invite(
        session, owner.id, "Last month", datetime.now(timezone.utc) - timedelta(days=30),
    )


@pytest.fixture
def upcoming_event(session, owner):
    return event_service.create_invite(
        session, owner.id, "Tonight", datetime.now(timezone.utc) + timedelta(hours=2),
    )


def _upload(client, headers, user_id, invite_id, data=None, content_type="image/png", caption=None):
    form = {"invite_id": invite_id}
    if caption:
        form["caption"] = caption
    return client.post(
        "/api/v1/media",
        files={"file": ("photo.png", data if data is not None else _png(), content_type)},
        data=form,
        headers=headers(user_id),
    )


def test_upload_allowed_while_locked(client, owner, upcoming_event, headers):
    r = _upload(client, headers, owner.id, upcoming_event.id, caption="Getting ready")
    assert r.status_code == 201, r.text
    item = r.json()
    assert item["type"] == "IMAGE"
    assert item["width"] == 32 and item["height"] == 16
    assert item["caption"] == "Getting ready"
    assert item["url"] == f"/api/v1/media/{item['id']}/file"


def test_locked_vault_hides_media(client, owner, upcoming_event, headers):
    r = _upload(client, headers, owner.id, upcoming_event.id)
    media_id = r.json()["id"]

    r = client.get(f"/api/v1/invites/{upcoming_event.id}", headers=headers(owner.id))
    assert r.status_code == 200
    data = r.json()
    assert data["is_vault_unlocked"] is False
    assert data["media_items"] == []

    r = client.get(f"/api/v1/invites/{upcoming_event.id}/media", headers=headers(owner.id))
    assert r.status_code == 423
    assert r.json()["error"]["code"] == "VAULT_LOCKED"

    r = client.get(f"/api/v1/media/{media_id}/file", headers=headers(owner.id))
    assert r.status_code == 423


def test_unlocked_vault_serves_media(client, owner, past_event, headers):
    data = _png()
    media_id = _upload(client, headers, owner.id, past_event.id, data=data).json()["id"]

    r = client.get(f"/api/v1/invites/{past_event.id}", headers=headers(owner.id))
    details = r.json()
    assert details["is_vault_unlocked"] is True
    assert [m["id"] for m in details["media_items"]] == [media_id]

    r = client.get(f"/api/v1/invites/{past_event.id}/media", headers=headers(owner.id))
    assert r.status_code == 200
    assert r.json()["total"] == 1

    r = client.get(f"/api/v1/media/{media_id}/file", headers=headers(owner.id))
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content == data


def test_service_uses_supplied_clock(session, owner, upcoming_event):
    event_service.upload_media(session, upcoming_event.id, owner.id, _png(), "a.png", "image/png")
    with pytest.raises(VaultLocked):
        event_service.list_media(session, upcoming_event.id, owner.id)

    later = datetime.now(timezone.utc) + timedelta(days=2)
    assert len(event_service.list_media(session, upcoming_event.id, owner.id, now=later)) == 1


def test_upload_rejects_bad_files(client, owner, past_event, headers):
    r = _upload(client, headers, owner.id, past_event.id, data=b"not an image")
    assert r.status_code == 400

    r = _upload(client, headers, owner.id, past_event.id, data=b"%PDF-1.4", content_type="application/pdf")
    assert r.status_code == 400

    r = _upload(client, headers, owner.id, past_event.id, data=b"")
    assert r.status_code == 400


def test_video_upload_skips_image_check(client, owner, past_event, headers):
    r = _upload(client, headers, owner.id, past_event.id, data=b"\x00\x00\x00\x18ftypmp42", content_type="video/mp4")
    assert r.status_code == 201, r.text
    assert r.json()["type"] == "VIDEO"
    assert r.json()["width"] is None


def test_deleting_event_removes_files(client, session, owner, past_event, headers):
    media_id = _upload(client, headers, owner.id, past_event.id).json()["id"]
    _, path = event_service.get_media_file(session, media_id, owner.id)
    assert path.exists()

    r = client.delete(f"/api/v1/invites/{past_event.id}", headers=headers(owner.id))
    assert r.status_code == 200
    assert not Path(path).exists()


def test_media_of_unknown_item(client, owner, headers):
    r = client.get("/api/v1/media/med_missing/file", headers=headers(owner.id))
    assert r.status_code == 404


def _failing_commit():
    raise RuntimeError("commit failed")


def test_failed_upload_commit_leaves_no_file(monkeypatch, session, owner, past_event):
    monkeypatch.setattr(session, "commit", _failing_commit)
    with pytest.raises(RuntimeError):
        event_service.upload_media(session, past_event.id, owner.id, _png(), "a.png", "image/png")

    upload_dir = settings.upload_dir / past_event.id
    assert list(upload_dir.iterdir()) == []


def test_failed_delete_commit_keeps_files(monkeypatch, client, session, owner, past_event, headers):
    media_id = _upload(client, headers, owner.id, past_event.id).json()["id"]
    _, path = event_service.get_media_file(session, media_id, owner.id)

    monkeypatch.setattr(session, "commit", _failing_commit)
    with pytest.raises(RuntimeError):
        event_service.delete_invite(session, past_event.id, owner.id)
    assert path.exists()
