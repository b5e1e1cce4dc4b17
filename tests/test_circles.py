"""Circle lifecycle: create, list, details, preview, delete."""

from sqlmodel import select

from privo.models.circle import Circle, CircleInviteLink, CircleMember
from privo.models.event import Invite
from privo.services import circle_service, invite_link_service, membership_service


def test_create_circle_makes_owner_active_member(client, owner, headers, session):
    r = client.post("/api/v1/circles", json={"name": "Book Club"}, headers=headers(owner.id))
    assert r.status_code == 201, f"create failed: {r.status_code} {r.text}"
    data = r.json()
    assert len(data["invite_code"]) == 12
    assert data["invite_code"].isalnum()

    member = session.exec(
        select(CircleMember).where(CircleMember.circle_id == data["id"])
    ).one()
    assert member.user_id == owner.id
    assert member.role == "OWNER"
    assert member.status == "ACTIVE"


def test_create_circle_rejects_blank_name(client, owner, headers):
    r = client.post("/api/v1/circles", json={"name": "   "}, headers=headers(owner.id))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_ARGUMENT"

    r = client.post("/api/v1/circles", json={"name": ""}, headers=headers(owner.id))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_circles_only_includes_active_memberships(client, session, circle, alice, bob, headers):
    membership_service.join_by_code(session, circle.invite_code, alice.id)

    r = client.get("/api/v1/circles", headers=headers(alice.id))
    assert r.status_code == 200
    assert r.json() == []

    membership_service.approve(session, circle.id, alice.id, circle.owner_id)
    r = client.get("/api/v1/circles", headers=headers(alice.id))
    circles = r.json()
    assert [c["id"] for c in circles] == [circle.id]
    assert circles[0]["member_count"] == 2
    assert circles[0]["owner"]["id"] == circle.owner_id

    r = client.get("/api/v1/circles", headers=headers(bob.id))
    assert r.json() == []


def test_pending_member_sees_limited_details(client, session, circle, alice, headers):
    membership_service.join_by_code(session, circle.invite_code, alice.id)

    r = client.get(f"/api/v1/circles/{circle.id}", headers=headers(alice.id))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["current_user_status"] == "PENDING"
    assert data["name"] == "Family"
    assert data["owner"]["id"] == circle.owner_id
    assert data["invite_code"] is None
    assert data["members"] == []
    assert data["invites"] == []


def test_active_member_sees_members_and_code(client, circle, owner, headers):
    r = client.get(f"/api/v1/circles/{circle.id}", headers=headers(owner.id))
    data = r.json()
    assert data["current_user_status"] == "ACTIVE"
    assert data["invite_code"] == circle.invite_code
    assert [m["user_id"] for m in data["members"]] == [owner.id]
    assert data["members"][0]["role"] == "OWNER"


def test_non_member_cannot_view_details(client, circle, bob, headers):
    r = client.get(f"/api/v1/circles/{circle.id}", headers=headers(bob.id))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_preview_is_public(client, circle):
    r = client.get(f"/api/v1/circles/invite/{circle.invite_code}")
    assert r.status_code == 200
    data = r.json()
    assert data["id"] == circle.id
    assert data["member_count"] == 1
    assert data["owner"]["email"] is None


def test_preview_resolves_live_limited_links_only(client, session, circle, owner, alice):
    link = invite_link_service.create_limited_link(session, circle.id, owner.id, 1)
    r = client.get(f"/api/v1/circles/invite/{link.code}")
    assert r.status_code == 200
    assert r.json()["id"] == circle.id

    membership_service.join_by_code(session, link.code, alice.id)
    r = client.get(f"/api/v1/circles/invite/{link.code}")
    assert r.status_code == 404


def test_preview_unknown_code(client):
    r = client.get("/api/v1/circles/invite/doesnotexist")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_delete_circle_is_owner_only_and_cascades(client, session, circle, owner, alice, headers):
    invite_link_service.create_limited_link(session, circle.id, owner.id, 5)
    r = client.post(
        "/api/v1/invites",
        json={"title": "Dinner", "event_date": "2026-01-10T18:00:00Z", "circle_id": circle.id},
        headers=headers(owner.id),
    )
    assert r.status_code == 201, r.text

    r = client.delete(f"/api/v1/circles/{circle.id}", headers=headers(alice.id))
    assert r.status_code == 403

    r = client.delete(f"/api/v1/circles/{circle.id}", headers=headers(owner.id))
    assert r.status_code == 200
    assert r.json() == {"success": True}

    session.expunge_all()
    assert session.get(Circle, circle.id) is None
    assert session.exec(select(CircleMember).where(CircleMember.circle_id == circle.id)).all() == []
    assert session.exec(select(CircleInviteLink).where(CircleInviteLink.circle_id == circle.id)).all() == []
    assert session.exec(select(Invite).where(Invite.circle_id == circle.id)).all() == []


def test_delete_missing_circle(client, owner, headers):
    r = client.delete("/api/v1/circles/cir_missing", headers=headers(owner.id))
    assert r.status_code == 404


def test_circle_details_list_events_with_rsvp_counts(client, session, circle, owner, headers):
    r = client.post(
        "/api/v1/invites",
        json={"title": "Picnic", "event_date": "2026-06-01T12:00:00Z", "circle_id": circle.id},
        headers=headers(owner.id),
    )
    invite_id = r.json()["id"]
    client.post(f"/api/v1/invites/{invite_id}/rsvp", json={"status": "YES"}, headers=headers(owner.id))

    details = circle_service.get_circle_details(session, circle.id, owner.id)
    assert [(i.id, count) for i, count in details.invites] == [(invite_id, 1)]


def test_details_of_missing_circle(client, owner, headers):
    r = client.get("/api/v1/circles/cir_missing", headers=headers(owner.id))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"
