"""Owner-side approval, rejection, removal and leaving."""

from privo.services import circle_service, membership_service


def test_owner_lists_and_approves_pending(client, session, circle, owner, alice, headers):
    membership_service.join_by_code(session, circle.invite_code, alice.id)

    r = client.get(f"/api/v1/circles/{circle.id}/pending", headers=headers(owner.id))
    assert r.status_code == 200
    pending = r.json()
    assert [m["user_id"] for m in pending] == [alice.id]
    assert pending[0]["status"] == "PENDING"
    assert pending[0]["user"]["email"] == "alice@example.com"

    r = client.post(f"/api/v1/circles/{circle.id}/members/{alice.id}/approve", headers=headers(owner.id))
    assert r.status_code == 200

    session.expire_all()
    assert circle_service.is_active_member(session, circle.id, alice.id)
    r = client.get(f"/api/v1/circles/{circle.id}/pending", headers=headers(owner.id))
    assert r.json() == []


def test_approve_is_idempotent(session, circle, owner, alice):
    membership_service.join_by_code(session, circle.invite_code, alice.id)
    membership_service.approve(session, circle.id, alice.id, owner.id)
    member = membership_service.approve(session, circle.id, alice.id, owner.id)
    assert member.status == "ACTIVE"


def test_approve_unknown_member(client, circle, owner, bob, headers):
    r = client.post(f"/api/v1/circles/{circle.id}/members/{bob.id}/approve", headers=headers(owner.id))
    assert r.status_code == 404


def test_non_owner_cannot_manage_members(client, session, circle, owner, alice, bob, headers):
    membership_service.join_by_code(session, circle.invite_code, bob.id)
    membership_service.join_by_code(session, circle.invite_code, alice.id)
    membership_service.approve(session, circle.id, alice.id, owner.id)

    r = client.get(f"/api/v1/circles/{circle.id}/pending", headers=headers(alice.id))
    assert r.status_code == 403
    r = client.post(f"/api/v1/circles/{circle.id}/members/{bob.id}/approve", headers=headers(alice.id))
    assert r.status_code == 403
    r = client.delete(f"/api/v1/circles/{circle.id}/members/{bob.id}", headers=headers(alice.id))
    assert r.status_code == 403


def test_reject_pending_member_allows_rejoin(client, session, circle, owner, alice, headers):
    membership_service.join_by_code(session, circle.invite_code, alice.id)

    r = client.delete(f"/api/v1/circles/{circle.id}/members/{alice.id}", headers=headers(owner.id))
    assert r.status_code == 200
    session.expire_all()
    assert circle_service.get_member(session, circle.id, alice.id) is None

    r = client.post(f"/api/v1/circles/join/{circle.invite_code}", headers=headers(alice.id))
    assert r.json()["status"] == "PENDING"


def test_remove_active_member(client, session, circle, owner, alice, headers):
    membership_service.join_by_code(session, circle.invite_code, alice.id)
    membership_service.approve(session, circle.id, alice.id, owner.id)

    r = client.delete(f"/api/v1/circles/{circle.id}/members/{alice.id}", headers=headers(owner.id))
    assert r.status_code == 200
    session.expire_all()
    assert not circle_service.is_active_member(session, circle.id, alice.id)


def test_owner_cannot_be_removed(client, circle, owner, headers):
    r = client.delete(f"/api/v1/circles/{circle.id}/members/{owner.id}", headers=headers(owner.id))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "CANNOT_REMOVE_OWNER"


def test_member_can_leave(client, session, circle, owner, alice, headers):
    membership_service.join_by_code(session, circle.invite_code, alice.id)
    membership_service.approve(session, circle.id, alice.id, owner.id)

    r = client.post(f"/api/v1/circles/{circle.id}/leave", headers=headers(alice.id))
    assert r.status_code == 200
    r = client.get("/api/v1/circles", headers=headers(alice.id))
    assert r.json() == []


def test_owner_cannot_leave(client, circle, owner, headers):
    r = client.post(f"/api/v1/circles/{circle.id}/leave", headers=headers(owner.id))
    assert r.status_code == 400


def test_leave_without_membership(client, circle, bob, headers):
    r = client.post(f"/api/v1/circles/{circle.id}/leave", headers=headers(bob.id))
    assert r.status_code == 404
