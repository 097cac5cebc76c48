"""
Tests for invitations, collaborator roles, removal and leaving a trip.
"""
from datetime import datetime, timedelta

from app.models import InvitationStatus, TripInvitation


def as_user(user):
    return {"X-User-Id": str(user["id"])}


def invite(client, trip, owner, email="dana@example.com", role="editor"):
    return client.post(
        f"/api/trips/{trip['id']}/invitations",
        json={"email": email, "role": role},
        headers=as_user(owner)
    )


def collaborators(client, trip):
    detail = client.get(f"/api/trips/{trip['id']}").json()
    return {c["display_name"]: (c["role"], c["status"]) for c in detail["collaborators"]}


def test_invite_and_accept(client, owned_trip, olivia, dana):
    response = invite(client, owned_trip, olivia, email="Dana@Example.com", role="viewer")
    assert response.status_code == 201
    invitation = response.json()
    assert invitation["email"] == "dana@example.com"
    assert invitation["status"] == "pending"
    assert invitation["trip_title"] == "Madrid"
    assert invitation["invited_by_user_id"] == olivia["id"]

    pending = client.get("/api/invitations", headers=as_user(dana)).json()
    assert [i["id"] for i in pending] == [invitation["id"]]

    accepted = client.post(f"/api/invitations/{invitation['id']}/accept", headers=as_user(dana))
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert collaborators(client, owned_trip)["Dana"] == ("viewer", "active")
    assert client.get("/api/invitations", headers=as_user(dana)).json() == []


def test_invitations_need_an_acting_owner(client, owned_trip, dana):
    assert client.post(
        f"/api/trips/{owned_trip['id']}/invitations", json={"email": "x@example.com"}
    ).status_code == 401
    assert client.get("/api/invitations", headers={"X-User-Id": "999"}).status_code == 401
    assert invite(client, owned_trip, dana, email="x@example.com").status_code == 403


def test_invite_rejects_duplicates_and_owner_role(client, owned_trip, olivia, dana, join_trip):
    assert invite(client, owned_trip, olivia, email="eli@example.com").status_code == 201
    again = invite(client, owned_trip, olivia, email="ELI@example.com")
    assert again.status_code == 400
    assert again.json()["detail"] == "An invitation is already pending for this email"

    assert invite(client, owned_trip, olivia, email="fay@example.com", role="owner").status_code == 422

    join_trip(owned_trip, dana)
    member = invite(client, owned_trip, olivia)
    assert member.status_code == 400
    assert member.json()["detail"] == "User is already a collaborator"


def test_decline_invitation(client, owned_trip, olivia, dana):
    invitation = invite(client, owned_trip, olivia).json()

    declined = client.post(f"/api/invitations/{invitation['id']}/decline", headers=as_user(dana))
    assert declined.status_code == 200
    assert declined.json()["status"] == "declined"

    late = client.post(f"/api/invitations/{invitation['id']}/accept", headers=as_user(dana))
    assert late.status_code == 400
    assert "dana@example.com" not in [c["email"] for c in
                                      client.get(f"/api/trips/{owned_trip['id']}").json()["collaborators"]]


def test_invitation_belongs_to_its_email(client, owned_trip, olivia):
    invitation = invite(client, owned_trip, olivia).json()

    response = client.post(f"/api/invitations/{invitation['id']}/accept", headers=as_user(olivia))
    assert response.status_code == 404


def test_expired_invitation_cannot_be_accepted(client, owned_trip, olivia, dana, db_session):
    invitation = invite(client, owned_trip, olivia).json()
    stored = db_session.get(TripInvitation, invitation["id"])
    stored.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db_session.commit()

    assert client.get("/api/invitations", headers=as_user(dana)).json() == []
    response = client.post(f"/api/invitations/{invitation['id']}/accept", headers=as_user(dana))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invitation has expired"

    db_session.expire_all()
    assert db_session.get(TripInvitation, invitation["id"]).status == InvitationStatus.EXPIRED
    # An expired invitation no longer blocks a new one
    assert invite(client, owned_trip, olivia).status_code == 201


def test_change_collaborator_role(client, owned_trip, olivia, dana, join_trip):
    join_trip(owned_trip, dana)
    url = f"/api/trips/{owned_trip['id']}/collaborators"

    response = client.put(f"{url}/{dana['id']}/role", json={"role": "viewer"}, headers=as_user(olivia))
    assert response.status_code == 200
    assert collaborators(client, owned_trip)["Dana"] == ("viewer", "active")

    owner = client.put(f"{url}/{olivia['id']}/role", json={"role": "editor"}, headers=as_user(olivia))
    assert owner.status_code == 400
    assert owner.json()["detail"] == "Cannot change owner role"

    assert client.put(f"{url}/{dana['id']}/role", json={"role": "owner"}, headers=as_user(olivia)).status_code == 422
    assert client.put(f"{url}/{dana['id']}/role", json={"role": "editor"}, headers=as_user(dana)).status_code == 403
    assert client.put(f"{url}/999/role", json={"role": "editor"}, headers=as_user(olivia)).status_code == 404


def test_remove_collaborator_keeps_former_member(client, owned_trip, olivia, dana, join_trip):
    join_trip(owned_trip, dana)
    url = f"/api/trips/{owned_trip['id']}/collaborators"

    assert client.delete(f"{url}/{dana['id']}", headers=as_user(dana)).status_code == 403
    removed = client.delete(f"{url}/{dana['id']}", headers=as_user(olivia))
    assert removed.status_code == 200
    assert collaborators(client, owned_trip)["Dana"] == ("editor", "former_member")

    assert client.delete(f"{url}/{dana['id']}", headers=as_user(olivia)).status_code == 400
    assert client.delete(f"{url}/{olivia['id']}", headers=as_user(olivia)).status_code == 400
    assert client.delete(f"{url}/999", headers=as_user(olivia)).status_code == 404
    assert client.put(f"{url}/{dana['id']}/role", json={"role": "viewer"},
                      headers=as_user(olivia)).status_code == 400

    again = invite(client, owned_trip, olivia)
    assert again.status_code == 400
    assert again.json()["detail"] == "User was previously a member of this trip"


def test_leave_trip(client, owned_trip, olivia, dana, join_trip):
    url = f"/api/trips/{owned_trip['id']}/leave"
    assert client.post(url, headers=as_user(dana)).status_code == 404

    join_trip(owned_trip, dana)
    assert client.post(url, headers=as_user(dana)).status_code == 200
    assert collaborators(client, owned_trip)["Dana"] == ("editor", "former_member")
    assert client.post(url, headers=as_user(dana)).json()["detail"] == "You have already left this trip"

    owner = client.post(url, headers=as_user(olivia))
    assert owner.status_code == 400
    assert owner.json()["detail"] == "Trip owner cannot leave the trip"


def test_former_members_are_not_listed_as_participants(client, owned_trip, dana, join_trip):
    join_trip(owned_trip, dana)
    client.post(f"/api/trips/{owned_trip['id']}/leave", headers=as_user(dana))

    participants = client.get(f"/api/trips/{owned_trip['id']}/participants").json()["participants"]
    assert participants == ["Olivia", "Alice", "Bob"]
