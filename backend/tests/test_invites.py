from datetime import timedelta

from sqlmodel import select

from conftest import PASSWORD, auth_header
from venturehub import models


def _invite(client, admin_token, email="guest@team.test", name="Gus Guest"):
    r = client.post("/admin/user-invites", json={"email": email, "name": name}, headers=auth_header(admin_token))
    assert r.status_code == 201, r.text
    return r.json()


def _accept(client, invite, password=PASSWORD):
    r = client.post(
        "/auth/signup/invite",
        json={"email": invite["email"], "password": password, "name": invite["name"], "invite_token": invite["invite_token"]},
    )
    assert r.status_code == 201, r.text
    v = client.post(
        "/auth/verify-invite-otp",
        json={"email": invite["email"], "code": r.json()["debug_code"], "invite_token": invite["invite_token"]},
    )
    assert v.status_code == 200, v.text
    return v.json()


def test_invited_user_signs_up_and_is_promoted(client, admin_token):
    invite = _invite(client, admin_token, email="Guest@Team.test")
    assert invite["email"] == "guest@team.test"
    assert invite["status"] == "pending"
    assert invite["invitation_link"].endswith(f"/invite-signup?token={invite['invite_token']}")

    valid = client.get("/auth/invites/validate", params={"token": invite["invite_token"]})
    assert valid.status_code == 200
    assert valid.json()["name"] == "Gus Guest"

    result = _accept(client, invite)
    assert result["invite_accepted"] is True

    me = client.get("/auth/me", headers=auth_header(result["access_token"])).json()
    assert me["account_type"] == "user"
    assert me["status"] == "pending"
    assert client.get("/admin/stats", headers=auth_header(result["access_token"])).status_code == 403

    headers = auth_header(admin_token)
    accepted = client.get("/admin/user-invites/accepted", headers=headers).json()
    assert [i["user_id"] for i in accepted] == [result["account_id"]]

    promoted = client.post(f"/admin/user-invites/{invite['id']}/promote", json={"admin_level": "standard"}, headers=headers)
    assert promoted.status_code == 200
    assert promoted.json()["admin_level"] == "standard"
    assert client.get("/admin/user-invites", headers=headers).json() == []

    signin = client.post("/auth/signin", json={"email": "guest@team.test", "password": PASSWORD}).json()
    assert signin["redirect_to"] == "/admin"
    assert client.get("/admin/stats", headers=auth_header(signin["access_token"])).status_code == 200


def test_promotion_requires_an_accepted_invite(client, admin_token):
    invite = _invite(client, admin_token)
    r = client.post(f"/admin/user-invites/{invite['id']}/promote", json={}, headers=auth_header(admin_token))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid or unaccepted invite"


def test_standard_admins_cannot_promote(client, admin_token):
    invite = _invite(client, admin_token)
    _accept(client, invite)
    team = client.post(
        "/admin/invites", json={"email": "std@team.test", "name": "Std"}, headers=auth_header(admin_token)
    ).json()
    token = client.post(
        "/auth/admin-invites/accept", json={"token": team["invite_token"], "password": PASSWORD}
    ).json()["access_token"]
    r = client.post(f"/admin/user-invites/{invite['id']}/promote", json={}, headers=auth_header(token))
    assert r.status_code == 403


def test_duplicate_invites_are_refused(client, admin_token, signup):
    from conftest import startup_payload

    signup(startup_payload("taken@rocket.test"))
    headers = auth_header(admin_token)
    r = client.post("/admin/user-invites", json={"email": "taken@rocket.test", "name": "T"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "User with this email already exists"

    _invite(client, admin_token)
    again = client.post("/admin/user-invites", json={"email": "guest@team.test", "name": "G"}, headers=headers)
    assert again.status_code == 409


def test_resend_replaces_the_token(client, admin_token):
    invite = _invite(client, admin_token)
    r = client.post(f"/admin/user-invites/{invite['id']}/resend", headers=auth_header(admin_token))
    assert r.status_code == 200
    fresh = r.json()
    assert fresh["invite_token"] != invite["invite_token"]
    assert client.get("/auth/invites/validate", params={"token": invite["invite_token"]}).status_code == 400
    assert client.get("/auth/invites/validate", params={"token": fresh["invite_token"]}).status_code == 200


def test_expired_invite_cannot_be_used(client, admin_token, session):
    invite = _invite(client, admin_token)
    row = session.exec(select(models.UserInvite).where(models.UserInvite.id == invite["id"])).one()
    row.expires_at = models.utcnow() - timedelta(minutes=1)
    session.add(row)
    session.commit()

    r = client.post(
        "/auth/signup/invite",
        json={"email": invite["email"], "password": PASSWORD, "name": "Gus", "invite_token": invite["invite_token"]},
    )
    assert r.status_code == 400
    assert r.json()["code"] == "invite_expired"
    session.refresh(row)
    assert row.status == "expired"


def test_delete_invite(client, admin_token):
    invite = _invite(client, admin_token)
    headers = auth_header(admin_token)
    assert client.delete(f"/admin/user-invites/{invite['id']}", headers=headers).status_code == 204
    assert client.delete(f"/admin/user-invites/{invite['id']}", headers=headers).status_code == 404
