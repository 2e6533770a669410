from conftest import auth_header, investor_payload, startup_payload


def _send(client, admin_token, user_id, **extra):
    body = {"user_id": user_id, "title": "Hello", "content": "Welcome aboard", **extra}
    r = client.post("/notifications", json=body, headers=auth_header(admin_token))
    assert r.status_code == 201, r.text
    return r.json()


def test_inbox_is_scoped_to_the_signed_in_user(client, admin_token, signup):
    mine = signup(startup_payload("mine@rocket.test"))
    other = signup(startup_payload("other@rocket.test"))
    note = _send(client, admin_token, mine["profile_id"], priority="urgent", metadata={"k": "v"})
    assert note["priority"] == "urgent"
    assert note["metadata"] == {"k": "v"}
    assert note["is_read"] is False

    inbox = client.get("/notifications", headers=auth_header(mine["access_token"])).json()
    assert [n["id"] for n in inbox] == [note["id"]]
    assert client.get("/notifications", headers=auth_header(other["access_token"])).json() == []

    # another user cannot touch it
    r = client.post(f"/notifications/{note['id']}/read", headers=auth_header(other["access_token"]))
    assert r.status_code == 404


def test_read_archive_and_counts(client, admin_token, signup):
    user = signup(investor_payload("reader@acme.test"))
    headers = auth_header(user["access_token"])
    first = _send(client, admin_token, user["profile_id"])
    second = _send(client, admin_token, user["profile_id"], type="reminder")
    _send(client, admin_token, user["profile_id"])

    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 3}
    read = client.post(f"/notifications/{first['id']}/read", headers=headers).json()
    assert read["is_read"] is True
    assert read["read_at"] is not None
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 2}

    reminders = client.get("/notifications", params={"type": "reminder"}, headers=headers).json()
    assert [n["id"] for n in reminders] == [second["id"]]
    unread = client.get("/notifications", params={"unread_only": "true"}, headers=headers).json()
    assert first["id"] not in {n["id"] for n in unread}

    assert client.post("/notifications/read", json={"ids": [second["id"], "missing"]}, headers=headers).json() == {"updated": 1}
    assert client.post("/notifications/read-all", headers=headers).json() == {"updated": 1}
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 0}

    archived = client.post(f"/notifications/{first['id']}/archive", headers=headers).json()
    assert archived["is_archived"] is True
    assert len(client.get("/notifications", headers=headers).json()) == 2


def test_limit_bounds(client, approved_startup):
    headers = auth_header(approved_startup["access_token"])
    assert client.get("/notifications", params={"limit": 0}, headers=headers).status_code == 422
    assert client.get("/notifications", params={"limit": 201}, headers=headers).status_code == 422


def test_only_admins_send(client, approved_startup):
    headers = auth_header(approved_startup["access_token"])
    body = {"user_id": approved_startup["profile_id"], "title": "x", "content": "y"}
    assert client.post("/notifications", json=body, headers=headers).status_code == 403


def test_bulk_send_skips_duplicates(client, admin_token, signup):
    a = signup(startup_payload("a@rocket.test"))
    b = signup(investor_payload("b@acme.test"))
    r = client.post(
        "/notifications/bulk",
        json={"user_ids": [a["profile_id"], b["profile_id"], a["profile_id"], ""], "title": "News", "content": "Body"},
        headers=auth_header(admin_token),
    )
    assert r.status_code == 201
    assert r.json() == {"sent_count": 2}


def test_admins_receive_their_own_notifications(client, admin_token, super_admin):
    _send(client, admin_token, super_admin)
    assert client.get("/notifications/unread-count", headers=auth_header(admin_token)).json() == {"count": 1}


def test_campaign_lifecycle(client, admin_token, signup):
    s = signup(startup_payload("s@rocket.test"))
    i = signup(investor_payload("i@acme.test"))
    headers = auth_header(admin_token)

    assert client.get("/admin/campaigns/recipient-count", headers=headers).json() == {"recipient_type": "all", "count": 2}
    assert client.get(
        "/admin/campaigns/recipient-count", params={"recipient_type": "investors"}, headers=headers
    ).json()["count"] == 1

    r = client.post(
        "/admin/campaigns",
        json={"title": "March", "subject": "Monthly update", "content": "Hello all", "recipient_type": "startups"},
        headers=headers,
    )
    assert r.status_code == 201
    campaign = r.json()
    assert campaign["status"] == "draft"

    updated = client.patch(f"/admin/campaigns/{campaign['id']}", json={"content": "Hello founders"}, headers=headers).json()
    assert updated["content"] == "Hello founders"
    assert updated["subject"] == "Monthly update"

    sent = client.post(f"/admin/campaigns/{campaign['id']}/send", headers=headers).json()
    assert sent["sent_count"] == 1
    assert sent["campaign"]["status"] == "sent"
    assert sent["campaign"]["total_recipients"] == 1
    assert client.post(f"/admin/campaigns/{campaign['id']}/send", headers=headers).status_code == 400

    inbox = client.get("/notifications", headers=auth_header(s["access_token"])).json()
    assert inbox[0]["type"] == "newsletter"
    assert inbox[0]["title"] == "Monthly update"
    assert inbox[0]["newsletter_id"] == campaign["id"]
    assert client.get("/notifications", headers=auth_header(i["access_token"])).json() == []

    listed = client.get("/admin/campaigns", params={"status": "sent"}, headers=headers).json()
    assert [c["id"] for c in listed] == [campaign["id"]]
    assert client.get("/admin/campaigns/missing", headers=headers).status_code == 404


def test_specific_recipient_campaign(client, admin_token, signup):
    s = signup(startup_payload("s@rocket.test"))
    signup(startup_payload("t@rocket.test"))
    headers = auth_header(admin_token)
    campaign = client.post(
        "/admin/campaigns",
        json={
            "title": "Direct",
            "subject": "Just you",
            "content": "Hi",
            "recipient_type": "specific",
            "specific_recipients": [s["profile_id"]],
        },
        headers=headers,
    ).json()
    assert campaign["specific_recipients"] == [s["profile_id"]]
    sent = client.post(f"/admin/campaigns/{campaign['id']}/send", headers=headers).json()
    assert sent["sent_count"] == 1


def test_connection_request_helper(session):
    from venturehub.services.notifications import NotificationService

    note = NotificationService(session).send_connection_request_notification("profile-1", "Ivan", "investor")
    assert note["type"] == "connection_request"
    assert note["content"] == "Ivan wants to connect with you."
    assert note["metadata"] == {"requester_type": "investor", "requester_name": "Ivan"}
    assert NotificationService(session).get_unread_count("profile-1") == 1
