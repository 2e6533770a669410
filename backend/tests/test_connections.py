from conftest import auth_header, investor_payload


def _connect(client, token, startup_id, connection_type="interested", message=None):
    body = {"startup_id": startup_id, "connection_type": connection_type}
    if message:
        body["message"] = message
    return client.post("/connections", json=body, headers=auth_header(token))


def test_interest_notifies_startup_and_admins(client, admin_token, approved_startup, approved_investor):
    sid = approved_startup["profile_id"]
    r = _connect(client, approved_investor["access_token"], sid)
    assert r.status_code == 201
    conn = r.json()
    assert conn["investor_id"] == approved_investor["profile_id"]
    assert conn["startup_name"] == "Rocket Labs"
    assert conn["startup_email"] == "founder@rocket.test"
    assert conn["investor_email"] == "ivan@acme.test"
    assert conn["investor_calendly_link"] == "https://calendly.com/ivan"
    assert conn["status"] == "active"

    founder_inbox = client.get(
        "/notifications", params={"type": "investment_interest"}, headers=auth_header(approved_startup["access_token"])
    ).json()
    assert founder_inbox[0]["title"] == "New Investor Interest!"
    assert founder_inbox[0]["priority"] == "high"
    assert "https://calendly.com/ivan" in founder_inbox[0]["content"]
    assert founder_inbox[0]["metadata"]["connection_id"] == conn["id"]

    admin_inbox = client.get("/notifications", headers=auth_header(admin_token)).json()
    assert admin_inbox[0]["title"] == "New Investor Interest"
    assert admin_inbox[0]["content"] == 'Ivan Investor has shown interest in "Rocket Labs"'


def test_duplicate_interest_is_a_conflict(client, approved_startup, approved_investor):
    sid = approved_startup["profile_id"]
    token = approved_investor["access_token"]
    assert _connect(client, token, sid).status_code == 201
    r = _connect(client, token, sid)
    assert r.status_code == 409
    assert r.json()["detail"] == "Connection already exists"
    # a different connection type is a separate row
    assert _connect(client, token, sid, "info_request").status_code == 201


def test_info_request_only_reaches_admins(client, admin_token, approved_startup, approved_investor):
    sid = approved_startup["profile_id"]
    r = _connect(client, approved_investor["access_token"], sid, "info_request", message="Cap table?")
    assert r.status_code == 201
    admin_inbox = client.get("/notifications", headers=auth_header(admin_token)).json()
    assert admin_inbox[0]["title"] == "Info Request from Investor"
    assert admin_inbox[0]["content"].endswith('Message: "Cap table?"')
    founder_inbox = client.get(
        "/notifications", params={"type": "investment_interest"}, headers=auth_header(approved_startup["access_token"])
    ).json()
    assert founder_inbox == []


def test_connection_guards(client, signup, approved_startup):
    sid = approved_startup["profile_id"]
    assert _connect(client, approved_startup["access_token"], sid).status_code == 403
    pending = signup(investor_payload("wait@acme.test"))
    r = _connect(client, pending["access_token"], sid)
    assert r.status_code == 403
    assert r.json()["code"] == "not_approved"


def test_unknown_startup(client, approved_investor):
    assert _connect(client, approved_investor["access_token"], "missing").status_code == 404


def test_interest_listings_for_both_sides(client, approved_startup, approved_investor):
    sid = approved_startup["profile_id"]
    inv_headers = auth_header(approved_investor["access_token"])
    assert client.get(f"/connections/interest/{sid}", headers=inv_headers).json() == {"startup_id": sid, "interested": False}
    _connect(client, approved_investor["access_token"], sid)
    _connect(client, approved_investor["access_token"], sid, "info_request")
    assert client.get(f"/connections/interest/{sid}", headers=inv_headers).json()["interested"] is True

    startups = client.get("/connections/interested-startups", headers=inv_headers).json()
    assert len(startups) == 1
    assert startups[0]["startup"]["id"] == sid

    investors = client.get(
        "/connections/interested-investors", headers=auth_header(approved_startup["access_token"])
    ).json()
    assert len(investors) == 1
    assert investors[0]["investor"]["id"] == approved_investor["profile_id"]
    assert "email" not in investors[0]["investor"]


def test_admin_lists_and_archives(client, admin_token, approved_startup, approved_investor):
    sid = approved_startup["profile_id"]
    conn = _connect(client, approved_investor["access_token"], sid).json()
    _connect(client, approved_investor["access_token"], sid, "info_request")
    headers = auth_header(admin_token)

    assert len(client.get("/connections", headers=headers).json()) == 2
    info = client.get("/connections", params={"connection_type": "info_request"}, headers=headers).json()
    assert [c["connection_type"] for c in info] == ["info_request"]

    archived = client.post(f"/connections/{conn['id']}/archive", headers=headers).json()
    assert archived["status"] == "archived"
    assert len(client.get("/connections", headers=headers).json()) == 1
    assert len(client.get("/connections", params={"status": "archived"}, headers=headers).json()) == 1
    # archived interest no longer counts
    inv_headers = auth_header(approved_investor["access_token"])
    assert client.get(f"/connections/interest/{sid}", headers=inv_headers).json()["interested"] is False
    assert client.get("/connections", headers=auth_header(approved_investor["access_token"])).status_code == 403
