from conftest import auth_header, investor_payload, startup_payload


def test_pending_investor_cannot_browse_startups(client, signup):
    token = signup(investor_payload("wait@acme.test"))["access_token"]
    r = client.get("/startups", headers=auth_header(token))
    assert r.status_code == 403
    assert r.json()["code"] == "not_approved"


def test_startups_cannot_browse_startups(client, approved_startup):
    r = client.get("/startups", headers=auth_header(approved_startup["access_token"]))
    assert r.status_code == 403


def test_vetted_startups_hide_pending_ones(client, signup, approve, approved_investor):
    approved = signup(startup_payload("a@one.test", startup_name="Alpha Pay", industry="Fintech"))
    approve("startup", approved["profile_id"])
    signup(startup_payload("b@two.test", startup_name="Beta Health", industry="Health"))

    r = client.get("/startups", headers=auth_header(approved_investor["access_token"]))
    assert r.status_code == 200
    rows = r.json()
    assert isinstance(rows, list)
    assert [s["startup_name"] for s in rows] == ["Alpha Pay"]
    # investors see the basic projection only
    assert "admin_notes" not in rows[0]
    assert "phone" not in rows[0]


def test_startup_filters_and_pagination(client, signup, approve, approved_investor):
    for i, (name, industry) in enumerate([("Alpha Pay", "Fintech"), ("Beta Health", "Health"), ("Gamma Pay", "Fintech")]):
        result = signup(startup_payload(f"s{i}@startup.test", startup_name=name, industry=industry))
        approve("startup", result["profile_id"])
    headers = auth_header(approved_investor["access_token"])

    fintech = client.get("/startups", params={"industry": "fin"}, headers=headers).json()
    assert sorted(s["startup_name"] for s in fintech) == ["Alpha Pay", "Gamma Pay"]

    search = client.get("/startups", params={"search_term": "beta"}, headers=headers).json()
    assert [s["startup_name"] for s in search] == ["Beta Health"]

    page = client.get("/startups", params={"limit": 2}, headers=headers).json()
    assert page["total"] == 3
    assert page["page"] == 1
    assert page["limit"] == 2
    assert page["total_pages"] == 2
    assert len(page["startups"]) == 2

    page2 = client.get("/startups", params={"limit": 2, "offset": 2}, headers=headers).json()
    assert page2["page"] == 2
    assert len(page2["startups"]) == 1

    # limits are clamped to 50
    big = client.get("/startups", params={"limit": 500}, headers=headers).json()
    assert big["limit"] == 50

    assert client.get("/startups/industries").json() == ["Fintech", "Health"]
    assert client.get("/startups/stages").json() == ["MVP"]


def test_startup_detail_and_batch(client, approved_startup, approved_investor):
    headers = auth_header(approved_investor["access_token"])
    sid = approved_startup["profile_id"]
    r = client.get(f"/startups/{sid}", headers=headers)
    assert r.status_code == 200
    assert r.json()["id"] == sid
    assert client.get("/startups/missing", headers=headers).status_code == 404
    batch = client.get("/startups/batch", params={"ids": f"{sid},missing"}, headers=headers).json()
    assert [s["id"] for s in batch] == [sid]
    dash = client.get("/startups/dashboard", headers=headers).json()
    assert [s["id"] for s in dash] == [sid]


def test_founder_edits_own_profile(client, approved_startup):
    headers = auth_header(approved_startup["access_token"])
    r = client.patch(
        "/startups/me",
        json={"website": "https://rocket.test", "team_size": "5", "co_founders": ["Bo", "Cy"], "status": "approved"},
        headers=headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["website"] == "https://rocket.test"
    assert body["team_size"] == 5
    assert body["co_founders"] == ["Bo", "Cy"]

    nothing = client.patch("/startups/me", json={"status": "approved", "verified": True}, headers=headers)
    assert nothing.status_code == 400
    assert client.get("/startups/me", headers=headers).json()["website"] == "https://rocket.test"


def test_startups_browse_investors(client, signup, approve, approved_startup):
    vc = signup(investor_payload("vc@fund.test", preferred_industries=["Fintech", " AI "], country="Portugal"))
    approve("investor", vc["profile_id"])
    signup(investor_payload("angel@fund.test", investor_type="individual", preferred_industries="Health"))
    headers = auth_header(approved_startup["access_token"])

    rows = client.get("/investors", headers=headers).json()
    assert [i["id"] for i in rows] == [vc["profile_id"]]
    assert rows[0]["preferred_industries"] == "Fintech,AI"
    assert rows[0]["preferred_company_stage"] == "MVP"

    assert client.get("/investors", params={"country": "portu"}, headers=headers).json()[0]["id"] == vc["profile_id"]
    assert client.get("/investors", params={"industry": "health"}, headers=headers).json() == []
    assert client.get("/investors/industries").json() == ["AI", "Fintech", "Health"]

    detail = client.get(f"/investors/{vc['profile_id']}", headers=headers).json()
    assert "email" not in detail


def test_investor_edits_own_profile(client, approved_investor):
    headers = auth_header(approved_investor["access_token"])
    r = client.patch("/investors/me", json={"preferred_stage": "Scaling", "number_of_investments": 4}, headers=headers)
    assert r.status_code == 200
    assert r.json()["preferred_company_stage"] == "Scaling"
    assert r.json()["number_of_investments"] == 4
    assert r.json()["average_ticket_size"] == "$50k-$100k"


def test_admin_listings_include_every_status(client, admin_token, signup, approve):
    a = signup(startup_payload("a@one.test"))
    signup(startup_payload("b@two.test"))
    approve("startup", a["profile_id"])
    headers = auth_header(admin_token)
    everything = client.get("/admin/startups", headers=headers).json()
    assert len(everything) == 2
    assert "email" in everything[0]
    pending = client.get("/admin/startups", params={"status": "pending"}, headers=headers).json()
    assert [s["email"] for s in pending] == ["b@two.test"]
    # admins browse through the public listing too
    assert len(client.get("/startups", headers=headers).json()) == 1
    assert client.get(f"/startups/{a['profile_id']}", headers=headers).json()["email"] == "a@one.test"
