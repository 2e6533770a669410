from datetime import timedelta

from conftest import auth_header, investor_payload, startup_payload
from venturehub import models
from venturehub.services.matchmaking import matchmaking_to_dict


def _startups(signup, approve, count):
    ids = []
    for i in range(count):
        result = signup(startup_payload(f"s{i}@startup.test", startup_name=f"Startup {i}"))
        approve("startup", result["profile_id"])
        ids.append(result["profile_id"])
    return ids


def _match(client, admin_token, investor_id, startup_ids, **extra):
    return client.post(
        "/matchmakings",
        json={"investor_id": investor_id, "startup_ids": startup_ids, **extra},
        headers=auth_header(admin_token),
    )


def test_admin_matches_investor_with_startups(client, admin_token, super_admin, signup, approve, approved_investor):
    ids = _startups(signup, approve, 2)
    r = _match(client, admin_token, approved_investor["profile_id"], ids, comment="Strong fit", expiry_days=7)
    assert r.status_code == 201
    rows = r.json()
    assert {m["startup_id"] for m in rows} == set(ids)
    assert all(m["matched_by"] == super_admin for m in rows)
    assert all(m["comment"] == "Strong fit" for m in rows)
    assert all(m["is_interested"] is False and m["is_expired"] is False for m in rows)
    assert rows[0]["investor_email"] == "ivan@acme.test"

    inbox = client.get("/notifications", headers=auth_header(approved_investor["access_token"])).json()
    assert inbox[0]["type"] == "match_suggestion"
    assert inbox[0]["title"] == "New Startup Matches"
    assert inbox[0]["action_url"] == "/investor-dashboard"
    assert "Startup 0" in inbox[0]["content"]

    mine = client.get("/matchmakings/mine", headers=auth_header(approved_investor["access_token"])).json()
    assert {m["id"] for m in mine} == {m["id"] for m in rows}
    assert len(client.get("/matchmakings", headers=auth_header(admin_token)).json()) == 2


def test_match_size_limits(client, admin_token, signup, approve, approved_investor):
    ids = _startups(signup, approve, 4)
    inv = approved_investor["profile_id"]
    empty = _match(client, admin_token, inv, [])
    assert empty.status_code == 400
    assert empty.json()["detail"] == "At least one startup must be selected"
    too_many = _match(client, admin_token, inv, ids)
    assert too_many.status_code == 400
    assert too_many.json()["detail"] == "Maximum 3 startups can be selected"
    assert _match(client, admin_token, "missing", ids[:1]).status_code == 404
    assert _match(client, admin_token, inv, ["missing"]).status_code == 404


def test_only_admins_create_matches(client, approved_investor, approved_startup):
    r = _match(client, approved_investor["access_token"], approved_investor["profile_id"], [approved_startup["profile_id"]])
    assert r.status_code == 403


def test_investor_interest_notifies_startup_once(client, admin_token, approved_investor, approved_startup):
    match = _match(client, admin_token, approved_investor["profile_id"], [approved_startup["profile_id"]]).json()[0]
    headers = auth_header(approved_investor["access_token"])
    url = f"/matchmakings/{match['id']}/status"

    r = client.patch(url, json={"is_interested": True}, headers=headers)
    assert r.status_code == 200
    assert r.json()["is_interested"] is True
    client.patch(url, json={"is_interested": True}, headers=headers)

    founder = auth_header(approved_startup["access_token"])
    inbox = client.get("/notifications", params={"type": "investment_interest"}, headers=founder).json()
    assert len(inbox) == 1
    assert inbox[0]["title"] == "New Investor Interest!"
    assert inbox[0]["priority"] == "high"

    # the startup sees the match but cannot answer for the investor
    assert [m["id"] for m in client.get("/matchmakings/mine", headers=founder).json()] == [match["id"]]
    denied = client.patch(url, json={"is_interested": False}, headers=founder)
    assert denied.status_code == 403
    assert denied.json()["detail"] == "You can only update your own matches"


def test_other_investors_cannot_touch_a_match(client, admin_token, signup, approve, approved_investor, approved_startup):
    match = _match(client, admin_token, approved_investor["profile_id"], [approved_startup["profile_id"]]).json()[0]
    other = signup(investor_payload("other@fund.test"))
    approve("investor", other["profile_id"])
    r = client.post(f"/matchmakings/{match['id']}/archive", headers=auth_header(other["access_token"]))
    assert r.status_code == 403


def test_flagged_investor_cannot_archive(client, admin_token, approve, approved_investor, approved_startup):
    match = _match(client, admin_token, approved_investor["profile_id"], [approved_startup["profile_id"]]).json()[0]
    approve("investor", approved_investor["profile_id"], status="flagged")
    r = client.post(f"/matchmakings/{match['id']}/archive", headers=auth_header(approved_investor["access_token"]))
    assert r.status_code == 403
    assert r.json()["code"] == "not_approved"


def test_archive_and_delete(client, admin_token, approved_investor, approved_startup):
    match = _match(client, admin_token, approved_investor["profile_id"], [approved_startup["profile_id"]]).json()[0]
    archived = client.post(f"/matchmakings/{match['id']}/archive", headers=auth_header(approved_investor["access_token"]))
    assert archived.json()["is_archived"] is True

    headers = auth_header(admin_token)
    assert client.delete(f"/matchmakings/{match['id']}", headers=headers).status_code == 204
    assert client.delete(f"/matchmakings/{match['id']}", headers=headers).status_code == 404


def test_expired_flag():
    m = models.Matchmaking(
        investor_id="i",
        investor_name="I",
        investor_email="i@x.test",
        startup_id="s",
        startup_name="S",
        startup_email="s@x.test",
        expiry_date=models.utcnow() - timedelta(days=1),
        matched_by="a",
    )
    assert matchmaking_to_dict(m)["is_expired"] is True


def test_expiry_survives_a_database_round_trip(client, session, admin_token, approved_investor, approved_startup):
    match = _match(client, admin_token, approved_investor["profile_id"], [approved_startup["profile_id"]]).json()[0]
    headers = auth_header(approved_investor["access_token"])
    assert client.get("/matchmakings/mine", headers=headers).json()[0]["is_expired"] is False

    row = session.get(models.Matchmaking, match["id"])
    row.expiry_date = models.utcnow() - timedelta(hours=1)
    session.add(row)
    session.commit()
    assert client.get("/matchmakings/mine", headers=headers).json()[0]["is_expired"] is True
