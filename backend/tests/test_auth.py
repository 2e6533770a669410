from datetime import timedelta

from sqlmodel import select

from conftest import PASSWORD, auth_header, investor_payload, startup_payload
from venturehub import models
from venturehub.config import settings


def _expire_codes(session, email):
    rows = session.exec(select(models.VerificationCode).where(models.VerificationCode.email == email)).all()
    for row in rows:
        assert models.as_utc(row.expires_at) > models.utcnow()
        row.expires_at = models.utcnow() - timedelta(minutes=1)
        session.add(row)
    session.commit()
    return rows


def test_signup_creates_profile_only_after_verification(client):
    r = client.post("/auth/signup", json=startup_payload("new@rocket.test"))
    assert r.status_code == 201
    body = r.json()
    assert body["needs_verification"] is True
    assert len(body["debug_code"]) == 6

    # unverified accounts cannot sign in yet
    r2 = client.post("/auth/signin", json={"email": "new@rocket.test", "password": PASSWORD})
    assert r2.status_code == 401
    assert r2.json()["code"] == "email_not_confirmed"

    v = client.post("/auth/verify-otp", json={"email": "new@rocket.test", "code": body["debug_code"]})
    assert v.status_code == 200
    data = v.json()
    assert data["profile_id"]
    assert data["redirect_to"] == "/startup/profile/setup"
    profile = data["profile"]
    assert profile["status"] == "pending"
    assert profile["verified"] is False
    assert profile["startup_name"] == "Rocket Labs"
    assert profile["role"] == "startup"


def test_signup_rejects_duplicate_email(client, signup):
    signup(startup_payload("dup@rocket.test"))
    r = client.post("/auth/signup", json=startup_payload("DUP@rocket.test"))
    assert r.status_code == 409
    assert r.json() == {"detail": "An account with this email already exists", "code": "email_already_in_use"}


def test_signup_reports_every_password_rule(client):
    r = client.post("/auth/signup", json=startup_payload("weak@rocket.test", password="abc"))
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert "Password must be at least 8 characters long" in detail
    assert "Password must contain at least one uppercase letter" in detail
    assert "Password must contain at least one number" in detail
    assert r.json()["code"] == "weak_password"


def test_signup_reports_missing_fields(client):
    r = client.post("/auth/signup", json=startup_payload("x@rocket.test", startup_name="", stage=None))
    assert r.status_code == 400
    assert r.json()["detail"] == "startup_name is required, stage is required"


def test_investor_signup_needs_investor_type(client):
    r = client.post("/auth/signup", json=investor_payload("i@acme.test", investor_type=None))
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_account_type"


def test_investor_signup_stores_industries_and_stage(signup):
    result = signup(investor_payload("angel@acme.test", investor_type="individual"))
    profile = result["profile"]
    assert profile["account_type"] == "individual"
    assert profile["role"] == "investor"
    assert profile["company"] == "Acme Ventures"


def test_invalid_email_and_wrong_code(client):
    r = client.post("/auth/signup", json=startup_payload("not-an-email"))
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_email"

    client.post("/auth/signup", json=startup_payload("code@rocket.test"))
    v = client.post("/auth/verify-otp", json={"email": "code@rocket.test", "code": "000000x"})
    assert v.status_code == 401
    assert v.json()["code"] == "invalid_otp"


def test_expired_codes_are_rejected(client, session, signup):
    code = client.post("/auth/signup", json=startup_payload("late@rocket.test")).json()["debug_code"]
    assert _expire_codes(session, "late@rocket.test")
    v = client.post("/auth/verify-otp", json={"email": "late@rocket.test", "code": code})
    assert v.status_code == 401
    assert v.json() == {"detail": "The verification code is invalid or has expired", "code": "invalid_otp"}

    signup(startup_payload("slow@rocket.test"))
    reset = client.post("/auth/password/reset-request", json={"email": "slow@rocket.test"}).json()["debug_code"]
    _expire_codes(session, "slow@rocket.test")
    r = client.post("/auth/password/reset", json={"email": "slow@rocket.test", "code": reset, "new_password": "N3w!Password"})
    assert r.status_code == 401
    assert r.json()["code"] == "invalid_otp"


def test_resend_otp_invalidates_previous_code(client):
    first = client.post("/auth/signup", json=startup_payload("resend@rocket.test")).json()["debug_code"]
    second = client.post("/auth/resend-otp", json={"email": "resend@rocket.test"}).json()["debug_code"]
    if first != second:
        r = client.post("/auth/verify-otp", json={"email": "resend@rocket.test", "code": first})
        assert r.status_code == 401
    r = client.post("/auth/verify-otp", json={"email": "resend@rocket.test", "code": second})
    assert r.status_code == 200
    again = client.post("/auth/resend-otp", json={"email": "resend@rocket.test"})
    assert again.status_code == 400


def test_signin_and_me(client, signup):
    signup(startup_payload("me@rocket.test"))
    bad = client.post("/auth/signin", json={"email": "me@rocket.test", "password": "Wrong!Pass1"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid email or password"

    r = client.post("/auth/signin", json={"email": "me@rocket.test", "password": PASSWORD})
    assert r.status_code == 200
    assert r.json()["redirect_to"] == "/startup-dashboard"
    token = r.json()["access_token"]
    me = client.get("/auth/me", headers=auth_header(token))
    assert me.status_code == 200
    assert me.json()["email"] == "me@rocket.test"
    assert me.json()["last_login_at"] is not None
    assert "view_all_investors" in me.json()["permissions"]


def test_bad_token_is_rejected(client):
    r = client.get("/auth/me", headers=auth_header("not-a-token"))
    assert r.status_code == 401
    assert client.get("/auth/me").status_code in (401, 403)


def test_password_reset_flow(client, signup):
    signup(startup_payload("reset@rocket.test"))
    unknown = client.post("/auth/password/reset-request", json={"email": "nobody@rocket.test"})
    assert unknown.status_code == 200
    assert "debug_code" not in unknown.json()

    code = client.post("/auth/password/reset-request", json={"email": "reset@rocket.test"}).json()["debug_code"]
    r = client.post("/auth/password/reset", json={"email": "reset@rocket.test", "code": code, "new_password": "N3w!Password"})
    assert r.status_code == 200
    assert client.post("/auth/signin", json={"email": "reset@rocket.test", "password": PASSWORD}).status_code == 401
    assert client.post("/auth/signin", json={"email": "reset@rocket.test", "password": "N3w!Password"}).status_code == 200


def test_update_password_and_profile(client, signup):
    token = signup(investor_payload("upd@acme.test"))["access_token"]
    wrong = client.post(
        "/auth/password/update",
        json={"current_password": "Nope!1234", "new_password": "An0ther!Pass"},
        headers=auth_header(token),
    )
    assert wrong.status_code == 401
    ok = client.post(
        "/auth/password/update",
        json={"current_password": PASSWORD, "new_password": "An0ther!Pass"},
        headers=auth_header(token),
    )
    assert ok.status_code == 200

    r = client.patch("/auth/profile", json={"name": "Ivan R.", "location": "Lisbon"}, headers=auth_header(token))
    assert r.status_code == 200
    assert r.json()["name"] == "Ivan R."
    assert r.json()["location"] == "Lisbon"


def test_auth_endpoints_are_rate_limited(client, monkeypatch):
    monkeypatch.setattr(settings, "AUTH_RATE_LIMIT_PER_MIN", 2)
    body = {"email": "nobody@rocket.test", "password": PASSWORD}
    assert client.post("/auth/signin", json=body).status_code == 401
    assert client.post("/auth/signin", json=body).status_code == 401
    r = client.post("/auth/signin", json=body)
    assert r.status_code == 429
    assert int(r.headers["Retry-After"]) >= 1


def test_request_id_header_is_propagated(client):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers["X-Request-ID"]
