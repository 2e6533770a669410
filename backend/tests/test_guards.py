from conftest import auth_header, investor_payload, startup_payload
from venturehub import access


def _route(client, path, token=None):
    headers = auth_header(token) if token else {}
    r = client.get("/auth/route-check", params={"path": path}, headers=headers)
    assert r.status_code == 200
    return r.json()


def test_route_check_for_anonymous_visitors(client):
    assert _route(client, "/")["allowed"] is True
    assert _route(client, "/articles/some-post")["allowed"] is True
    denied = _route(client, "/admin/users")
    assert denied == {"path": "/admin/users", "allowed": False, "redirect_to": "/login"}


def test_route_check_by_role_and_status(client, signup, approve):
    pending = signup(startup_payload("pending@rocket.test"))
    token = pending["access_token"]
    assert _route(client, "/startups", token)["redirect_to"] == "/unauthorized"
    assert _route(client, "/investors", token)["redirect_to"] == "/pending-verification"
    assert _route(client, "/startup-dashboard", token)["allowed"] is True
    assert _route(client, "/admin", token)["redirect_to"] == "/unauthorized"

    approve("startup", pending["profile_id"])
    assert _route(client, "/investors", token)["allowed"] is True
    assert _route(client, "/matchmaking", token)["allowed"] is True


def test_admins_pass_every_guard(client, admin_token):
    for path in ("/admin", "/startups", "/investors", "/matchmaking", "/notifications"):
        assert _route(client, path, admin_token)["allowed"] is True, path


def test_verification_status_messages(client, signup, approve):
    result = signup(investor_payload("status@acme.test"))
    token = result["access_token"]
    r = client.get("/auth/verification-status", headers=auth_header(token)).json()
    assert r["can_access_feature"] is False
    assert r["message"] == access.PENDING_MESSAGE
    assert r["can_create_profile"] is True
    assert r["can_view_startups"] is False

    approve("investor", result["profile_id"])
    r = client.get("/auth/verification-status", headers=auth_header(token)).json()
    assert r["can_access_feature"] is True
    assert r["status_message"] == "Account verified"
    assert r["can_view_startups"] is True
    assert r["can_view_investors"] is False


def test_rejected_and_flagged_profiles_are_locked_out(client, signup, approve):
    result = signup(investor_payload("flag@acme.test"))
    token = result["access_token"]
    approve("investor", result["profile_id"], status="flagged")
    r = client.get("/startups", headers=auth_header(token))
    assert r.status_code == 403
    assert r.json() == {"detail": access.PENDING_MESSAGE, "code": "not_approved"}


def test_check_user_verification_rules():
    assert access.check_user_verification(None)["message"] == access.LOGIN_MESSAGE
    approved = {"account_type": "startup", "verified": True, "status": "approved"}
    assert access.check_user_verification(approved)["can_access_feature"] is True
    rejected = {"account_type": "startup", "verified": True, "status": "rejected"}
    assert access.check_user_verification(rejected)["message"] == access.REJECTED_MESSAGE
    flagged = {"account_type": "vc", "verified": True, "status": "flagged"}
    assert access.check_user_verification(flagged)["message"] == access.FLAGGED_MESSAGE
    assert access.can_create_profile({"account_type": "startup", "status": "rejected"}) is False


def test_route_table_prefix_matching():
    investor = {"account_type": "individual", "verified": True, "status": "approved"}
    assert access.route_check("/startups/abc", investor)["allowed"] is True
    assert access.route_check("/startupsfoo", investor)["allowed"] is True
    assert access.route_check("/investor-dashboard/", investor)["allowed"] is True
    assert access.route_check("/startup-dashboard", investor)["redirect_to"] == "/unauthorized"
