"""Verification checks and the page route table.

A profile (see `services.auth.build_profile`) can use gated features once
it is verified or approved and not rejected or flagged. `route_check`
answers, for a front-end path, whether the current visitor may open it
and where to send them otherwise.
"""

from typing import Optional

from .account_types import role_for

LOGIN_MESSAGE = "Please log in to access this feature"
PENDING_MESSAGE = "Your account is pending admin approval. Please wait for verification to access this feature."
REJECTED_MESSAGE = "Your account has been rejected. Please contact support for more information."
FLAGGED_MESSAGE = "Your account has been flagged for review. Please contact support."


def check_user_verification(profile: Optional[dict]) -> dict:
    if not profile:
        return {"is_verified": False, "is_approved": False, "can_access_feature": False, "message": LOGIN_MESSAGE}

    is_verified = bool(profile.get("verified"))
    is_approved = bool(profile.get("admin_approved")) or profile.get("status") == "approved"
    denied = {"is_verified": False, "is_approved": False, "can_access_feature": False}

    if not is_verified and not is_approved:
        return {**denied, "message": PENDING_MESSAGE}
    if profile.get("status") == "rejected":
        return {**denied, "message": REJECTED_MESSAGE}
    if profile.get("status") == "flagged":
        return {**denied, "message": FLAGGED_MESSAGE}
    return {"is_verified": True, "is_approved": True, "can_access_feature": True, "message": None}


def _role(profile: Optional[dict]) -> Optional[str]:
    return role_for(profile["account_type"]) if profile else None


def can_view_startups(profile: Optional[dict]) -> bool:
    if _role(profile) != "investor":
        return False
    return check_user_verification(profile)["can_access_feature"]


def can_view_investors(profile: Optional[dict]) -> bool:
    if _role(profile) != "startup":
        return False
    return check_user_verification(profile)["can_access_feature"]


def can_create_profile(profile: Optional[dict]) -> bool:
    # unverified users may still fill in their profile
    if not profile:
        return False
    return profile.get("status") != "rejected"


def can_connect_with_users(profile: Optional[dict]) -> bool:
    if not profile:
        return False
    return check_user_verification(profile)["can_access_feature"]


def can_browse_content(profile: Optional[dict]) -> bool:
    if not profile:
        return False
    if _role(profile) == "admin":
        return True
    return profile.get("status") == "approved"


def verification_status_message(profile: Optional[dict]) -> str:
    if not profile:
        return "Please log in"
    check = check_user_verification(profile)
    if check["can_access_feature"]:
        return "Account verified"
    return check["message"] or "Account not verified"


# path -> (roles allowed or None for any signed-in user, status guarded)
# paths missing from the table are public
ROUTES = {
    "/admin": (("admin",), False),
    "/startups": (("investor", "admin"), True),
    "/investors": (("startup", "admin"), True),
    "/investor-dashboard": (("investor",), False),
    "/startup-dashboard": (("startup",), False),
    "/matchmaking": (("investor", "startup", "admin"), True),
    "/notifications": (None, False),
    "/profile": (None, False),
    "/pending-verification": (None, False),
}


def _match(path: str) -> Optional[str]:
    path = "/" + path.strip("/")
    if path in ROUTES:
        return path
    for prefix in sorted(ROUTES, key=len, reverse=True):
        if path.startswith(prefix + "/"):
            return prefix
    return None


def route_check(path: str, profile: Optional[dict]) -> dict:
    """Decide whether `profile` may open `path`; returns `{allowed, redirect_to}`."""
    rule = _match(path or "/")
    if rule is None:
        return {"allowed": True, "redirect_to": None}
    roles, status_guarded = ROUTES[rule]
    if not profile:
        return {"allowed": False, "redirect_to": "/login"}
    if roles is not None and _role(profile) not in roles:
        return {"allowed": False, "redirect_to": "/unauthorized"}
    if status_guarded and not can_browse_content(profile):
        return {"allowed": False, "redirect_to": "/pending-verification"}
    return {"allowed": True, "redirect_to": None}
