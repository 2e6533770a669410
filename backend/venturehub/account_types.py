"""Account types, roles and the static permission table."""

from typing import Optional

MAIN_ACCOUNT_TYPES = ("startup", "investor")
INVESTOR_TYPES = ("individual", "vc")
PROFILE_ACCOUNT_TYPES = ("startup", "individual", "vc")
ACCOUNT_TYPES = PROFILE_ACCOUNT_TYPES + ("admin", "user")

STATUSES = ("pending", "approved", "rejected", "flagged")
VISIBILITY_STATUSES = ("normal", "featured", "hot")
ADMIN_LEVELS = ("standard", "super")

ALL_PERMISSIONS = (
    "view_all_startups",
    "view_all_investors",
    "create_startup_profile",
    "create_investor_profile",
    "view_own_interest",
    "express_interest",
    "request_info",
    "manage_users",
    "manage_admins",
    "manage_articles",
    "send_newsletters",
    "manage_matchmaking",
    "manage_connections",
    "score_startups",
)

ROLE_PERMISSIONS = {
    "startup": ("view_all_investors", "create_startup_profile", "view_own_interest"),
    "investor": ("view_all_startups", "create_investor_profile", "express_interest", "request_info"),
    "admin": ALL_PERMISSIONS,
    "user": (),
}


def get_full_account_type(main_account_type: str, investor_type: Optional[str] = None) -> str:
    """Resolve the stored account type from the signup selection."""
    if main_account_type == "startup":
        return "startup"
    if investor_type not in INVESTOR_TYPES:
        raise ValueError(f"unknown investor type: {investor_type!r}")
    return investor_type


def role_for(account_type: str) -> str:
    if account_type in INVESTOR_TYPES:
        return "investor"
    if account_type in ("startup", "admin"):
        return account_type
    return "user"


def is_investor(account_type: str) -> bool:
    return account_type in INVESTOR_TYPES


def has_permission(account_type: str, permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get(role_for(account_type), ())


def permissions_for(account_type: str) -> list:
    return list(ROLE_PERMISSIONS.get(role_for(account_type), ()))


def default_redirect_path(account_type: Optional[str]) -> str:
    """Landing page after sign-in for each account type."""
    role = role_for(account_type) if account_type else None
    if role == "investor":
        return "/investor-dashboard"
    if role == "startup":
        return "/startup-dashboard"
    if role == "admin":
        return "/admin"
    return "/"


def profile_setup_path(account_type: Optional[str]) -> str:
    role = role_for(account_type) if account_type else None
    if role == "investor":
        return "/investor/profile/setup"
    if role == "startup":
        return "/startup/profile/setup"
    return "/profile/setup"
