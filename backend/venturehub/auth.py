"""Authentication helpers and FastAPI security dependencies.

`get_current_account` validates the bearer token and returns the
`Account` row; the `require_*` factories layer role, permission and
moderation-status checks on top of it. Failures raise `ServiceError`
subclasses, which the app turns into JSON error responses.
"""

from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from . import models, repositories
from .access import check_user_verification
from .account_types import has_permission, role_for
from .database import get_session
from .errors import AuthError, PermissionDenied
from .services.auth import build_profile, decode_access_token

bearer_scheme = HTTPBearer()
optional_bearer = HTTPBearer(auto_error=False)


def _account_from_token(session: Session, token: str) -> models.Account:
    payload = decode_access_token(token)
    account_id = payload.get("account_id")
    if not account_id:
        raise AuthError("Invalid token payload", code="invalid_token")
    account = repositories.AccountRepository(session).get(account_id)
    if not account:
        raise AuthError("Account not found", code="user_not_found")
    return account


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
    session: Session = Depends(get_session),
) -> models.Account:
    """FastAPI dependency that returns the authenticated account."""
    return _account_from_token(session, credentials.credentials)


def get_optional_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_bearer),
    session: Session = Depends(get_session),
) -> Optional[models.Account]:
    if credentials is None:
        return None
    return _account_from_token(session, credentials.credentials)


def get_current_profile(
    account: models.Account = Depends(get_current_account),
    session: Session = Depends(get_session),
) -> dict:
    return build_profile(session, account)


def require_roles(*roles: str):
    """Dependency factory: the account's role must be one of `roles`."""

    def dependency(account: models.Account = Depends(get_current_account)) -> models.Account:
        if role_for(account.account_type) not in roles:
            raise PermissionDenied("You do not have access to this resource")
        return account

    return dependency


def require_permission(permission: str):
    def dependency(account: models.Account = Depends(get_current_account)) -> models.Account:
        if not has_permission(account.account_type, permission):
            raise PermissionDenied(f"Missing permission: {permission}")
        return account

    return dependency


def require_approved(profile: dict = Depends(get_current_profile)) -> dict:
    """Status guard: pending, rejected and flagged profiles are turned away."""
    check = check_user_verification(profile)
    if not check["can_access_feature"]:
        raise PermissionDenied(check["message"], code="not_approved")
    return profile


def require_admin(
    account: models.Account = Depends(get_current_account),
    session: Session = Depends(get_session),
) -> models.Admin:
    admin = None
    if account.account_type == "admin":
        admin = repositories.AdminRepository(session).get(account.id)
    if admin is None:
        raise PermissionDenied("Admin access required")
    return admin


def require_super_admin(admin: models.Admin = Depends(require_admin)) -> models.Admin:
    if admin.admin_level != "super":
        raise PermissionDenied("Super admin access required")
    return admin
