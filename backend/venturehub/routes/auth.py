"""Signup, e-mail verification, sessions and the page route guard.

Endpoints implemented:
- POST /auth/signup, /auth/signup/invite
- POST /auth/verify-otp, /auth/verify-invite-otp, /auth/resend-otp
- POST /auth/signin, /auth/signout, /auth/refresh
- GET /auth/me, /auth/verification-status, /auth/route-check
- POST /auth/password/reset-request, /auth/password/reset, /auth/password/update
- PATCH /auth/profile
- GET /auth/invites/validate, /auth/admin-invites/validate
- POST /auth/admin-invites/accept
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from .. import access, models
from ..account_types import default_redirect_path, profile_setup_path
from ..auth import get_current_account, get_current_profile, get_optional_account
from ..config import settings
from ..database import get_session
from ..schemas import (
    AcceptAdminInviteIn,
    EmailIn,
    InviteSignUpIn,
    InviteVerifyIn,
    OtpVerifyIn,
    PasswordResetIn,
    PasswordUpdateIn,
    ProfileUpdateIn,
    SignInIn,
    SignUpIn,
)
from ..services.admin import AdminService
from ..services.auth import AuthService, build_profile
from ..services.user_invites import UserInviteService
from ..utils.rate_limit import InMemoryRateLimiter

router = APIRouter(prefix="/auth", tags=["auth"])
auth_rate_limiter = InMemoryRateLimiter()


def enforce_auth_rate_limit(request: Request) -> None:
    key = f"{request.client.host if request.client else 'unknown'}:{request.url.path}"
    allowed, retry_after = auth_rate_limiter.allow(key, settings.AUTH_RATE_LIMIT_PER_MIN, 60)
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"rate limit exceeded; retry after {retry_after}s",
            headers={"Retry-After": str(retry_after)},
        )


@router.post("/signup", status_code=201, dependencies=[Depends(enforce_auth_rate_limit)])
def sign_up(payload: SignUpIn, db: Session = Depends(get_session)):
    """Register a startup or investor and mail a 6-digit verification code.

    The profile row is only created once the code is verified.
    """
    return AuthService(db).sign_up(payload.model_dump())


@router.post("/signup/invite", status_code=201, dependencies=[Depends(enforce_auth_rate_limit)])
def sign_up_with_invite(payload: InviteSignUpIn, db: Session = Depends(get_session)):
    return AuthService(db).sign_up_with_invite(payload.email, payload.password, payload.name, payload.invite_token)


@router.post("/verify-otp")
def verify_otp(payload: OtpVerifyIn, db: Session = Depends(get_session)):
    result = AuthService(db).verify_otp(payload.email, payload.code)
    account_type = result["profile"]["account_type"]
    result["redirect_to"] = profile_setup_path(account_type)
    return result


@router.post("/verify-invite-otp")
def verify_invite_otp(payload: InviteVerifyIn, db: Session = Depends(get_session)):
    return AuthService(db).verify_invite_otp(payload.email, payload.code, payload.invite_token)


@router.post("/resend-otp", dependencies=[Depends(enforce_auth_rate_limit)])
def resend_otp(payload: EmailIn, db: Session = Depends(get_session)):
    return AuthService(db).resend_otp(payload.email)


@router.post("/signin", dependencies=[Depends(enforce_auth_rate_limit)])
def sign_in(payload: SignInIn, db: Session = Depends(get_session)):
    """Authenticate and return a JWT plus the caller's profile."""
    result = AuthService(db).sign_in(payload.email, payload.password)
    result["redirect_to"] = default_redirect_path(result["profile"]["account_type"])
    return result


@router.post("/signout")
def sign_out(account: models.Account = Depends(get_current_account), db: Session = Depends(get_session)):
    return AuthService(db).sign_out(account)


@router.post("/refresh")
def refresh(account: models.Account = Depends(get_current_account), db: Session = Depends(get_session)):
    return AuthService(db).refresh_session(account)


@router.get("/me")
def me(profile: dict = Depends(get_current_profile)):
    return profile


@router.get("/verification-status")
def verification_status(profile: dict = Depends(get_current_profile)):
    check = access.check_user_verification(profile)
    check.update({
        "status_message": access.verification_status_message(profile),
        "can_view_startups": access.can_view_startups(profile),
        "can_view_investors": access.can_view_investors(profile),
        "can_create_profile": access.can_create_profile(profile),
        "can_connect_with_users": access.can_connect_with_users(profile),
    })
    return check


@router.get("/route-check")
def check_route(
    path: str = "/",
    account: Optional[models.Account] = Depends(get_optional_account),
    db: Session = Depends(get_session),
):
    """Tell the front-end whether the caller may open `path` and where to go otherwise."""
    profile = build_profile(db, account) if account else None
    return {"path": path, **access.route_check(path, profile)}


@router.post("/password/reset-request", dependencies=[Depends(enforce_auth_rate_limit)])
def request_password_reset(payload: EmailIn, db: Session = Depends(get_session)):
    return AuthService(db).request_password_reset(payload.email)


@router.post("/password/reset", dependencies=[Depends(enforce_auth_rate_limit)])
def reset_password(payload: PasswordResetIn, db: Session = Depends(get_session)):
    return AuthService(db).reset_password(payload.email, payload.code, payload.new_password)


@router.post("/password/update")
def update_password(
    payload: PasswordUpdateIn,
    account: models.Account = Depends(get_current_account),
    db: Session = Depends(get_session),
):
    return AuthService(db).update_password(account, payload.current_password, payload.new_password)


@router.patch("/profile")
def update_profile(
    payload: ProfileUpdateIn,
    account: models.Account = Depends(get_current_account),
    db: Session = Depends(get_session),
):
    return AuthService(db).update_profile(account, payload.model_dump(exclude_none=True))


@router.get("/invites/validate")
def validate_user_invite(token: str, db: Session = Depends(get_session)):
    return UserInviteService(db).validate_invite_token(token)


@router.get("/admin-invites/validate")
def validate_admin_invite(token: str, db: Session = Depends(get_session)):
    return AdminService(db).validate_admin_invite(token)


@router.post("/admin-invites/accept", status_code=201, dependencies=[Depends(enforce_auth_rate_limit)])
def accept_admin_invite(payload: AcceptAdminInviteIn, db: Session = Depends(get_session)):
    return AdminService(db).accept_admin_invite(payload.token, payload.password)
