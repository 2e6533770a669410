"""Account authentication: signup, e-mail verification and sessions.

Signup stores the account with an unconfirmed e-mail and keeps the
registration form as JSON on the account row. The startup or investor
profile is only created once the six-digit code mailed to the user has
been verified, starting out as `pending` and unverified until an admin
approves it.

Sessions are stateless JWTs carrying `account_id`, `email` and
`account_type`.
"""

import json
import logging
import secrets
from datetime import timedelta

import jwt
from passlib.context import CryptContext
from sqlmodel import Session

from .. import mailer, models, repositories
from ..account_types import get_full_account_type, is_investor, permissions_for, role_for
from ..config import settings
from ..errors import AuthError, ConflictError, NotFoundError, ValidationFailed, error_message
from ..validation import require_fields, signup_required_fields, validate_email, validate_password
from . import profile_fields
from .user_invites import UserInviteService

logger = logging.getLogger("venturehub.auth")

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return PWD_CTX.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return PWD_CTX.verify(password, password_hash)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_access_token(account: models.Account) -> str:
    """Sign a token for `account` valid for `JWT_EXPIRE_HOURS`."""
    expire = models.utcnow() + timedelta(hours=settings.JWT_EXPIRE_HOURS)
    payload = {
        "account_id": account.id,
        "email": account.email,
        "account_type": account.account_type,
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError(error_message("session_not_found"), code="session_not_found")
    except jwt.PyJWTError:
        raise AuthError("Invalid authentication token", code="invalid_token")


def _check_password_strength(password: str) -> None:
    problems = validate_password(password)
    if problems:
        raise ValidationFailed(", ".join(problems), code="weak_password")


def _check_email(email: str) -> None:
    if not validate_email(email):
        raise ValidationFailed(error_message("invalid_email"), code="invalid_email")


def build_profile(session: Session, account: models.Account) -> dict:
    """Assemble the user profile the front-end works with.

    Startup and investor profiles report their moderation state; admins
    are always verified and approved. Accounts that have not finished
    verification report `pending`.
    """
    profile = {
        "id": account.profile_id or account.id,
        "account_id": account.id,
        "email": account.email,
        "name": account.name,
        "account_type": account.account_type,
        "role": role_for(account.account_type),
        "permissions": permissions_for(account.account_type),
        "is_email_verified": account.email_confirmed_at is not None,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
        "last_login_at": account.last_sign_in_at,
        "verified": False,
        "admin_approved": False,
        "status": "pending",
        "visibility_status": "normal",
        "has_profile": False,
    }
    if account.account_type == "admin":
        admin = repositories.AdminRepository(session).get(account.id)
        profile.update({
            "verified": True,
            "admin_approved": True,
            "status": "approved",
            "admin_level": admin.admin_level if admin else "standard",
            "phone_number": admin.phone_number if admin else None,
            "location": admin.location if admin else None,
            "has_profile": admin is not None,
        })
        return profile

    if account.account_type == "startup":
        row = repositories.StartupRepository(session).get(account.profile_id)
        if row:
            profile.update({
                "name": row.name,
                "startup_id": row.id,
                "startup_name": row.startup_name,
                "position": "Founder",
                "phone_number": row.phone,
            })
    elif is_investor(account.account_type):
        row = repositories.InvestorRepository(session).get(account.profile_id)
        if row:
            profile.update({
                "name": row.name,
                "investor_type": row.investor_type,
                "company": row.company,
                "linkedin_url": row.linkedin_profile,
                "bio": row.strong_candidate_reason,
                "phone_number": row.phone,
                "location": row.city,
            })
    else:
        row = None

    if row is not None:
        profile.update({
            "has_profile": True,
            "verified": bool(row.verified),
            "admin_approved": row.status == "approved",
            "status": row.status or "pending",
            "visibility_status": row.visibility_status or "normal",
            "created_at": row.created_at,
            "updated_at": row.updated_at or row.created_at,
        })
    return profile


class AuthService:
    """Signup, verification, sign-in and password management."""

    def __init__(self, session: Session):
        self.session = session
        self.accounts = repositories.AccountRepository(session)
        self.codes = repositories.VerificationCodeRepository(session)
        self.startups = repositories.StartupRepository(session)
        self.investors = repositories.InvestorRepository(session)

    # -- verification codes -------------------------------------------

    def _issue_code(self, email: str, purpose: str) -> str:
        self.codes.consume_all(email, purpose)
        code = f"{secrets.randbelow(1_000_000):06d}"
        self.codes.create(models.VerificationCode(
            email=email,
            purpose=purpose,
            code_hash=PWD_CTX.hash(code),
            expires_at=models.utcnow() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES),
        ))
        mailer.send_verification_code(email, code, purpose)
        return code

    def _consume_code(self, email: str, code: str, purpose: str) -> None:
        row = self.codes.latest_active(email, purpose)
        if not row or models.as_utc(row.expires_at) < models.utcnow() or not PWD_CTX.verify((code or "").strip(), row.code_hash):
            raise AuthError(error_message("invalid_otp"), code="invalid_otp")
        row.consumed_at = models.utcnow()
        self.codes.create(row)

    def _with_debug_code(self, result: dict, code: str) -> dict:
        if settings.EXPOSE_DEBUG_CODES:
            result["debug_code"] = code
        return result

    # -- signup -----------------------------------------------------------

    def sign_up(self, registration: dict) -> dict:
        """Create an unconfirmed account and mail a verification code."""
        email = normalize_email(registration.get("email"))
        _check_email(email)
        _check_password_strength(registration.get("password") or "")
        missing = require_fields(registration, signup_required_fields(registration.get("main_account_type")))
        if missing:
            raise ValidationFailed(", ".join(missing))
        try:
            account_type = get_full_account_type(registration["main_account_type"], registration.get("investor_type"))
        except ValueError:
            raise ValidationFailed("Please select an investor type", code="invalid_account_type")
        if self.accounts.get_by_email(email):
            raise ConflictError(error_message("email_already_in_use"), code="email_already_in_use")

        pending = {k: v for k, v in registration.items() if k not in ("password", "email")}
        account = self.accounts.create(models.Account(
            email=email,
            password_hash=hash_password(registration["password"]),
            name=registration.get("name") or "",
            account_type=account_type,
            pending_registration=json.dumps(pending, default=str),
        ))
        code = self._issue_code(email, "signup")
        logger.info("signup account_id=%s type=%s", account.id, account_type)
        return self._with_debug_code({"account_id": account.id, "needs_verification": True}, code)

    def sign_up_with_invite(self, email: str, password: str, name: str, invite_token: str) -> dict:
        """Register an invited user; the account type stays `user` until promotion."""
        email = normalize_email(email)
        _check_email(email)
        _check_password_strength(password)
        UserInviteService(self.session).validate_invite_token(invite_token)
        if self.accounts.get_by_email(email):
            raise ConflictError(error_message("email_already_in_use"), code="email_already_in_use")
        account = self.accounts.create(models.Account(
            email=email,
            password_hash=hash_password(password),
            name=name,
            account_type="user",
            invite_token=invite_token,
        ))
        code = self._issue_code(email, "signup")
        return self._with_debug_code({"account_id": account.id, "needs_verification": True}, code)

    def resend_otp(self, email: str) -> dict:
        email = normalize_email(email)
        account = self.accounts.get_by_email(email)
        if not account:
            raise NotFoundError(error_message("user_not_found"), code="user_not_found")
        if account.email_confirmed_at is not None:
            raise ValidationFailed("Email is already verified", code="already_verified")
        code = self._issue_code(email, "signup")
        return self._with_debug_code({"success": True}, code)

    def verify_otp(self, email: str, code: str) -> dict:
        """Confirm the e-mail and create the pending startup/investor profile."""
        email = normalize_email(email)
        account = self.accounts.get_by_email(email)
        if not account:
            raise NotFoundError(error_message("user_not_found"), code="user_not_found")
        self._consume_code(email, code, "signup")
        account.email_confirmed_at = account.email_confirmed_at or models.utcnow()
        profile_id = account.profile_id
        if profile_id is None and account.account_type in ("startup", "individual", "vc"):
            registration = json.loads(account.pending_registration or "{}")
            profile_id = self._create_profile(account, registration)
            account.profile_id = profile_id
            account.pending_registration = None
        self.accounts.save(account)
        return {
            "account_id": account.id,
            "profile_id": profile_id,
            "access_token": create_access_token(account),
            "profile": build_profile(self.session, account),
        }

    def verify_invite_otp(self, email: str, code: str, invite_token: str) -> dict:
        """Confirm an invited user's e-mail and accept their invitation."""
        email = normalize_email(email)
        account = self.accounts.get_by_email(email)
        if not account:
            raise NotFoundError(error_message("user_not_found"), code="user_not_found")
        self._consume_code(email, code, "signup")
        account.email_confirmed_at = account.email_confirmed_at or models.utcnow()
        self.accounts.save(account)
        invite_accepted = True
        try:
            UserInviteService(self.session).accept_invite(invite_token, account.id)
        except Exception:
            # the account is already verified; acceptance can be retried by an admin
            logger.exception("failed to accept invite for account_id=%s", account.id)
            invite_accepted = False
        return {
            "account_id": account.id,
            "invite_accepted": invite_accepted,
            "access_token": create_access_token(account),
        }

    def _create_profile(self, account: models.Account, registration: dict) -> str:
        base = {"name": account.name or registration.get("name") or "", **registration}
        if account.account_type == "startup":
            row = models.Startup(email=account.email, name=base["name"], account_id=account.id)
            profile_fields.apply_profile_fields(
                row, profile_fields.registration_to_startup(base), profile_fields.SIGNUP_STARTUP_FIELDS
            )
            row = self.startups.create(row)
        else:
            row = models.Investor(
                email=account.email, name=base["name"], account_id=account.id, investor_type=account.account_type
            )
            profile_fields.apply_profile_fields(
                row, profile_fields.registration_to_investor(base), profile_fields.INVESTOR_FIELDS
            )
            row = self.investors.create(row)
        logger.info("profile created account_id=%s profile_id=%s", account.id, row.id)
        return row.id

    # -- sessions ---------------------------------------------------------

    def sign_in(self, email: str, password: str) -> dict:
        email = normalize_email(email)
        _check_email(email)
        account = self.accounts.get_by_email(email)
        if not account or not verify_password(password or "", account.password_hash):
            raise AuthError(error_message("invalid_credentials"), code="invalid_credentials")
        if account.email_confirmed_at is None:
            raise AuthError(error_message("email_not_confirmed"), code="email_not_confirmed")
        account.last_sign_in_at = models.utcnow()
        self.accounts.save(account)
        return {"access_token": create_access_token(account), "profile": build_profile(self.session, account)}

    def sign_out(self, account: models.Account) -> dict:
        logger.info("sign_out account_id=%s", account.id)
        return {"success": True}

    def refresh_session(self, account: models.Account) -> dict:
        return {"access_token": create_access_token(account)}

    def get_profile(self, account: models.Account) -> dict:
        return build_profile(self.session, account)

    # -- passwords --------------------------------------------------------

    def request_password_reset(self, email: str) -> dict:
        """Mail a recovery code; unknown addresses succeed silently."""
        email = normalize_email(email)
        _check_email(email)
        result = {"success": True}
        if not self.accounts.get_by_email(email):
            logger.info("password reset requested for unknown email")
            return result
        code = self._issue_code(email, "recovery")
        return self._with_debug_code(result, code)

    def reset_password(self, email: str, code: str, new_password: str) -> dict:
        email = normalize_email(email)
        _check_password_strength(new_password)
        account = self.accounts.get_by_email(email)
        if not account:
            raise AuthError(error_message("invalid_otp"), code="invalid_otp")
        self._consume_code(email, code, "recovery")
        account.password_hash = hash_password(new_password)
        # proving control of the inbox also confirms the address
        account.email_confirmed_at = account.email_confirmed_at or models.utcnow()
        self.accounts.save(account)
        return {"success": True}

    def update_password(self, account: models.Account, current_password: str, new_password: str) -> dict:
        if not verify_password(current_password or "", account.password_hash):
            raise AuthError("Current password is incorrect", code="invalid_credentials")
        _check_password_strength(new_password)
        account.password_hash = hash_password(new_password)
        self.accounts.save(account)
        return {"success": True}

    def update_profile(self, account: models.Account, data: dict) -> dict:
        """Update the few self-service fields shared by both profile types."""
        if account.account_type == "startup":
            row = self.startups.get(account.profile_id)
            mapping = {"name": "name", "phone": "phone"}
            repo = self.startups
        elif is_investor(account.account_type):
            row = self.investors.get(account.profile_id)
            mapping = {
                "name": "name",
                "phone": "phone",
                "location": "city",
                "bio": "strong_candidate_reason",
                "linkedin": "linkedin_profile",
            }
            repo = self.investors
        else:
            row = None
        if row is None:
            raise NotFoundError("Profile not found", code="profile_not_found")
        for key, column in mapping.items():
            if data.get(key):
                setattr(row, column, data[key])
        repo.save(row)
        if data.get("name"):
            account.name = data["name"]
            self.accounts.save(account)
        return build_profile(self.session, account)


