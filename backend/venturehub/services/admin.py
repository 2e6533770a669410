"""Admin moderation and admin-team management.

Moderation works on startup and investor profiles alike, addressed by
`(id, type)` where type is `startup` or `investor`. A status change is a
single update of `status`, `verified` and `updated_at` (plus the
verification stamp when approving); the profile owner is then told
through an `admin_action` notification.
"""

import logging
import uuid
from datetime import timedelta
from typing import Dict, List, Optional

from sqlmodel import Session

from .. import mailer, models, repositories
from ..config import settings
from ..errors import ConflictError, NotFoundError, PermissionDenied, ValidationFailed
from . import profile_fields, scoring
from .auth import hash_password, normalize_email
from .investors import investor_admin
from .notifications import NotificationService
from .startups import startup_admin

logger = logging.getLogger("venturehub.admin")

USER_TYPES = ("startup", "investor")

STATUS_ACTIONS = {
    "approved": ("Approved", "Your account has been approved. You now have full access to the platform."),
    "rejected": ("Rejected", "Your account application has been rejected. Please contact support for more information."),
    "flagged": ("Flagged", "Your account has been flagged for review. Please contact support."),
    "pending": ("Pending Review", "Your account has been returned to pending review."),
}


def admin_user_row(row, user_type: str) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "email": row.email,
        "phone": row.phone,
        "type": user_type,
        "verified": bool(row.verified),
        "status": row.status or "pending",
        "visibility_status": row.visibility_status,
        "admin_notes": row.admin_notes,
        "verified_at": row.verified_at,
        "verified_by": row.verified_by,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def admin_to_dict(admin: models.Admin) -> dict:
    return {
        "id": admin.id,
        "email": admin.email,
        "name": admin.name,
        "admin_level": admin.admin_level,
        "phone_number": admin.phone_number,
        "location": admin.location,
        "created_at": admin.created_at,
        "updated_at": admin.updated_at,
    }


def admin_invite_to_dict(invite: models.AdminInvite) -> dict:
    return {
        "id": invite.id,
        "email": invite.email,
        "name": invite.name,
        "admin_level": invite.admin_level,
        "phone_number": invite.phone_number,
        "location": invite.location,
        "invite_token": invite.invite_token,
        "invited_by": invite.invited_by,
        "status": invite.status,
        "expires_at": invite.expires_at,
        "accepted_at": invite.accepted_at,
        "created_at": invite.created_at,
        "invitation_link": get_invitation_link(invite.invite_token),
    }


def get_invitation_link(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL}/admin-invite?token={token}"


class AdminService:
    """User moderation, dashboard statistics and admin management."""

    def __init__(self, session: Session):
        self.session = session
        self.startups = repositories.StartupRepository(session)
        self.investors = repositories.InvestorRepository(session)
        self.accounts = repositories.AccountRepository(session)
        self.admins = repositories.AdminRepository(session)
        self.admin_invites = repositories.AdminInviteRepository(session)

    def _repo(self, user_type: str):
        if user_type not in USER_TYPES:
            raise ValidationFailed(f"Unknown user type: {user_type}")
        return self.investors if user_type == "investor" else self.startups

    def _row(self, user_id: str, user_type: str):
        row = self._repo(user_type).get(user_id)
        if not row:
            raise NotFoundError("User not found")
        return row

    # -- moderation -------------------------------------------------------

    def get_all_users(
        self,
        type: Optional[str] = None,
        status: Optional[str] = None,
        verified: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[dict]:
        """Investors and startups merged into one list, newest first."""
        users = []
        if not type or type == "investor":
            users.extend(admin_user_row(i, "investor") for i in self.investors.list())
        if not type or type == "startup":
            users.extend(admin_user_row(s, "startup") for s in self.startups.list())
        if status:
            users = [u for u in users if u["status"] == status]
        if verified is not None:
            users = [u for u in users if u["verified"] == verified]
        if search:
            term = search.lower()
            users = [u for u in users if term in (u["name"] or "").lower() or term in (u["email"] or "").lower()]
        users.sort(key=lambda u: u["created_at"], reverse=True)
        return users

    def get_user_details(self, user_id: str, user_type: str) -> dict:
        row = self._row(user_id, user_type)
        return investor_admin(row) if user_type == "investor" else startup_admin(row)

    def update_user_status(self, user_id: str, user_type: str, data: Dict, verified_by: Optional[str] = None) -> dict:
        row = self._row(user_id, user_type)
        status = data["status"]
        now = models.utcnow()
        row.status = status
        row.verified = status == "approved"
        if status == "approved":
            row.verified_at = now
            row.verified_by = verified_by
        if data.get("visibility_status"):
            row.visibility_status = data["visibility_status"]
        if data.get("admin_notes"):
            row.admin_notes = data["admin_notes"]
        row = self._repo(user_type).save(row)
        logger.info("%s %s status=%s by=%s", user_type, user_id, status, verified_by)

        action, details = STATUS_ACTIONS.get(status, (status.title(), f"Your account status is now {status}."))
        try:
            NotificationService(self.session).send_admin_action_notification(row.id, action, details)
        except Exception:
            logger.exception("failed to notify %s %s about status change", user_type, user_id)
            self.session.rollback()
        return self.get_user_details(user_id, user_type)

    def update_user_profile(self, user_id: str, user_type: str, data: Dict) -> dict:
        row = self._row(user_id, user_type)
        fields = profile_fields.INVESTOR_FIELDS if user_type == "investor" else profile_fields.STARTUP_FIELDS
        written = profile_fields.apply_profile_fields(row, data, fields + profile_fields.ADMIN_EXTRA_FIELDS)
        if not written:
            raise ValidationFailed("No editable fields supplied")
        self._repo(user_type).save(row)
        return self.get_user_details(user_id, user_type)

    def delete_user(self, user_id: str, user_type: str) -> None:
        """Delete the profile row and the account that owns it."""
        row = self._row(user_id, user_type)
        account = self.accounts.get(row.account_id) if row.account_id else None
        self._repo(user_type).delete(row)
        if account:
            self.accounts.delete(account)
        logger.info("deleted %s %s", user_type, user_id)

    def get_dashboard_stats(self) -> dict:
        startups = self.startups.list()
        investors = self.investors.list()
        everyone = startups + investors
        return {
            "totalStartups": len(startups),
            "totalInvestors": len(investors),
            "pendingApprovals": sum(1 for u in everyone if not u.status or u.status == "pending"),
            "approvedUsers": sum(1 for u in everyone if u.status == "approved" or u.verified),
            "rejectedUsers": sum(1 for u in everyone if u.status == "rejected"),
            "flaggedUsers": sum(1 for u in everyone if u.status == "flagged"),
        }

    def score_startup(self, startup_id: str, inputs: Dict, weights: Optional[Dict] = None) -> dict:
        """Score a startup, pre-filling inputs from its profile."""
        startup = self.startups.get(startup_id)
        if not startup:
            raise NotFoundError("Startup not found")
        if weights is not None:
            merged_weights = {**scoring.DEFAULT_WEIGHTS, **weights}
            if not scoring.validate_weights(merged_weights):
                raise ValidationFailed(f"Weights must total 100 (got {scoring.total_weight(merged_weights):g})")
        else:
            merged_weights = scoring.DEFAULT_WEIGHTS
        merged_inputs = scoring.inputs_from_startup(startup)
        merged_inputs.update({k: v for k, v in inputs.items() if v is not None})
        result = scoring.calculate_startup_score(merged_inputs, merged_weights)
        result.update({"startup_id": startup.id, "inputs": merged_inputs, "weights": merged_weights})
        return result

    # -- admin management -------------------------------------------------

    def is_super_admin(self, admin_id: str) -> bool:
        admin = self.admins.get(admin_id)
        return admin is not None and admin.admin_level == "super"

    def get_all_admins(self) -> List[dict]:
        return [admin_to_dict(a) for a in self.admins.list()]

    def get_pending_invites(self) -> List[dict]:
        return [admin_invite_to_dict(i) for i in self.admin_invites.list(models.AdminInvite.status == "pending")]

    def create_admin_invite(self, data: Dict, invited_by: str) -> dict:
        if not self.is_super_admin(invited_by):
            raise PermissionDenied("Only super admins can invite admins")
        email = normalize_email(data.get("email"))
        if not email or not data.get("name"):
            raise ValidationFailed("email and name are required")
        if self.admins.get_by_email(email):
            raise ConflictError("An admin with this email already exists")
        if self.admin_invites.pending_for_email(email):
            raise ConflictError("There's already a pending invite for this email")
        invite = self.admin_invites.create(models.AdminInvite(
            email=email,
            name=data["name"],
            admin_level=data.get("admin_level") or "standard",
            phone_number=data.get("phone_number"),
            location=data.get("location"),
            invite_token=uuid.uuid4().hex,
            invited_by=invited_by,
            status="pending",
            expires_at=models.utcnow() + timedelta(days=settings.INVITE_EXPIRY_DAYS),
        ))
        mailer.send_invitation(email, get_invitation_link(invite.invite_token), "admin")
        logger.info("admin invite created id=%s level=%s by=%s", invite.id, invite.admin_level, invited_by)
        return admin_invite_to_dict(invite)

    def _pending_invite(self, token: str) -> models.AdminInvite:
        invite = self.admin_invites.get_by_token(token)
        if not invite or invite.status != "pending":
            raise ValidationFailed("Invalid or expired invitation", code="invalid_invite")
        if models.utcnow() > models.as_utc(invite.expires_at):
            invite.status = "expired"
            self.admin_invites.save(invite)
            raise ValidationFailed("Invitation has expired", code="invite_expired")
        return invite

    def validate_admin_invite(self, token: str) -> dict:
        return admin_invite_to_dict(self._pending_invite(token))

    def accept_admin_invite(self, token: str, password: str) -> dict:
        """Create the admin's account and admin row from a pending invite."""
        from .auth import _check_password_strength, create_access_token

        invite = self._pending_invite(token)
        _check_password_strength(password)
        if self.accounts.get_by_email(invite.email):
            raise ConflictError("An account with this email already exists", code="email_already_in_use")
        now = models.utcnow()
        account = self.accounts.create(models.Account(
            email=invite.email,
            password_hash=hash_password(password),
            name=invite.name,
            account_type="admin",
            email_confirmed_at=now,
        ))
        admin = self.admins.create(models.Admin(
            id=account.id,
            email=invite.email,
            name=invite.name,
            admin_level=invite.admin_level,
            phone_number=invite.phone_number,
            location=invite.location,
        ))
        invite.status = "accepted"
        invite.accepted_at = now
        self.admin_invites.save(invite)
        logger.info("admin invite %s accepted account_id=%s", invite.id, account.id)
        return {"admin": admin_to_dict(admin), "access_token": create_access_token(account)}

    def cancel_admin_invite(self, invite_id: str) -> dict:
        invite = self.admin_invites.get(invite_id)
        if not invite:
            raise NotFoundError("Invitation not found")
        if invite.status != "pending":
            raise ValidationFailed(f"Invitation is already {invite.status}")
        invite.status = "cancelled"
        return admin_invite_to_dict(self.admin_invites.save(invite))

    def remove_admin(self, admin_id: str, acting_admin_id: str) -> None:
        """Revoke admin rights; the account stays as a plain user."""
        if not self.is_super_admin(acting_admin_id):
            raise PermissionDenied("Only super admins can remove admins")
        if admin_id == acting_admin_id:
            raise ValidationFailed("You cannot remove yourself")
        admin = self.admins.get(admin_id)
        if not admin:
            raise NotFoundError("Admin not found")
        self.admins.delete(admin)
        account = self.accounts.get(admin_id)
        if account:
            account.account_type = "user"
            self.accounts.save(account)
        logger.info("admin %s removed by %s", admin_id, acting_admin_id)
