"""User invitations and promotion of invited users to admin.

An invite moves from `pending` to `accepted` once the invited user has
signed up and verified their e-mail, or to `expired` when it is checked
after its expiry date. Promotion turns an accepted invite into an admin
row and removes the invite.
"""

import logging
import uuid
from datetime import timedelta
from typing import Dict, List

from sqlmodel import Session

from .. import mailer, models, repositories
from ..config import settings
from ..errors import ConflictError, NotFoundError, ValidationFailed

logger = logging.getLogger("venturehub.user_invites")


def invite_to_dict(invite: models.UserInvite) -> dict:
    return {
        "id": invite.id,
        "email": invite.email,
        "name": invite.name,
        "invited_by": invite.invited_by,
        "invite_token": invite.invite_token,
        "status": invite.status,
        "user_id": invite.user_id,
        "expires_at": invite.expires_at,
        "created_at": invite.created_at,
        "updated_at": invite.updated_at,
        "invitation_link": get_invitation_link(invite.invite_token),
    }


def get_invitation_link(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL}/invite-signup?token={token}"


class UserInviteService:
    def __init__(self, session: Session):
        self.session = session
        self.invites = repositories.UserInviteRepository(session)
        self.accounts = repositories.AccountRepository(session)
        self.admins = repositories.AdminRepository(session)

    def _expiry(self):
        return models.utcnow() + timedelta(days=settings.INVITE_EXPIRY_DAYS)

    def _get(self, invite_id: str) -> models.UserInvite:
        invite = self.invites.get(invite_id)
        if not invite:
            raise NotFoundError("Invitation not found")
        return invite

    def create_user_invite(self, data: Dict, invited_by: str) -> dict:
        email = (data.get("email") or "").strip().lower()
        if not email or not data.get("name"):
            raise ValidationFailed("email and name are required")
        if self.accounts.get_by_email(email):
            raise ConflictError("User with this email already exists")
        if self.invites.pending_for_email(email):
            raise ConflictError("There's already a pending invite for this email")
        invite = self.invites.create(models.UserInvite(
            email=email,
            name=data["name"],
            invited_by=invited_by,
            invite_token=uuid.uuid4().hex,
            status="pending",
            expires_at=self._expiry(),
        ))
        mailer.send_invitation(email, get_invitation_link(invite.invite_token), "user")
        logger.info("user invite created id=%s by=%s", invite.id, invited_by)
        return invite_to_dict(invite)

    def validate_invite_token(self, token: str) -> dict:
        """Return the pending invite for `token`, expiring it if it is overdue."""
        invite = self.invites.get_by_token(token)
        if not invite or invite.status != "pending":
            raise ValidationFailed("Invalid or expired invitation", code="invalid_invite")
        if models.utcnow() > models.as_utc(invite.expires_at):
            invite.status = "expired"
            self.invites.save(invite)
            raise ValidationFailed("Invitation has expired", code="invite_expired")
        return invite_to_dict(invite)

    def accept_invite(self, token: str, user_id: str) -> dict:
        invite = self.invites.get_by_token(token)
        if not invite:
            raise NotFoundError("Invitation not found")
        invite.status = "accepted"
        invite.user_id = user_id
        return invite_to_dict(self.invites.save(invite))

    def get_all_invites(self) -> List[dict]:
        return [invite_to_dict(i) for i in self.invites.list()]

    def get_accepted_invites(self) -> List[dict]:
        return [invite_to_dict(i) for i in self.invites.list(models.UserInvite.status == "accepted")]

    def promote_user_to_admin(self, invite_id: str, admin_level: str = "standard") -> dict:
        invite = self.invites.get(invite_id)
        if not invite or invite.status != "accepted":
            raise ValidationFailed("Invalid or unaccepted invite")
        if not invite.user_id:
            raise ValidationFailed("User ID not found in the invitation")
        account = self.accounts.get(invite.user_id)
        if not account:
            raise NotFoundError("User ID not found in the invitation")
        admin = self.admins.create(models.Admin(
            id=account.id,
            email=account.email,
            name=invite.name or account.name,
            admin_level=admin_level,
        ))
        account.account_type = "admin"
        self.accounts.save(account)
        try:
            self.invites.delete(invite)
        except Exception:
            # promotion already happened; a stale invite row is harmless
            logger.exception("failed to delete invite %s after promotion", invite_id)
            self.session.rollback()
        logger.info("account %s promoted to %s admin", account.id, admin_level)
        return {"id": admin.id, "email": admin.email, "name": admin.name, "admin_level": admin.admin_level}

    def delete_invite(self, invite_id: str) -> None:
        self.invites.delete(self._get(invite_id))

    def resend_invitation(self, invite_id: str) -> dict:
        invite = self._get(invite_id)
        invite.invite_token = uuid.uuid4().hex
        invite.expires_at = self._expiry()
        invite.status = "pending"
        invite = self.invites.save(invite)
        mailer.send_invitation(invite.email, get_invitation_link(invite.invite_token), "user")
        return invite_to_dict(invite)
