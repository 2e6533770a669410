"""In-app notifications and newsletter campaigns.

Notifications are addressed to the id a user is known by: the startup or
investor profile id for founders and investors, the admin id (equal to
the account id) for admins. `recipient_id` resolves it for an account.

Campaigns are drafted by admins and fanned out into `newsletter`
notifications when sent.
"""

import logging
from typing import Dict, List, Optional

from sqlmodel import Session

from .. import models, repositories
from ..errors import NotFoundError, ValidationFailed
from ..utils import json_fields

logger = logging.getLogger("venturehub.notifications")

NOTIFICATION_TYPES = (
    "newsletter",
    "admin_action",
    "connection_request",
    "message",
    "profile_update",
    "match_suggestion",
    "investment_interest",
    "meeting_request",
    "system_update",
    "reminder",
    "other",
)
PRIORITIES = ("low", "normal", "high", "urgent")
RECIPIENT_TYPES = ("all", "investors", "startups", "specific")
CAMPAIGN_STATUSES = ("draft", "scheduled", "sending", "sent", "cancelled")


def recipient_id(account: models.Account) -> str:
    return account.profile_id or account.id


def notification_to_dict(n: models.Notification) -> dict:
    return {
        "id": n.id,
        "user_id": n.user_id,
        "type": n.type,
        "title": n.title,
        "content": n.content,
        "metadata": json_fields.load_dict(n.metadata_json),
        "priority": n.priority,
        "newsletter_id": n.newsletter_id,
        "recipient_type": n.recipient_type,
        "action_url": n.action_url,
        "action_label": n.action_label,
        "scheduled_for": n.scheduled_for,
        "is_read": n.is_read,
        "read_at": n.read_at,
        "is_archived": n.is_archived,
        "created_at": n.created_at,
        "updated_at": n.updated_at,
    }


def campaign_to_dict(c: models.NewsletterCampaign) -> dict:
    return {
        "id": c.id,
        "title": c.title,
        "subject": c.subject,
        "content": c.content,
        "recipient_type": c.recipient_type,
        "specific_recipients": json_fields.load_list(c.specific_recipients),
        "scheduled_for": c.scheduled_for,
        "metadata": json_fields.load_dict(c.metadata_json),
        "status": c.status,
        "created_by": c.created_by,
        "sent_at": c.sent_at,
        "total_recipients": c.total_recipients,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
    }


class NotificationService:
    """Create, list and update notifications; manage campaigns."""

    def __init__(self, session: Session):
        self.session = session
        self.notifications = repositories.NotificationRepository(session)
        self.campaigns = repositories.CampaignRepository(session)
        self.startups = repositories.StartupRepository(session)
        self.investors = repositories.InvestorRepository(session)

    def _build(self, user_id: str, data: Dict) -> models.Notification:
        ntype = data.get("type") or "other"
        priority = data.get("priority") or "normal"
        if ntype not in NOTIFICATION_TYPES:
            raise ValidationFailed(f"Unknown notification type: {ntype}")
        if priority not in PRIORITIES:
            raise ValidationFailed(f"Unknown priority: {priority}")
        if not data.get("title") or not data.get("content"):
            raise ValidationFailed("title and content are required")
        return models.Notification(
            user_id=user_id,
            type=ntype,
            title=data["title"],
            content=data["content"],
            metadata_json=json_fields.dump_dict(data.get("metadata")),
            priority=priority,
            newsletter_id=data.get("newsletter_id"),
            recipient_type=data.get("recipient_type"),
            action_url=data.get("action_url"),
            action_label=data.get("action_label"),
            scheduled_for=data.get("scheduled_for"),
        )

    def create_notification(self, data: Dict) -> dict:
        if not data.get("user_id"):
            raise ValidationFailed("user_id is required")
        n = self.notifications.create(self._build(data["user_id"], data))
        return notification_to_dict(n)

    def send_bulk_notifications(self, user_ids: List[str], data: Dict) -> int:
        """Insert one notification per distinct user id; returns the count."""
        seen = []
        for uid in user_ids:
            if uid and uid not in seen:
                seen.append(uid)
        if not seen:
            return 0
        return self.notifications.create_many([self._build(uid, data) for uid in seen])

    def get_user_notifications(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
        unread_only: bool = False,
        type: Optional[str] = None,
    ) -> List[dict]:
        conditions = [
            models.Notification.user_id == user_id,
            models.Notification.is_archived == False,  # noqa: E712
        ]
        if unread_only:
            conditions.append(models.Notification.is_read == False)  # noqa: E712
        if type:
            conditions.append(models.Notification.type == type)
        rows = self.notifications.list(*conditions, limit=limit, offset=offset)
        return [notification_to_dict(n) for n in rows]

    def _owned(self, user_id: str, notification_id: str) -> models.Notification:
        n = self.notifications.get(notification_id)
        if not n or n.user_id != user_id:
            raise NotFoundError("Notification not found")
        return n

    def mark_as_read(self, user_id: str, notification_id: str) -> dict:
        n = self._owned(user_id, notification_id)
        if not n.is_read:
            self.notifications.mark_read([n])
        return notification_to_dict(n)

    def mark_multiple_as_read(self, user_id: str, ids: List[str]) -> int:
        if not ids:
            return 0
        return self.notifications.mark_read(self.notifications.unread_for_user(user_id, ids))

    def mark_all_as_read(self, user_id: str) -> int:
        return self.notifications.mark_read(self.notifications.unread_for_user(user_id))

    def archive_notification(self, user_id: str, notification_id: str) -> dict:
        n = self._owned(user_id, notification_id)
        n.is_archived = True
        return notification_to_dict(self.notifications.save(n))

    def get_unread_count(self, user_id: str) -> int:
        return self.notifications.count(
            models.Notification.user_id == user_id,
            models.Notification.is_read == False,  # noqa: E712
            models.Notification.is_archived == False,  # noqa: E712
        )

    # -- helpers used by other services ---------------------------------

    def send_admin_action_notification(self, user_id: str, action: str, details: str) -> dict:
        return self.create_notification({
            "user_id": user_id,
            "type": "admin_action",
            "title": f"Account Update: {action}",
            "content": details,
            "priority": "high",
            "metadata": {"action": action, "timestamp": models.utcnow().isoformat()},
        })

    def send_connection_request_notification(self, recipient: str, requester_name: str, requester_type: str) -> dict:
        return self.create_notification({
            "user_id": recipient,
            "type": "connection_request",
            "title": "New Connection Request",
            "content": f"{requester_name} wants to connect with you.",
            "priority": "normal",
            "action_url": "/connections",
            "action_label": "View Request",
            "metadata": {"requester_type": requester_type, "requester_name": requester_name},
        })

    def admin_ids(self) -> List[str]:
        return [a.id for a in repositories.AdminRepository(self.session).list()]

    # -- campaigns ----------------------------------------------------------

    def create_campaign(self, data: Dict, created_by: str) -> dict:
        recipient_type = data.get("recipient_type") or "all"
        if recipient_type not in RECIPIENT_TYPES:
            raise ValidationFailed(f"Unknown recipient type: {recipient_type}")
        c = self.campaigns.create(models.NewsletterCampaign(
            title=data["title"],
            subject=data["subject"],
            content=data["content"],
            recipient_type=recipient_type,
            specific_recipients=json_fields.dump_list(data.get("specific_recipients")),
            scheduled_for=data.get("scheduled_for"),
            metadata_json=json_fields.dump_dict(data.get("metadata")),
            status="draft",
            created_by=created_by,
        ))
        logger.info("campaign created id=%s by=%s", c.id, created_by)
        return campaign_to_dict(c)

    def get_campaigns(self, limit: int = 50, offset: int = 0, status: Optional[str] = None) -> List[dict]:
        conditions = []
        if status:
            conditions.append(models.NewsletterCampaign.status == status)
        return [campaign_to_dict(c) for c in self.campaigns.list(*conditions, limit=limit, offset=offset)]

    def _campaign(self, campaign_id: str) -> models.NewsletterCampaign:
        c = self.campaigns.get(campaign_id)
        if not c:
            raise NotFoundError("Campaign not found")
        return c

    def get_campaign(self, campaign_id: str) -> dict:
        return campaign_to_dict(self._campaign(campaign_id))

    def update_campaign(self, campaign_id: str, data: Dict) -> dict:
        c = self._campaign(campaign_id)
        for key, value in data.items():
            if value is None:
                continue
            if key == "specific_recipients":
                c.specific_recipients = json_fields.dump_list(value)
            elif key == "metadata":
                c.metadata_json = json_fields.dump_dict(value)
            elif key in ("title", "subject", "content", "recipient_type", "scheduled_for", "status"):
                setattr(c, key, value)
        return campaign_to_dict(self.campaigns.save(c))

    def _recipients(self, recipient_type: str, specific: List[str]) -> List[str]:
        if recipient_type == "specific":
            return list(specific)
        ids = []
        if recipient_type in ("all", "investors"):
            ids.extend(i.id for i in self.investors.list())
        if recipient_type in ("all", "startups"):
            ids.extend(s.id for s in self.startups.list())
        return ids

    def get_recipient_count(self, recipient_type: str) -> int:
        count = 0
        if recipient_type in ("all", "investors"):
            count += self.investors.count()
        if recipient_type in ("all", "startups"):
            count += self.startups.count()
        return count

    def send_campaign(self, campaign_id: str) -> dict:
        """Notify every recipient of the campaign and mark it sent."""
        c = self._campaign(campaign_id)
        if c.status in ("sent", "cancelled"):
            raise ValidationFailed(f"Campaign is already {c.status}")
        user_ids = self._recipients(c.recipient_type, json_fields.load_list(c.specific_recipients))
        sent = self.send_bulk_notifications(user_ids, {
            "type": "newsletter",
            "title": c.subject,
            "content": c.content,
            "newsletter_id": c.id,
            "recipient_type": c.recipient_type,
            "priority": "normal",
        })
        c.status = "sent"
        c.sent_at = models.utcnow()
        c.total_recipients = len(user_ids)
        self.campaigns.save(c)
        logger.info("campaign sent id=%s recipients=%s", c.id, sent)
        return {"success": True, "sent_count": sent, "campaign": campaign_to_dict(c)}
