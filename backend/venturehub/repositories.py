"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table. Repositories
return SQLModel objects, perform commits/refreshes where appropriate and
stamp `updated_at` on every save. Services compose filter conditions and
hand them to `list`/`count`.
"""

from typing import List, Optional, Sequence
from sqlmodel import Session, select, col
from sqlalchemy import func, or_
from . import models


def contains(column, term: str):
    """Case-insensitive substring match."""
    return col(column).ilike(f"%{term}%")


def any_contains(columns: Sequence, term: str):
    return or_(*[contains(c, term) for c in columns])


class _Repository:
    model = None

    def __init__(self, session: Session):
        self.session = session

    def get(self, obj_id: str):
        """Get a row by primary key or `None`."""
        if not obj_id:
            return None
        return self.session.get(self.model, obj_id)

    def create(self, obj):
        """Persist a new row and return the managed instance."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def create_many(self, objs: list) -> int:
        for obj in objs:
            self.session.add(obj)
        self.session.commit()
        return len(objs)

    def save(self, obj):
        obj.updated_at = models.utcnow()
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, obj) -> None:
        self.session.delete(obj)
        self.session.commit()

    def list(self, *conditions, order_by=None, limit: Optional[int] = None, offset: Optional[int] = None) -> List:
        """Rows matching all `conditions`, newest first unless told otherwise."""
        stmt = select(self.model)
        for c in conditions:
            stmt = stmt.where(c)
        if order_by is None:
            order_by = col(self.model.created_at).desc()
        stmt = stmt.order_by(order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.exec(stmt).all())

    def count(self, *conditions) -> int:
        stmt = select(func.count()).select_from(self.model)
        for c in conditions:
            stmt = stmt.where(c)
        return int(self.session.exec(stmt).one())


class AccountRepository(_Repository):
    """CRUD operations for `Account` objects."""
    model = models.Account

    def get_by_email(self, email: str) -> Optional[models.Account]:
        stmt = select(models.Account).where(func.lower(models.Account.email) == (email or "").strip().lower())
        return self.session.exec(stmt).first()

    def list_by_type(self, *account_types: str) -> List[models.Account]:
        return self.list(col(models.Account.account_type).in_(account_types))


class VerificationCodeRepository(_Repository):
    model = models.VerificationCode

    def latest_active(self, email: str, purpose: str) -> Optional[models.VerificationCode]:
        """Most recent unconsumed code for an email and purpose."""
        stmt = (
            select(models.VerificationCode)
            .where(
                models.VerificationCode.email == email,
                models.VerificationCode.purpose == purpose,
                col(models.VerificationCode.consumed_at).is_(None),
            )
            .order_by(col(models.VerificationCode.created_at).desc())
        )
        return self.session.exec(stmt).first()

    def consume_all(self, email: str, purpose: str) -> None:
        stmt = select(models.VerificationCode).where(
            models.VerificationCode.email == email,
            models.VerificationCode.purpose == purpose,
            col(models.VerificationCode.consumed_at).is_(None),
        )
        now = models.utcnow()
        for row in self.session.exec(stmt).all():
            row.consumed_at = now
            self.session.add(row)
        self.session.commit()


class StartupRepository(_Repository):
    """Queries over the `startups` table."""
    model = models.Startup

    def get_by_account(self, account_id: str) -> Optional[models.Startup]:
        stmt = select(models.Startup).where(models.Startup.account_id == account_id)
        return self.session.exec(stmt).first()

    def get_many(self, ids: Sequence[str], *conditions) -> List[models.Startup]:
        if not ids:
            return []
        return self.list(col(models.Startup.id).in_(list(ids)), *conditions)

    def distinct_values(self, column, *conditions) -> List[str]:
        stmt = select(column).distinct()
        for c in conditions:
            stmt = stmt.where(c)
        return [v for v in self.session.exec(stmt).all() if v]


class InvestorRepository(_Repository):
    """Queries over the `investors` table."""
    model = models.Investor

    def get_by_account(self, account_id: str) -> Optional[models.Investor]:
        stmt = select(models.Investor).where(models.Investor.account_id == account_id)
        return self.session.exec(stmt).first()

    def distinct_values(self, column, *conditions) -> List[str]:
        stmt = select(column).distinct()
        for c in conditions:
            stmt = stmt.where(c)
        return [v for v in self.session.exec(stmt).all() if v]


class AdminRepository(_Repository):
    model = models.Admin

    def get_by_email(self, email: str) -> Optional[models.Admin]:
        stmt = select(models.Admin).where(func.lower(models.Admin.email) == (email or "").strip().lower())
        return self.session.exec(stmt).first()


class AdminInviteRepository(_Repository):
    model = models.AdminInvite

    def get_by_token(self, token: str) -> Optional[models.AdminInvite]:
        stmt = select(models.AdminInvite).where(models.AdminInvite.invite_token == token)
        return self.session.exec(stmt).first()

    def pending_for_email(self, email: str) -> Optional[models.AdminInvite]:
        stmt = select(models.AdminInvite).where(
            func.lower(models.AdminInvite.email) == email.lower(),
            models.AdminInvite.status == "pending",
        )
        return self.session.exec(stmt).first()


class UserInviteRepository(_Repository):
    model = models.UserInvite

    def get_by_token(self, token: str) -> Optional[models.UserInvite]:
        stmt = select(models.UserInvite).where(models.UserInvite.invite_token == token)
        return self.session.exec(stmt).first()

    def pending_for_email(self, email: str) -> Optional[models.UserInvite]:
        stmt = select(models.UserInvite).where(
            func.lower(models.UserInvite.email) == email.lower(),
            models.UserInvite.status == "pending",
        )
        return self.session.exec(stmt).first()


class NotificationRepository(_Repository):
    """Per-user notification queries."""
    model = models.Notification

    def unread_for_user(self, user_id: str, ids: Optional[Sequence[str]] = None) -> List[models.Notification]:
        conditions = [
            models.Notification.user_id == user_id,
            models.Notification.is_read == False,  # noqa: E712
        ]
        if ids is not None:
            conditions.append(col(models.Notification.id).in_(list(ids)))
        return self.list(*conditions)

    def mark_read(self, rows: List[models.Notification]) -> int:
        now = models.utcnow()
        for n in rows:
            n.is_read = True
            n.read_at = now
            n.updated_at = now
            self.session.add(n)
        self.session.commit()
        return len(rows)


class CampaignRepository(_Repository):
    model = models.NewsletterCampaign


class ArticleRepository(_Repository):
    model = models.Article

    def get_by_slug(self, slug: str, *conditions) -> Optional[models.Article]:
        stmt = select(models.Article).where(models.Article.slug == slug)
        for c in conditions:
            stmt = stmt.where(c)
        return self.session.exec(stmt).first()


class ConnectionRepository(_Repository):
    model = models.InvestorStartupConnection

    def find(self, investor_id: str, startup_id: str, connection_type: Optional[str] = None, status: Optional[str] = "active"):
        stmt = select(models.InvestorStartupConnection).where(
            models.InvestorStartupConnection.investor_id == investor_id,
            models.InvestorStartupConnection.startup_id == startup_id,
        )
        if connection_type:
            stmt = stmt.where(models.InvestorStartupConnection.connection_type == connection_type)
        if status:
            stmt = stmt.where(models.InvestorStartupConnection.status == status)
        return self.session.exec(stmt).first()


class MatchmakingRepository(_Repository):
    model = models.Matchmaking
