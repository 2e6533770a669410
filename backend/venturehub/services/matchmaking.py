"""Admin-curated investor/startup match suggestions."""

import logging
from datetime import timedelta
from typing import List, Optional

from sqlmodel import Session

from .. import models, repositories
from ..config import settings
from ..errors import NotFoundError, ValidationFailed
from .notifications import NotificationService

logger = logging.getLogger("venturehub.matchmaking")

MAX_STARTUPS_PER_MATCH = 3


def matchmaking_to_dict(m: models.Matchmaking) -> dict:
    return {
        "id": m.id,
        "investor_id": m.investor_id,
        "investor_name": m.investor_name,
        "investor_email": m.investor_email,
        "startup_id": m.startup_id,
        "startup_name": m.startup_name,
        "startup_email": m.startup_email,
        "expiry_date": m.expiry_date,
        "is_expired": models.utcnow() > models.as_utc(m.expiry_date),
        "is_interested": m.is_interested,
        "is_archived": m.is_archived,
        "matched_by": m.matched_by,
        "comment": m.comment,
        "created_at": m.created_at,
        "updated_at": m.updated_at,
    }


class MatchmakingService:
    def __init__(self, session: Session):
        self.session = session
        self.matchmakings = repositories.MatchmakingRepository(session)
        self.investors = repositories.InvestorRepository(session)
        self.startups = repositories.StartupRepository(session)
        self.notifications = NotificationService(session)

    def create_matchmakings(
        self,
        investor_id: str,
        startup_ids: List[str],
        matched_by: str,
        comment: Optional[str] = None,
        expiry_days: Optional[int] = None,
    ) -> List[dict]:
        """Create one matchmaking row per startup for a single investor."""
        if not startup_ids:
            raise ValidationFailed("At least one startup must be selected")
        if len(startup_ids) > MAX_STARTUPS_PER_MATCH:
            raise ValidationFailed("Maximum 3 startups can be selected")
        investor = self.investors.get(investor_id)
        if not investor:
            raise NotFoundError("Investor not found")
        startups = []
        for startup_id in startup_ids:
            startup = self.startups.get(startup_id)
            if not startup:
                raise NotFoundError(f"Startup not found: {startup_id}")
            startups.append(startup)

        expiry = models.utcnow() + timedelta(days=expiry_days or settings.MATCHMAKING_EXPIRY_DAYS)
        rows = [
            models.Matchmaking(
                investor_id=investor.id,
                investor_name=investor.name,
                investor_email=investor.email,
                startup_id=s.id,
                startup_name=s.startup_name or s.name,
                startup_email=s.email,
                expiry_date=expiry,
                is_interested=False,
                is_archived=False,
                matched_by=matched_by,
                comment=comment or None,
            )
            for s in startups
        ]
        self.matchmakings.create_many(rows)
        logger.info("matched investor %s with %d startups by=%s", investor.id, len(rows), matched_by)

        names = ", ".join(r.startup_name for r in rows)
        try:
            self.notifications.create_notification({
                "user_id": investor.id,
                "type": "match_suggestion",
                "title": "New Startup Matches",
                "content": f"We think you'd be interested in: {names}.",
                "priority": "normal",
                "action_url": "/investor-dashboard",
                "action_label": "View Matches",
                "metadata": {"matchmaking_ids": [r.id for r in rows], "expiry_date": expiry.isoformat()},
            })
        except Exception:
            logger.exception("failed to notify investor %s of matches", investor.id)
            self.session.rollback()
        return [matchmaking_to_dict(r) for r in rows]

    def get_matchmakings_by_investor(self, investor_id: str) -> List[dict]:
        return [matchmaking_to_dict(m) for m in self.matchmakings.list(models.Matchmaking.investor_id == investor_id)]

    def get_matchmakings_by_startup(self, startup_id: str) -> List[dict]:
        return [matchmaking_to_dict(m) for m in self.matchmakings.list(models.Matchmaking.startup_id == startup_id)]

    def get_all_matchmakings(self) -> List[dict]:
        return [matchmaking_to_dict(m) for m in self.matchmakings.list()]

    def get_matchmaking_row(self, matchmaking_id: str) -> models.Matchmaking:
        m = self.matchmakings.get(matchmaking_id)
        if not m:
            raise NotFoundError("Matchmaking not found")
        return m

    def update_matchmaking_status(self, matchmaking_id: str, is_interested: bool) -> dict:
        m = self.get_matchmaking_row(matchmaking_id)
        was_interested = m.is_interested
        m.is_interested = is_interested
        m = self.matchmakings.save(m)
        if is_interested and not was_interested:
            try:
                self.notifications.create_notification({
                    "user_id": m.startup_id,
                    "type": "investment_interest",
                    "title": "New Investor Interest!",
                    "content": f'{m.investor_name} is interested in "{m.startup_name}".',
                    "priority": "high",
                    "metadata": {"matchmaking_id": m.id, "investor_id": m.investor_id},
                })
            except Exception:
                logger.exception("failed to notify startup %s of match interest", m.startup_id)
                self.session.rollback()
        return matchmaking_to_dict(m)

    def archive_matchmaking(self, matchmaking_id: str) -> dict:
        m = self.get_matchmaking_row(matchmaking_id)
        m.is_archived = True
        return matchmaking_to_dict(self.matchmakings.save(m))

    def delete_matchmaking(self, matchmaking_id: str) -> None:
        self.matchmakings.delete(self.get_matchmaking_row(matchmaking_id))
