"""Startup listings and profile maintenance.

Two projections of a startup row exist: the basic one shown to investors
and visitors, and the admin one that adds contact, financial and
moderation fields. Public listings only include startups that are both
approved and verified.
"""

import logging
from typing import Dict, List, Optional

from sqlmodel import Session

from .. import models, repositories
from ..errors import NotFoundError, ValidationFailed
from ..repositories import any_contains, contains
from ..utils import json_fields, pagination
from ..validation import validate_startup_choices
from . import profile_fields

logger = logging.getLogger("venturehub.startups")

SEARCH_COLUMNS = (
    models.Startup.startup_name,
    models.Startup.name,
    models.Startup.industry,
    models.Startup.problem_solving,
)

# columns a founder may change on their own profile
SELF_EDITABLE = profile_fields.SIGNUP_STARTUP_FIELDS


def _str_or_none(value) -> Optional[str]:
    return None if value is None else str(value)


def startup_basic(s: models.Startup) -> dict:
    return {
        "id": s.id,
        "email": s.email,
        "name": s.name,
        "startup_name": s.startup_name or s.name,
        "industry": s.industry,
        "stage": s.stage or "Unknown",
        "description": s.problem_solving,
        "website": s.website,
        "founders": s.founder_info,
        "team_size": s.team_size,
        "founded_date": s.created_at,
        "problem_solved": s.problem_solving,
        "usp": s.uniqueness,
        "traction": s.achievements,
        "funding_required": _str_or_none(s.capital_seeking),
        "valuation": _str_or_none(s.pre_money_valuation),
        "verified": s.verified,
        "logo": s.logo,
        "calendly_link": s.calendly_link,
        "social_media_accounts": json_fields.load_list(s.social_media_accounts),
    }


def startup_admin(s: models.Startup) -> dict:
    out = startup_basic(s)
    out.update({
        "account_id": s.account_id,
        "phone": s.phone,
        "founder_info": s.founder_info,
        "problem_solving": s.problem_solving,
        "solution": s.solution,
        "uniqueness": s.uniqueness,
        "previous_financial_year_revenue": s.previous_financial_year_revenue,
        "monthly_burn_rate": s.monthly_burn_rate,
        "capital_seeking": s.capital_seeking,
        "pre_money_valuation": s.pre_money_valuation,
        "funding_already_raised": s.funding_already_raised,
        "investment_instrument": s.investment_instrument,
        "has_received_funding": s.has_received_funding,
        "exit_strategy": s.exit_strategy,
        "achievements": s.achievements,
        "risks": s.risks,
        "risk_mitigation": s.risk_mitigation,
        "participated_in_accelerator": s.participated_in_accelerator,
        "accelerator_details": s.accelerator_details,
        "pitch_deck": s.pitch_deck,
        "video_link": s.video_link,
        "co_founders": json_fields.load_list(s.co_founders),
        "additional_files": json_fields.load_list(s.additional_files),
        "status": s.status,
        "visibility_status": s.visibility_status,
        "admin_notes": s.admin_notes,
        "verified_at": s.verified_at,
        "verified_by": s.verified_by,
        "created_at": s.created_at,
        "updated_at": s.updated_at,
    })
    return out


def _approved():
    return [models.Startup.status == "approved", models.Startup.verified == True]  # noqa: E712


class StartupService:
    """Read and update startup profiles."""

    def __init__(self, session: Session):
        self.session = session
        self.startups = repositories.StartupRepository(session)

    def _filter_conditions(self, filters: Dict) -> list:
        conditions = []
        if filters.get("industry"):
            conditions.append(contains(models.Startup.industry, filters["industry"]))
        if filters.get("stage"):
            conditions.append(models.Startup.stage == filters["stage"])
        if filters.get("search_term"):
            conditions.append(any_contains(SEARCH_COLUMNS, filters["search_term"]))
        return conditions

    def _listing(self, conditions: list, filters: Dict, project) -> object:
        limit, offset = filters.get("limit"), filters.get("offset")
        if not pagination.is_paginated(limit, offset):
            return [project(s) for s in self.startups.list(*conditions)]
        page, limit, offset = pagination.resolve_page(limit, offset)
        rows = self.startups.list(*conditions, limit=limit, offset=offset)
        total = self.startups.count(*conditions)
        return pagination.envelope("startups", [project(s) for s in rows], total, page, limit)

    def get_vetted_startups(self, filters: Optional[Dict] = None):
        """Approved and verified startups, newest first.

        Returns a plain list unless `limit` or `offset` is given, in which
        case a `{startups, total, page, limit, total_pages}` envelope is
        returned.
        """
        filters = filters or {}
        return self._listing(_approved() + self._filter_conditions(filters), filters, startup_basic)

    def get_all_startups(self, filters: Optional[Dict] = None):
        """Every startup regardless of status, admin projection."""
        filters = filters or {}
        conditions = self._filter_conditions(filters)
        if filters.get("status"):
            conditions.append(models.Startup.status == filters["status"])
        return self._listing(conditions, filters, startup_admin)

    def get_dashboard_startups(self, limit: int = 6) -> List[dict]:
        return [startup_basic(s) for s in self.startups.list(*_approved(), limit=limit)]

    def get_startup_row(self, startup_id: str) -> models.Startup:
        s = self.startups.get(startup_id)
        if not s:
            raise NotFoundError("Startup not found")
        return s

    def get_startup_by_id(self, startup_id: str, admin: bool = False) -> dict:
        s = self.get_startup_row(startup_id)
        return startup_admin(s) if admin else startup_basic(s)

    def get_startups_by_ids(self, ids: List[str]) -> List[dict]:
        return [startup_basic(s) for s in self.startups.get_many(ids, *_approved())]

    def get_industries(self) -> List[str]:
        return sorted(set(self.startups.distinct_values(models.Startup.industry, *_approved())))

    def get_stages(self) -> List[str]:
        return sorted(set(self.startups.distinct_values(models.Startup.stage, *_approved())))

    def get_own_profile(self, account: models.Account) -> dict:
        return startup_admin(self.get_startup_row(account.profile_id))

    def update_own_profile(self, startup_id: str, data: Dict) -> dict:
        """Apply whitelisted edits from the founder; moderation fields are ignored."""
        s = self.get_startup_row(startup_id)
        errors = validate_startup_choices(data)
        if errors:
            raise ValidationFailed(", ".join(errors))
        written = profile_fields.apply_profile_fields(s, data, SELF_EDITABLE)
        if not written:
            raise ValidationFailed("No editable fields supplied")
        s = self.startups.save(s)
        logger.info("startup %s updated fields=%s", s.id, ",".join(written))
        return startup_admin(s)

    def set_pitch_deck(self, startup_id: str, url: Optional[str]) -> dict:
        s = self.get_startup_row(startup_id)
        s.pitch_deck = url
        return startup_admin(self.startups.save(s))

    def set_logo(self, startup_id: str, url: Optional[str]) -> dict:
        s = self.get_startup_row(startup_id)
        s.logo = url
        return startup_admin(self.startups.save(s))

