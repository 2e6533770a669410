"""Investor listings and profile maintenance."""

import logging
from typing import Dict, List, Optional

from sqlmodel import Session, col

from .. import models, repositories
from ..errors import NotFoundError, ValidationFailed
from ..repositories import any_contains, contains
from ..utils import json_fields, pagination
from . import profile_fields

logger = logging.getLogger("venturehub.investors")

SEARCH_COLUMNS = (models.Investor.name, models.Investor.company, models.Investor.preferred_industries)


def investor_basic(i: models.Investor) -> dict:
    return {
        "id": i.id,
        "name": i.name,
        "investor_type": i.investor_type,
        "preferred_industries": i.preferred_industries or "",
        "preferred_company_stage": i.preferred_company_stage or "",
        "average_ticket_size": i.average_ticket_size or "",
        "company": i.company,
        "role": i.role,
        "city": i.city,
        "country": i.country,
        "number_of_investments": i.number_of_investments,
        "verified": i.verified,
    }


def investor_admin(i: models.Investor) -> dict:
    out = investor_basic(i)
    out.update({
        "account_id": i.account_id,
        "email": i.email,
        "phone": i.phone,
        "birthday": i.birthday,
        "linkedin_profile": i.linkedin_profile,
        "other_social_media_profile": json_fields.load_list(i.other_social_media_profile),
        "heard_about_us": i.heard_about_us,
        "secured_lead_investor": i.secured_lead_investor,
        "participated_as_advisor": i.participated_as_advisor,
        "strong_candidate_reason": i.strong_candidate_reason,
        "calendly_link": i.calendly_link,
        "status": i.status,
        "visibility_status": i.visibility_status,
        "admin_notes": i.admin_notes,
        "verified_at": i.verified_at,
        "verified_by": i.verified_by,
        "created_at": i.created_at,
        "updated_at": i.updated_at,
    })
    return out


def split_industries(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


class InvestorService:
    """Read and update investor profiles."""

    def __init__(self, session: Session):
        self.session = session
        self.investors = repositories.InvestorRepository(session)

    def _filter_conditions(self, filters: Dict) -> list:
        conditions = []
        if filters.get("industry"):
            conditions.append(contains(models.Investor.preferred_industries, filters["industry"]))
        if filters.get("stage"):
            conditions.append(models.Investor.preferred_company_stage == filters["stage"])
        if filters.get("search_term"):
            conditions.append(any_contains(SEARCH_COLUMNS, filters["search_term"]))
        if filters.get("country"):
            conditions.append(contains(models.Investor.country, filters["country"]))
        return conditions

    def _listing(self, conditions: list, filters: Dict, project):
        limit, offset = filters.get("limit"), filters.get("offset")
        if not pagination.is_paginated(limit, offset):
            return [project(i) for i in self.investors.list(*conditions)]
        page, limit, offset = pagination.resolve_page(limit, offset)
        rows = self.investors.list(*conditions, limit=limit, offset=offset)
        total = self.investors.count(*conditions)
        return pagination.envelope("investors", [project(i) for i in rows], total, page, limit)

    def get_verified_investors(self, filters: Optional[Dict] = None):
        """Approved and verified investors, newest first (list or paginated envelope)."""
        filters = filters or {}
        conditions = [
            models.Investor.status == "approved",
            models.Investor.verified == True,  # noqa: E712
        ] + self._filter_conditions(filters)
        return self._listing(conditions, filters, investor_basic)

    def get_all_investors(self, filters: Optional[Dict] = None):
        filters = filters or {}
        conditions = self._filter_conditions(filters)
        if filters.get("status"):
            conditions.append(models.Investor.status == filters["status"])
        return self._listing(conditions, filters, investor_admin)

    def get_industries(self) -> List[str]:
        values = self.investors.distinct_values(
            models.Investor.preferred_industries, col(models.Investor.preferred_industries).is_not(None)
        )
        found = set()
        for value in values:
            found.update(split_industries(value))
        return sorted(found)

    def get_stages(self) -> List[str]:
        return sorted(set(self.investors.distinct_values(
            models.Investor.preferred_company_stage, col(models.Investor.preferred_company_stage).is_not(None)
        )))

    def get_investor_row(self, investor_id: str) -> models.Investor:
        i = self.investors.get(investor_id)
        if not i:
            raise NotFoundError("Investor not found")
        return i

    def get_investor_by_id(self, investor_id: str, admin: bool = False) -> dict:
        i = self.get_investor_row(investor_id)
        return investor_admin(i) if admin else investor_basic(i)

    def get_own_profile(self, account: models.Account) -> dict:
        return investor_admin(self.get_investor_row(account.profile_id))

    def update_own_profile(self, investor_id: str, data: Dict) -> dict:
        i = self.get_investor_row(investor_id)
        data = dict(data)
        if "preferred_stage" in data:
            data.setdefault("preferred_company_stage", data.pop("preferred_stage"))
        written = profile_fields.apply_profile_fields(i, data, profile_fields.INVESTOR_FIELDS)
        if not written:
            raise ValidationFailed("No editable fields supplied")
        i = self.investors.save(i)
        logger.info("investor %s updated fields=%s", i.id, ",".join(written))
        return investor_admin(i)
