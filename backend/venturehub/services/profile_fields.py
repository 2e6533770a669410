"""Column whitelists and value coercion for startup/investor profile rows.

Signup, self-service edits and admin edits all funnel through
`apply_profile_fields` so only known columns are written and list-valued
fields are JSON-stringified on the way in.
"""

import logging
from typing import Dict, Iterable

from ..utils import json_fields

logger = logging.getLogger("venturehub.profiles")

STARTUP_FIELDS = (
    "name",
    "phone",
    "founder_info",
    "startup_name",
    "website",
    "industry",
    "stage",
    "logo",
    "social_media_accounts",
    "problem_solving",
    "solution",
    "uniqueness",
    "previous_financial_year_revenue",
    "has_received_funding",
    "monthly_burn_rate",
    "investment_instrument",
    "capital_seeking",
    "pre_money_valuation",
    "funding_already_raised",
    "pitch_deck",
    "co_founders",
    "calendly_link",
    "video_link",
    "team_size",
    "achievements",
    "risks",
    "risk_mitigation",
    "exit_strategy",
    "participated_in_accelerator",
    "accelerator_details",
    "additional_files",
)

# set only by the storage upload endpoints (or an admin)
UPLOAD_FIELDS = ("pitch_deck", "logo")
SIGNUP_STARTUP_FIELDS = tuple(f for f in STARTUP_FIELDS if f not in UPLOAD_FIELDS)

INVESTOR_FIELDS = (
    "name",
    "phone",
    "birthday",
    "company",
    "role",
    "country",
    "city",
    "preferred_industries",
    "preferred_company_stage",
    "linkedin_profile",
    "other_social_media_profile",
    "heard_about_us",
    "number_of_investments",
    "average_ticket_size",
    "secured_lead_investor",
    "participated_as_advisor",
    "strong_candidate_reason",
    "calendly_link",
)

# moderation columns admins may also edit directly
ADMIN_EXTRA_FIELDS = ("email", "verified", "status", "visibility_status", "admin_notes")

JSON_LIST_FIELDS = {"social_media_accounts", "co_founders", "additional_files", "other_social_media_profile"}
FLOAT_FIELDS = {
    "previous_financial_year_revenue",
    "monthly_burn_rate",
    "capital_seeking",
    "pre_money_valuation",
    "funding_already_raised",
}
INT_FIELDS = {"team_size", "number_of_investments"}
BOOL_FIELDS = {
    "has_received_funding",
    "participated_in_accelerator",
    "secured_lead_investor",
    "participated_as_advisor",
    "verified",
}


def _to_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return bool(value)


def coerce(field: str, value):
    """Convert an incoming form value to the column's storage type."""
    if value is None:
        return None
    if field in JSON_LIST_FIELDS:
        return json_fields.dump_list(value)
    if field == "preferred_industries" and isinstance(value, (list, tuple)):
        return ",".join(str(v).strip() for v in value if str(v).strip())
    if field in FLOAT_FIELDS or field in INT_FIELDS:
        if value == "":
            return None
        try:
            return int(float(value)) if field in INT_FIELDS else float(value)
        except (TypeError, ValueError):
            logger.warning("dropping non-numeric %s=%r", field, value)
            return None
    if field in BOOL_FIELDS:
        return _to_bool(value)
    return value


def apply_profile_fields(row, data: Dict, allowed: Iterable[str]) -> list:
    """Copy whitelisted keys from `data` onto `row`; return the names written."""
    allowed = set(allowed)
    written = []
    for key, value in data.items():
        if key not in allowed:
            continue
        setattr(row, key, coerce(key, value))
        written.append(key)
    return written


def registration_to_startup(data: Dict) -> Dict:
    """Signup payload keys mapped onto `startups` columns."""
    out = dict(data)
    out.setdefault("founder_info", data.get("name"))
    combined = data.get("risks_and_mitigation")
    if combined:
        out.setdefault("risks", combined)
        out.setdefault("risk_mitigation", combined)
    if out.get("industry") is None:
        out["industry"] = ""
    return out


def registration_to_investor(data: Dict) -> Dict:
    """Signup payload keys mapped onto `investors` columns."""
    out = dict(data)
    if "preferred_stage" in data and "preferred_company_stage" not in data:
        out["preferred_company_stage"] = data["preferred_stage"]
    if out.get("average_ticket_size") is None:
        out["average_ticket_size"] = ""
    return out
