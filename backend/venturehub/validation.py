"""Form validation helpers.

These are presence and format checks applied before anything is written:
e-mail shape, password strength, required signup fields and the small
enumerations used by startup forms.
"""

import re
from typing import Iterable, List, Mapping

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHARS_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

STARTUP_STAGES = ("Idea", "MVP", "Scaling")
INVESTMENT_INSTRUMENTS = (
    "Equity",
    "Convertible note",
    "SAFE",
    "Loan",
    "Other",
    "Undecided",
    "Not interested in funding",
)
EXIT_STRATEGIES = (
    "Competitor buyout",
    "Company buyout",
    "Shareholder/employee buyout",
    "IPO/RPO",
)

COMMON_SIGNUP_FIELDS = ("email", "password", "name")
STARTUP_SIGNUP_FIELDS = ("startup_name", "industry", "stage")
INVESTOR_SIGNUP_FIELDS = ("preferred_industries", "preferred_stage", "average_ticket_size")


def validate_email(email: str) -> bool:
    return bool(email) and EMAIL_RE.match(email) is not None


def validate_password(password: str) -> List[str]:
    """Return the list of unmet password rules (empty when valid)."""
    password = password or ""
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not SPECIAL_CHARS_RE.search(password):
        errors.append("Password must contain at least one special character")
    return errors


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def require_fields(payload: Mapping, fields: Iterable[str]) -> List[str]:
    """Return a `"<field> is required"` message per missing field."""
    return [f"{f} is required" for f in fields if _is_missing(payload.get(f))]


def signup_required_fields(main_account_type: str) -> tuple:
    if main_account_type == "startup":
        return COMMON_SIGNUP_FIELDS + STARTUP_SIGNUP_FIELDS
    return COMMON_SIGNUP_FIELDS + INVESTOR_SIGNUP_FIELDS


def validate_choice(value, allowed: Iterable[str], field: str) -> List[str]:
    """Optional enum check: empty values pass, anything else must be listed."""
    if _is_missing(value):
        return []
    allowed = tuple(allowed)
    if value not in allowed:
        return [f"{field} must be one of: {', '.join(allowed)}"]
    return []


def validate_startup_choices(payload: Mapping) -> List[str]:
    errors = validate_choice(payload.get("stage"), STARTUP_STAGES, "stage")
    errors += validate_choice(payload.get("investment_instrument"), INVESTMENT_INSTRUMENTS, "investment_instrument")
    errors += validate_choice(payload.get("exit_strategy"), EXIT_STRATEGIES, "exit_strategy")
    return errors
