"""Startup browsing for investors and self-service for founders."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlmodel import Session

from .. import models
from ..account_types import role_for
from ..auth import require_approved, require_roles
from ..database import get_session
from ..services.startups import StartupService

router = APIRouter(prefix="/startups", tags=["startups"])

browse_guard = [Depends(require_roles("investor", "admin")), Depends(require_approved)]


@router.get("", dependencies=browse_guard)
def list_startups(
    industry: Optional[str] = None,
    stage: Optional[str] = None,
    search_term: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_session),
):
    """Vetted startups, newest first.

    Without `limit`/`offset` a plain list is returned; otherwise a
    `{startups, total, page, limit, total_pages}` envelope.
    """
    filters = {"industry": industry, "stage": stage, "search_term": search_term, "limit": limit, "offset": offset}
    return StartupService(db).get_vetted_startups(filters)


@router.get("/dashboard", dependencies=browse_guard)
def dashboard_startups(limit: int = 6, db: Session = Depends(get_session)):
    return StartupService(db).get_dashboard_startups(limit=limit)


@router.get("/industries")
def industries(db: Session = Depends(get_session)):
    return StartupService(db).get_industries()


@router.get("/stages")
def stages(db: Session = Depends(get_session)):
    return StartupService(db).get_stages()


@router.get("/batch", dependencies=browse_guard)
def startups_by_ids(ids: str, db: Session = Depends(get_session)):
    """Vetted startups for a comma-separated list of ids."""
    return StartupService(db).get_startups_by_ids([i for i in ids.split(",") if i.strip()])


@router.get("/me")
def own_profile(account: models.Account = Depends(require_roles("startup")), db: Session = Depends(get_session)):
    return StartupService(db).get_own_profile(account)


@router.patch("/me")
def update_own_profile(
    data: Dict[str, Any] = Body(...),
    account: models.Account = Depends(require_roles("startup")),
    db: Session = Depends(get_session),
):
    return StartupService(db).update_own_profile(account.profile_id, data)


@router.get("/{startup_id}")
def get_startup(
    startup_id: str,
    account: models.Account = Depends(require_roles("investor", "admin")),
    profile: dict = Depends(require_approved),
    db: Session = Depends(get_session),
):
    return StartupService(db).get_startup_by_id(startup_id, admin=role_for(account.account_type) == "admin")
