"""Investor browsing for startups and self-service for investors."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlmodel import Session

from .. import models
from ..account_types import role_for
from ..auth import require_approved, require_roles
from ..database import get_session
from ..services.investors import InvestorService

router = APIRouter(prefix="/investors", tags=["investors"])

browse_guard = [Depends(require_roles("startup", "admin")), Depends(require_approved)]


@router.get("", dependencies=browse_guard)
def list_investors(
    industry: Optional[str] = None,
    stage: Optional[str] = None,
    search_term: Optional[str] = None,
    country: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_session),
):
    filters = {
        "industry": industry,
        "stage": stage,
        "search_term": search_term,
        "country": country,
        "limit": limit,
        "offset": offset,
    }
    return InvestorService(db).get_verified_investors(filters)


@router.get("/industries")
def industries(db: Session = Depends(get_session)):
    return InvestorService(db).get_industries()


@router.get("/stages")
def stages(db: Session = Depends(get_session)):
    return InvestorService(db).get_stages()


@router.get("/me")
def own_profile(account: models.Account = Depends(require_roles("investor")), db: Session = Depends(get_session)):
    return InvestorService(db).get_own_profile(account)


@router.patch("/me")
def update_own_profile(
    data: Dict[str, Any] = Body(...),
    account: models.Account = Depends(require_roles("investor")),
    db: Session = Depends(get_session),
):
    return InvestorService(db).update_own_profile(account.profile_id, data)


@router.get("/{investor_id}")
def get_investor(
    investor_id: str,
    account: models.Account = Depends(require_roles("startup", "admin")),
    profile: dict = Depends(require_approved),
    db: Session = Depends(get_session),
):
    return InvestorService(db).get_investor_by_id(investor_id, admin=role_for(account.account_type) == "admin")
