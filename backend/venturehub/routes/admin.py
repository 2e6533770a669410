"""Admin console: moderation, admin team, invites, campaigns and scoring.

Every endpoint requires an admin; inviting and removing admins and
promoting invited users require a super admin.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from sqlmodel import Session

from .. import models
from ..auth import require_admin, require_permission, require_super_admin
from ..database import get_session
from ..schemas import (
    AdminInviteIn,
    CampaignIn,
    CampaignUpdateIn,
    PromoteIn,
    RecipientType,
    ScoreIn,
    Status,
    StatusUpdateIn,
    UserInviteIn,
    UserType,
)
from ..services import scoring
from ..services.admin import AdminService
from ..services.investors import InvestorService
from ..services.notifications import NotificationService
from ..services.startups import StartupService
from ..services.user_invites import UserInviteService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# -- moderation ---------------------------------------------------------------

@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_session)):
    return AdminService(db).get_dashboard_stats()


@router.get("/users")
def list_users(
    type: Optional[UserType] = None,
    status: Optional[Status] = None,
    verified: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_session),
):
    return AdminService(db).get_all_users(type=type, status=status, verified=verified, search=search)


@router.get("/users/{user_type}/{user_id}")
def user_details(user_type: UserType, user_id: str, db: Session = Depends(get_session)):
    return AdminService(db).get_user_details(user_id, user_type)


@router.patch("/users/{user_type}/{user_id}/status")
def update_user_status(
    user_type: UserType,
    user_id: str,
    payload: StatusUpdateIn,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_session),
):
    """Approve, reject, flag or reset a profile; the owner is notified."""
    return AdminService(db).update_user_status(user_id, user_type, payload.model_dump(), verified_by=admin.id)


@router.patch("/users/{user_type}/{user_id}")
def update_user_profile(
    user_type: UserType,
    user_id: str,
    data: Dict[str, Any] = Body(...),
    db: Session = Depends(get_session),
):
    return AdminService(db).update_user_profile(user_id, user_type, data)


@router.delete("/users/{user_type}/{user_id}", status_code=204)
def delete_user(user_type: UserType, user_id: str, db: Session = Depends(get_session)):
    AdminService(db).delete_user(user_id, user_type)


@router.get("/startups")
def all_startups(
    industry: Optional[str] = None,
    stage: Optional[str] = None,
    search_term: Optional[str] = None,
    status: Optional[Status] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_session),
):
    filters = {
        "industry": industry,
        "stage": stage,
        "search_term": search_term,
        "status": status,
        "limit": limit,
        "offset": offset,
    }
    return StartupService(db).get_all_startups(filters)


@router.get("/investors")
def all_investors(
    industry: Optional[str] = None,
    stage: Optional[str] = None,
    search_term: Optional[str] = None,
    country: Optional[str] = None,
    status: Optional[Status] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_session),
):
    filters = {
        "industry": industry,
        "stage": stage,
        "search_term": search_term,
        "country": country,
        "status": status,
        "limit": limit,
        "offset": offset,
    }
    return InvestorService(db).get_all_investors(filters)


@router.get("/scoring/defaults")
def scoring_defaults():
    return {"weights": scoring.DEFAULT_WEIGHTS, "inputs": scoring.DEFAULT_INPUTS}


@router.post("/startups/{startup_id}/score", dependencies=[Depends(require_permission("score_startups"))])
def score_startup(startup_id: str, payload: ScoreIn, db: Session = Depends(get_session)):
    """Score a startup; inputs not supplied are taken from its profile."""
    return AdminService(db).score_startup(startup_id, payload.inputs.model_dump(), payload.weights)


# -- admin team ---------------------------------------------------------------

@router.get("/admins")
def list_admins(db: Session = Depends(get_session)):
    return AdminService(db).get_all_admins()


@router.delete("/admins/{admin_id}", status_code=204)
def remove_admin(admin_id: str, admin: models.Admin = Depends(require_super_admin), db: Session = Depends(get_session)):
    AdminService(db).remove_admin(admin_id, admin.id)


@router.post("/invites", status_code=201)
def create_admin_invite(
    payload: AdminInviteIn,
    admin: models.Admin = Depends(require_super_admin),
    db: Session = Depends(get_session),
):
    return AdminService(db).create_admin_invite(payload.model_dump(), admin.id)


@router.get("/invites")
def pending_admin_invites(db: Session = Depends(get_session)):
    return AdminService(db).get_pending_invites()


@router.delete("/invites/{invite_id}")
def cancel_admin_invite(invite_id: str, db: Session = Depends(get_session)):
    return AdminService(db).cancel_admin_invite(invite_id)


# -- user invites ---------------------------------------------------------------

@router.post("/user-invites", status_code=201)
def create_user_invite(
    payload: UserInviteIn,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_session),
):
    return UserInviteService(db).create_user_invite(payload.model_dump(), admin.id)


@router.get("/user-invites")
def list_user_invites(db: Session = Depends(get_session)):
    return UserInviteService(db).get_all_invites()


@router.get("/user-invites/accepted")
def accepted_user_invites(db: Session = Depends(get_session)):
    return UserInviteService(db).get_accepted_invites()


@router.post("/user-invites/{invite_id}/promote", dependencies=[Depends(require_super_admin)])
def promote_user(invite_id: str, payload: PromoteIn, db: Session = Depends(get_session)):
    return UserInviteService(db).promote_user_to_admin(invite_id, payload.admin_level)


@router.post("/user-invites/{invite_id}/resend")
def resend_user_invite(invite_id: str, db: Session = Depends(get_session)):
    return UserInviteService(db).resend_invitation(invite_id)


@router.delete("/user-invites/{invite_id}", status_code=204)
def delete_user_invite(invite_id: str, db: Session = Depends(get_session)):
    UserInviteService(db).delete_invite(invite_id)


# -- newsletter campaigns -------------------------------------------------------

@router.post("/campaigns", status_code=201)
def create_campaign(payload: CampaignIn, admin: models.Admin = Depends(require_admin), db: Session = Depends(get_session)):
    return NotificationService(db).create_campaign(payload.model_dump(), admin.id)


@router.get("/campaigns")
def list_campaigns(limit: int = 50, offset: int = 0, status: Optional[str] = None, db: Session = Depends(get_session)):
    return NotificationService(db).get_campaigns(limit=limit, offset=offset, status=status)


@router.get("/campaigns/recipient-count")
def recipient_count(recipient_type: RecipientType = "all", db: Session = Depends(get_session)):
    return {"recipient_type": recipient_type, "count": NotificationService(db).get_recipient_count(recipient_type)}


@router.get("/campaigns/{campaign_id}")
def get_campaign(campaign_id: str, db: Session = Depends(get_session)):
    return NotificationService(db).get_campaign(campaign_id)


@router.patch("/campaigns/{campaign_id}")
def update_campaign(campaign_id: str, payload: CampaignUpdateIn, db: Session = Depends(get_session)):
    return NotificationService(db).update_campaign(campaign_id, payload.model_dump(exclude_none=True))


@router.post("/campaigns/{campaign_id}/send")
def send_campaign(campaign_id: str, db: Session = Depends(get_session)):
    return NotificationService(db).send_campaign(campaign_id)
