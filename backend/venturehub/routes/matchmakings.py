"""Admin-curated match suggestions and the participants' responses."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .. import models
from ..account_types import role_for
from ..auth import require_admin, require_approved, require_roles
from ..database import get_session
from ..errors import PermissionDenied
from ..schemas import MatchmakingIn, MatchmakingStatusIn
from ..services.matchmaking import MatchmakingService

router = APIRouter(prefix="/matchmakings", tags=["matchmakings"])

participant = require_roles("investor", "startup", "admin")


def _check_owner(account: models.Account, m: models.Matchmaking) -> None:
    role = role_for(account.account_type)
    if role == "admin":
        return
    if role == "investor" and m.investor_id == account.profile_id:
        return
    raise PermissionDenied("You can only update your own matches")


@router.post("", status_code=201)
def create_matchmakings(
    payload: MatchmakingIn,
    admin: models.Admin = Depends(require_admin),
    db: Session = Depends(get_session),
):
    """Suggest one to three startups to an investor."""
    return MatchmakingService(db).create_matchmakings(
        payload.investor_id, payload.startup_ids, admin.id, payload.comment, payload.expiry_days
    )


@router.get("", dependencies=[Depends(require_admin)])
def list_matchmakings(db: Session = Depends(get_session)):
    return MatchmakingService(db).get_all_matchmakings()


@router.get("/mine", dependencies=[Depends(require_approved)])
def my_matchmakings(account: models.Account = Depends(participant), db: Session = Depends(get_session)):
    svc = MatchmakingService(db)
    role = role_for(account.account_type)
    if role == "investor":
        return svc.get_matchmakings_by_investor(account.profile_id)
    if role == "startup":
        return svc.get_matchmakings_by_startup(account.profile_id)
    return svc.get_all_matchmakings()


@router.patch("/{matchmaking_id}/status", dependencies=[Depends(require_approved)])
def update_status(
    matchmaking_id: str,
    payload: MatchmakingStatusIn,
    account: models.Account = Depends(participant),
    db: Session = Depends(get_session),
):
    svc = MatchmakingService(db)
    _check_owner(account, svc.get_matchmaking_row(matchmaking_id))
    return svc.update_matchmaking_status(matchmaking_id, payload.is_interested)


@router.post("/{matchmaking_id}/archive", dependencies=[Depends(require_approved)])
def archive(matchmaking_id: str, account: models.Account = Depends(participant), db: Session = Depends(get_session)):
    svc = MatchmakingService(db)
    _check_owner(account, svc.get_matchmaking_row(matchmaking_id))
    return svc.archive_matchmaking(matchmaking_id)


@router.delete("/{matchmaking_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete(matchmaking_id: str, db: Session = Depends(get_session)):
    MatchmakingService(db).delete_matchmaking(matchmaking_id)
