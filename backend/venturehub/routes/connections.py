"""Investor interest and info requests."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .. import models
from ..auth import require_admin, require_approved, require_roles
from ..database import get_session
from ..schemas import ConnectionIn
from ..services.connections import ConnectionService
from ..services.investors import InvestorService

router = APIRouter(prefix="/connections", tags=["connections"])


@router.post("", status_code=201, dependencies=[Depends(require_approved)])
def create_connection(
    payload: ConnectionIn,
    account: models.Account = Depends(require_roles("investor")),
    db: Session = Depends(get_session),
):
    """Express interest in, or ask for more information about, a startup."""
    investor = InvestorService(db).get_investor_row(account.profile_id)
    return ConnectionService(db).create_connection(investor, payload.startup_id, payload.connection_type, payload.message)


@router.get("/interested-startups", dependencies=[Depends(require_approved)])
def interested_startups(account: models.Account = Depends(require_roles("investor")), db: Session = Depends(get_session)):
    return ConnectionService(db).get_interested_startups(account.profile_id)


@router.get("/interested-investors", dependencies=[Depends(require_approved)])
def interested_investors(account: models.Account = Depends(require_roles("startup")), db: Session = Depends(get_session)):
    return ConnectionService(db).get_interested_investors(account.profile_id)


@router.get("/interest/{startup_id}")
def has_shown_interest(
    startup_id: str,
    account: models.Account = Depends(require_roles("investor")),
    db: Session = Depends(get_session),
):
    return {"startup_id": startup_id, "interested": ConnectionService(db).has_shown_interest(account.profile_id, startup_id)}


@router.get("", dependencies=[Depends(require_admin)])
def list_connections(
    investor_id: Optional[str] = None,
    startup_id: Optional[str] = None,
    connection_type: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_session),
):
    filters = {"investor_id": investor_id, "startup_id": startup_id, "connection_type": connection_type, "status": status}
    return ConnectionService(db).get_connections(filters)


@router.post("/{connection_id}/archive", dependencies=[Depends(require_admin)])
def archive_connection(connection_id: str, db: Session = Depends(get_session)):
    return ConnectionService(db).archive_connection(connection_id)
