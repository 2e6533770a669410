"""The signed-in user's notification inbox, plus admin sending."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from .. import models
from ..auth import get_current_account, require_admin
from ..database import get_session
from ..schemas import BulkNotificationIn, MarkReadIn, NotificationIn
from ..services.notifications import NotificationService, recipient_id

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    unread_only: bool = False,
    type: Optional[str] = None,
    account: models.Account = Depends(get_current_account),
    db: Session = Depends(get_session),
):
    return NotificationService(db).get_user_notifications(
        recipient_id(account), limit=limit, offset=offset, unread_only=unread_only, type=type
    )


@router.get("/unread-count")
def unread_count(account: models.Account = Depends(get_current_account), db: Session = Depends(get_session)):
    return {"count": NotificationService(db).get_unread_count(recipient_id(account))}


@router.post("/read")
def mark_multiple_read(
    payload: MarkReadIn,
    account: models.Account = Depends(get_current_account),
    db: Session = Depends(get_session),
):
    return {"updated": NotificationService(db).mark_multiple_as_read(recipient_id(account), payload.ids)}


@router.post("/read-all")
def mark_all_read(account: models.Account = Depends(get_current_account), db: Session = Depends(get_session)):
    return {"updated": NotificationService(db).mark_all_as_read(recipient_id(account))}


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    account: models.Account = Depends(get_current_account),
    db: Session = Depends(get_session),
):
    return NotificationService(db).mark_as_read(recipient_id(account), notification_id)


@router.post("/{notification_id}/archive")
def archive(
    notification_id: str,
    account: models.Account = Depends(get_current_account),
    db: Session = Depends(get_session),
):
    return NotificationService(db).archive_notification(recipient_id(account), notification_id)


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_notification(payload: NotificationIn, db: Session = Depends(get_session)):
    return NotificationService(db).create_notification(payload.model_dump())


@router.post("/bulk", status_code=201, dependencies=[Depends(require_admin)])
def send_bulk(payload: BulkNotificationIn, db: Session = Depends(get_session)):
    data = payload.model_dump(exclude={"user_ids"})
    return {"sent_count": NotificationService(db).send_bulk_notifications(payload.user_ids, data)}
