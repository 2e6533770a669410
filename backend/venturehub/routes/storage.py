"""Pitch deck and logo uploads for the signed-in startup.

Stored files themselves are served by the static mount at `/storage`;
these endpoints only write and delete them.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session

from .. import models
from ..auth import require_roles
from ..config import settings
from ..database import get_session
from ..errors import NotFoundError, ValidationFailed
from ..services import storage
from ..services.startups import StartupService

router = APIRouter(prefix="/storage", tags=["storage"])
logger = logging.getLogger("venturehub.storage")

founder = require_roles("startup")


def _read_upload(file: UploadFile) -> bytes:
    if not file.filename:
        raise ValidationFailed("no file")
    # one byte over the limit is enough to reject it
    return file.file.read(settings.MAX_UPLOAD_BYTES + 1)


def _owned_path(bucket: str, url, account: models.Account) -> str:
    """Bucket path behind `url`, or "" unless it sits in the caller's folder."""
    path = storage.extract_file_path_from_url(url, bucket)
    if path and not path.startswith(f"{account.id}/"):
        logger.warning("refusing to delete %s file %s not owned by %s", bucket, path, account.id)
        return ""
    return path


def _drop_previous(bucket: str, url, keep: str, account: models.Account) -> None:
    path = _owned_path(bucket, url, account)
    if not path or path == keep:
        return
    try:
        storage.delete_file(bucket, path)
    except (NotFoundError, ValidationFailed) as e:
        logger.warning("could not delete previous %s file %s: %s", bucket, path, e.message)


@router.post("/pitch-deck", status_code=201)
def upload_pitch_deck(
    file: UploadFile = File(...),
    account: models.Account = Depends(founder),
    db: Session = Depends(get_session),
):
    """Upload a PDF pitch deck (max 10 MB) and link it to the startup profile."""
    svc = StartupService(db)
    startup = svc.get_startup_row(account.profile_id)
    stored = storage.upload_pitch_deck(_read_upload(file), file.content_type, account.id)
    _drop_previous(storage.PITCH_DECK_BUCKET, startup.pitch_deck, stored["path"], account)
    return {**stored, "startup": svc.set_pitch_deck(startup.id, stored["url"])}


@router.delete("/pitch-deck")
def delete_pitch_deck(account: models.Account = Depends(founder), db: Session = Depends(get_session)):
    svc = StartupService(db)
    startup = svc.get_startup_row(account.profile_id)
    if not startup.pitch_deck:
        raise NotFoundError("No pitch deck uploaded")
    path = _owned_path(storage.PITCH_DECK_BUCKET, startup.pitch_deck, account)
    if path:
        try:
            storage.delete_pitch_deck(path)
        except NotFoundError:
            logger.warning("pitch deck %s already gone, clearing link", path)
    return svc.set_pitch_deck(startup.id, None)


@router.post("/logo", status_code=201)
def upload_logo(
    file: UploadFile = File(...),
    account: models.Account = Depends(founder),
    db: Session = Depends(get_session),
):
    svc = StartupService(db)
    startup = svc.get_startup_row(account.profile_id)
    stored = storage.upload_logo(_read_upload(file), account.id)
    _drop_previous(storage.LOGO_BUCKET, startup.logo, stored["path"], account)
    return {**stored, "startup": svc.set_logo(startup.id, stored["url"])}
