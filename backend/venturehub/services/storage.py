"""File storage for pitch decks and startup logos.

Files live under `STORAGE_DIR/<bucket>/<account_id>/<file>` and are served
read-only from `/storage`, so a stored file's public URL is
`{PUBLIC_BASE_URL}/storage/<bucket>/<account_id>/<file>`.
"""

import io
import logging
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError

from ..config import settings
from ..errors import NotFoundError, ValidationFailed

logger = logging.getLogger("venturehub.storage")

PITCH_DECK_BUCKET = "pitchdecks"
LOGO_BUCKET = "logos"
BUCKETS = (PITCH_DECK_BUCKET, LOGO_BUCKET)
LOGO_FORMATS = {"PNG": "png", "JPEG": "jpg", "GIF": "gif", "WEBP": "webp"}


def get_bucket_root(bucket: str) -> Path:
    if bucket not in BUCKETS:
        raise ValidationFailed(f"Unknown storage bucket: {bucket}")
    return (Path(settings.STORAGE_DIR) / bucket).resolve()


def public_url(bucket: str, path: str) -> str:
    return f"{settings.PUBLIC_BASE_URL}/storage/{bucket}/{path}"


def _check_size(payload: bytes) -> None:
    if not payload:
        raise ValidationFailed("File is empty")
    if len(payload) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationFailed(f"File size must be less than {limit_mb}MB", code="file_too_large")


def _write(bucket: str, account_id: str, filename: str, payload: bytes) -> str:
    folder = get_bucket_root(bucket) / account_id
    folder.mkdir(parents=True, exist_ok=True)
    (folder / filename).write_bytes(payload)
    path = f"{account_id}/{filename}"
    logger.info("stored %s/%s bytes=%d", bucket, path, len(payload))
    return path


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def upload_pitch_deck(payload: bytes, content_type: Optional[str], account_id: str) -> dict:
    """Store a PDF pitch deck and return its bucket path and public URL."""
    if content_type != "application/pdf" and payload[:4] != b"%PDF":
        raise ValidationFailed("Only PDF files are allowed", code="unsupported_file")
    _check_size(payload)
    path = _write(PITCH_DECK_BUCKET, account_id, f"{_timestamp_ms()}_pitchdeck.pdf", payload)
    return {"path": path, "url": public_url(PITCH_DECK_BUCKET, path)}


def upload_logo(payload: bytes, account_id: str) -> dict:
    _check_size(payload)
    try:
        image = Image.open(io.BytesIO(payload))
        image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationFailed("Logo must be a valid image", code="unsupported_file")
    ext = LOGO_FORMATS.get(image.format or "")
    if not ext:
        raise ValidationFailed("Logo must be a PNG, JPEG, GIF or WebP image", code="unsupported_file")
    path = _write(LOGO_BUCKET, account_id, f"{_timestamp_ms()}_logo.{ext}", payload)
    return {"path": path, "url": public_url(LOGO_BUCKET, path)}


def delete_file(bucket: str, path: str) -> None:
    root = get_bucket_root(bucket)
    target = (root / path).resolve()
    if root not in target.parents:
        raise ValidationFailed("Invalid file path")
    if not target.is_file():
        raise NotFoundError("File not found")
    target.unlink()
    logger.info("deleted %s/%s", bucket, path)


def delete_pitch_deck(path: str) -> None:
    delete_file(PITCH_DECK_BUCKET, path)


def extract_file_path_from_url(url: Optional[str], bucket: str = PITCH_DECK_BUCKET) -> str:
    """Bucket-relative path of a stored file's URL, or "" when it has none.

    Relative paths are returned unchanged. For URLs, the path after the
    bucket segment wins; `.../object/public/<bucket>/...` and
    `.../object/<bucket>/...` layouts are recognised as a fallback.
    """
    if not url or not url.strip():
        logger.warning("empty url passed to extract_file_path_from_url")
        return ""
    if not url.startswith("http") and "/" in url:
        return url
    segments = [s for s in urlparse(url).path.split("/") if s]
    if bucket in segments:
        idx = segments.index(bucket)
        if idx < len(segments) - 1:
            return "/".join(segments[idx + 1:])
    if "object" in segments:
        idx = segments.index("object")
        if segments[idx + 1:idx + 3] == ["public", bucket]:
            return "/".join(segments[idx + 3:])
        if segments[idx + 1:idx + 2] == [bucket]:
            return "/".join(segments[idx + 2:])
    logger.warning("could not extract file path from url %s", url)
    return ""
