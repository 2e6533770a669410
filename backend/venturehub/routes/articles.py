"""Public blog reads and admin article management."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from .. import models
from ..auth import require_admin
from ..database import get_session
from ..schemas import ArticleCategory, ArticleIn, ArticleStatus, ArticleUpdateIn
from ..services.articles import CATEGORY_LABELS, ArticleService

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("")
def published_articles(
    category: Optional[ArticleCategory] = None,
    is_featured: Optional[bool] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_session),
):
    """Published articles as `{articles, total, page, limit, total_pages}`."""
    filters = {"category": category, "is_featured": is_featured, "search": search, "limit": limit, "offset": offset}
    return ArticleService(db).get_published_articles(filters)


@router.get("/featured")
def featured(limit: int = 5, db: Session = Depends(get_session)):
    return ArticleService(db).get_featured_articles(limit)


@router.get("/recent")
def recent(limit: int = 5, db: Session = Depends(get_session)):
    return ArticleService(db).get_recent_articles(limit)


@router.get("/categories")
def categories():
    return [{"value": value, "label": label} for value, label in CATEGORY_LABELS.items()]


@router.get("/category/{category}")
def by_category(category: ArticleCategory, limit: int = 10, db: Session = Depends(get_session)):
    return ArticleService(db).get_articles_by_category(category, limit)


@router.get("/slug/{slug}")
def by_slug(slug: str, db: Session = Depends(get_session)):
    """A published article; each read counts as a view."""
    return ArticleService(db).get_published_article_by_slug(slug)


@router.get("/manage", dependencies=[Depends(require_admin)])
def all_articles(
    status: Optional[ArticleStatus] = None,
    category: Optional[ArticleCategory] = None,
    author_id: Optional[str] = None,
    is_featured: Optional[bool] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    db: Session = Depends(get_session),
):
    filters = {
        "status": status,
        "category": category,
        "author_id": author_id,
        "is_featured": is_featured,
        "search": search,
        "limit": limit,
        "offset": offset,
    }
    return ArticleService(db).get_all_articles(filters)


@router.post("", status_code=201)
def create_article(payload: ArticleIn, admin: models.Admin = Depends(require_admin), db: Session = Depends(get_session)):
    return ArticleService(db).create_article(payload.model_dump(), admin.id, admin.name)


@router.get("/{article_id}", dependencies=[Depends(require_admin)])
def get_article(article_id: str, db: Session = Depends(get_session)):
    return ArticleService(db).get_article_by_id(article_id)


@router.patch("/{article_id}", dependencies=[Depends(require_admin)])
def update_article(article_id: str, payload: ArticleUpdateIn, db: Session = Depends(get_session)):
    return ArticleService(db).update_article(article_id, payload.model_dump(exclude_none=True))


@router.delete("/{article_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_article(article_id: str, db: Session = Depends(get_session)):
    ArticleService(db).delete_article(article_id)
