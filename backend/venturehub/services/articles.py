"""Blog articles written by admins and read by everyone."""

import logging
import re
from typing import Dict, List, Optional

from sqlmodel import Session, col

from .. import models, repositories
from ..errors import NotFoundError, ValidationFailed
from ..repositories import any_contains
from ..utils import json_fields, pagination

logger = logging.getLogger("venturehub.articles")

CATEGORY_LABELS = {
    "news": "News",
    "industry_insights": "Industry Insights",
    "startup_tips": "Startup Tips",
    "investment_guide": "Investment Guide",
    "company_updates": "Company Updates",
    "market_analysis": "Market Analysis",
    "founder_stories": "Founder Stories",
    "investor_spotlight": "Investor Spotlight",
}
ARTICLE_STATUSES = ("draft", "published", "archived")
EDITABLE_FIELDS = (
    "title", "content", "excerpt", "featured_image_url", "category",
    "status", "is_featured", "seo_title", "seo_description",
)
SEARCH_COLUMNS = (models.Article.title, models.Article.content, models.Article.excerpt)


def generate_slug(title: str) -> str:
    slug = re.sub(r"[^a-z0-9 -]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug).strip()


def article_to_dict(a: models.Article) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "slug": a.slug,
        "content": a.content,
        "excerpt": a.excerpt,
        "featured_image_url": a.featured_image_url,
        "category": a.category,
        "category_label": CATEGORY_LABELS.get(a.category, a.category),
        "tags": json_fields.load_list(a.tags),
        "status": a.status,
        "author_id": a.author_id,
        "author_name": a.author_name,
        "published_at": a.published_at,
        "views_count": a.views_count,
        "is_featured": a.is_featured,
        "seo_title": a.seo_title,
        "seo_description": a.seo_description,
        "created_at": a.created_at,
        "updated_at": a.updated_at,
    }


def _published():
    return models.Article.status == "published"


def _newest_published():
    return col(models.Article.published_at).desc()


class ArticleService:
    def __init__(self, session: Session):
        self.session = session
        self.articles = repositories.ArticleRepository(session)

    def _filter_conditions(self, filters: Dict) -> list:
        conditions = []
        if filters.get("category"):
            conditions.append(models.Article.category == filters["category"])
        if filters.get("is_featured") is not None:
            conditions.append(models.Article.is_featured == filters["is_featured"])
        if filters.get("search"):
            conditions.append(any_contains(SEARCH_COLUMNS, filters["search"]))
        return conditions

    def _page(self, conditions: list, filters: Dict, order_by) -> dict:
        page, limit, offset = pagination.resolve_page(filters.get("limit"), filters.get("offset"), default_limit=10)
        rows = self.articles.list(*conditions, order_by=order_by, limit=limit, offset=offset)
        total = self.articles.count(*conditions)
        return pagination.envelope("articles", [article_to_dict(a) for a in rows], total, page, limit)

    def get_published_articles(self, filters: Optional[Dict] = None) -> dict:
        """Published articles, most recently published first, always paginated."""
        filters = filters or {}
        return self._page([_published()] + self._filter_conditions(filters), filters, _newest_published())

    def get_all_articles(self, filters: Optional[Dict] = None) -> dict:
        filters = filters or {}
        conditions = self._filter_conditions(filters)
        if filters.get("status"):
            conditions.append(models.Article.status == filters["status"])
        if filters.get("author_id"):
            conditions.append(models.Article.author_id == filters["author_id"])
        return self._page(conditions, filters, None)

    def _get(self, article_id: str) -> models.Article:
        a = self.articles.get(article_id)
        if not a:
            raise NotFoundError("Article not found")
        return a

    def get_article_by_id(self, article_id: str) -> dict:
        return article_to_dict(self._get(article_id))

    def get_published_article_by_slug(self, slug: str) -> dict:
        a = self.articles.get_by_slug(slug, _published())
        if not a:
            raise NotFoundError("Article not found")
        a.views_count = (a.views_count or 0) + 1
        self.session.add(a)
        self.session.commit()
        self.session.refresh(a)
        return article_to_dict(a)

    def create_article(self, data: Dict, author_id: str, author_name: str) -> dict:
        if not (data.get("title") or "").strip():
            raise ValidationFailed("title is required")
        now = models.utcnow()
        status = data.get("status") or "draft"
        a = models.Article(
            title=data["title"],
            slug=generate_slug(data["title"]),
            content=data.get("content") or "",
            excerpt=data.get("excerpt") or "",
            featured_image_url=data.get("featured_image_url"),
            category=data.get("category") or "news",
            tags=json_fields.dump_list(data.get("tags")),
            status=status,
            author_id=author_id,
            author_name=author_name,
            published_at=now if status == "published" else None,
            views_count=0,
            is_featured=bool(data.get("is_featured")),
            seo_title=data.get("seo_title"),
            seo_description=data.get("seo_description"),
        )
        a = self.articles.create(a)
        logger.info("article created id=%s slug=%s status=%s", a.id, a.slug, a.status)
        return article_to_dict(a)

    def update_article(self, article_id: str, data: Dict) -> dict:
        a = self._get(article_id)
        for key in EDITABLE_FIELDS:
            if data.get(key) is not None:
                setattr(a, key, data[key])
        if data.get("tags") is not None:
            a.tags = json_fields.dump_list(data["tags"])
        if data.get("title"):
            a.slug = generate_slug(data["title"])
        if data.get("status") == "published" and not a.published_at:
            a.published_at = models.utcnow()
        return article_to_dict(self.articles.save(a))

    def delete_article(self, article_id: str) -> None:
        self.articles.delete(self._get(article_id))
        logger.info("article deleted id=%s", article_id)

    def get_featured_articles(self, limit: int = 5) -> List[dict]:
        rows = self.articles.list(_published(), models.Article.is_featured == True,  # noqa: E712
                                  order_by=_newest_published(), limit=limit)
        return [article_to_dict(a) for a in rows]

    def get_recent_articles(self, limit: int = 5) -> List[dict]:
        return [article_to_dict(a) for a in self.articles.list(_published(), order_by=_newest_published(), limit=limit)]

    def get_articles_by_category(self, category: str, limit: int = 10) -> List[dict]:
        rows = self.articles.list(_published(), models.Article.category == category,
                                  order_by=_newest_published(), limit=limit)
        return [article_to_dict(a) for a in rows]
