"""
Quillpost Backend — Article Service
=====================================

What:  Tenant-scoped article storage behind the /api/articles routes.
How:   In-process dict keyed by UUID. Every lookup filters by tenant id, so
       an article created under tenant "acme" is invisible (404) to "globex".
Who:   Called by route handlers with the tenant from the RequestContext.

This is the stand-in for the persistence collaborator: the route handlers
only depend on these four methods, so a database-backed service can replace
it without touching the pipeline or the routes.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from quillpost.context import AuthenticatedIdentity
from quillpost.exceptions import NotFoundError, ValidationError
from quillpost.schemas.article import ArticleCreate, ArticleListResponse, ArticleResponse

logger = logging.getLogger(__name__)


@dataclass
class Article:
    title: str
    body: str
    author_id: str
    tenant_id: Optional[str]
    published: bool = False
    tags: List[str] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ArticleService:
    """
    Responsibilities:
        - create_article(): store a new article under the caller's tenant
          (ValidationError on repeated tags)
        - get_article(): single article, NotFoundError across tenant boundaries
        - list_articles(): newest first, optionally published-only
        - delete_article(): remove within the tenant
    """

    def __init__(self) -> None:
        self._articles: Dict[uuid.UUID, Article] = {}

    async def create_article(
        self,
        data: ArticleCreate,
        author: AuthenticatedIdentity,
        tenant_id: Optional[str],
    ) -> ArticleResponse:
        if len(set(data.tags)) != len(data.tags):
            raise ValidationError(
                message="Tags must be unique. Remove the repeated tags and try again.",
                field="tags",
            )

        article = Article(
            title=data.title,
            body=data.body,
            published=data.published,
            tags=list(data.tags),
            author_id=author.user_id,
            tenant_id=tenant_id,
        )
        self._articles[article.id] = article
        logger.info("Article %s created by %s (tenant=%s)", article.id, author.user_id, tenant_id)
        return ArticleResponse.model_validate(article)

    async def get_article(self, article_id: uuid.UUID, tenant_id: Optional[str]) -> ArticleResponse:
        article = self._articles.get(article_id)
        if article is None or article.tenant_id != tenant_id:
            raise NotFoundError(resource="article", resource_id=str(article_id))
        return ArticleResponse.model_validate(article)

    async def list_articles(
        self,
        tenant_id: Optional[str],
        published_only: bool = False,
        all_tenants: bool = False,
    ) -> ArticleListResponse:
        matches = [
            article
            for article in self._articles.values()
            if (all_tenants or article.tenant_id == tenant_id)
            and (article.published or not published_only)
        ]
        matches.sort(key=lambda a: a.created_at, reverse=True)
        return ArticleListResponse(
            articles=[ArticleResponse.model_validate(a) for a in matches],
            total_count=len(matches),
        )

    async def delete_article(self, article_id: uuid.UUID, tenant_id: Optional[str]) -> None:
        article = self._articles.get(article_id)
        if article is None or article.tenant_id != tenant_id:
            raise NotFoundError(resource="article", resource_id=str(article_id))
        del self._articles[article_id]
        logger.info("Article %s deleted (tenant=%s)", article_id, tenant_id)


# Singleton instance used by the routes
article_service = ArticleService()
