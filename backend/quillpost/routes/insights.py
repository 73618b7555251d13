"""
Quillpost Backend — Feature-Flagged Insight Routes
====================================================

Endpoints that only exist while their feature flag is on:
    GET /api/dashboard   new-dashboard
    GET /api/reports     beta-reports (admin only; off for some tenants)
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from quillpost.context import RequestContext
from quillpost.pipeline import get_context
from quillpost.schemas.common import ErrorResponse
from quillpost.services.article_service import article_service

router = APIRouter(prefix="/api", tags=["Insights"])

_FLAGGED_RESPONSES = {
    403: {"description": "Feature disabled or insufficient permissions", "model": ErrorResponse},
}


@router.get(
    "/dashboard",
    name="read_dashboard",
    responses=_FLAGGED_RESPONSES,
    summary="Article counts for the current tenant",
)
async def read_dashboard(context: RequestContext = Depends(get_context)) -> Dict[str, Any]:
    listing = await article_service.list_articles(tenant_id=context.tenant_id)
    published = sum(1 for article in listing.articles if article.published)
    return {
        "tenant_id": context.tenant_id,
        "articles": listing.total_count,
        "published": published,
        "drafts": listing.total_count - published,
    }


@router.get(
    "/reports",
    name="read_reports",
    responses=_FLAGGED_RESPONSES,
    summary="Per-author article report (beta)",
)
async def read_reports(context: RequestContext = Depends(get_context)) -> Dict[str, Any]:
    listing = await article_service.list_articles(tenant_id=context.tenant_id)
    by_author: Dict[str, int] = {}
    for article in listing.articles:
        by_author[article.author_id] = by_author.get(article.author_id, 0) + 1
    return {"tenant_id": context.tenant_id, "articles_by_author": by_author}
