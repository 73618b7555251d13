"""
Quillpost Backend — Article Route Handlers
============================================

What:  Article listing, detail, creation and deletion, plus the public feed.
How:   Handlers read the tenant from the RequestContext and delegate to
       ArticleService. Access rules are NOT declared here: they live in
       quillpost.policy.ROUTE_POLICIES, keyed by each route's `name`.

Route Inventory:
    GET    /api/public/articles      list_public_articles   public
    GET    /api/articles             list_articles          authenticated
    GET    /api/articles/{id}        get_article            authenticated
    POST   /api/articles             create_article         editor | admin
    DELETE /api/articles/{id}        delete_article         admin
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from quillpost.context import AuthenticatedIdentity, RequestContext
from quillpost.pipeline import current_user, get_context
from quillpost.schemas.article import ArticleCreate, ArticleListResponse, ArticleResponse
from quillpost.schemas.common import ErrorResponse
from quillpost.services.article_service import article_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Articles"])

_GUARDED_RESPONSES = {
    401: {"description": "Missing, expired or invalid token", "model": ErrorResponse},
    403: {"description": "Insufficient permissions", "model": ErrorResponse},
}


@router.get(
    "/public/articles",
    name="list_public_articles",
    response_model=ArticleListResponse,
    summary="Published articles across all tenants",
)
async def list_public_articles() -> ArticleListResponse:
    # /api/public is excluded from tenant resolution, so there is no tenant to scope by
    return await article_service.list_articles(
        tenant_id=None, published_only=True, all_tenants=True
    )


@router.get(
    "/articles",
    name="list_articles",
    response_model=ArticleListResponse,
    responses=_GUARDED_RESPONSES,
    summary="Articles of the current tenant",
)
async def list_articles(
    context: RequestContext = Depends(get_context),
) -> ArticleListResponse:
    return await article_service.list_articles(tenant_id=context.tenant_id)


@router.get(
    "/articles/{article_id}",
    name="get_article",
    response_model=ArticleResponse,
    responses={**_GUARDED_RESPONSES, 404: {"description": "Not found", "model": ErrorResponse}},
    summary="Get a single article by ID",
)
async def get_article(
    article_id: UUID,
    context: RequestContext = Depends(get_context),
) -> ArticleResponse:
    return await article_service.get_article(article_id, tenant_id=context.tenant_id)


@router.post(
    "/articles",
    name="create_article",
    response_model=ArticleResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_GUARDED_RESPONSES,
    summary="Create an article (editor or admin)",
)
async def create_article(
    payload: ArticleCreate,
    context: RequestContext = Depends(get_context),
    author: AuthenticatedIdentity = Depends(current_user()),
) -> ArticleResponse:
    return await article_service.create_article(payload, author=author, tenant_id=context.tenant_id)


@router.delete(
    "/articles/{article_id}",
    name="delete_article",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**_GUARDED_RESPONSES, 404: {"description": "Not found", "model": ErrorResponse}},
    summary="Delete an article (admin)",
)
async def delete_article(
    article_id: UUID,
    context: RequestContext = Depends(get_context),
) -> Response:
    await article_service.delete_article(article_id, tenant_id=context.tenant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
