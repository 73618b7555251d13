"""
Quillpost Backend — Article Service Unit Tests
================================================

What:  Tests for ArticleService tenant scoping (create, get, list, delete).
How:   Each test works on a fresh ArticleService (no shared singleton state).

What we test:
    ✅ Created article carries author and tenant
    ✅ Cross-tenant get/delete raise NotFoundError
    ✅ Listing is tenant-scoped, newest first, optionally published-only
"""

import pytest
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from quillpost.context import AuthenticatedIdentity
from quillpost.exceptions import NotFoundError, ValidationError
from quillpost.schemas.article import ArticleCreate
from quillpost.services.article_service import ArticleService

AUTHOR = AuthenticatedIdentity(user_id="author-1", roles=("editor",))


class TestArticleServiceCreate:

    def setup_method(self):
        self.service = ArticleService()

    @pytest.mark.asyncio
    async def test_create_article(self):
        """New article is stored under the caller's tenant with the caller as author."""
        result = await self.service.create_article(
            ArticleCreate(title="Hello", tags=["intro"]), author=AUTHOR, tenant_id="acme"
        )

        assert result.title == "Hello"
        assert result.author_id == "author-1"
        assert result.tenant_id == "acme"
        assert result.tags == ["intro"]
        assert result.published is False

    @pytest.mark.asyncio
    async def test_repeated_tags_rejected(self):
        """Duplicate tags raise ValidationError naming the field."""
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_article(
                ArticleCreate(title="Hello", tags=["a", "a"]), author=AUTHOR, tenant_id="acme"
            )
        assert exc_info.value.field == "tags"
        assert self.service._articles == {}

    @pytest.mark.asyncio
    async def test_create_without_tenant(self):
        """Requests with no resolved tenant store articles with tenant_id None."""
        result = await self.service.create_article(
            ArticleCreate(title="Solo"), author=AUTHOR, tenant_id=None
        )
        fetched = await self.service.get_article(result.id, tenant_id=None)
        assert fetched.id == result.id


class TestArticleServiceGet:

    def setup_method(self):
        self.service = ArticleService()

    @pytest.mark.asyncio
    async def test_unknown_id(self):
        """Unknown article id should raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_article(uuid4(), tenant_id="acme")
        assert exc_info.value.context["resource"] == "article"

    @pytest.mark.asyncio
    async def test_other_tenant_cannot_see_article(self):
        """Tenants never see each other's articles; it looks like a 404."""
        created = await self.service.create_article(
            ArticleCreate(title="Private"), author=AUTHOR, tenant_id="acme"
        )
        with pytest.raises(NotFoundError):
            await self.service.get_article(created.id, tenant_id="globex")


class TestArticleServiceList:

    def setup_method(self):
        self.service = ArticleService()

    @pytest.mark.asyncio
    async def test_newest_first_and_scoped(self):
        """Listing returns only the tenant's articles, newest first."""
        older = await self.service.create_article(
            ArticleCreate(title="Older"), author=AUTHOR, tenant_id="acme"
        )
        self.service._articles[older.id].created_at = datetime.now(timezone.utc) - timedelta(hours=1)
        await self.service.create_article(ArticleCreate(title="Newer"), author=AUTHOR, tenant_id="acme")
        await self.service.create_article(ArticleCreate(title="Elsewhere"), author=AUTHOR, tenant_id="globex")

        result = await self.service.list_articles(tenant_id="acme")

        assert result.total_count == 2
        assert [a.title for a in result.articles] == ["Newer", "Older"]

    @pytest.mark.asyncio
    async def test_published_only_across_tenants(self):
        """The public feed mode ignores tenants and drafts."""
        await self.service.create_article(
            ArticleCreate(title="Live", published=True), author=AUTHOR, tenant_id="acme"
        )
        await self.service.create_article(ArticleCreate(title="Draft"), author=AUTHOR, tenant_id="acme")
        await self.service.create_article(
            ArticleCreate(title="Other live", published=True), author=AUTHOR, tenant_id="globex"
        )

        result = await self.service.list_articles(tenant_id=None, published_only=True, all_tenants=True)

        assert sorted(a.title for a in result.articles) == ["Live", "Other live"]


class TestArticleServiceDelete:

    def setup_method(self):
        self.service = ArticleService()

    @pytest.mark.asyncio
    async def test_delete_within_tenant(self):
        created = await self.service.create_article(
            ArticleCreate(title="Temp"), author=AUTHOR, tenant_id="acme"
        )
        await self.service.delete_article(created.id, tenant_id="acme")
        assert (await self.service.list_articles(tenant_id="acme")).total_count == 0

    @pytest.mark.asyncio
    async def test_delete_from_other_tenant_refused(self):
        """Deleting across tenants raises and leaves the article in place."""
        created = await self.service.create_article(
            ArticleCreate(title="Keep"), author=AUTHOR, tenant_id="acme"
        )
        with pytest.raises(NotFoundError):
            await self.service.delete_article(created.id, tenant_id="globex")
        assert (await self.service.list_articles(tenant_id="acme")).total_count == 1


class TestArticleCreateSchema:

    def test_title_is_stripped(self):
        assert ArticleCreate(title="  Hi  ").title == "Hi"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValueError):
            ArticleCreate(title=title)
