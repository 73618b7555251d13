"""
Quillpost Backend — Article Schemas
=====================================

What:  Pydantic models defining the article API contract.
How:   FastAPI validates request bodies against these models and serializes
       responses through them (and documents both in OpenAPI).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ArticleCreate(BaseModel):
    """Body of POST /api/articles."""

    title: str = Field(min_length=1, max_length=200, description="Article headline")
    body: str = Field(default="", description="Article content (markdown)")
    published: bool = Field(default=False, description="Visible on the public listing")
    tags: List[str] = Field(default_factory=list, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped


class ArticleResponse(BaseModel):
    id: uuid.UUID = Field(description="Unique article identifier (UUID)")
    title: str
    body: str
    published: bool
    tags: List[str]
    author_id: str = Field(description="user_id of the creating identity")
    tenant_id: Optional[str] = Field(default=None, description="Owning tenant, if any")
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")

    model_config = {"from_attributes": True}


class ArticleListResponse(BaseModel):
    articles: List[ArticleResponse]
    total_count: int = Field(description="Number of articles returned")
