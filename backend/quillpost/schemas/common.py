"""
Quillpost Backend — Shared Response Schemas
=============================================

What:  Response models used across routers: the error envelope, the health
       probe, and the current-user view.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable code (e.g., "TOKEN_EXPIRED", "not_found")
        message: Human-readable description for display to users
        details: Extra context (required roles, feature name, ...)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "FEATURE_DISABLED",
            "message": "Feature not available",
            "details": {"feature": "beta-reports"},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since the process started")


class CurrentUserResponse(BaseModel):
    """The caller as seen by the API: identity claims plus resolved tenant."""
    user_id: str
    email: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    token_tenant_id: Optional[str] = Field(
        default=None, description="tenant_id claim carried by the access token"
    )
    request_tenant_id: Optional[str] = Field(
        default=None, description="Tenant resolved for this request (header/subdomain/default)"
    )
    tenant_source: Optional[str] = Field(default=None, description="header, subdomain or default")
