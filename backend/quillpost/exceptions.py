"""
Quillpost Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for handler errors and pipeline rejections.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, middleware and guards; caught by global handlers.

Exception Hierarchy:
    QuillpostError (base)
    ├── ValidationError              → 400 Bad Request
    ├── NotFoundError                → 404 Not Found
    └── PipelineRejection            → terminal request-pipeline failure
        ├── TenantResolutionError    → 400  BAD_REQUEST
        ├── AuthenticationError      → 401  TOKEN_EXPIRED | INVALID_TOKEN |
        │                                   TOKEN_MISSING | UNAUTHORIZED
        ├── AuthorizationError       → 403  USER_NOT_FOUND | INSUFFICIENT_ROLES
        └── FeatureDisabledError     → 403  FEATURE_DISABLED

Rejection response body:
    {
        "error": "INSUFFICIENT_ROLES",
        "message": "Insufficient permissions",
        "details": {"required_roles": ["admin"], "user_roles": ["user"]},
        "request_id": "3f1c..."
    }
"""

from enum import Enum
from typing import Any, Dict, Optional

# Placeholder used when a rejection is raised before a correlation id exists
NO_REQUEST_ID = "no-request-id"


class QuillpostError(Exception):
    """
    Base exception for all Quillpost application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuillpostError):
    """Raised when client input fails a business rule. HTTP 400."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(QuillpostError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/articles/{id} with an unknown id, or an id that belongs
             to another tenant (tenants never see each other's articles).
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


# ══════════════════════════════════════════════════════════════════════════
# Request Pipeline Rejections
# ══════════════════════════════════════════════════════════════════════════

class RejectionCode(str, Enum):
    """Machine-readable rejection kinds returned in the `error` field."""

    BAD_REQUEST = "BAD_REQUEST"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_MISSING = "TOKEN_MISSING"
    UNAUTHORIZED = "UNAUTHORIZED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INSUFFICIENT_ROLES = "INSUFFICIENT_ROLES"
    FEATURE_DISABLED = "FEATURE_DISABLED"


class PipelineRejection(QuillpostError):
    """
    A pipeline stage refused the request. Always terminal.

    Unlike the base class, `details` IS returned to the client: it holds the
    requirement that failed (required roles, feature name, ...) so callers
    can tell why they were turned away.
    """

    status_code: int = 400
    default_code: RejectionCode = RejectionCode.BAD_REQUEST

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        code: Optional[RejectionCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=details)
        self.code = code or self.default_code
        self.request_id = request_id or NO_REQUEST_ID
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        """Serialize into the ErrorResponse shape used by every error body."""
        return {
            "error": self.code.value,
            "message": self.message,
            "details": self.details or None,
            "request_id": self.request_id,
        }


class TenantResolutionError(PipelineRejection):
    """Tenant resolution raised unexpectedly. HTTP 400."""

    status_code = 400
    default_code = RejectionCode.BAD_REQUEST

    def __init__(self, reason: str, request_id: Optional[str] = None):
        super().__init__(
            message="Unable to determine tenant context",
            request_id=request_id,
            details={"reason": reason},
        )
        self.reason = reason


class AuthenticationError(PipelineRejection):
    """Bearer credential missing, expired, invalid, or not accepted. HTTP 401."""

    status_code = 401
    default_code = RejectionCode.UNAUTHORIZED


class AuthorizationError(PipelineRejection):
    """Authenticated (or not) caller lacks a required role. HTTP 403."""

    status_code = 403
    default_code = RejectionCode.INSUFFICIENT_ROLES


class FeatureDisabledError(PipelineRejection):
    """
    The endpoint's feature flag is off, globally or for the caller's tenant.
    HTTP 403.
    """

    status_code = 403
    default_code = RejectionCode.FEATURE_DISABLED

    def __init__(self, feature: str, request_id: Optional[str] = None):
        super().__init__(
            message="Feature not available",
            request_id=request_id,
            details={"feature": feature},
        )
        self.feature = feature
