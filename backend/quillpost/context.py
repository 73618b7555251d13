"""
Quillpost Backend — Per-Request Context
=========================================

What:  The state the request pipeline accumulates for one request.
How:   RequestIDMiddleware creates a RequestContext and stores it on
       `request.state.context`; later stages fill in tenant and identity.
Who:   Middleware and guards write it; route handlers read it.

Lifecycle:
    created   → RequestIDMiddleware (correlation_id, start_time)
    tenant    → TenantContextMiddleware
    identity  → AuthenticationGate (only on successful validation)
    discarded → when the response is sent (never persisted or shared)
"""

import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from starlette.requests import Request

# ── Context Variable ──────────────────────────────────────────────────────
# Coroutine-local copy of the correlation id for log statements and
# exception handlers that have no RequestContext at hand.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class TenantSource(str, Enum):
    """Which input produced the tenant id. Precedence: header > subdomain > default."""

    HEADER = "header"
    SUBDOMAIN = "subdomain"
    DEFAULT = "default"


@dataclass(frozen=True)
class TenantInfo:
    tenant_id: str
    source: TenantSource
    subdomain: Optional[str] = None


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """
    Caller identity produced by a successful credential validation.

    `roles` keeps the order found in the token so authorization failures can
    echo it back verbatim.
    """

    user_id: str
    email: Optional[str] = None
    roles: Tuple[str, ...] = ()
    tenant_id: Optional[str] = None


@dataclass
class RequestContext:
    """Mutable per-request state. `correlation_id` is never reassigned."""

    correlation_id: str
    start_time: float = field(default_factory=time.perf_counter)
    tenant: Optional[TenantInfo] = None
    identity: Optional[AuthenticatedIdentity] = None

    @property
    def tenant_id(self) -> Optional[str]:
        return self.tenant.tenant_id if self.tenant else None


def get_request_context(request: Request) -> RequestContext:
    """
    Return the context RequestIDMiddleware attached to this request.

    Falls back to a fresh context with an empty correlation id when the
    middleware is not installed (e.g. a bare router under test), so
    rejections report "no-request-id" instead of crashing.
    """
    context = getattr(request.state, "context", None)
    if context is None:
        context = RequestContext(correlation_id="")
        request.state.context = context
    return context


def identity_value(context: RequestContext, field_name: Optional[str] = None) -> Any:
    """
    Return the authenticated identity, or one named field of it.

    Returns None when the request carries no identity (public endpoint or
    unauthenticated), and None for a field the identity does not have.
    """
    identity = context.identity
    if identity is None:
        return None
    if field_name is None:
        return identity
    return getattr(identity, field_name, None)
