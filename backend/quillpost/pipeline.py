"""
Quillpost Backend — Guard Pipeline
====================================

What:  Runs the per-route guards in their fixed order and exposes them to
       FastAPI as dependencies.
How:   enforce_endpoint_policy is installed as an application-wide
       dependency. It looks up the matched route's EndpointPolicy by route
       name and awaits run_gates before the handler is called.

Order (each step reads what the previous ones wrote):
    AuthenticationGate → check_roles → check_feature → handler

A rejection raised here is rendered by the PipelineRejection exception
handler in main.py, and still passes back out through the middleware, so
the response carries X-Request-ID (and X-Tenant-ID when resolved).
"""

from typing import Any, Callable, Optional

from fastapi import Request

from quillpost.context import (
    AuthenticatedIdentity,
    RequestContext,
    get_request_context,
    identity_value,
)
from quillpost.guards.authentication import AuthenticationGate
from quillpost.guards.features import check_feature
from quillpost.guards.roles import check_roles
from quillpost.policy import FEATURE_POLICY, EndpointPolicy, FeaturePolicy, policy_for
from quillpost.services.credential_base import CredentialValidator


async def run_gates(
    context: RequestContext,
    policy: EndpointPolicy,
    authorization: Optional[str],
    validator: CredentialValidator,
    features: FeaturePolicy = FEATURE_POLICY,
) -> Optional[AuthenticatedIdentity]:
    """Authenticate, then authorize by role, then by feature flag."""
    identity = await AuthenticationGate(validator).check(context, policy, authorization)
    check_roles(context, policy.roles)
    check_feature(context, policy.feature, features)
    return identity


# ══════════════════════════════════════════════════════════════════════════
# FastAPI Dependencies
# ══════════════════════════════════════════════════════════════════════════

async def enforce_endpoint_policy(request: Request) -> None:
    """Application-wide dependency: guard the matched route."""
    route = request.scope.get("route")
    policy = policy_for(getattr(route, "name", None))
    await run_gates(
        get_request_context(request),
        policy,
        request.headers.get("authorization"),
        request.app.state.credential_validator,
    )


def get_context(request: Request) -> RequestContext:
    return get_request_context(request)


def current_user(field_name: Optional[str] = None) -> Callable[[Request], Any]:
    """
    Dependency factory giving handlers the caller's identity.

    Usage:
        async def handler(user: AuthenticatedIdentity = Depends(current_user())): ...
        async def handler(email: str = Depends(current_user("email"))): ...

    Resolves to None on public routes or when no identity is attached.
    """

    def dependency(request: Request) -> Any:
        return identity_value(get_request_context(request), field_name)

    return dependency
