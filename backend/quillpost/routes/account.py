"""
Quillpost Backend — Current User Route
========================================

GET /api/auth/me echoes who the pipeline thinks the caller is: the identity
taken from the token plus the tenant resolved for this request. Handy for
debugging header/subdomain tenant resolution from a client.
"""

from fastapi import APIRouter, Depends

from quillpost.context import AuthenticatedIdentity, RequestContext
from quillpost.pipeline import current_user, get_context
from quillpost.schemas.common import CurrentUserResponse, ErrorResponse

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.get(
    "/me",
    name="read_current_user",
    response_model=CurrentUserResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Identity and tenant of the caller",
)
async def read_current_user(
    identity: AuthenticatedIdentity = Depends(current_user()),
    context: RequestContext = Depends(get_context),
) -> CurrentUserResponse:
    tenant = context.tenant
    return CurrentUserResponse(
        user_id=identity.user_id,
        email=identity.email,
        roles=list(identity.roles),
        token_tenant_id=identity.tenant_id,
        request_tenant_id=tenant.tenant_id if tenant else None,
        tenant_source=tenant.source.value if tenant else None,
    )
