"""
Quillpost Backend — Role Authorization Gate
=============================================

Any one of the route's required roles is enough (OR semantics). On failure
the rejection echoes both role lists in the order they were given.
"""

from typing import Sequence

from quillpost.context import RequestContext
from quillpost.exceptions import AuthorizationError, RejectionCode


def check_roles(context: RequestContext, required_roles: Sequence[str]) -> None:
    if not required_roles:
        return

    identity = context.identity
    if identity is None:
        raise AuthorizationError(
            "User not Authenticated",
            context.correlation_id,
            RejectionCode.USER_NOT_FOUND,
        )

    user_roles = list(identity.roles or ())
    if not any(role in user_roles for role in required_roles):
        raise AuthorizationError(
            "Insufficient permissions",
            context.correlation_id,
            RejectionCode.INSUFFICIENT_ROLES,
            details={"required_roles": list(required_roles), "user_roles": user_roles},
        )
