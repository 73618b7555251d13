"""
Quillpost Backend — Authentication Gate
=========================================

What:  Decides whether the caller is authenticated for the matched route.
How:   Public routes bypass the check. Otherwise the bearer credential is
       handed to the CredentialValidator and its (identity, error, info)
       outcome is mapped onto a rejection code.
Who:   run_gates() in quillpost/pipeline.py.

Outcome mapping (first match wins):
    info is jwt.ExpiredSignatureError   → 401 TOKEN_EXPIRED  "Token has expired"
    info is jwt.InvalidTokenError       → 401 INVALID_TOKEN  "Invalid token"
    info message == "No auth token"     → 401 TOKEN_MISSING  "Authentication token is required"
    error, or no identity               → 401 UNAUTHORIZED   "Unauthorized access"
    otherwise                           → identity attached to the RequestContext

Credential extraction:
    no Authorization header               → nothing offered (UNAUTHORIZED)
    "Bearer <token>"                      → <token> validated
    header present, no usable bearer token → "" validated (TOKEN_MISSING)
"""

import logging
from typing import Optional

import jwt

from quillpost.context import AuthenticatedIdentity, RequestContext
from quillpost.exceptions import AuthenticationError, RejectionCode
from quillpost.policy import EndpointPolicy
from quillpost.services.credential_base import NO_AUTH_TOKEN, CredentialCheck, CredentialValidator

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """None when no header was sent, "" when it holds no bearer token."""
    if authorization is None:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def identity_from_check(check: CredentialCheck, request_id: str) -> AuthenticatedIdentity:
    """Map a validator outcome to an identity or raise the matching rejection."""
    info = check.info

    if isinstance(info, jwt.ExpiredSignatureError):
        raise AuthenticationError("Token has expired", request_id, RejectionCode.TOKEN_EXPIRED)

    if isinstance(info, jwt.InvalidTokenError):
        raise AuthenticationError("Invalid token", request_id, RejectionCode.INVALID_TOKEN)

    if info is not None and str(info) == NO_AUTH_TOKEN:
        raise AuthenticationError(
            "Authentication token is required", request_id, RejectionCode.TOKEN_MISSING
        )

    if check.error is not None or not check.identity:
        raise AuthenticationError("Unauthorized access", request_id, RejectionCode.UNAUTHORIZED)

    return check.identity


class AuthenticationGate:
    def __init__(self, validator: CredentialValidator):
        self.validator = validator

    async def check(
        self,
        context: RequestContext,
        policy: EndpointPolicy,
        authorization: Optional[str],
    ) -> Optional[AuthenticatedIdentity]:
        """
        Returns the caller's identity, or None for a public route (the
        credential is not looked at). Raises AuthenticationError otherwise.
        """
        if policy.public:
            return None

        token = extract_bearer_token(authorization)
        if token is None:
            outcome = CredentialCheck()
        else:
            try:
                outcome = await self.validator.validate(token)
            except Exception as exc:
                logger.warning(
                    "[%s] Credential validator failed: %s",
                    context.correlation_id,
                    exc,
                    exc_info=True,
                )
                outcome = CredentialCheck(error=exc)

        context.identity = identity_from_check(outcome, context.correlation_id)
        return context.identity
