"""
Quillpost Backend — JWT Credential Validator
==============================================

What:  Verifies signed access tokens and maps their claims to an identity.
How:   PyJWT decodes and verifies signature, `exp` and `nbf`; refusals are
       reported through CredentialCheck.info as PyJWT's own exception types,
       which the AuthenticationGate matches on.
Who:   Built once by the app factory and stored on app.state.

Expected claims:
    {
        "sub": "42",                      → user_id (required)
        "email": "ada@example.com",       → email
        "roles": ["editor", "user"],      → roles (order preserved)
        "tenant_id": "acme",              → tenant_id
        "exp": 1767225600
    }

Token issuance is handled by another service; only verification lives here.
"""

import logging
from typing import Any, Mapping, Optional

import jwt

from quillpost.context import AuthenticatedIdentity
from quillpost.services.credential_base import (
    CredentialCheck,
    CredentialValidator,
    MissingCredentialError,
)

logger = logging.getLogger(__name__)


def identity_from_claims(claims: Mapping[str, Any]) -> Optional[AuthenticatedIdentity]:
    """Build an identity from decoded claims; None when `sub` is missing."""
    user_id = claims.get("sub")
    if not user_id:
        return None

    roles = claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]

    return AuthenticatedIdentity(
        user_id=str(user_id),
        email=claims.get("email"),
        roles=tuple(str(role) for role in roles),
        tenant_id=claims.get("tenant_id"),
    )


class JWTCredentialValidator(CredentialValidator):
    """
    PyJWT-backed validator.

    Refusal reporting:
        ""                        → info = MissingCredentialError("No auth token")
        jwt.ExpiredSignatureError → info = that exception
        other InvalidTokenError   → info = that exception (bad signature, garbage, ...)
        decoded, no `sub` claim   → empty CredentialCheck (gate answers UNAUTHORIZED)
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", leeway: int = 0):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.leeway = leeway

    async def validate(self, token: str) -> CredentialCheck:
        if not token:
            return CredentialCheck(info=MissingCredentialError())

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                leeway=self.leeway,
            )
        except jwt.InvalidTokenError as exc:
            # ExpiredSignatureError is a subclass; the gate tells them apart
            logger.debug("Token refused: %s: %s", type(exc).__name__, exc)
            return CredentialCheck(info=exc)

        return CredentialCheck(identity=identity_from_claims(claims))
