"""
Quillpost Backend — Abstract Credential Validator Interface
=============================================================

What:  Abstract base class defining the contract for bearer-credential checks.
How:   Concrete implementations inherit from CredentialValidator and implement
       validate(). The AuthenticationGate only ever sees a CredentialCheck.
Who:   Called by the AuthenticationGate for every non-public endpoint.
When:  After tenant resolution, before role and feature checks.

The (identity, error, info) triple:
    identity: the caller, when the credential was accepted
    error:    something went wrong while validating (not the token's fault)
    info:     why the token was refused (expired, malformed, missing)

The gate maps this triple onto rejection codes, so implementations report
outcomes and never raise for an ordinary bad token.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from quillpost.context import AuthenticatedIdentity

# Exact message the gate recognises as "no credential supplied"
NO_AUTH_TOKEN = "No auth token"


class MissingCredentialError(Exception):
    """Reported in CredentialCheck.info when there is no token to check."""

    def __init__(self, message: str = NO_AUTH_TOKEN):
        super().__init__(message)
        self.message = message


@dataclass
class CredentialCheck:
    identity: Optional[AuthenticatedIdentity] = None
    error: Optional[BaseException] = None
    info: Optional[BaseException] = None


class CredentialValidator(ABC):
    """
    Abstract interface for turning a bearer credential into an identity.

    Contract:
        - validate() never raises for an expired/invalid/missing token;
          it reports the reason in CredentialCheck.info
        - An empty token string means "header present, no token in it"
        - Implementations may suspend (network lookups, key fetching); the
          pipeline awaits them before running any later stage

    Implementations:
        - JWTCredentialValidator: HS*/RS* signed JWTs via PyJWT (default)
    """

    @abstractmethod
    async def validate(self, token: str) -> CredentialCheck:
        """
        Check a bearer credential.

        Args:
            token: The raw credential taken from "Authorization: Bearer <token>".
                   May be "" when the header carried no token.

        Returns:
            CredentialCheck with identity set on success, info set when the
            token was refused.
        """
        ...
