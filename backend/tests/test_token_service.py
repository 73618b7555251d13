"""
Quillpost Backend — JWT Credential Validator Tests
====================================================

What we test:
    ✅ Valid token → identity with claims mapped (roles order kept)
    ✅ Expired / forged / garbage / wrong-algorithm tokens → PyJWT error as info
    ✅ Empty token → "No auth token" info
    ✅ Token without `sub` → no identity
    ✅ Leeway accepts a token that expired moments ago
"""

import time

import jwt
import pytest

from quillpost.config import settings
from quillpost.services.credential_base import NO_AUTH_TOKEN
from quillpost.services.token_service import JWTCredentialValidator, identity_from_claims

# conftest exported JWT_SECRET_KEY before settings loaded
TEST_SECRET = settings.jwt_secret_key


@pytest.fixture
def validator() -> JWTCredentialValidator:
    return JWTCredentialValidator(secret_key=TEST_SECRET)


class TestIdentityFromClaims:

    def test_full_claims(self):
        identity = identity_from_claims(
            {"sub": 42, "email": "ada@example.com", "roles": ["editor", "user"], "tenant_id": "acme"}
        )
        assert identity.user_id == "42"
        assert identity.email == "ada@example.com"
        assert identity.roles == ("editor", "user")
        assert identity.tenant_id == "acme"

    def test_single_role_string(self):
        assert identity_from_claims({"sub": "1", "roles": "admin"}).roles == ("admin",)

    def test_missing_roles(self):
        identity = identity_from_claims({"sub": "1"})
        assert identity.roles == ()
        assert identity.email is None

    @pytest.mark.parametrize("claims", [{}, {"sub": ""}, {"email": "x@example.com"}])
    def test_no_subject(self, claims):
        assert identity_from_claims(claims) is None


class TestJWTCredentialValidator:

    @pytest.mark.asyncio
    async def test_valid_token(self, validator, make_token):
        check = await validator.validate(make_token(sub="7", roles=["admin"], tenant_id="acme"))
        assert check.error is None
        assert check.info is None
        assert check.identity.user_id == "7"
        assert check.identity.roles == ("admin",)
        assert check.identity.tenant_id == "acme"

    @pytest.mark.asyncio
    async def test_empty_token(self, validator):
        check = await validator.validate("")
        assert check.identity is None
        assert str(check.info) == NO_AUTH_TOKEN

    @pytest.mark.asyncio
    async def test_expired_token(self, validator, make_token):
        check = await validator.validate(make_token(expires_in=-60))
        assert check.identity is None
        assert isinstance(check.info, jwt.ExpiredSignatureError)

    @pytest.mark.asyncio
    async def test_forged_signature(self, validator, make_token):
        check = await validator.validate(make_token(secret="not-the-real-secret-0123456789abcdef"))
        assert isinstance(check.info, jwt.InvalidSignatureError)

    @pytest.mark.asyncio
    async def test_garbage_token(self, validator):
        check = await validator.validate("not-a-jwt")
        assert isinstance(check.info, jwt.DecodeError)
        assert not isinstance(check.info, jwt.ExpiredSignatureError)

    @pytest.mark.asyncio
    async def test_unexpected_algorithm_rejected(self, validator):
        token = jwt.encode(
            {"sub": "1", "exp": int(time.time()) + 60},
            TEST_SECRET,
            algorithm="HS512",
        )
        check = await validator.validate(token)
        assert isinstance(check.info, jwt.InvalidAlgorithmError)

    @pytest.mark.asyncio
    async def test_token_without_subject(self, validator, make_token):
        check = await validator.validate(make_token(sub=None))
        assert check.identity is None
        assert check.info is None
        assert check.error is None

    @pytest.mark.asyncio
    async def test_leeway_accepts_recently_expired(self, make_token):
        lenient = JWTCredentialValidator(secret_key=TEST_SECRET, leeway=120)
        check = await lenient.validate(make_token(expires_in=-30))
        assert check.identity is not None
