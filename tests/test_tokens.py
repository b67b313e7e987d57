# =============================================================================
# tests/test_tokens.py - Token Service and Principal Decoding Tests
# =============================================================================
# This module contains tests for:
# - TokenService issuing and validating HS256 bearer tokens
# - Email claim lookup in token payloads
# - Client principal header decoding and email lookup
# =============================================================================

import base64
import time

import pytest
from jose import jwt

from app.auth.principal import (
    PrincipalDecodeError,
    decode_client_principal,
    email_from_principal,
    encode_client_principal,
)
from app.auth.tokens import ALGORITHM, TokenService, email_from_claims
from tests.helpers import TEST_SECRET


# =============================================================================
# TokenService Tests
# =============================================================================

class TestTokenService:
    """Test token issuance and validation."""

    def test_generated_token_round_trips(self, token_service):
        token = token_service.generate_token("jane@example.com")
        claims = token_service.validate_token(token)

        assert claims is not None
        assert claims["email"] == "jane@example.com"
        assert claims["emails"] == "jane@example.com"
        assert claims["sub"] == "jane@example.com"
        assert claims["iss"] == "RecipeApi"
        assert claims["aud"] == "RecipeFrontend"
        assert claims["jti"]

    def test_token_lifetime_is_24_hours(self, token_service):
        token = token_service.generate_token("jane@example.com")
        claims = jwt.get_unverified_claims(token)

        assert claims["exp"] - claims["iat"] == 24 * 3600
        assert token_service.lifetime_seconds == 86400

    def test_each_token_has_unique_jti(self, token_service):
        first = jwt.get_unverified_claims(token_service.generate_token("a@example.com"))
        second = jwt.get_unverified_claims(token_service.generate_token("a@example.com"))

        assert first["jti"] != second["jti"]

    def test_wrong_secret_is_rejected(self, token_service):
        other = TokenService(secret_key="another-secret-key-9876543210")
        token = other.generate_token("jane@example.com")

        assert token_service.validate_token(token) is None

    def test_wrong_audience_is_rejected(self, token_service):
        other = TokenService(secret_key=TEST_SECRET, audience="SomeoneElse")
        token = other.generate_token("jane@example.com")

        assert token_service.validate_token(token) is None

    def test_wrong_issuer_is_rejected(self, token_service):
        other = TokenService(secret_key=TEST_SECRET, issuer="SomeoneElse")
        token = other.generate_token("jane@example.com")

        assert token_service.validate_token(token) is None

    def test_expired_token_is_rejected(self, token_service):
        now = int(time.time())
        token = jwt.encode(
            {
                "email": "jane@example.com",
                "iat": now - 7200,
                "exp": now - 3600,
                "iss": "RecipeApi",
                "aud": "RecipeFrontend",
            },
            TEST_SECRET,
            algorithm=ALGORITHM,
        )

        assert token_service.validate_token(token) is None

    def test_recently_expired_token_is_within_clock_skew(self, token_service):
        now = int(time.time())
        token = jwt.encode(
            {
                "email": "jane@example.com",
                "iat": now - 3600,
                "exp": now - 60,
                "iss": "RecipeApi",
                "aud": "RecipeFrontend",
            },
            TEST_SECRET,
            algorithm=ALGORITHM,
        )

        assert token_service.validate_token(token) is not None

    def test_garbage_is_rejected(self, token_service):
        assert token_service.validate_token("not-a-jwt") is None


class TestEmailFromClaims:
    """Test email claim lookup order."""

    def test_email_claim_wins(self):
        claims = {"email": "First@Example.com", "emails": "second@example.com"}
        assert email_from_claims(claims) == "first@example.com"

    def test_emails_claim_as_list(self):
        assert email_from_claims({"emails": ["Jane@Example.com"]}) == "jane@example.com"

    def test_emailaddress_uri_claim(self):
        claims = {
            "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress": "jane@example.com"
        }
        assert email_from_claims(claims) == "jane@example.com"

    def test_no_email_claim(self):
        assert email_from_claims({"sub": "user-123"}) is None

    def test_blank_email_falls_through(self):
        assert email_from_claims({"email": "  ", "emails": "jane@example.com"}) == "jane@example.com"


# =============================================================================
# Client Principal Tests
# =============================================================================

class TestClientPrincipal:
    """Test X-MS-CLIENT-PRINCIPAL decoding."""

    def test_decode_valid_principal(self):
        header = encode_client_principal({"userId": "abc", "claims": []})
        assert decode_client_principal(header) == {"userId": "abc", "claims": []}

    def test_invalid_base64_raises(self):
        with pytest.raises(PrincipalDecodeError) as exc_info:
            decode_client_principal("not base64!!")

        assert exc_info.value.code == "INVALID_PRINCIPAL"

    def test_invalid_json_raises(self):
        header = base64.b64encode(b"not json").decode()
        with pytest.raises(PrincipalDecodeError):
            decode_client_principal(header)

    def test_non_object_json_raises(self):
        header = base64.b64encode(b'["a@example.com"]').decode()
        with pytest.raises(PrincipalDecodeError):
            decode_client_principal(header)

    def test_email_from_emails_claim(self):
        principal = {
            "userId": "abc",
            "claims": [
                {"typ": "name", "val": "Jane"},
                {"typ": "emails", "val": "Jane@Example.com"},
            ],
        }
        assert email_from_principal(principal) == "jane@example.com"

    def test_email_from_emailaddress_claim(self):
        principal = {
            "claims": [
                {
                    "typ": "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress",
                    "val": "jane@example.com",
                }
            ]
        }
        assert email_from_principal(principal) == "jane@example.com"

    def test_user_id_with_at_sign_is_used(self):
        assert email_from_principal({"userId": "Jane@Example.com"}) == "jane@example.com"

    def test_opaque_user_id_is_ignored(self):
        assert email_from_principal({"userId": "8f14e45f", "claims": []}) is None
