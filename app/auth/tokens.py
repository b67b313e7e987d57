# =============================================================================
# app/auth/tokens.py - Bearer Token Service
# =============================================================================
# Issues and validates the API's own HS256 JWTs.
#
# Tokens are minted by POST /api/auth/token once the hosting platform has
# authenticated the caller (see app/auth/principal.py), and are then sent as
# `Authorization: Bearer <token>` on every API call.
#
# Usage:
#   from app.auth.tokens import TokenService
#
#   service = TokenService.from_settings(settings)
#   token = service.generate_token("jane@example.com")
#   claims = service.validate_token(token)  # dict or None
# =============================================================================

import logging
import time
import uuid
from typing import Any

from jose import jwt, JWTError, ExpiredSignatureError

from app.config import Settings
from lib.utils import normalize_email

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Claim types that carry the caller's email, in lookup order.
# "emails" mirrors the claim name used by the platform principal header.
EMAIL_CLAIM_TYPES = (
    "email",
    "emails",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress",
)


def email_from_claims(claims: dict[str, Any]) -> str | None:
    """
    Return the first email-like claim value from a token payload.

    Args:
        claims: Decoded JWT payload

    Returns:
        Normalized email, or None if no email claim is present
    """
    for claim_type in EMAIL_CLAIM_TYPES:
        value = claims.get(claim_type)
        # Some issuers send "emails" as a list
        if isinstance(value, list):
            value = next((item for item in value if isinstance(item, str) and item), None)
        if isinstance(value, str):
            email = normalize_email(value)
            if email:
                return email
    return None


class TokenService:
    """
    Signs and verifies bearer tokens with a shared secret.

    validate_token() never raises for routine failures (bad signature,
    expired, wrong audience, garbage input); it logs and returns None so
    the caller can fall back to another identity source.
    """

    def __init__(
        self,
        secret_key: str,
        issuer: str = "RecipeApi",
        audience: str = "RecipeFrontend",
        expire_hours: int = 24,
        clock_skew_seconds: int = 300,
    ):
        self.secret_key = secret_key
        self.issuer = issuer
        self.audience = audience
        self.expire_hours = expire_hours
        self.clock_skew_seconds = clock_skew_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            expire_hours=settings.JWT_EXPIRE_HOURS,
            clock_skew_seconds=settings.JWT_CLOCK_SKEW_SECONDS,
        )

    @property
    def lifetime_seconds(self) -> int:
        return self.expire_hours * 3600

    def generate_token(self, email: str) -> str:
        """
        Create a signed token for an email address.

        Args:
            email: The caller's email (stored as-is in the claims)

        Returns:
            Encoded JWT string
        """
        now = int(time.time())
        claims = {
            "email": email,
            "emails": email,
            "sub": email,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + self.lifetime_seconds,
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """
        Verify a token's signature, issuer, audience and lifetime.

        Args:
            token: Encoded JWT (without the "Bearer " prefix)

        Returns:
            The decoded claims, or None if the token is not valid
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"leeway": self.clock_skew_seconds},
            )

        except ExpiredSignatureError:
            logger.warning("Bearer token has expired")
            return None

        except JWTError as e:
            logger.warning(f"Bearer token validation failed: {e}")
            return None
