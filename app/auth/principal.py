# =============================================================================
# app/auth/principal.py - Platform Client Principal Header
# =============================================================================
# The hosting platform authenticates users in front of the API and forwards
# the result as a base64-encoded JSON header:
#
#   X-MS-CLIENT-PRINCIPAL: eyJ1c2VySWQiOi...
#
#   {
#     "identityProvider": "aad",
#     "userId": "d75b260a64504067bfc5b2905e3b8182",
#     "userDetails": "jane@example.com",
#     "claims": [{"typ": "emails", "val": "jane@example.com"}, ...]
#   }
#
# This module decodes the header and pulls the caller's email out of it.
# =============================================================================

import base64
import binascii
import json
from typing import Any

from lib.utils import ApplicationError, normalize_email

PRINCIPAL_HEADER = "X-MS-CLIENT-PRINCIPAL"

PRINCIPAL_EMAIL_CLAIM_TYPES = (
    "emails",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress",
)


class PrincipalDecodeError(ApplicationError):
    """Raised when the principal header is not base64-encoded JSON."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Invalid client principal header: {error}",
            code="INVALID_PRINCIPAL",
            suggestion=f"The {PRINCIPAL_HEADER} header must be base64-encoded JSON",
            details={"error": error},
        )


def decode_client_principal(header_value: str) -> dict[str, Any]:
    """
    Decode a client principal header into a dict.

    Args:
        header_value: Raw header value

    Returns:
        The decoded principal object

    Raises:
        PrincipalDecodeError: If the value is not base64, not UTF-8,
            not JSON, or not a JSON object
    """
    try:
        decoded = base64.b64decode(header_value.strip(), validate=True)
        principal = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise PrincipalDecodeError(str(e)) from e

    if not isinstance(principal, dict):
        raise PrincipalDecodeError("principal is not a JSON object")

    return principal


def email_from_principal(principal: dict[str, Any]) -> str | None:
    """
    Find the caller's email in a decoded principal.

    Lookup order:
    1. The first claim whose `typ` is an email claim type
    2. `userId`, but only if it contains "@"

    The `userId` fallback is a heuristic: some providers put the login
    email there, others an opaque id. It is kept for compatibility and is
    not a security boundary (the allow-list check still applies).

    Returns:
        Normalized email, or None
    """
    claims = principal.get("claims")
    if isinstance(claims, list):
        for claim in claims:
            if not isinstance(claim, dict):
                continue
            if claim.get("typ") in PRINCIPAL_EMAIL_CLAIM_TYPES:
                value = claim.get("val")
                if isinstance(value, str) and normalize_email(value):
                    return normalize_email(value)

    user_id = principal.get("userId")
    if isinstance(user_id, str) and "@" in user_id:
        return normalize_email(user_id)

    return None


def encode_client_principal(principal: dict[str, Any]) -> str:
    """Encode a principal dict the way the platform does (used by dev tooling and tests)."""
    return base64.b64encode(json.dumps(principal).encode("utf-8")).decode("ascii")
