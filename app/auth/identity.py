# =============================================================================
# app/auth/identity.py - Caller Identity Resolution
# =============================================================================
# Works out "who is calling" for the access gate.
#
# Resolvers are tried in order and the first one that returns an email wins;
# results are never merged. A resolver that cannot read its credential
# (missing header, bad token, garbage header) returns None so the next one
# gets a chance.
#
#   Authorization: Bearer <jwt>      -> BearerTokenResolver
#   X-MS-CLIENT-PRINCIPAL: <base64>  -> ClientPrincipalResolver
# =============================================================================

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from starlette.requests import Request

from app.auth.principal import (
    PRINCIPAL_HEADER,
    PrincipalDecodeError,
    decode_client_principal,
    email_from_principal,
)
from app.auth.tokens import TokenService, email_from_claims

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


class IdentityResolver(ABC):
    """Extracts a normalized email from one kind of credential."""

    name: str = "resolver"

    @abstractmethod
    def resolve(self, request: Request) -> str | None:
        """Return the caller's normalized email, or None if this source has none."""


class BearerTokenResolver(IdentityResolver):
    """Reads the email claim from a valid `Authorization: Bearer` token."""

    name = "bearer"

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    def resolve(self, request: Request) -> str | None:
        authorization = request.headers.get("Authorization")
        if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
            return None

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            return None

        claims = self.token_service.validate_token(token)
        if claims is None:
            return None

        email = email_from_claims(claims)
        if email is None:
            logger.warning("Bearer token is valid but carries no email claim")
        return email


class ClientPrincipalResolver(IdentityResolver):
    """Reads the email from the platform-injected client principal header."""

    name = "client_principal"

    def __init__(self, header_name: str = PRINCIPAL_HEADER):
        self.header_name = header_name

    def resolve(self, request: Request) -> str | None:
        header_value = request.headers.get(self.header_name)
        if not header_value:
            return None

        try:
            principal = decode_client_principal(header_value)
        except PrincipalDecodeError as e:
            logger.warning(f"Ignoring malformed {self.header_name} header: {e.message}")
            return None

        return email_from_principal(principal)


def resolve_identity(
    request: Request,
    resolvers: Sequence[IdentityResolver],
) -> str | None:
    """
    Run resolvers in order and return the first email found.

    Args:
        request: The inbound request
        resolvers: Ordered resolvers (bearer token first by convention)

    Returns:
        Normalized email, or None if no resolver produced one
    """
    for resolver in resolvers:
        email = resolver.resolve(request)
        if email:
            logger.debug(f"Resolved identity via {resolver.name}")
            return email
    return None
