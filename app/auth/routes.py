# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual login/logout is handled by the hosting platform in front of
# the API. POST /token trades the platform's principal header for an API
# bearer token; it is a public path, so it applies the allow-list check
# itself before issuing anything.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.auth.dependencies import get_access_gate, get_current_user, get_token_service
from app.auth.gate import AccessGate
from app.auth.models import AuthUser, MeResponse, TokenResponse
from app.auth.principal import (
    PRINCIPAL_HEADER,
    PrincipalDecodeError,
    decode_client_principal,
    email_from_principal,
)
from app.auth.tokens import TokenService
from app.exceptions import (
    InvalidPrincipalError,
    PrincipalEmailMissingError,
    PrincipalMissingError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/token", response_model=TokenResponse)
async def issue_token(
    request: Request,
    gate: AccessGate = Depends(get_access_gate),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Issue an API bearer token for the platform-authenticated user.

    Returns:
        token, email and expiresIn (seconds)

    Raises:
        401: If the principal header is missing
        400: If the header is malformed or carries no email
        403: If the email is not on the approved list
    """
    header_value = request.headers.get(PRINCIPAL_HEADER)
    if not header_value:
        logger.warning(f"No {PRINCIPAL_HEADER} header found in token request")
        raise PrincipalMissingError(PRINCIPAL_HEADER)

    try:
        principal = decode_client_principal(header_value)
    except PrincipalDecodeError as e:
        logger.error(f"Failed to decode {PRINCIPAL_HEADER} header: {e.message}")
        raise InvalidPrincipalError(e.details.get("error", e.message))

    email = email_from_principal(principal)
    if not email:
        logger.warning(f"Could not extract email from {PRINCIPAL_HEADER}")
        raise PrincipalEmailMissingError()

    decision = await gate.authorize(email, request.url.path)
    if not decision.admit:
        return decision.to_response()

    token = token_service.generate_token(email)
    logger.info(f"Generated token for user {email}")

    return TokenResponse(
        token=token,
        email=email,
        expires_in=token_service.lifetime_seconds,
    )


@router.get("/me", response_model=MeResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> MeResponse:
    """
    Return the identity the access gate resolved for this request.

    Useful for checking if a stored token is still valid.
    """
    return MeResponse(email=user.email, authenticated=user.is_authenticated)
