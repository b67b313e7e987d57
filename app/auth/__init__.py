# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Email allow-list access gate plus the API's own bearer tokens.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"email": user.email}
# =============================================================================

from app.auth.dependencies import get_current_user, get_access_gate, get_token_service
from app.auth.gate import (
    AccessGate,
    AccessGateMiddleware,
    GateDecision,
    GateReason,
    build_access_gate,
)
from app.auth.models import AuthUser, MeResponse, TokenResponse
from app.auth.tokens import TokenService

__all__ = [
    "get_current_user",
    "get_access_gate",
    "get_token_service",
    "AccessGate",
    "AccessGateMiddleware",
    "GateDecision",
    "GateReason",
    "build_access_gate",
    "AuthUser",
    "MeResponse",
    "TokenResponse",
    "TokenService",
]
