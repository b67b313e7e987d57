# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# The access gate middleware has already admitted the request by the time a
# route runs; these dependencies expose what it found.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"email": user.email}
# =============================================================================

from fastapi import Request

from app.auth.gate import AccessGate
from app.auth.models import AuthUser
from app.auth.tokens import TokenService


def get_current_user(request: Request) -> AuthUser:
    """
    Return the caller admitted by the access gate.

    Public routes and the development bypass have no identity, so email
    may be None.
    """
    return AuthUser(email=getattr(request.state, "identity", None))


def get_access_gate(request: Request) -> AccessGate:
    """The gate instance installed on the application."""
    return request.app.state.access_gate


def get_token_service(request: Request) -> TokenService:
    """The token service shared by the gate and the token endpoint."""
    return request.app.state.token_service
