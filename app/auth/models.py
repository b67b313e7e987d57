# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for the auth endpoints.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Caller admitted by the access gate.

    email is None when the gate admitted the request without resolving
    an identity (development bypass).
    """
    model_config = ConfigDict(frozen=True)

    email: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.email is not None


class TokenResponse(BaseModel):
    """Bearer token issued by POST /api/auth/token."""
    token: str
    email: str
    expires_in: int = Field(
        ...,
        serialization_alias="expiresIn",
        description="Token lifetime in seconds"
    )


class MeResponse(BaseModel):
    """Response for GET /api/auth/me."""
    email: str | None = None
    authenticated: bool
