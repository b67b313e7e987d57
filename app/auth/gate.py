# =============================================================================
# app/auth/gate.py - Email Allow-List Access Gate
# =============================================================================
# Admits or rejects every inbound request:
#
#   1. OPTIONS (CORS preflight) and public paths   -> admit, no identity needed
#   2. Development with ALLOW_UNAUTHENTICATED      -> admit, logged
#   3. Resolve identity (bearer token, then principal header)
#        none found                                -> 401
#   4. Make sure the approved list is fresh
#   5. Identity on the list                        -> admit
#                                                  -> 403 (echoes the email)
#
# AccessGateMiddleware plugs the gate into FastAPI and stores the admitted
# identity on request.state.identity for route handlers.
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.auth.allowlist import (
    AllowListCache,
    AllowListSource,
    ConfigAllowListSource,
    SecretStoreAllowListSource,
)
from app.auth.identity import (
    BearerTokenResolver,
    ClientPrincipalResolver,
    IdentityResolver,
    resolve_identity,
)
from app.auth.tokens import TokenService
from app.config import Settings
from lib.utils import normalize_email

logger = logging.getLogger(__name__)

AUTHENTICATION_REQUIRED_MESSAGE = "Please log in to access this resource."
ACCESS_DENIED_MESSAGE = (
    "Your account is not authorized to access this application. "
    "Please contact an administrator."
)


class GateReason(str, Enum):
    """Why the gate admitted or rejected a request."""
    PREFLIGHT = "preflight"
    PUBLIC_PATH = "public_path"
    DEVELOPMENT_BYPASS = "development_bypass"
    AUTHORIZED = "authorized"
    AUTHENTICATION_REQUIRED = "authentication_required"
    ACCESS_DENIED = "access_denied"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of evaluating one request."""
    admit: bool
    reason: GateReason
    identity: str | None = None

    @property
    def status_code(self) -> int:
        if self.admit:
            return 200
        if self.reason == GateReason.AUTHENTICATION_REQUIRED:
            return 401
        return 403

    def response_body(self) -> dict[str, Any] | None:
        """JSON body for a rejection, None for admitted requests."""
        if self.admit:
            return None
        if self.reason == GateReason.AUTHENTICATION_REQUIRED:
            return {
                "error": "Authentication required",
                "message": AUTHENTICATION_REQUIRED_MESSAGE,
            }
        return {
            "error": "Access denied",
            "message": ACCESS_DENIED_MESSAGE,
            "email": self.identity,
        }

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.response_body())


class AccessGate:
    """
    Email allow-list authorization for every request.

    Args:
        cache: Approved email cache (owned by this gate)
        resolvers: Identity resolvers, tried in order
        public_path_prefixes: Paths starting with any of these skip the gate
        public_paths: Paths equal to any of these skip the gate
        allow_unauthenticated: Admit everything (development only)
    """

    def __init__(
        self,
        cache: AllowListCache,
        resolvers: Sequence[IdentityResolver],
        *,
        public_path_prefixes: Iterable[str] = ("/health", "/.auth"),
        public_paths: Iterable[str] = ("/api/auth/token",),
        allow_unauthenticated: bool = False,
    ):
        self.cache = cache
        self.resolvers = list(resolvers)
        self.public_path_prefixes = tuple(p.lower() for p in public_path_prefixes)
        self.public_paths = frozenset(p.lower() for p in public_paths)
        self.allow_unauthenticated = allow_unauthenticated

    def is_public_path(self, path: str) -> bool:
        path = path.lower()
        return path in self.public_paths or path.startswith(self.public_path_prefixes)

    async def evaluate(self, request: Request) -> GateDecision:
        """Decide whether a request may reach the application."""
        path = request.url.path

        if request.method.upper() == "OPTIONS":
            return GateDecision(admit=True, reason=GateReason.PREFLIGHT)

        if self.is_public_path(path):
            return GateDecision(admit=True, reason=GateReason.PUBLIC_PATH)

        if self.allow_unauthenticated:
            logger.info(f"Development mode: skipping authentication for {path}")
            return GateDecision(admit=True, reason=GateReason.DEVELOPMENT_BYPASS)

        identity = resolve_identity(request, self.resolvers)
        if identity is None:
            logger.warning(f"Unauthenticated access attempt to {path}")
            return GateDecision(admit=False, reason=GateReason.AUTHENTICATION_REQUIRED)

        return await self.authorize(identity, path)

    async def authorize(self, identity: str, path: str | None = None) -> GateDecision:
        """
        Check an already-resolved identity against the approved list.

        Refreshes the list first if it is stale. A failed refresh falls
        back to the last good list.
        """
        email = normalize_email(identity)
        if email is None:
            return GateDecision(admit=False, reason=GateReason.AUTHENTICATION_REQUIRED)

        await self.cache.ensure_fresh()

        if not self.cache.contains(email):
            logger.warning(f"Unauthorized access attempt by {email} to {path}")
            return GateDecision(admit=False, reason=GateReason.ACCESS_DENIED, identity=email)

        logger.debug(f"Authorized access by {email} to {path}")
        return GateDecision(admit=True, reason=GateReason.AUTHORIZED, identity=email)


class AccessGateMiddleware(BaseHTTPMiddleware):
    """Runs the access gate in front of every route."""

    def __init__(self, app, gate: AccessGate):
        super().__init__(app)
        self.gate = gate

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        decision = await self.gate.evaluate(request)
        if not decision.admit:
            return decision.to_response()

        request.state.identity = decision.identity
        return await call_next(request)


# =============================================================================
# Wiring
# =============================================================================

def build_allowlist_source(settings: Settings) -> AllowListSource:
    """Pick the approved-email source for this deployment."""
    if settings.SECRET_STORE_ENABLED:
        return SecretStoreAllowListSource(settings.APPROVED_EMAILS_SECRET_NAME)
    return ConfigAllowListSource(settings.approved_emails_list)


def build_access_gate(
    settings: Settings,
    token_service: TokenService | None = None,
    source: AllowListSource | None = None,
) -> AccessGate:
    """
    Build an AccessGate from settings.

    Args:
        settings: Application settings
        token_service: Overrides the settings-derived token service
        source: Overrides the settings-derived approved-email source
    """
    token_service = token_service or TokenService.from_settings(settings)
    cache = AllowListCache(
        source or build_allowlist_source(settings),
        freshness_seconds=settings.ALLOWLIST_REFRESH_SECONDS,
        fetch_timeout=settings.ALLOWLIST_FETCH_TIMEOUT_SECONDS,
        backoff_seconds=settings.ALLOWLIST_RETRY_BACKOFF_SECONDS,
        backoff_max_seconds=settings.ALLOWLIST_RETRY_BACKOFF_MAX_SECONDS,
    )

    if settings.allow_unauthenticated_access:
        logger.warning("ALLOW_UNAUTHENTICATED is on: the access gate admits every request")

    return AccessGate(
        cache,
        resolvers=[BearerTokenResolver(token_service), ClientPrincipalResolver()],
        public_path_prefixes=settings.public_path_prefixes_list,
        public_paths=settings.public_paths_list,
        allow_unauthenticated=settings.allow_unauthenticated_access,
    )
