# =============================================================================
# tests/helpers.py - Shared Test Helpers
# =============================================================================
# Builders for requests and principal headers, and a controllable clock.
# =============================================================================

from starlette.requests import Request

from app.auth.principal import encode_client_principal

TEST_SECRET = "test-jwt-secret-key-0123456789"


def make_request(
    path: str = "/api/recipes",
    method: str = "GET",
    headers: dict[str, str] | None = None,
) -> Request:
    """Build a bare Starlette request for calling the gate directly."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "scheme": "http",
        "query_string": b"",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    return Request(scope)


def principal_header(email: str | None = None, user_id: str = "user-123", typ: str = "emails") -> str:
    """Encode a client principal the way the hosting platform does."""
    claims = [{"typ": typ, "val": email}] if email else []
    return encode_client_principal({
        "identityProvider": "aad",
        "userId": user_id,
        "userDetails": user_id,
        "claims": claims,
    })


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
