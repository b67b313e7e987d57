# =============================================================================
# tests/test_gate.py - Access Gate Tests
# =============================================================================
# This module contains tests for:
# - Bypass rules (preflight, public paths, development bypass)
# - Identity resolution order (bearer token, then principal header)
# - 401 / 403 decisions and response bodies
# - Allow-list refresh behavior seen through the gate
# =============================================================================

import asyncio
import time

from jose import jwt

from app.auth.allowlist import AllowListCache, AllowListSource, ConfigAllowListSource
from app.auth.gate import AccessGate, GateDecision, GateReason, build_access_gate
from app.auth.identity import BearerTokenResolver, ClientPrincipalResolver
from app.auth.tokens import ALGORITHM
from app.config import Settings
from tests.helpers import TEST_SECRET, make_request, principal_header


class CountingSource(AllowListSource):
    name = "counting"

    def __init__(self, emails=None, error=None):
        self.emails = emails
        self.error = error
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.emails


def make_gate(token_service, source=None, clock=None, **kwargs):
    cache_kwargs = {"clock": clock} if clock else {}
    cache = AllowListCache(source or ConfigAllowListSource(["jane@example.com"]), **cache_kwargs)
    return AccessGate(
        cache,
        resolvers=[BearerTokenResolver(token_service), ClientPrincipalResolver()],
        **kwargs,
    )


def evaluate(gate, **request_kwargs) -> GateDecision:
    return asyncio.run(gate.evaluate(make_request(**request_kwargs)))


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Bypass Rules
# =============================================================================

class TestBypassRules:
    """Requests the gate admits without looking for an identity."""

    def test_options_preflight_is_admitted(self, token_service):
        decision = evaluate(make_gate(token_service), method="OPTIONS")

        assert decision.admit
        assert decision.reason == GateReason.PREFLIGHT

    def test_health_prefix_is_public(self, token_service):
        source = CountingSource(["jane@example.com"])
        gate = make_gate(token_service, source=source)

        for path in ("/health", "/health/ready", "/HEALTH/live"):
            decision = evaluate(gate, path=path)
            assert decision.admit
            assert decision.reason == GateReason.PUBLIC_PATH

        assert source.calls == 0

    def test_platform_auth_prefix_is_public(self, token_service):
        assert evaluate(make_gate(token_service), path="/.auth/me").admit

    def test_token_endpoint_is_public(self, token_service):
        decision = evaluate(make_gate(token_service), path="/api/auth/token", method="POST")
        assert decision.reason == GateReason.PUBLIC_PATH

    def test_token_endpoint_match_is_exact(self, token_service):
        decision = evaluate(make_gate(token_service), path="/api/auth/token/extra")
        assert not decision.admit

    def test_development_bypass(self, token_service):
        gate = make_gate(token_service, allow_unauthenticated=True)
        decision = evaluate(gate, path="/api/recipes")

        assert decision.admit
        assert decision.reason == GateReason.DEVELOPMENT_BYPASS
        assert decision.identity is None

    def test_bypass_requires_development_environment(self):
        production = Settings(
            ENVIRONMENT="production",
            ALLOW_UNAUTHENTICATED=True,
            JWT_SECRET_KEY=TEST_SECRET,
        )
        development = Settings(
            ENVIRONMENT="development",
            ALLOW_UNAUTHENTICATED=True,
            JWT_SECRET_KEY=TEST_SECRET,
        )

        assert build_access_gate(production).allow_unauthenticated is False
        assert build_access_gate(development).allow_unauthenticated is True


# =============================================================================
# Identity and Authorization
# =============================================================================

class TestAuthorization:
    """Identity resolution and allow-list membership."""

    def test_no_credentials_is_401(self, token_service):
        source = CountingSource(["jane@example.com"])
        decision = evaluate(make_gate(token_service, source=source))

        assert not decision.admit
        assert decision.status_code == 401
        assert decision.response_body() == {
            "error": "Authentication required",
            "message": "Please log in to access this resource.",
        }
        assert source.calls == 0

    def test_valid_bearer_listed_email_is_admitted(self, token_service):
        token = token_service.generate_token("Jane@Example.com")
        decision = evaluate(make_gate(token_service), headers=bearer(token))

        assert decision.admit
        assert decision.reason == GateReason.AUTHORIZED
        assert decision.identity == "jane@example.com"

    def test_allow_list_match_is_case_insensitive(self, token_service):
        gate = make_gate(token_service, source=ConfigAllowListSource(["JANE@EXAMPLE.COM"]))
        token = token_service.generate_token("jane@example.com")

        assert evaluate(gate, headers=bearer(token)).admit

    def test_unlisted_email_is_403_with_identity(self, token_service):
        token = token_service.generate_token("Mallory@Example.com")
        decision = evaluate(make_gate(token_service), headers=bearer(token))

        assert not decision.admit
        assert decision.status_code == 403
        body = decision.response_body()
        assert body["error"] == "Access denied"
        assert body["email"] == "mallory@example.com"
        assert "not authorized" in body["message"]

    def test_lowercase_bearer_scheme_is_accepted(self, token_service):
        token = token_service.generate_token("jane@example.com")
        decision = evaluate(make_gate(token_service), headers={"Authorization": f"bearer {token}"})

        assert decision.admit

    def test_principal_header_is_used_without_token(self, token_service):
        headers = {"X-MS-CLIENT-PRINCIPAL": principal_header("jane@example.com")}
        decision = evaluate(make_gate(token_service), headers=headers)

        assert decision.admit
        assert decision.identity == "jane@example.com"

    def test_bearer_token_takes_precedence_over_principal(self, token_service):
        headers = {
            **bearer(token_service.generate_token("mallory@example.com")),
            "X-MS-CLIENT-PRINCIPAL": principal_header("jane@example.com"),
        }
        decision = evaluate(make_gate(token_service), headers=headers)

        assert decision.status_code == 403
        assert decision.identity == "mallory@example.com"

    def test_malformed_principal_is_401(self, token_service):
        decision = evaluate(
            make_gate(token_service),
            headers={"X-MS-CLIENT-PRINCIPAL": "%%% not base64 %%%"},
        )

        assert decision.status_code == 401

    def test_principal_user_id_fallback(self, token_service):
        headers = {"X-MS-CLIENT-PRINCIPAL": principal_header(None, user_id="Jane@Example.com")}
        decision = evaluate(make_gate(token_service), headers=headers)

        assert decision.admit
        assert decision.identity == "jane@example.com"

    def test_admitted_response_has_no_body(self, token_service):
        token = token_service.generate_token("jane@example.com")
        decision = evaluate(make_gate(token_service), headers=bearer(token))

        assert decision.status_code == 200
        assert decision.response_body() is None


# =============================================================================
# Refresh and Fallback Behavior
# =============================================================================

class TestRefreshAndFallback:
    """Gate behavior across refreshes and credential fallbacks."""

    def test_expired_token_falls_back_to_principal(self, token_service):
        now = int(time.time())
        expired = jwt.encode(
            {
                "email": "mallory@example.com",
                "iat": now - 7200,
                "exp": now - 3600,
                "iss": "RecipeApi",
                "aud": "RecipeFrontend",
            },
            TEST_SECRET,
            algorithm=ALGORITHM,
        )
        headers = {
            **bearer(expired),
            "X-MS-CLIENT-PRINCIPAL": principal_header("jane@example.com"),
        }
        decision = evaluate(make_gate(token_service), headers=headers)

        assert decision.admit
        assert decision.identity == "jane@example.com"

    def test_source_outage_serves_stale_list(self, token_service, clock):
        source = CountingSource(["jane@example.com"])
        gate = make_gate(token_service, source=source, clock=clock)
        token = token_service.generate_token("jane@example.com")

        assert evaluate(gate, headers=bearer(token)).admit

        source.error = RuntimeError("secret store unavailable")
        clock.advance(301)

        decision = evaluate(gate, headers=bearer(token))
        assert decision.admit
        assert source.calls == 2

    def test_removed_user_rejected_after_window(self, token_service, clock):
        source = CountingSource(["jane@example.com", "bob@example.com"])
        gate = make_gate(token_service, source=source, clock=clock)
        token = token_service.generate_token("bob@example.com")

        assert evaluate(gate, headers=bearer(token)).admit

        source.emails = ["jane@example.com"]
        clock.advance(100)
        assert evaluate(gate, headers=bearer(token)).admit  # still within the window

        clock.advance(200)
        decision = evaluate(gate, headers=bearer(token))
        assert decision.status_code == 403
        assert decision.identity == "bob@example.com"

    def test_outage_before_first_load_denies(self, token_service):
        source = CountingSource(error=RuntimeError("secret store unavailable"))
        gate = make_gate(token_service, source=source)
        token = token_service.generate_token("jane@example.com")

        decision = evaluate(gate, headers=bearer(token))

        assert decision.status_code == 403
        assert decision.identity == "jane@example.com"

    def test_concurrent_requests_share_one_refresh(self, token_service):
        source = CountingSource(["jane@example.com"])
        gate = make_gate(token_service, source=source)
        token = token_service.generate_token("jane@example.com")

        async def run():
            return await asyncio.gather(
                *(gate.evaluate(make_request(headers=bearer(token))) for _ in range(10))
            )

        decisions = asyncio.run(run())

        assert all(decision.admit for decision in decisions)
        assert source.calls == 1


# =============================================================================
# Worked Examples
# =============================================================================

class TestWorkedExamples:
    """Small allow-lists with one request each."""

    def test_listed_email_in_other_case_is_admitted(self, token_service):
        gate = make_gate(token_service, source=ConfigAllowListSource(["a@x.com"]))
        decision = evaluate(gate, headers=bearer(token_service.generate_token("A@X.com")))

        assert decision.admit
        assert decision.identity == "a@x.com"

    def test_unlisted_email_is_403_naming_it(self, token_service):
        gate = make_gate(token_service, source=ConfigAllowListSource(["a@x.com"]))
        decision = evaluate(gate, headers=bearer(token_service.generate_token("b@x.com")))

        assert decision.status_code == 403
        assert decision.response_body()["email"] == "b@x.com"

    def test_configured_list_without_secret_store(self):
        settings = Settings(
            SECRET_STORE_ENABLED=False,
            APPROVED_EMAILS="dev@local.test",
            JWT_SECRET_KEY=TEST_SECRET,
            _env_file=None,
        )
        gate = build_access_gate(settings)
        headers = {"X-MS-CLIENT-PRINCIPAL": principal_header("dev@local.test", typ="emails")}

        decision = evaluate(gate, headers=headers)

        assert isinstance(gate.cache.source, ConfigAllowListSource)
        assert decision.admit
        assert decision.identity == "dev@local.test"

    def test_undecodable_principal_without_token_is_401(self, token_service):
        gate = make_gate(token_service, source=ConfigAllowListSource(["a@x.com"]))
        decision = evaluate(gate, headers={"X-MS-CLIENT-PRINCIPAL": "!!not-base64!!"})

        assert decision.status_code == 401
        assert decision.identity is None
