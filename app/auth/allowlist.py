# =============================================================================
# app/auth/allowlist.py - Approved Email Cache
# =============================================================================
# Holds the set of approved emails used by the access gate and keeps it fresh.
#
# Sources:
# - SecretStoreAllowListSource: JSON array stored in Supabase Vault (deployed)
# - ConfigAllowListSource: APPROVED_EMAILS setting (local development)
#
# Refresh rules:
# - The list is reloaded at most once per freshness window (5 minutes)
# - Only one refresh runs at a time; concurrent callers wait for it
# - A failed refresh keeps the previous list and timestamp, logs, and never
#   raises, so requests keep being served from the last good list
# - After a failure the next attempt is delayed with exponential backoff
#
# Usage:
#   cache = AllowListCache(ConfigAllowListSource(["jane@example.com"]))
#   await cache.ensure_fresh()
#   cache.contains("Jane@Example.com")  # True
# =============================================================================

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable

from lib.supabase_client import SupabaseClient
from lib.utils import ApplicationError, normalize_email

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_SECONDS = 300.0


class AllowListSourceError(ApplicationError):
    """Raised by a source when it could not produce a list."""

    def __init__(self, source: str, error: str):
        super().__init__(
            message=f"Failed to load approved emails from {source}: {error}",
            code="ALLOWLIST_SOURCE_ERROR",
            suggestion="Check the secret store configuration and connectivity",
            details={"source": source, "error": error},
        )


# =============================================================================
# Sources
# =============================================================================

class AllowListSource(ABC):
    """Somewhere approved emails can be loaded from."""

    name: str = "source"

    @abstractmethod
    async def fetch(self) -> list[str] | None:
        """
        Load the raw email list.

        Returns:
            The list (possibly empty), or None when the source has nothing
            to offer and the current list should be kept

        Raises:
            Exception: Any failure; the cache treats all of them alike
        """


class ConfigAllowListSource(AllowListSource):
    """Static list from configuration."""

    name = "configuration"

    def __init__(self, emails: Iterable[str]):
        self.emails = list(emails)

    async def fetch(self) -> list[str] | None:
        # An empty setting means "not configured", not "nobody is approved"
        return list(self.emails) or None


class SecretStoreAllowListSource(AllowListSource):
    """JSON array of emails stored as a Supabase Vault secret."""

    name = "secret store"

    def __init__(
        self,
        secret_name: str,
        fetch_secret: Callable[[str], str | None] = SupabaseClient.fetch_secret,
    ):
        self.secret_name = secret_name
        self._fetch_secret = fetch_secret

    async def fetch(self) -> list[str] | None:
        # supabase-py is synchronous; keep it off the event loop
        raw = await asyncio.to_thread(self._fetch_secret, self.secret_name)
        if raw is None:
            raise AllowListSourceError(self.name, f"secret '{self.secret_name}' not found")

        try:
            emails = json.loads(raw)
        except ValueError as e:
            raise AllowListSourceError(self.name, f"secret is not valid JSON: {e}") from e

        if emails is None:
            return None
        if not isinstance(emails, list) or not all(isinstance(e, str) for e in emails):
            raise AllowListSourceError(self.name, "secret must be a JSON array of strings")
        return emails


# =============================================================================
# Cache
# =============================================================================

@dataclass(frozen=True)
class AllowListSnapshot:
    """
    One immutable version of the approved list.

    The cache swaps whole snapshots, so a reader holding one sees either
    the old list and timestamp or the new ones, never a mix.
    """
    entries: frozenset[str]
    refreshed_at: float | None = None  # None = never loaded

    def age(self, now: float) -> float:
        if self.refreshed_at is None:
            return float("inf")
        return now - self.refreshed_at


class AllowListCache:
    """
    Process-wide approved email list with single-flight refresh.

    Attributes:
        source: Where the list is loaded from
        freshness_seconds: Max age before a refresh is attempted
        fetch_timeout: Seconds a single fetch may take before it counts as failed
        backoff_seconds: First retry delay after a failure (0 disables backoff)
        backoff_max_seconds: Cap on the retry delay
    """

    def __init__(
        self,
        source: AllowListSource,
        *,
        freshness_seconds: float = DEFAULT_FRESHNESS_SECONDS,
        fetch_timeout: float | None = 10.0,
        backoff_seconds: float = 0.0,
        backoff_max_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.freshness_seconds = freshness_seconds
        self.fetch_timeout = fetch_timeout
        self.backoff_seconds = backoff_seconds
        self.backoff_max_seconds = backoff_max_seconds
        self._clock = clock

        self._snapshot = AllowListSnapshot(entries=frozenset())
        self._lock = asyncio.Lock()
        self._consecutive_failures = 0
        self._retry_at: float | None = None
        self.fetch_count = 0

    # -------------------------------------------------------------------------
    # Reads (no lock)
    # -------------------------------------------------------------------------

    @property
    def snapshot(self) -> AllowListSnapshot:
        return self._snapshot

    @property
    def entries(self) -> frozenset[str]:
        return self._snapshot.entries

    @property
    def last_refreshed_at(self) -> float | None:
        return self._snapshot.refreshed_at

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def is_fresh(self) -> bool:
        return self._snapshot.age(self._clock()) < self.freshness_seconds

    def contains(self, email: str | None) -> bool:
        """Case-insensitive membership test."""
        normalized = normalize_email(email)
        return normalized is not None and normalized in self._snapshot.entries

    def _should_skip_refresh(self) -> bool:
        if self.is_fresh():
            return True
        # Backing off after a failure: serve the stale list for now
        return self._retry_at is not None and self._clock() < self._retry_at

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    async def ensure_fresh(self) -> None:
        """
        Reload the list if it is older than the freshness window.

        Never raises for source failures. Callers that find the list fresh
        return without touching the lock.
        """
        if self._should_skip_refresh():
            return

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self._should_skip_refresh():
                return
            await self._refresh_locked()

    async def refresh(self) -> bool:
        """
        Force a reload regardless of age.

        Returns:
            True if the list was replaced
        """
        async with self._lock:
            return await self._refresh_locked()

    async def _refresh_locked(self) -> bool:
        self.fetch_count += 1
        try:
            if self.fetch_timeout:
                emails = await asyncio.wait_for(self.source.fetch(), timeout=self.fetch_timeout)
            else:
                emails = await self.source.fetch()

        except asyncio.CancelledError:
            logger.warning(f"Approved email refresh from {self.source.name} was cancelled")
            raise

        except asyncio.TimeoutError:
            self._record_failure(f"timed out after {self.fetch_timeout}s")
            return False

        except Exception as e:
            self._record_failure(str(e))
            return False

        if emails is None:
            logger.warning(
                f"No approved emails available from {self.source.name}; "
                f"keeping {len(self._snapshot.entries)} cached entries"
            )
            return False

        entries = frozenset(
            normalized for normalized in (normalize_email(e) for e in emails) if normalized
        )
        self._snapshot = AllowListSnapshot(entries=entries, refreshed_at=self._clock())
        self._consecutive_failures = 0
        self._retry_at = None
        logger.info(f"Loaded {len(entries)} approved emails from {self.source.name}")
        return True

    def _record_failure(self, error: str) -> None:
        self._consecutive_failures += 1

        if self.backoff_seconds > 0:
            delay = min(
                self.backoff_seconds * (2 ** (self._consecutive_failures - 1)),
                self.backoff_max_seconds,
            )
            self._retry_at = self._clock() + delay
            retry_note = f"retrying in {delay:.0f}s"
        else:
            retry_note = "retrying on next request"

        logger.error(
            f"Failed to load approved emails from {self.source.name}: {error} "
            f"(attempt {self._consecutive_failures}, keeping "
            f"{len(self._snapshot.entries)} cached entries, {retry_note})"
        )
