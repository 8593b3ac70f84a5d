"""
Lazily refreshed cache entry for one SSM parameter or Secrets Manager secret.

An entry holds the last payload fetched through the Lambda extension, decides
when that payload is stale, and guarantees that staleness triggers at most one
concurrent refresh:

1. The first stale access flips status to REFRESHING and publishes a shared
   task before any I/O happens
2. Every caller arriving while that task runs awaits the same task
3. The task tries the side-car up to 3 times, back to back
4. Success replaces the value; exhaustion marks the entry FAILED and keeps the
   previous value (stale-but-available)

Entries are normally created at module level, outside the Lambda handler,
because the extension is not reachable during the init phase. Await one of the
async accessors (or SecretRegistry.prime_all()) before using read_sync().

Example:
    db_password = cached_secret('prod/db-password')

    async def handler(event, context):
        password = await db_password.read_value()
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from .config import get_settings
from .errors import NotYetPrimedError
from .kinds import EntryKind, kind_spec
from .logging import RefreshTimer, get_logger
from .models import EntryDiagnostics, FreshnessInfo
from .registry import get_default_registry
from .transport import SidecarTransport, Transport

if TYPE_CHECKING:
    from .registry import SecretRegistry

logger = get_logger(__name__)

MAX_ATTEMPTS = 3


class CacheStatus(str, Enum):
    """Refresh status of an entry."""

    PENDING = 'pending'  # never attempted
    REFRESHING = 'refreshing'
    FRESH = 'fresh'
    FAILED = 'failed'


@dataclass
class Freshness:
    """Freshness metadata of an entry."""

    refresh_after_seconds: int
    last_refresh_at: float | None = None
    status: CacheStatus = CacheStatus.PENDING


def _consume_refresh_error(task: asyncio.Task[CacheStatus]) -> None:
    # Logged as entry.refresh_error; every waiting caller may have been cancelled
    if not task.cancelled():
        task.exception()


class CachedEntry:
    """
    One cached parameter or secret.

    str(entry) returns the decoded value itself, so an entry can be dropped
    into a connection string or f-string once primed. That makes str() a
    sensitive operation: never log an entry with %s/str(). Use repr(),
    name_tag or to_diagnostics() for logging, none of which include the value.
    """

    def __init__(
        self,
        name: str,
        kind: EntryKind,
        refresh_after_seconds: int | None = None,
        transport: Transport | None = None,
        registry: SecretRegistry | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Create an entry and register it.

        Args:
            name: Parameter path ('/my/path/param') or secret id
            kind: EntryKind.PARAMETER or EntryKind.SECRET
            refresh_after_seconds: TTL override (defaults to DEFAULT_REFRESH_AFTER_SECONDS).
                This is on top of the extension's own cache, so only raise it for
                values that rarely change.
            transport: Side-car transport (defaults to a SidecarTransport built on first fetch)
            registry: Registry to join (defaults to the process-wide registry)
            clock: Monotonic clock in seconds, injectable for tests
        """
        if refresh_after_seconds is None:
            refresh_after_seconds = get_settings().DEFAULT_REFRESH_AFTER_SECONDS
        refresh_after_seconds = int(refresh_after_seconds)
        if refresh_after_seconds < 0:
            raise ValueError('refresh_after_seconds must be >= 0')

        self._name = name
        self._kind = EntryKind(kind)
        self._kind_spec = kind_spec(self._kind)
        self._transport = transport
        self._clock = clock
        self._in_flight: asyncio.Task[CacheStatus] | None = None

        self.value: dict[str, Any] | None = None
        self.freshness = Freshness(refresh_after_seconds=refresh_after_seconds)

        self.registry = registry if registry is not None else get_default_registry()
        self.registry.register(self)
        logger.debug('entry.registered', name_tag=self.name_tag)

    @property
    def name(self) -> str:
        """Parameter path and name, or secret id."""
        return self._name

    @property
    def kind(self) -> EntryKind:
        return self._kind

    @property
    def name_tag(self) -> str:
        """'name [Kind]', e.g. 'db-pass [Secret]'."""
        return f'{self._name} [{self._kind.value}]'

    @property
    def path(self) -> str:
        """URL path requested from the Lambda extension."""
        return self._kind_spec.build_path(self._name)

    @property
    def status(self) -> CacheStatus:
        return self.freshness.status

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = SidecarTransport()
        return self._transport

    # =========================================================================
    # State
    # =========================================================================

    def is_refreshing(self) -> bool:
        return self.freshness.status is CacheStatus.REFRESHING

    def is_stale(self) -> bool:
        """
        True when the next access should refresh.

        A failed previous attempt is always stale so the next access retries
        immediately instead of waiting out the TTL.
        """
        if self.is_refreshing():
            return False

        last_refresh_at = self.freshness.last_refresh_at
        if last_refresh_at is None or self.freshness.status is CacheStatus.FAILED:
            return True

        return self._clock() - last_refresh_at > self.freshness.refresh_after_seconds

    def is_valid(self) -> bool:
        """True when a payload of the expected shape for this kind is cached."""
        return self._kind_spec.is_valid(self.value)

    # =========================================================================
    # Refresh
    # =========================================================================

    async def ensure_fresh(self) -> CacheStatus:
        """
        Refresh if stale, otherwise join the in-flight refresh if any.

        Safe to call redundantly; concurrent callers share one outcome.
        """
        if self.is_stale():
            return await self.refresh()
        if self._in_flight is not None:
            return await asyncio.shield(self._in_flight)
        return self.freshness.status

    async def refresh(self) -> CacheStatus:
        """
        Refresh whether or not the value has expired.

        A refresh already in flight is joined, not restarted. Exhausting all
        attempts returns CacheStatus.FAILED rather than raising.
        """
        if not self.is_refreshing():
            # Publish before the first await so later callers join this task
            self.freshness.status = CacheStatus.REFRESHING
            self._in_flight = asyncio.ensure_future(self._run_refresh())
            self._in_flight.add_done_callback(_consume_refresh_error)
            logger.debug('entry.refresh_started', name_tag=self.name_tag)

        # Shielded: cancelling one caller must not abort the shared fetch
        return await asyncio.shield(self._in_flight)

    async def _run_refresh(self) -> CacheStatus:
        timer = RefreshTimer()
        try:
            payload = await self._fetch_with_retries(timer)

            if payload is None:
                self.freshness.status = CacheStatus.FAILED
                logger.error('entry.refresh_failed', name_tag=self.name_tag, **timer.summary())
            else:
                self.value = payload
                self.freshness.last_refresh_at = self._clock()
                self.freshness.status = CacheStatus.FRESH
                logger.info(
                    'entry.refreshed',
                    name_tag=self.name_tag,
                    is_valid=self.is_valid(),
                    **timer.summary(),
                )
            return self.freshness.status

        except Exception as e:
            logger.error(
                'entry.refresh_error',
                name_tag=self.name_tag,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        finally:
            # Also covers cancellation when the event loop shuts down mid-refresh
            if self.freshness.status is CacheStatus.REFRESHING:
                self.freshness.status = CacheStatus.FAILED
            self._in_flight = None

    async def _fetch_with_retries(self, timer: RefreshTimer) -> dict[str, Any] | None:
        """Call the transport until it returns a payload, at most MAX_ATTEMPTS times."""
        path = self.path

        async def attempt() -> dict[str, Any] | None:
            with timer.attempt():
                return await self.transport.fetch(path)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            retry=retry_if_result(lambda payload: payload is None),
            before=self._warn_on_retry,
            retry_error_callback=lambda retry_state: None,
        )
        return await retrying(attempt)

    def _warn_on_retry(self, retry_state: RetryCallState) -> None:
        if retry_state.attempt_number > 1:
            logger.warning(
                'entry.refresh_retry',
                name_tag=self.name_tag,
                attempt=retry_state.attempt_number,
                max_attempts=MAX_ATTEMPTS,
            )

    # =========================================================================
    # Reads
    # =========================================================================

    async def read(self) -> dict[str, Any] | None:
        """
        Ensure freshness, then return the full payload.

        The payload may be the stale previous one if the refresh failed, or
        None if no refresh has ever succeeded.
        """
        await self.ensure_fresh()
        return self.value

    async def read_value(self) -> str | None:
        """Ensure freshness, then return the decoded value (None if unavailable)."""
        await self.read()
        if not self.is_valid():
            return None
        return self._kind_spec.extract_value(self.value)

    def read_sync(self) -> str:
        """
        Return the decoded value of the current payload without any I/O.

        The value may have expired; only an async accessor refreshes it.

        Raises:
            NotYetPrimedError: no valid payload has been fetched yet
        """
        if not self.is_valid():
            raise NotYetPrimedError(
                f'{self.name_tag} has no value. Await read(), read_value() or '
                'refresh() before reading synchronously',
                context={'name': self._name, 'status': self.freshness.status.value},
            )
        return self._kind_spec.extract_value(self.value)

    # =========================================================================
    # Introspection
    # =========================================================================

    def to_diagnostics(self) -> EntryDiagnostics:
        """Safe-to-log metadata; never includes the value."""
        return EntryDiagnostics(
            name=self._name,
            kind=self._kind,
            name_tag=self.name_tag,
            freshness=FreshnessInfo(
                status=self.freshness.status.value,
                last_refresh_at=self.freshness.last_refresh_at,
                refresh_after_seconds=self.freshness.refresh_after_seconds,
            ),
            is_refreshing=self.is_refreshing(),
            is_stale=self.is_stale(),
            is_valid=self.is_valid(),
        )

    def __str__(self) -> str:
        # Emits the secret itself, see class docstring
        return str(self.read_sync())

    def __repr__(self) -> str:
        return f'<CachedEntry {self.name_tag} status={self.freshness.status.value}>'


def cached_parameter(name: str, **kwargs: Any) -> CachedEntry:
    """Create a Parameter Store entry ('/my/path/param')."""
    return CachedEntry(name, EntryKind.PARAMETER, **kwargs)


def cached_secret(name: str, **kwargs: Any) -> CachedEntry:
    """Create a Secrets Manager entry."""
    return CachedEntry(name, EntryKind.SECRET, **kwargs)
