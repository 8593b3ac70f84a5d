"""
Directory of cached entries, with bulk priming and diagnostics.

Entries join a registry when they are constructed. Most applications use the
process-wide default registry; tests and multi-tenant setups pass their own
SecretRegistry to each entry instead:

    registry = SecretRegistry()
    db_password = cached_secret('prod/db-password', registry=registry)
    await registry.prime_all()

reset_default_registry() drops the default instance; entries created
afterwards join a new, empty one.
"""

from __future__ import annotations

import asyncio
import json
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Iterator

from .errors import PrimeError
from .logging import get_logger

if TYPE_CHECKING:
    from .entry import CachedEntry
    from .models import EntryDiagnostics

logger = get_logger(__name__)


class SecretRegistry:
    """
    Insertion-ordered collection of CachedEntry objects.

    Names are not required to be unique; lookup() returns the first match.
    """

    def __init__(self):
        self._entries: list[CachedEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CachedEntry]:
        return iter(list(self._entries))

    def register(self, entry: CachedEntry) -> None:
        """Append an entry."""
        self._entries.append(entry)

    def lookup(self, name: str) -> CachedEntry | None:
        """First registered entry with this name, or None."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def clear(self) -> None:
        """Forget every entry. Existing entries keep working on their own."""
        self._entries.clear()

    async def prime_all(self) -> bool:
        """
        Ensure every entry is fresh, concurrently.

        Call once during cold start (and cheaply on later invocations) so the
        first-fetch latency is paid up front. Individual fetch failures are
        visible through each entry's status, not through this call.

        Returns:
            True once every entry has completed

        Raises:
            PrimeError: an entry's refresh raised unexpectedly
        """
        entries = list(self._entries)
        try:
            await asyncio.gather(*(entry.ensure_fresh() for entry in entries))
        except Exception as e:
            logger.error(
                'registry.prime_failed',
                entries=len(entries),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PrimeError(
                f'Priming failed: {e}',
                context={'error_type': type(e).__name__},
            ) from e

        logger.debug(
            'registry.primed',
            entries=len(entries),
            stale=[entry.name_tag for entry in entries if entry.is_stale()],
        )
        return True

    def list_names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    def list_name_tags(self) -> list[str]:
        """'name [Kind]' for every entry."""
        return [entry.name_tag for entry in self._entries]

    def to_diagnostics(self) -> list[EntryDiagnostics]:
        """Per-entry metadata, safe to log (no values)."""
        return [entry.to_diagnostics() for entry in self._entries]

    def to_dict(self) -> dict[str, Any]:
        return {'objects': [d.model_dump(mode='json') for d in self.to_diagnostics()]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@lru_cache
def get_default_registry() -> SecretRegistry:
    """Process-wide registry singleton."""
    return SecretRegistry()


def reset_default_registry() -> None:
    """Drop the process-wide registry; the next get_default_registry() builds a new one."""
    get_default_registry.cache_clear()
