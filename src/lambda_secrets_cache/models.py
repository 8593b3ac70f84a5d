"""
Diagnostic models for cached entries.

These are safe to log: they describe an entry's name, kind and freshness
but never carry the fetched value.
"""

from pydantic import BaseModel, Field

from .kinds import EntryKind


class FreshnessInfo(BaseModel):
    """Freshness metadata of one entry."""

    status: str = Field(..., description='pending, refreshing, fresh or failed')
    last_refresh_at: float | None = Field(
        default=None, description='Clock reading of the last successful refresh'
    )
    refresh_after_seconds: int = Field(..., ge=0, description='TTL in seconds')


class EntryDiagnostics(BaseModel):
    """Metadata of one cached entry, excluding its value."""

    name: str
    kind: EntryKind
    name_tag: str
    freshness: FreshnessInfo
    is_refreshing: bool
    is_stale: bool
    is_valid: bool
