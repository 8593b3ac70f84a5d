"""
Custom exceptions for the parameter and secret cache.

Only programmer errors and unexpected internal failures are exceptions.
Side-car failures are absorbed by the transport, and exhausted retries are
reported through CacheStatus.FAILED rather than raised.
"""

from typing import Any


class SecretsCacheError(Exception):
    """Base exception for all cache errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class NotYetPrimedError(SecretsCacheError):
    """
    A synchronous read was attempted before any successful refresh.

    Await read(), read_value(), ensure_fresh() or refresh() at least once
    before calling read_sync() or str() on an entry.
    """

    pass


class PrimeError(SecretsCacheError):
    """Priming a registry failed for a reason other than an ordinary fetch failure."""

    pass
