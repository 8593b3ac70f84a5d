"""
Lambda entry point support: prime cached entries before each invocation.

The Lambda extension is not reachable during the init phase, so entries are
declared at module level and fetched on the first invocation. Later warm
invocations only refresh entries whose TTL has expired.

Usage:
    db_password = cached_secret('prod/db-password')

    @primed_handler()
    def lambda_handler(event, context):
        dsn = f'postgresql://app:{db_password}@db/app'
        ...
"""

import asyncio
import functools
from typing import Any, Callable, TypeVar

from .logging import get_logger, logging_context
from .registry import SecretRegistry, get_default_registry

logger = get_logger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def primed_handler(registry: SecretRegistry | None = None) -> Callable[[F], F]:
    """
    Decorate a synchronous Lambda handler so every registered entry is fresh
    (or as fresh as the side-car allows) before the handler body runs.

    Args:
        registry: Registry to prime (defaults to the process-wide registry,
            looked up at invocation time)

    Must not be applied to handlers invoked from inside a running event loop.
    """

    def decorator(handler: F) -> F:
        @functools.wraps(handler)
        def wrapper(event: Any, context: Any) -> Any:
            target = registry if registry is not None else get_default_registry()
            with logging_context(
                request_id=getattr(context, 'aws_request_id', None),
                function_name=getattr(context, 'function_name', None),
            ):
                asyncio.run(target.prime_all())
                logger.debug('handler.primed', entries=len(target))
                return handler(event, context)

        return wrapper  # type: ignore[return-value]

    return decorator
