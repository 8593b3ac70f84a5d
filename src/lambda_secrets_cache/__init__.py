"""
Lambda Secrets Cache

Process-local, lazily refreshed cache for SSM Parameter Store parameters and
Secrets Manager secrets fetched through the AWS Parameters and Secrets Lambda
Extension, with single-flight refreshes and a synchronous read path.
"""

__version__ = '0.1.0'

from .config import CacheSettings, get_settings
from .entry import (
    CachedEntry,
    CacheStatus,
    Freshness,
    cached_parameter,
    cached_secret,
)
from .errors import NotYetPrimedError, PrimeError, SecretsCacheError
from .kinds import EntryKind
from .lambda_support import primed_handler
from .logging import configure_logging, get_logger, logging_context
from .models import EntryDiagnostics, FreshnessInfo
from .registry import SecretRegistry, get_default_registry, reset_default_registry
from .transport import SidecarTransport

__all__ = [
    # Version
    '__version__',
    # Entries
    'CachedEntry',
    'CacheStatus',
    'Freshness',
    'EntryKind',
    'cached_parameter',
    'cached_secret',
    # Registry
    'SecretRegistry',
    'get_default_registry',
    'reset_default_registry',
    # Transport
    'SidecarTransport',
    # Config
    'CacheSettings',
    'get_settings',
    # Lambda
    'primed_handler',
    # Diagnostics
    'EntryDiagnostics',
    'FreshnessInfo',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    # Errors
    'SecretsCacheError',
    'NotYetPrimedError',
    'PrimeError',
]
