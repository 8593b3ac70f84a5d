"""
Pytest configuration and shared fixtures.

Key fixtures:
- registry: a fresh SecretRegistry per test
- fake_clock: manually advanced monotonic clock
- secret_payload / parameter_payload: extension response bodies

The process-wide default registry is reset after every test.
"""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from lambda_secrets_cache.registry import SecretRegistry, reset_default_registry


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_default_registry():
    yield
    reset_default_registry()


@pytest.fixture
def registry() -> SecretRegistry:
    """Isolated registry for a single test."""
    return SecretRegistry()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def secret_payload() -> dict:
    """Secrets Manager response from the extension."""
    return {
        'ARN': 'arn:aws:secretsmanager:us-east-1:123456789012:secret:db-pass-AbCdEf',
        'Name': 'db-pass',
        'SecretString': 'p@ss1',
        'VersionId': 'v1',
    }


@pytest.fixture
def parameter_payload() -> dict:
    """Parameter Store response from the extension."""
    return {
        'Parameter': {
            'Name': '/my/path/param',
            'Type': 'SecureString',
            'Value': 'param-value',
            'Version': 3,
        }
    }
