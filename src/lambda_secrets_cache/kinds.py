"""
Parameter Store vs Secrets Manager variants.

The two kinds differ only in the side-car path they request and the field
their payload carries, so each is a small record rather than a subclass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
from urllib.parse import quote

# Characters encodeURIComponent leaves untouched, besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


class EntryKind(str, Enum):
    """Kind of cached value."""

    PARAMETER = 'Parameter'
    SECRET = 'Secret'


def encode_uri_component(value: str) -> str:
    """Percent-encode a name for use as a single query parameter value."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _parameter_path(name: str) -> str:
    return f'/systemsmanager/parameters/get/?name={encode_uri_component(name)}&withDecryption=true'


def _secret_path(name: str) -> str:
    return f'/secretsmanager/get?secretId={encode_uri_component(name)}&withDecryption=true'


def _parameter_value(payload: dict[str, Any]) -> Any:
    parameter = payload.get('Parameter')
    if isinstance(parameter, dict):
        return parameter.get('Value')
    return None


def _secret_value(payload: dict[str, Any]) -> Any:
    return payload.get('SecretString')


@dataclass(frozen=True)
class KindSpec:
    """Per-kind path builder, validity field and value extractor."""

    build_path: Callable[[str], str]
    value_field: str
    extract_value: Callable[[dict[str, Any]], Any]

    def is_valid(self, payload: Any) -> bool:
        """True when payload is a JSON object carrying this kind's field with a string value."""
        return (
            isinstance(payload, dict)
            and self.value_field in payload
            and isinstance(self.extract_value(payload), str)
        )


KIND_SPECS: dict[EntryKind, KindSpec] = {
    EntryKind.PARAMETER: KindSpec(
        build_path=_parameter_path,
        value_field='Parameter',
        extract_value=_parameter_value,
    ),
    EntryKind.SECRET: KindSpec(
        build_path=_secret_path,
        value_field='SecretString',
        extract_value=_secret_value,
    ),
}


def kind_spec(kind: EntryKind) -> KindSpec:
    """Look up the record for a kind."""
    return KIND_SPECS[EntryKind(kind)]
