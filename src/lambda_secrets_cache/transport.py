"""HTTP client for the AWS Parameters and Secrets Lambda Extension."""

from typing import Any, Protocol

import httpx

from .config import CacheSettings, get_settings
from .logging import get_logger

logger = get_logger(__name__)

TOKEN_HEADER = 'X-Aws-Parameters-Secrets-Token'


class Transport(Protocol):
    """Anything that can fetch one side-car path into a parsed payload or None."""

    async def fetch(self, path: str) -> dict[str, Any] | None: ...


class SidecarTransport:
    """
    Issues one GET per fetch to the extension listening on localhost.

    Never raises for side-car problems:
    - timeout / connection error: None
    - non-2xx status: None
    - body that is not a JSON object: None
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            settings: Side-car settings (defaults to get_settings())
            http_transport: Optional httpx transport, used by tests
        """
        self.settings = settings or get_settings()
        self._http_transport = http_transport

    def _headers(self) -> dict[str, str]:
        return {TOKEN_HEADER: self.settings.AWS_SESSION_TOKEN}

    async def fetch(self, path: str) -> dict[str, Any] | None:
        """
        GET a side-car path and parse the JSON body.

        Args:
            path: Path and query string, e.g. '/secretsmanager/get?secretId=x'

        Returns:
            Parsed JSON object, or None on any failure
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.settings.sidecar_base_url,
                timeout=self.settings.SIDECAR_TIMEOUT_SECONDS,
                transport=self._http_transport,
            ) as client:
                response = await client.get(path, headers=self._headers())
                response.raise_for_status()
                payload = response.json()

        except httpx.HTTPStatusError as e:
            logger.error(
                'transport.bad_status',
                path=path,
                status_code=e.response.status_code,
            )
            return None

        except httpx.TimeoutException as e:
            logger.error('transport.timeout', path=path, error_type=type(e).__name__)
            return None

        except httpx.HTTPError as e:
            logger.error(
                'transport.request_failed',
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            logger.error('transport.invalid_json', path=path, error=str(e))
            return None

        if not isinstance(payload, dict):
            logger.error(
                'transport.unexpected_body',
                path=path,
                body_type=type(payload).__name__,
            )
            return None

        logger.debug('transport.response_received', path=path)
        return payload
