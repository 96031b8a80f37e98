"""
Base Backend Client for the hosted backend-as-a-service

Base class for every adapter that talks to the hosted backend (identity,
record store, blob store). Handles:
1. Backend configuration checks
2. apikey / bearer headers (user token or anonymous key)
3. HTTP client management
4. Timeout control

Adapters never raise across this boundary: every call returns a
BackendResult(data, error) pair.
"""

import enum
import logging
from typing import Any, Dict, NamedTuple, Optional

import httpx

from core.config import BackendConfig

logger = logging.getLogger(__name__)


class BackendNotConfiguredError(RuntimeError):
    """Raised when the backend URL or anonymous key is missing"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "Backend credentials are not configured. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY in the environment."
        )


class BackendErrorKind(str, enum.Enum):
    """Failure class of a backend call"""
    CONNECTIVITY = "connectivity"
    REJECTED = "rejected"


class BackendError(NamedTuple):
    """Error returned by the backend (or by the transport)"""
    message: str
    status_code: Optional[int] = None
    code: Optional[str] = None
    kind: BackendErrorKind = BackendErrorKind.REJECTED

    @property
    def is_connectivity(self) -> bool:
        return self.kind == BackendErrorKind.CONNECTIVITY


class BackendResult(NamedTuple):
    """(data, error) pair returned by every backend adapter"""
    data: Any = None
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def error_from_response(response: httpx.Response) -> BackendError:
    """Build a BackendError from a non-2xx response body"""
    message = response.text or f"HTTP {response.status_code}"
    code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        # PostgREST uses message/code, the identity provider msg/error_description,
        # the storage API message/error
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or message
        )
        code = body.get("code") or body.get("error_code") or body.get("statusCode")
        if code is not None:
            code = str(code)
    return BackendError(message=str(message), status_code=response.status_code, code=code)


def connectivity_error(exc: Exception) -> BackendError:
    """Build a BackendError for a transport failure"""
    return BackendError(
        message=f"Failed to fetch: {exc}",
        kind=BackendErrorKind.CONNECTIVITY,
    )


class BackendClient:
    """
    Base class for hosted backend adapters

    Usage:
        class RecordStore(BackendClient):
            async def select(self, table: str):
                return await self.request_json("GET", f"{self.config.rest_url}/{table}")
    """

    def __init__(
        self,
        config: BackendConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not config.is_configured:
            raise BackendNotConfiguredError()

        self.config = config
        self.client = http_client or httpx.AsyncClient(timeout=config.request_timeout)

        logger.debug(f"Initialized {self.__class__.__name__} for {config.url}")

    def _headers(
        self,
        access_token: Optional[str] = None,
        extra: Optional[Dict[str, str]] = None,
    ) -> Dict[str, str]:
        """Build request headers; anonymous requests use the anon key as bearer"""
        headers = {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {access_token or self.config.anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        url: str,
        access_token: Optional[str] = None,
        params: Optional[Any] = None,
        json: Optional[Any] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> BackendResult:
        """Send a request; transport failures and non-2xx become BackendError"""
        try:
            response = await self.client.request(
                method,
                url,
                params=params,
                json=json,
                content=content,
                headers=self._headers(access_token, headers),
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            return BackendResult(error=connectivity_error(e))

        if response.status_code >= 400:
            error = error_from_response(response)
            logger.warning(f"{method} {url} rejected ({response.status_code}): {error.message}")
            return BackendResult(error=error)

        return BackendResult(data=response)

    async def request_json(self, method: str, url: str, **kwargs) -> BackendResult:
        """Send a request and decode the JSON body (None for empty bodies)"""
        result = await self.request(method, url, **kwargs)
        if result.error:
            return BackendResult(error=result.error)

        response = result.data
        if not response.content:
            return BackendResult(data=None)
        try:
            return BackendResult(data=response.json())
        except ValueError as e:
            return BackendResult(error=BackendError(message=f"Invalid JSON from backend: {e}",
                                                    status_code=response.status_code))

    async def health_check(self) -> bool:
        """Check that the backend answers at all"""
        result = await self.request("GET", f"{self.config.auth_url}/health")
        return result.ok

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.__class__.__name__}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


__all__ = [
    "BackendClient",
    "BackendError",
    "BackendErrorKind",
    "BackendResult",
    "BackendNotConfiguredError",
    "error_from_response",
    "connectivity_error",
]
