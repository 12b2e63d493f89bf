"""Base Dogma API Client.

Provides the HTTP transport, bearer token authentication and response status
handling shared by all Dogma API operations.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from ..config import ClientConfig, WatchConfig
from .network_error_handler import NetworkErrorHandler

logger = logging.getLogger(__name__)

QueryParams = Union[Dict[str, Any], List[Tuple[str, Any]]]


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable: bool = False


class AuthenticationError(APIClientError):
    """Exception raised when the server rejects the token (401/403)."""

    pass


class ResourceNotFoundError(APIClientError):
    """Exception raised when a project, repository or file does not exist."""

    pass


class ConflictError(APIClientError):
    """Exception raised when a resource already exists or a push conflicts."""

    pass


class ServerError(APIClientError):
    """Exception raised for server-side errors (5xx responses)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.is_retryable = True


class ResponseDecodeError(APIClientError):
    """Exception raised when a successful response body cannot be decoded."""

    pass


class InvalidParamsError(APIClientError):
    """Exception raised when a call is rejected before reaching the server."""

    pass


class DogmaAPIClient:
    """Base API client with authentication and common HTTP functionality."""

    def __init__(
        self,
        server_url: str,
        token: Optional[str] = None,
        request_timeout: float = 30.0,
        watch_config: Optional[WatchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            server_url: Base URL of the Dogma server
            token: Bearer token; requests are sent anonymously when None
            request_timeout: Default timeout for a single request in seconds
            watch_config: Settings for watch streams opened by this client
            transport: Optional httpx transport, mainly for tests
        """
        self.server_url = server_url.rstrip("/")
        self.request_timeout = request_timeout
        self.watch_config = watch_config or WatchConfig()
        self._token = token
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None
        self._network_error_handler = NetworkErrorHandler()

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        return cls(
            server_url=config.server_url,
            token=config.token,
            request_timeout=config.request_timeout,
            watch_config=config.watch,
            transport=transport,
        )

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            # No connection cap: every open watch stream holds a connection
            # for up to the long-poll timeout.
            limits = httpx.Limits(
                max_connections=None,
                max_keepalive_connections=20,
                keepalive_expiry=30.0,
            )

            self._session = httpx.AsyncClient(
                timeout=httpx.Timeout(self.request_timeout),
                limits=limits,
                follow_redirects=True,
                verify=True,
                transport=self._transport,
            )
        return self._session

    def _build_headers(
        self, method: str, headers: Optional[Dict[str, str]]
    ) -> Dict[str, str]:
        request_headers: Dict[str, str] = {}
        if method.upper() == "PATCH":
            request_headers["Content-Type"] = "application/json-patch+json"
        else:
            request_headers["Content-Type"] = "application/json"

        if self._token:
            request_headers["Authorization"] = f"Bearer {self._token}"

        if headers:
            request_headers.update(headers)
        return request_headers

    async def send(
        self,
        method: str,
        endpoint: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[bytes] = None,
        params: Optional[QueryParams] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a single request and return the response whatever its status.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path, starting with ``/``
            headers: Extra request headers
            body: Raw request body
            params: Query parameters; a list of pairs allows repeated keys
            timeout: Bound on the whole call including connection setup

        Returns:
            HTTP response object with its body already read

        Raises:
            TransportTimeoutError: If the call does not finish within ``timeout``
            TransportConnectionError: If the server cannot be reached
            ResponseEncodingError: If the body does not match its Content-Encoding
            TransportError: If the request fails for any other reason, including
                a redirect loop
        """
        url = f"{self.server_url}{endpoint}"
        effective_timeout = self.request_timeout if timeout is None else timeout

        try:
            response = await asyncio.wait_for(
                self.session.request(
                    method,
                    url,
                    headers=self._build_headers(method, headers),
                    content=body,
                    params=params,
                    timeout=httpx.Timeout(effective_timeout),
                ),
                timeout=effective_timeout,
            )
        except (asyncio.TimeoutError, httpx.RequestError) as e:
            transport_error = self._network_error_handler.classify_transport_error(e)
            logger.debug(f"{method} {endpoint} failed: {transport_error}")
            raise transport_error from e

        logger.debug(f"{method} {endpoint} -> {response.status_code}")
        return response

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        """Raise the API error matching a non-2xx response."""
        status_code = response.status_code
        if 200 <= status_code < 300:
            return

        error_detail = f"HTTP {status_code}"
        try:
            error_data = response.json()
            if isinstance(error_data, dict):
                error_detail = error_data.get(
                    "message", error_data.get("detail", error_detail)
                )
        except ValueError:
            if response.text:
                error_detail = response.text

        message = f"Failed to {action}: {error_detail}"
        if status_code in (401, 403):
            raise AuthenticationError(message, status_code)
        if status_code == 404:
            raise ResourceNotFoundError(message, status_code)
        if status_code == 409:
            raise ConflictError(message, status_code)
        if status_code >= 500:
            raise ServerError(message, status_code)
        raise APIClientError(message, status_code)

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        action: str,
        json_body: Any = None,
        params: Optional[QueryParams] = None,
        allow_empty: bool = False,
    ) -> Any:
        """Make a single request and decode its JSON response.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            action: Short description used in error messages
            json_body: Value to send as the JSON request body
            params: Query parameters
            allow_empty: Return None instead of failing on an empty body

        Raises:
            APIClientError: If the server answers with an error status
            ResponseDecodeError: If the body is not valid JSON
            TransportError: If the request cannot be completed
        """
        body = None
        if json_body is not None:
            body = json.dumps(json_body).encode("utf-8")

        response = await self.send(method, endpoint, body=body, params=params)
        self._raise_for_status(response, action)

        if not response.content:
            if allow_empty:
                return None
            raise ResponseDecodeError(
                f"Failed to {action}: empty response body", response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"Failed to {action}: invalid JSON response: {e}",
                response.status_code,
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def __del__(self):
        """Cleanup when object is destroyed."""
        session = getattr(self, "_session", None)
        if session and not session.is_closed:
            logger.warning("DogmaAPIClient was not properly closed")
