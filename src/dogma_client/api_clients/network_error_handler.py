"""Network Error Handler for the Dogma API client.

Classifies low-level httpx and asyncio failures into the transport error
taxonomy used by the rest of the client. Status codes are not handled here:
a response with a 4xx/5xx status is still a successful transport call.
"""

import asyncio
import logging
import re
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Exception raised when an HTTP request could not be completed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class TransportTimeoutError(TransportError):
    """Exception raised when a request exceeds its overall timeout."""

    pass


class TransportConnectionError(TransportError):
    """Exception raised when a connection to the server cannot be established."""

    pass


class ResponseEncodingError(TransportError):
    """Exception raised when a response body cannot be decoded per its Content-Encoding."""

    pass


class NetworkErrorHandler:
    """Maps httpx exceptions onto transport errors with readable messages."""

    def __init__(self):
        self._dns_error_patterns = [
            r"name.*resolution.*failed",
            r"name.*or.*service.*not.*known",
            r"nodename.*nor.*servname.*provided",
            r"temporary.*failure.*in.*name.*resolution",
        ]
        self._connection_error_patterns = [
            r"connection.*refused",
            r"connection.*reset",
            r"network.*is.*unreachable",
            r"no.*route.*to.*host",
        ]
        self._ssl_error_patterns = [
            r"ssl.*certificate.*verification.*failed",
            r"certificate.*verify.*failed",
            r"ssl.*handshake.*failed",
            r"bad.*certificate",
        ]

    def classify_transport_error(self, error: BaseException) -> TransportError:
        """Classify a failed request.

        Args:
            error: The exception raised by httpx or by the overall timeout

        Returns:
            The transport error to raise in its place
        """
        error_message = str(error).lower()

        # ConnectTimeout is a TimeoutException, so connection establishment
        # counts against the same timeout as the rest of the call.
        if isinstance(error, (asyncio.TimeoutError, httpx.TimeoutException)):
            return TransportTimeoutError("Request timed out", cause=error)

        if isinstance(error, httpx.ConnectError):
            return self._classify_connect_error(error, error_message)

        if isinstance(error, httpx.DecodingError):
            return ResponseEncodingError(
                f"Response body could not be decoded: {error}", cause=error
            )

        if isinstance(error, httpx.TooManyRedirects):
            return TransportError(f"Redirect loop: {error}", cause=error)

        if isinstance(error, httpx.RequestError):
            return TransportError(f"Network error: {error}", cause=error)

        logger.debug(f"Unclassified transport failure: {error!r}")
        return TransportError(f"Unknown network error: {error}", cause=error)

    def _classify_connect_error(
        self, error: httpx.ConnectError, error_message: str
    ) -> TransportConnectionError:
        """Build a connection error with a message describing the failure."""
        if any(re.search(p, error_message) for p in self._dns_error_patterns):
            return TransportConnectionError(
                "Cannot resolve server address. Check the server URL.", cause=error
            )

        if any(re.search(p, error_message) for p in self._ssl_error_patterns):
            return TransportConnectionError(
                "SSL certificate verification failed.", cause=error
            )

        if any(re.search(p, error_message) for p in self._connection_error_patterns):
            return TransportConnectionError(
                "Cannot connect to server. Check if server is running and accessible.",
                cause=error,
            )

        return TransportConnectionError(f"Connection failed: {error}", cause=error)
