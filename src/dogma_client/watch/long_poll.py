"""
Long-poll cycle: one watch call and the interpretation of its outcome.

The server holds a watch request open until the target changes past the
last known revision or the wait hint elapses. Some deployments answer an
elapsed wait with 304, others let the client time out; both mean "no change".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import ValidationError

from ..api_clients.base_client import DogmaAPIClient
from ..api_clients.network_error_handler import (
    ResponseEncodingError,
    TransportError,
    TransportTimeoutError,
)
from ..models import Revision, WatchUpdate
from .targets import WatchDecodeError, WatchRequest

logger = logging.getLogger(__name__)


class WatchErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CLIENT = "client"
    SERVER = "server"
    TRANSPORT = "transport"
    DECODE = "decode"


@dataclass(frozen=True)
class Updated:
    revision: Revision
    value: WatchUpdate


@dataclass(frozen=True)
class NotModified:
    pass


@dataclass(frozen=True)
class WatchError:
    kind: WatchErrorKind
    status_code: Optional[int] = None
    message: str = ""

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.kind.value} error (HTTP {self.status_code}): {self.message}"
        return f"{self.kind.value} error: {self.message}"


WatchResult = Union[Updated, NotModified, WatchError]


class LongPoller:
    """Performs single watch calls against a Dogma server."""

    def __init__(self, api_client: DogmaAPIClient, timeout_margin: float = 10.0):
        """Initialize the poller.

        Args:
            api_client: Client providing the HTTP transport
            timeout_margin: Seconds added to the server wait hint to form
                the client-side timeout of each call
        """
        self.api_client = api_client
        self.timeout_margin = timeout_margin

    async def poll(self, request: WatchRequest) -> WatchResult:
        """Perform exactly one watch call and map its outcome.

        Never raises for network or HTTP failures; those become
        ``WatchError`` values. Task cancellation propagates.
        """
        target = request.target
        params = target.watch_params()

        try:
            response = await self.api_client.send(
                "GET",
                target.watch_path(),
                headers=request.headers(),
                params=params or None,
                timeout=request.timeout + self.timeout_margin,
            )
        except TransportTimeoutError as e:
            logger.debug(f"Watch on {target} timed out without a change")
            return WatchError(WatchErrorKind.TIMEOUT, message=str(e))
        except ResponseEncodingError as e:
            return WatchError(WatchErrorKind.DECODE, message=str(e))
        except TransportError as e:
            return WatchError(WatchErrorKind.TRANSPORT, message=str(e))

        status_code = response.status_code
        if status_code == 304:
            return NotModified()
        if 400 <= status_code < 500:
            return WatchError(
                WatchErrorKind.CLIENT, status_code, _error_detail(response.text)
            )
        if status_code >= 500:
            return WatchError(
                WatchErrorKind.SERVER, status_code, _error_detail(response.text)
            )
        if not 200 <= status_code < 300:
            return WatchError(
                WatchErrorKind.DECODE,
                status_code,
                f"Unexpected status for a watch response: {status_code}",
            )

        try:
            value = target.decode(response.json())
        except (ValueError, ValidationError, WatchDecodeError) as e:
            logger.debug(f"Undecodable watch response for {target}: {e}")
            return WatchError(WatchErrorKind.DECODE, status_code, str(e))

        return Updated(value.revision, value)


def _error_detail(text: str, limit: int = 200) -> str:
    text = text.strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text
