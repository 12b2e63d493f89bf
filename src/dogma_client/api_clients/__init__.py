"""API Client Abstractions for the Dogma server.

All HTTP functionality is contained within the client classes of this
package; the watch subsystem reaches the network only through
``DogmaAPIClient.send``.
"""

from .base_client import (
    DogmaAPIClient,
    APIClientError,
    AuthenticationError,
    ConflictError,
    InvalidParamsError,
    ResourceNotFoundError,
    ResponseDecodeError,
    ServerError,
)
from .network_error_handler import (
    NetworkErrorHandler,
    ResponseEncodingError,
    TransportError,
    TransportTimeoutError,
    TransportConnectionError,
)
from .projects_client import ProjectsAPIClient
from .repos_client import ProjectClient
from .content_client import ContentClient

__all__ = [
    # Base client
    "DogmaAPIClient",
    "APIClientError",
    "AuthenticationError",
    "ConflictError",
    "InvalidParamsError",
    "ResourceNotFoundError",
    "ResponseDecodeError",
    "ServerError",
    # Transport errors
    "NetworkErrorHandler",
    "ResponseEncodingError",
    "TransportError",
    "TransportTimeoutError",
    "TransportConnectionError",
    # Service clients
    "ProjectsAPIClient",
    "ProjectClient",
    "ContentClient",
]
