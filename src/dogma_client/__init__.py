"""Typed asyncio client for the Dogma configuration repository service."""

from .api_clients import (
    APIClientError,
    AuthenticationError,
    ConflictError,
    InvalidParamsError,
    ResourceNotFoundError,
    ResponseDecodeError,
    ServerError,
    ResponseEncodingError,
    TransportConnectionError,
    TransportError,
    TransportTimeoutError,
)
from .client import DogmaClient, RepoClient
from .config import ClientConfig, WatchConfig
from .models import (
    Author,
    Change,
    ChangeType,
    CommitMessage,
    Entry,
    EntryType,
    ListEntry,
    Markup,
    Project,
    PushResult,
    Query,
    QueryType,
    Repository,
    Revision,
    WatchFileResult,
    WatchRepoResult,
)
from .watch import (
    FileWatchTarget,
    RepoWatchTarget,
    WatchAbortedError,
    WatchErrorKind,
    WatchStream,
)

__version__ = "0.1.0"

__all__ = [
    "DogmaClient",
    "RepoClient",
    "ClientConfig",
    "WatchConfig",
    # Models
    "Author",
    "Change",
    "ChangeType",
    "CommitMessage",
    "Entry",
    "EntryType",
    "ListEntry",
    "Markup",
    "Project",
    "PushResult",
    "Query",
    "QueryType",
    "Repository",
    "Revision",
    "WatchFileResult",
    "WatchRepoResult",
    # Watch
    "FileWatchTarget",
    "RepoWatchTarget",
    "WatchStream",
    "WatchAbortedError",
    "WatchErrorKind",
    # Errors
    "APIClientError",
    "AuthenticationError",
    "ConflictError",
    "InvalidParamsError",
    "ResourceNotFoundError",
    "ResponseDecodeError",
    "ServerError",
    "ResponseEncodingError",
    "TransportError",
    "TransportTimeoutError",
    "TransportConnectionError",
]
