"""Long-poll watch subsystem.

Turns a sequence of blocking watch calls into a cancellable stream of
change notifications.
"""

from .classifier import (
    Abort,
    BackoffPolicy,
    ErrorClassifier,
    RetryAfterBackoff,
    RetryDecision,
    RetryImmediately,
)
from .long_poll import (
    LongPoller,
    NotModified,
    Updated,
    WatchError,
    WatchErrorKind,
    WatchResult,
)
from .stream import WatchAbortedError, WatchStream
from .targets import (
    FileWatchTarget,
    RepoWatchTarget,
    WatchDecodeError,
    WatchRequest,
    WatchTarget,
)

__all__ = [
    # Targets
    "FileWatchTarget",
    "RepoWatchTarget",
    "WatchTarget",
    "WatchRequest",
    "WatchDecodeError",
    # Long-poll cycle
    "LongPoller",
    "WatchResult",
    "Updated",
    "NotModified",
    "WatchError",
    "WatchErrorKind",
    # Retry policy
    "ErrorClassifier",
    "BackoffPolicy",
    "RetryDecision",
    "RetryImmediately",
    "RetryAfterBackoff",
    "Abort",
    # Stream
    "WatchStream",
    "WatchAbortedError",
]
