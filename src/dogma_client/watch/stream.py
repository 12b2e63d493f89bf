"""Watch Stream: a cancellable async iterator of change notifications.

Each pull runs long-poll cycles until one of them produces an update or the
subscription ends. Keep-alive outcomes (304, elapsed waits) and transient
failures are absorbed here; callers only ever see updates, a single terminal
``WatchAbortedError``, or a clean end after ``cancel()``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional, Tuple

from ..config import WatchConfig
from ..models import Revision, WatchUpdate
from .classifier import (
    Abort,
    BackoffPolicy,
    ErrorClassifier,
    RetryAfterBackoff,
    RetryImmediately,
)
from .long_poll import LongPoller, NotModified, Updated, WatchErrorKind
from .targets import WatchRequest, WatchTarget

logger = logging.getLogger(__name__)


class WatchAbortedError(Exception):
    """Raised once when a watch stream ends because of a non-retryable error."""

    def __init__(
        self,
        reason: str,
        kind: WatchErrorKind,
        status_code: Optional[int] = None,
        detail: str = "",
    ):
        message = reason if not detail else f"{reason}: {detail}"
        super().__init__(message)
        self.reason = reason
        self.kind = kind
        self.status_code = status_code
        self.detail = detail


class WatchStream:
    """A subscription to one watch target.

    Use as ``async for update in stream``. Each stream owns its subscription
    state; streams opened on the same target do not share anything but the
    HTTP connection pool.
    """

    def __init__(
        self,
        poller: LongPoller,
        target: WatchTarget,
        from_revision: Optional[Revision] = None,
        config: Optional[WatchConfig] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        """Initialize the stream. No request is made until the first pull.

        Args:
            poller: Performs the individual long-poll calls
            target: File or repository to watch
            from_revision: Revision the caller has already observed; None
                means nothing has been observed yet
            config: Watch timeouts and backoff settings
            classifier: Retry policy; built from ``config`` when omitted
        """
        self.poller = poller
        self.target = target
        self.config = config or WatchConfig()
        self.classifier = classifier or ErrorClassifier(
            BackoffPolicy.from_config(self.config)
        )

        self._last_known_revision = from_revision
        self._consecutive_errors = 0
        self._cancelled = False
        self._finished = False
        self._pause_before_next_poll = False
        self._inflight: Optional["asyncio.Future[Any]"] = None

    @property
    def last_known_revision(self) -> Optional[Revision]:
        return self._last_known_revision

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop the stream. Safe to call repeatedly and from other tasks.

        An in-flight long-poll call or backoff wait is abandoned; the pending
        or next pull ends the iteration without an error.
        """
        if self._cancelled:
            return
        self._cancelled = True
        logger.info(f"Watch on {self.target} cancelled")
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    async def aclose(self) -> None:
        """Cancel the stream and wait for any in-flight call to unwind."""
        inflight = self._inflight
        self.cancel()
        if inflight is not None:
            await asyncio.wait({inflight})

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __aiter__(self):
        return self

    async def __anext__(self) -> WatchUpdate:
        if self._cancelled or self._finished:
            raise StopAsyncIteration
        if self._inflight is not None:
            raise RuntimeError("Another pull on this watch stream is in progress")

        if self._pause_before_next_poll:
            self._pause_before_next_poll = False
            if self.config.delay_on_success > 0:
                completed, _ = await self._suspend(
                    self._wait(self.config.delay_on_success)
                )
                if not completed:
                    raise StopAsyncIteration

        while True:
            if self._cancelled:
                raise StopAsyncIteration

            request = WatchRequest(
                target=self.target,
                last_known_revision=self._last_known_revision,
                timeout=self.config.timeout,
            )
            completed, result = await self._suspend(self.poller.poll(request))
            if not completed:
                raise StopAsyncIteration

            if isinstance(result, Updated):
                self._consecutive_errors = 0
                if self._already_observed(result.revision):
                    logger.debug(
                        f"Ignoring revision {result.revision} on {self.target}, "
                        f"already at {self._last_known_revision}"
                    )
                    continue
                self._last_known_revision = result.revision
                self._pause_before_next_poll = True
                logger.debug(f"Watch on {self.target} updated to {result.revision}")
                return result.value

            if isinstance(result, NotModified):
                self._consecutive_errors = 0
                continue

            decision = self.classifier.classify(result, self._consecutive_errors + 1)

            # A timeout is neither a success nor a failure: the counter stays.
            if isinstance(decision, RetryImmediately):
                continue

            if isinstance(decision, RetryAfterBackoff):
                self._consecutive_errors += 1
                logger.warning(
                    f"Watch on {self.target} failed ({result}), retry "
                    f"#{self._consecutive_errors} in {decision.delay:.1f}s"
                )
                completed, _ = await self._suspend(self._wait(decision.delay))
                if not completed:
                    raise StopAsyncIteration
                continue

            if isinstance(decision, Abort):
                self._finished = True
                logger.error(
                    f"Watch on {self.target} aborted: {decision.reason} ({result})"
                )
                raise WatchAbortedError(
                    decision.reason,
                    kind=result.kind,
                    status_code=result.status_code,
                    detail=result.message,
                )

            raise TypeError(f"Unknown retry decision: {decision!r}")

    def _already_observed(self, revision: Revision) -> bool:
        last = self._last_known_revision
        if last is None or last.is_relative or revision.is_relative:
            return False
        return revision <= last

    async def _wait(self, delay: float) -> None:
        await asyncio.sleep(delay)

    async def _suspend(self, awaitable: Awaitable[Any]) -> Tuple[bool, Any]:
        """Run one suspension point as a task that ``cancel()`` can abort.

        Returns:
            ``(True, result)`` when it finished, ``(False, None)`` when the
            stream was cancelled while it was pending
        """
        task = asyncio.ensure_future(awaitable)
        self._inflight = task
        try:
            result = await task
            if self._cancelled:
                return False, None
            return True, result
        except asyncio.CancelledError:
            if self._cancelled:
                return False, None
            raise
        finally:
            self._inflight = None
