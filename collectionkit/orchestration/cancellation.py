"""Cooperative cancellation for async evaluation."""

import threading

from collectionkit.core.exceptions import CancellationRequested


class CancellationToken:
    """
    Flag checked by the async executor between closure invocations.

    Cancelling never interrupts a closure that is already running; the
    executor stops before issuing the next invocation and discards whatever
    it had produced so far. ``cancel`` may be called from any thread.

    Example:
        token = CancellationToken()
        task = asyncio.create_task(chain_async(urls).map(fetch).collect(token))
        ...
        token.cancel()
        await task  # raises CancellationRequested
    """

    def __init__(self):
        self._event = threading.Event()
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation."""
        self._reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Whether cancellation was requested."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Reason passed to ``cancel``, if any."""
        return self._reason

    def raise_if_cancelled(self, stage: str | None = None) -> None:
        """
        Raise if cancellation was requested.

        Raises:
            CancellationRequested: When the token is cancelled
        """
        if self._event.is_set():
            raise CancellationRequested(stage)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
