"""
Cooperative cancellation for blocking operations.

Polling loops sleep on a CancellationToken instead of time.sleep() so another
thread (a signal handler, a build abort hook) can wake them up immediately.
Once cancelled, a token stays cancelled; callers that swallow a cancellation
re-mark the token so the outer operation still observes it.
"""

import threading

from polarisci.core.exceptions import OperationCancelledError


class CancellationToken:
    """Thread-safe cancellation flag with interruptible sleep."""

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Mark the token cancelled and wake every sleeper."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Operation was cancelled")

    def sleep(self, seconds: float) -> None:
        """
        Sleep for up to ``seconds``.

        Raises:
            OperationCancelledError: If the token is (or becomes) cancelled.
        """
        if self._event.wait(max(seconds, 0)):
            raise OperationCancelledError("Operation was cancelled while waiting")
