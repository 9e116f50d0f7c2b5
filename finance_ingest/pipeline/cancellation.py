import threading
import time

from finance_ingest.pipeline.exceptions import OperationCancelledError


class CancellationToken:
    """Cooperative cancellation shared by every step of one invocation.

    Cancelled either explicitly via cancel() or implicitly once the optional
    deadline (seconds from construction) has passed.
    """

    def __init__(self, deadline_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = (
            time.monotonic() + deadline_seconds if deadline_seconds is not None else None
        )

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def timeout(self, default: float | None = None) -> float | None:
        """Effective timeout for a blocking call: the tighter of default and remaining."""
        remaining = self.remaining()
        if remaining is None:
            return default
        if default is None:
            return remaining
        return min(default, remaining)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelledError("Operation cancelled")
