# ==============================================================================
# SHARED RUN STATE
# ==============================================================================
# Thread-safe primitives shared by all export workers of a run:
#   - CancellationToken: raised once on a fatal error, polled by workers
#   - AtomicCounter: monotonically increasing progress/summary counter
# ==============================================================================

import threading
from typing import Optional


class CancellationToken:
    """One-shot cancellation signal shared by every worker."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = None) -> bool:
        """
        Raise the signal.

        Returns:
            True for the call that actually cancelled, False if the token
            was already cancelled
        """
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()
            return True

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or the timeout passes. Returns the cancelled state."""
        return self._event.wait(timeout)


class AtomicCounter:
    """Integer counter that only goes up."""

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        """Add to the counter and return the new value."""
        if amount < 0:
            raise ValueError("counter cannot decrease")
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
