"""
Cooperative cancellation token shared by the scheduler and every stage.

A single token is cancelled on shutdown (signal, embedding process, tests).
Stages and the sweep check it at checkpoints; nothing is pre-empted.
"""

import logging
import threading
from typing import Callable, List, Optional

from liquidation.errors import CancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-way cancellation flag with callbacks."""

    def __init__(self, parent: Optional["CancellationToken"] = None):
        """
        Create a token.

        Args:
            parent: Optional token whose cancellation also cancels this one
        """
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        if parent is not None:
            parent.add_callback(self.cancel)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the token and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Cancellation callback failed: {e}", exc_info=True)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """
        Register a callback to run on cancellation.

        Runs immediately if the token is already cancelled.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout. Returns True if cancelled."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("operation cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
