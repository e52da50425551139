"""Cooperative cancellation for long-running scans."""

import threading


class CancelToken:
    """One-shot stop request shared between a scan and its caller.

    Once cancelled a token stays cancelled; create a new token per scan.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request that the scan stop at its next check point."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Whether a stop has been requested."""
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.is_cancelled()})"
