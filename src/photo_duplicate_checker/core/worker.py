"""Background execution of duplicate scans."""

import logging
import threading
from collections.abc import Callable

from .cancellation import CancelToken
from .models import ScanState
from .scanner import DuplicateScanner, ProgressCallback
from .source import AssetSource

logger = logging.getLogger(__name__)

DoneCallback = Callable[[ScanState | None, BaseException | None], None]


class ScanInProgressError(RuntimeError):
    """Raised when a scan is started while another one is still running."""


class ScanWorker:
    """Runs one duplicate scan at a time on a background thread."""

    def __init__(self, scanner: DuplicateScanner | None = None):
        """
        Initialize the worker.

        Args:
            scanner: Scanner to run, defaults to DuplicateScanner()
        """
        self.scanner = scanner or DuplicateScanner()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._running = False
        self._token: CancelToken | None = None
        self._result: ScanState | None = None
        self._error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        """Whether a scan has started and not yet reported completion."""
        return self._running

    @property
    def result(self) -> ScanState | None:
        """Final state of the last finished scan, if any."""
        return self._result

    def start(
        self,
        source: AssetSource,
        progress_callback: ProgressCallback | None = None,
        done_callback: DoneCallback | None = None,
    ) -> CancelToken:
        """
        Start scanning a source in the background.

        Args:
            source: Where to load the assets from
            progress_callback: Called on the worker thread after each asset
            done_callback: Called on the worker thread once with the final
                state, or with the error that ended the scan

        Returns:
            The cancellation token of the new scan

        Raises:
            ScanInProgressError: If a scan is already running
        """
        with self._lock:
            if self.is_running:
                raise ScanInProgressError("A duplicate scan is already in progress")

            self._token = CancelToken()
            self._result = None
            self._error = None
            self._running = True
            self._thread = threading.Thread(
                target=self._run,
                args=(source, self._token, progress_callback, done_callback),
                name="duplicate-scan",
                daemon=True,
            )
            self._thread.start()

        logger.debug("Scan worker started")
        return self._token

    def cancel(self) -> None:
        """Ask the running scan to stop; does nothing when idle."""
        if self._token is not None and self.is_running:
            logger.info("Cancellation requested for running scan")
            self._token.cancel()

    def wait(self, timeout: float | None = None) -> ScanState | None:
        """
        Wait for the current scan to finish.

        Args:
            timeout: Seconds to wait, or None to wait until done

        Returns:
            Final ScanState, or None if the scan is still running

        Raises:
            Exception: Whatever error ended the scan
        """
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                return None

        if self._error is not None:
            raise self._error
        return self._result

    def _run(
        self,
        source: AssetSource,
        token: CancelToken,
        progress_callback: ProgressCallback | None,
        done_callback: DoneCallback | None,
    ) -> None:
        result: ScanState | None = None
        error: BaseException | None = None
        try:
            result = self.scanner.scan_source(
                source, cancel_token=token, progress_callback=progress_callback
            )
        except Exception as e:
            logger.error(f"Error during duplicate scan: {e}")
            error = e

        # Cleared before the callback so it observes an idle worker
        with self._lock:
            self._result = result
            self._error = error
            self._running = False

        if done_callback:
            done_callback(result, error)
