"""
Cancellation registry — relays an interrupt to every running child.

The registry is handed to each ``ProcessRunner.run`` call explicitly;
nothing reads it from a global.  ``cancel()`` only forwards the request
and returns; the runners see the non-zero exits and fail normally.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import subprocess
import sys
import threading
from collections.abc import Iterator

logger = logging.getLogger(__name__)


def _interrupt(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    try:
        if sys.platform == "win32":
            proc.terminate()
        else:
            proc.send_signal(signal.SIGINT)
    except ProcessLookupError:
        pass  # exited between poll() and the signal


class CancellationRegistry:
    """Thread-safe set of in-flight process handles."""

    def __init__(self) -> None:
        self._procs: set[subprocess.Popen] = set()
        self._lock = threading.RLock()  # re-entered by the signal handler on the main thread
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._procs)

    def register(self, proc: subprocess.Popen) -> None:
        """Track a process; interrupt it at once if already cancelled."""
        with self._lock:
            self._procs.add(proc)
            if self._cancelled.is_set():
                _interrupt(proc)

    def unregister(self, proc: subprocess.Popen) -> None:
        with self._lock:
            self._procs.discard(proc)

    def cancel(self) -> None:
        """Forward an interrupt to every registered process. Does not wait."""
        with self._lock:
            self._cancelled.set()
            procs = list(self._procs)
            for proc in procs:
                _interrupt(proc)
        logger.info("Interrupt forwarded to %d process(es)", len(procs))


@contextlib.contextmanager
def install_interrupt_handler(registry: CancellationRegistry) -> Iterator[CancellationRegistry]:
    """Route SIGINT/SIGTERM to ``registry.cancel()`` for the duration.

    Must be entered from the main thread.
    """
    def _handler(signum: int, frame: object) -> None:
        logger.warning("Received %s, cancelling running commands", signal.Signals(signum).name)
        registry.cancel()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, _handler)
    try:
        yield registry
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
