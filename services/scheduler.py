#!/usr/bin/env python3
"""
Fixed-rate scheduling on a single background thread.
"""

import time
import logging
import threading
from typing import Callable, Optional


class FixedRateScheduler:
    """Runs one task repeatedly on its own daemon thread.

    Ticks never overlap: if a tick overruns its period the next one starts
    as soon as it returns.
    """

    def __init__(
        self,
        task: Callable[[], None],
        initial_delay: float,
        period: float,
        name: str = "scheduler"
    ):
        if period <= 0:
            raise ValueError(f"period must be positive (got {period})")
        self.task = task
        self.initial_delay = initial_delay
        self.period = period
        self.name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.logger = logging.getLogger(__name__)

    def start(self) -> None:
        """Start the worker thread."""
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        next_run = time.monotonic() + self.initial_delay
        while not self._cancelled.wait(max(0.0, next_run - time.monotonic())):
            try:
                self.task()
            except Exception as e:
                self.logger.error(f"[{self.name}] Scheduled task failed: {e}", exc_info=True)
            next_run += self.period

    def cancel(self, wait: bool = True) -> None:
        """Stop scheduling new ticks.

        A tick that is already running is not interrupted. With ``wait`` the
        caller blocks until it returns, unless the caller is the tick itself.

        Args:
            wait: Block until the worker thread has exited
        """
        self._cancelled.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
