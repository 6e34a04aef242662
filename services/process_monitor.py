#!/usr/bin/env python3
"""
Process monitor for detecting a dead or stalled capture process.
"""

import logging
from typing import Callable, Optional

from .capturer import Capturer


class ProcessMonitor:
    """Checks one capturer's health and reports it when unhealthy.

    The monitor only detects; deciding what to do about it is left to the
    callback, which receives the exit code if the process has exited, or
    None if it is still running but no longer producing output.
    """

    def __init__(self, capturer: Capturer, on_unhealthy: Callable[[Optional[int]], None]):
        self.capturer = capturer
        self.on_unhealthy = on_unhealthy
        self.logger = logging.getLogger(__name__)

    def check(self) -> None:
        """Run one health check."""
        try:
            healthy = self.capturer.is_healthy()
        except Exception as e:
            self.logger.error(f"[MONITOR] Health check raised: {e}", exc_info=True)
            return

        if healthy:
            self.logger.debug("[MONITOR] Capture is healthy")
            return

        exit_code = self.capturer.exit_code
        self.on_unhealthy(exit_code)
