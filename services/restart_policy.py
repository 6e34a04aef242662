#!/usr/bin/env python3
"""
Restart policy for recovering an unhealthy capture process.
"""

import enum
import logging
import threading
from typing import Optional

from exceptions import CaptureError, CaptureProcessError, CaptureStartError
from shared_state import SinkHolder
from config import CAPTURE_RESTART_ATTEMPTS

from .capturer import Capturer
from .recording_path_manager import RecordingPathManager
from .status import ServiceStatus, StatusPublisher


class RestartDecision(enum.Enum):
    """What the policy did with one unhealthy report."""
    RESTARTED = 'restarted'
    GAVE_UP = 'gave_up'
    RESTART_FAILED = 'restart_failed'
    IGNORED = 'ignored'


class RestartPolicy:
    """Restarts the capturer against a fresh sink, a bounded number of times.

    The restart count is cumulative for the life of the policy. Once it reaches
    ``max_restarts`` the next unhealthy report publishes ERROR. A restart that
    fails to start, or raises while restarting, also publishes ERROR straight
    away; it is not retried.
    """

    def __init__(
        self,
        capturer: Capturer,
        path_manager: RecordingPathManager,
        sink_holder: SinkHolder,
        publisher: StatusPublisher,
        max_restarts: int = CAPTURE_RESTART_ATTEMPTS
    ):
        if max_restarts < 0:
            raise ValueError(f"max_restarts must be non-negative (got {max_restarts})")
        self.capturer = capturer
        self.path_manager = path_manager
        self.sink_holder = sink_holder
        self.publisher = publisher
        self.max_restarts = max_restarts
        self.restart_count = 0
        self.failure: Optional[CaptureError] = None
        self._terminal = threading.Event()
        self.logger = logging.getLogger(__name__)

    @property
    def terminal(self) -> bool:
        return self._terminal.is_set()

    def handle_unhealthy(self, exit_code: Optional[int]) -> RestartDecision:
        """React to an unhealthy capture report.

        Args:
            exit_code: Exit code if the process exited, None if it is still running

        Returns:
            The decision taken
        """
        if self._terminal.is_set():
            self.logger.debug("[RESTART] Already gave up, ignoring unhealthy report")
            return RestartDecision.IGNORED
        if self.publisher.status is not None:
            self.logger.info(
                f"[RESTART] Job already ended with {self.publisher.status.name}, not restarting"
            )
            self._terminal.set()
            return RestartDecision.IGNORED

        if exit_code is not None:
            self.logger.error(f"Capturer process is no longer healthy. It exited with code {exit_code}")
        else:
            self.logger.error("Capturer process is no longer healthy but it is still running, stopping it now")

        if self.restart_count >= self.max_restarts:
            self.logger.error(f"[RESTART] Giving up on restarting the capturer after {self.restart_count} restart(s)")
            reason = None if exit_code is not None else "output stopped growing"
            self._give_up(CaptureProcessError(exit_code, reason))
            return RestartDecision.GAVE_UP

        self.restart_count += 1
        new_sink = None
        error = None
        try:
            new_sink = self.path_manager.allocate_sink()
            previous_sink = self.sink_holder.swap(new_sink)
            self.logger.info(
                f"[RESTART] Restart {self.restart_count}/{self.max_restarts}: "
                f"{getattr(previous_sink, 'path', None)} -> {new_sink.path}"
            )

            # Stop even a dead process so its resources are released
            self.capturer.stop()
            started = self.capturer.start(new_sink)
        except Exception as e:
            self.logger.error(f"[RESTART] Error while restarting the capturer: {e}", exc_info=True)
            started = False
            error = str(e)

        if not started:
            self.logger.error("[RESTART] Capture failed to restart, giving up")
            self._give_up(CaptureStartError(getattr(new_sink, 'path', ''), error))
            return RestartDecision.RESTART_FAILED

        return RestartDecision.RESTARTED

    def fail(self, error: CaptureError) -> None:
        """Give up without a decision from ``handle_unhealthy``; publishes ERROR."""
        self._give_up(error)

    def _give_up(self, error: CaptureError) -> None:
        self.failure = error
        self._terminal.set()
        self.publisher.publish(ServiceStatus.ERROR)
