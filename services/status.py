#!/usr/bin/env python3
"""
Terminal status publication for a recording job.
"""

import enum
import logging
import threading
from typing import Callable, List, Optional


class ServiceStatus(enum.Enum):
    """Terminal outcome of a recording job. Running is implicit and never published."""
    FINISHED = 'finished'
    ERROR = 'error'


StatusHandler = Callable[[ServiceStatus], None]


class StatusPublisher:
    """Delivers at most one terminal status to the registered handlers."""

    def __init__(self) -> None:
        self._handlers: List[StatusHandler] = []
        self._status: Optional[ServiceStatus] = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @property
    def status(self) -> Optional[ServiceStatus]:
        with self._lock:
            return self._status

    def add_handler(self, handler: StatusHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def publish(self, status: ServiceStatus) -> bool:
        """Publish a terminal status unless one has already been published.

        Both the monitor thread and the call session may publish while the
        caller thread is stopping, so the check and the set happen under one lock.

        Args:
            status: Terminal status to publish

        Returns:
            True if this call published the status
        """
        with self._lock:
            if self._status is not None:
                self.logger.debug(
                    f"Ignoring status {status.name}, already published {self._status.name}"
                )
                return False
            self._status = status
            handlers = list(self._handlers)

        self.logger.info(f"Publishing recording status: {status.name}")
        for handler in handlers:
            try:
                handler(status)
            except Exception as e:
                self.logger.error(f"Status handler failed: {e}", exc_info=True)
        return True
