#!/usr/bin/env python3
"""
Shared state module for thread-safe access to state shared between the
caller thread and the process monitor thread.
"""

import threading
from typing import Any, Generic, Optional, TypeVar

T = TypeVar('T')


class SinkHolder(Generic[T]):
    """Thread-safe, atomically swappable reference to the current sink."""

    def __init__(self, initial: Optional[T] = None) -> None:
        self._sink = initial
        self._lock = threading.Lock()

    def get(self) -> Optional[T]:
        """Get the current sink (thread-safe)."""
        with self._lock:
            return self._sink

    def set(self, sink: T) -> None:
        """Replace the current sink (thread-safe)."""
        with self._lock:
            self._sink = sink

    def swap(self, sink: T) -> Optional[T]:
        """Replace the current sink and return the previous one (thread-safe)."""
        with self._lock:
            previous = self._sink
            self._sink = sink
            return previous


class ActiveServiceRegistry:
    """Thread-safe holder for the recording service exposed over HTTP."""

    def __init__(self) -> None:
        self._service: Optional[Any] = None
        self._lock = threading.Lock()

    @property
    def service(self) -> Optional[Any]:
        """Get the registered service (thread-safe)."""
        with self._lock:
            return self._service

    def register(self, service: Any) -> None:
        """Register the active service (thread-safe)."""
        with self._lock:
            self._service = service

    def clear(self) -> None:
        """Forget the active service (thread-safe)."""
        with self._lock:
            self._service = None


# Global registry instance used by the web server
active_service = ActiveServiceRegistry()
