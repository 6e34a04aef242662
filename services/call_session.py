#!/usr/bin/env python3
"""
Call session contract: joining and leaving the web call being recorded.

The browser automation that implements it lives outside this project.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List
from urllib.parse import urlparse


def call_name_from_url(call_url: str) -> str:
    """Derive the call (room) name from a call URL.

    Example:
        https://meet.example.com/MyRoom#config.iAmRecorder=true -> MyRoom
    """
    path = urlparse(call_url).path
    name = path.rstrip('/').rsplit('/', 1)[-1]
    if not name:
        raise ValueError(f"Cannot derive a call name from URL: {call_url}")
    return name


@dataclass(frozen=True)
class CallParams:
    """Which call to join."""
    call_url: str
    call_name: str = ""

    def __post_init__(self) -> None:
        if not self.call_name:
            object.__setattr__(self, 'call_name', call_name_from_url(self.call_url))


@dataclass(frozen=True)
class CallCredentials:
    """Login used to appear as a hidden participant in the call."""
    domain: str
    username: str
    password: str = field(repr=False, default="")


class CallSession(ABC):
    """A joined web call."""

    @abstractmethod
    def join(self, call_name: str, credentials: CallCredentials) -> bool:
        """Join the call. Returns False if the call could not be joined."""

    @abstractmethod
    def leave(self) -> None:
        """Leave the call and tear down the browser."""

    @abstractmethod
    def get_participants(self) -> List[Dict[str, Any]]:
        """Participants currently in the call, in roster order."""

    @abstractmethod
    def add_status_handler(self, handler: Callable[[Any], None]) -> None:
        """Register a handler for asynchronous session health events."""
