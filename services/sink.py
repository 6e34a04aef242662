#!/usr/bin/env python3
"""
Sinks describe where one capture run writes its output.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class FileSink:
    """One output file for one capture run.

    A new sink is allocated every time capture restarts, so the token must be
    unique within a job.
    """

    directory: str
    call_name: str
    token: str
    extension: str = "mp4"

    @property
    def path(self) -> str:
        return os.path.join(self.directory, f"{self.call_name}_{self.token}.{self.extension}")

    @property
    def format(self) -> str:
        return self.extension

    @property
    def is_stream(self) -> bool:
        return False


@dataclass(frozen=True)
class StreamSink:
    """An rtmp endpoint used by the streaming back end."""

    url: str
    call_name: str

    @property
    def path(self) -> str:
        return self.url

    @property
    def format(self) -> str:
        return "flv"

    @property
    def is_stream(self) -> bool:
        return True
