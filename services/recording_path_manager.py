#!/usr/bin/env python3
"""
Recording path manager for allocating output sinks for one recording job.
"""

import os
import itertools
import threading
from datetime import datetime
from typing import Any

from config import (
    OUTPUT_DIR,
    RECORDING_FORMAT,
    RECORDING_TZ,
)

from .sink import FileSink

TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


class RecordingPathManager:
    """Allocates uniquely named file sinks for one call."""

    def __init__(
        self,
        call_name: str,
        output_dir: str = OUTPUT_DIR,
        recording_format: str = RECORDING_FORMAT,
        timezone: Any = RECORDING_TZ
    ):
        self.call_name = call_name
        self.output_dir = output_dir
        self.format_ext = recording_format if recording_format in ['mp4', 'mkv'] else 'mp4'
        self.timezone = timezone
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    def allocate_sink(self) -> FileSink:
        """Allocate a new sink whose name differs from every earlier one.

        The timestamp keeps names readable and sortable; the sequence number
        keeps them distinct when two allocations land in the same second.

        Returns:
            A fresh FileSink under the output directory
        """
        with self._lock:
            sequence = next(self._sequence)
        timestamp = datetime.now(self.timezone).strftime(TIMESTAMP_FORMAT)
        return FileSink(
            directory=self.output_dir,
            call_name=self.call_name,
            token=f"{timestamp}_{sequence:03d}",
            extension=self.format_ext
        )

    def ensure_output_directory(self) -> None:
        """Ensure the output directory exists."""
        os.makedirs(self.output_dir, exist_ok=True)
