#!/usr/bin/env python3
"""
Capturers read a live call's media and write it to a sink.
"""

import os
import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import IO, Optional

from exceptions import CaptureStartError
from resource_managers import start_process, stop_process
from config import (
    MIN_OUTPUT_GROWTH_KB,
    PROCESS_STOP_TIMEOUT,
)

from .ffmpeg_command_builder import FFmpegCommandBuilder


class Capturer(ABC):
    """Contract the recording service and process monitor rely on."""

    @abstractmethod
    def start(self, sink) -> bool:
        """Begin writing media to the sink. Returns False if capture could not start."""

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing and release resources. Safe to call repeatedly."""

    @abstractmethod
    def is_healthy(self) -> bool:
        """Whether the capture is running and producing output."""

    @property
    @abstractmethod
    def exit_code(self) -> Optional[int]:
        """Exit code of the capture process, or None while it runs."""


class FfmpegCapturer(Capturer):
    """Captures the call with an ffmpeg subprocess."""

    def __init__(
        self,
        command_builder: Optional[FFmpegCommandBuilder] = None,
        min_output_growth_kb: int = MIN_OUTPUT_GROWTH_KB,
        stop_timeout: int = PROCESS_STOP_TIMEOUT
    ):
        self.command_builder = command_builder or FFmpegCommandBuilder()
        self.min_output_growth_bytes = min_output_growth_kb * 1024
        self.stop_timeout = stop_timeout
        self.current_process: Optional[subprocess.Popen] = None
        self.current_sink = None
        self._last_output_size: Optional[int] = None
        self._log_file: Optional[IO] = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def start(self, sink) -> bool:
        """Launch ffmpeg against the sink.

        Args:
            sink: FileSink or StreamSink to write to

        Returns:
            True if the process was launched
        """
        with self._lock:
            if self.current_process is not None and self.current_process.poll() is None:
                self.logger.warning("Capture already running, refusing to start a second ffmpeg")
                return False
            try:
                self._launch(sink)
            except CaptureStartError as e:
                self.logger.error(str(e))
                return False

            self.logger.info(f"Capture started (PID: {self.current_process.pid}) -> {sink.path}")
            return True

    def _launch(self, sink) -> None:
        cmd = self.command_builder.build_command(sink)
        log_file = None
        try:
            if not sink.is_stream:
                os.makedirs(os.path.dirname(sink.path) or '.', exist_ok=True)
                log_file = open(sink.path + '.ffmpeg.log', 'ab')
            process = start_process(cmd, output=log_file)
        except OSError as e:
            if log_file is not None:
                log_file.close()
            raise CaptureStartError(sink.path, str(e)) from e

        self.current_process = process
        self.current_sink = sink
        self._log_file = log_file
        # Growth baseline restarts with every run
        self._last_output_size = None

    def stop(self) -> None:
        """Stop ffmpeg, giving it the chance to finish the file first."""
        with self._lock:
            process = self.current_process
            if process is None:
                self.logger.debug("No capture process to stop")
                return

            stop_process(process, self.stop_timeout)
            self.logger.info(f"Capture stopped (exit code: {process.returncode})")

            if self._log_file is not None:
                self._log_file.close()
                self._log_file = None
            self.current_process = None

    @property
    def exit_code(self) -> Optional[int]:
        process = self.current_process
        if process is None:
            return None
        return process.poll()

    def is_healthy(self) -> bool:
        """Check the process is alive and the output is still growing."""
        process = self.current_process
        if process is None or process.poll() is not None:
            return False
        if self.current_sink is None or self.current_sink.is_stream:
            return True
        return self._is_producing_output(self.current_sink.path)

    def _is_producing_output(self, path: str) -> bool:
        try:
            size = os.path.getsize(path)
        except OSError:
            size = 0

        previous = self._last_output_size
        self._last_output_size = size
        if previous is None:
            # First look since start; nothing to compare against yet
            return size > 0

        growth = size - previous
        self.logger.debug(f"[MONITOR] Output grew by {growth} bytes since last check")
        return growth >= self.min_output_growth_bytes
