#!/usr/bin/env python3
"""
Finalize step run once a recording has been torn down.
"""

import logging
import subprocess
from typing import Optional

from exceptions import FinalizeError, FinalizeTimeoutError
from resource_managers import supervised_process
from config import (
    FINALIZE_SCRIPT_PATH,
    FINALIZE_TIMEOUT,
    PROCESS_STOP_TIMEOUT,
)


class FinalizeRunner:
    """Runs the finalize script with the recording directory and waits for it."""

    def __init__(
        self,
        script_path: str = FINALIZE_SCRIPT_PATH,
        timeout: Optional[float] = FINALIZE_TIMEOUT,
        stop_timeout: int = PROCESS_STOP_TIMEOUT
    ):
        self.script_path = script_path
        # 0 or None means wait for as long as the script takes
        self.timeout = timeout or None
        self.stop_timeout = stop_timeout
        self.logger = logging.getLogger(__name__)

    def run(self, recording_directory: str) -> int:
        """Run the finalize script to completion.

        Args:
            recording_directory: Directory passed as the script's only argument

        Returns:
            The script's exit code

        Raises:
            FinalizeError: If the script cannot be launched
            FinalizeTimeoutError: If the script outlives the timeout; it is stopped first
        """
        cmd = [self.script_path, recording_directory]
        self.logger.info(f"[FINALIZE] Running {self.script_path} {recording_directory}")
        try:
            with supervised_process(cmd, timeout=self.stop_timeout) as process:
                try:
                    output, _ = process.communicate(timeout=self.timeout)
                except subprocess.TimeoutExpired:
                    self.logger.error(f"[FINALIZE] Script did not finish within {self.timeout}s, stopping it")
                    raise FinalizeTimeoutError(self.script_path, self.timeout)
        except OSError as e:
            raise FinalizeError(self.script_path, str(e)) from e

        if output:
            for line in output.decode('utf-8', errors='replace').splitlines():
                self.logger.debug(f"[FINALIZE] {line}")

        exit_code = process.returncode
        if exit_code == 0:
            self.logger.info("[FINALIZE] Recording finalize script finished with exit value: 0")
        else:
            self.logger.error(f"[FINALIZE] Recording finalize script finished with exit value: {exit_code}")
        return exit_code
