#!/usr/bin/env python3
"""
Resource management helpers for the call recorder.
Provides guaranteed cleanup for the capture and finalize processes.
"""

import signal
import subprocess
import logging
from contextlib import contextmanager
from typing import IO, Iterator, List, Optional


logger = logging.getLogger(__name__)


def start_process(cmd: List[str], output: Optional[IO] = None) -> subprocess.Popen:
    """
    Launch a long-running process such as ffmpeg.

    Args:
        cmd: Command list to execute
        output: Optional open file receiving both stdout and stderr; discarded if None

    Returns:
        subprocess.Popen: The running process

    Raises:
        OSError: If the executable cannot be launched
    """
    logger.debug(f"Starting process: {' '.join(cmd[:3])}...")
    target = output if output is not None else subprocess.DEVNULL
    return subprocess.Popen(
        cmd,
        stdout=target,
        stderr=subprocess.STDOUT if output is not None else subprocess.DEVNULL,
        stdin=subprocess.PIPE
    )


@contextmanager
def supervised_process(cmd: List[str], timeout: int = 10) -> Iterator[subprocess.Popen]:
    """
    Context manager for a child process with guaranteed cleanup.

    Ensures the process is properly terminated and cleaned up even if exceptions occur,
    e.g. when a caller gives up waiting on it.

    Args:
        cmd: Command list to execute (e.g., ['/opt/finalize.sh', '/recordings/abc'])
        timeout: Maximum seconds to wait for graceful shutdown on cleanup (default: 10)

    Yields:
        subprocess.Popen: The running process

    Example:
        with supervised_process(['finalize.sh', '/recordings']) as process:
            process.wait(timeout=600)
        # Process guaranteed to be cleaned up here
    """
    process = None
    try:
        logger.debug(f"Starting process: {' '.join(cmd[:3])}...")
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL
        )
        yield process

    finally:
        if process is not None:
            stop_process(process, timeout)


def stop_process(process: subprocess.Popen, timeout: int) -> None:
    """
    Stop a subprocess with escalating termination signals.

    Uses SIGINT first for graceful shutdown, then escalates to SIGTERM and SIGKILL.

    Args:
        process: Process to stop
        timeout: Maximum seconds to wait for graceful shutdown
    """
    if process.poll() is not None:
        logger.debug(f"Process already terminated with code {process.returncode}")
        return

    logger.info("Stopping process gracefully with SIGINT...")
    try:
        # SIGINT lets ffmpeg write the trailer so the file stays playable
        if hasattr(signal, 'SIGINT'):
            process.send_signal(signal.SIGINT)
        else:
            process.terminate()
    except OSError as e:
        logger.warning(f"Could not send SIGINT: {e}")
        process.terminate()

    try:
        process.wait(timeout=timeout)
        logger.info("Process stopped gracefully")
        return
    except subprocess.TimeoutExpired:
        logger.warning(f"Process did not stop within {timeout}s, escalating...")

    if process.poll() is None:
        logger.warning("Sending SIGTERM...")
        process.terminate()
        try:
            process.wait(timeout=2)
            logger.info("Process terminated")
            return
        except subprocess.TimeoutExpired:
            logger.warning("Process did not respond to SIGTERM")

    # Force kill as last resort
    if process.poll() is None:
        logger.warning("Force killing process with SIGKILL...")
        process.kill()
        try:
            process.wait(timeout=1)
            logger.warning("Process killed")
        except subprocess.TimeoutExpired:
            logger.error("Process could not be killed - may be zombie")
