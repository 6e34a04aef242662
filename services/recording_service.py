#!/usr/bin/env python3
"""
Recording service for orchestrating one call recording job.
"""

import os
import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from exceptions import CallJoinError, CaptureProcessError
from shared_state import SinkHolder
from config import (
    CAPTURE_RESTART_ATTEMPTS,
    MONITOR_INITIAL_DELAY,
    MONITOR_INTERVAL,
    OUTPUT_DIR,
    FINALIZE_SCRIPT_PATH,
)

from .call_session import CallCredentials, CallParams, CallSession
from .capturer import Capturer
from .finalizer import FinalizeRunner
from .metadata import RecordingMetadata, write_metadata
from .process_monitor import ProcessMonitor
from .recording_path_manager import RecordingPathManager
from .restart_policy import RestartDecision, RestartPolicy
from .scheduler import FixedRateScheduler
from .status import ServiceStatus, StatusHandler, StatusPublisher


@dataclass(frozen=True)
class RecordingParams:
    """Parameters needed for starting a RecordingService."""
    call_params: CallParams
    credentials: CallCredentials
    finalize_script_path: str = FINALIZE_SCRIPT_PATH
    recording_directory: str = OUTPUT_DIR


class RecordingState(enum.Enum):
    IDLE = 'idle'
    JOINING = 'joining'
    CAPTURING = 'capturing'
    RESTARTING = 'restarting'
    STOPPING = 'stopping'
    STOPPED = 'stopped'


class RecordingService:
    """Joins a call, records it to file and keeps the capture alive until stopped.

    One instance records one job: ``start()`` once, ``stop()`` once. While
    capturing, a background monitor checks the capturer and restarts it
    against a fresh file when it dies or stalls, up to ``max_restarts`` times
    in total. Terminal outcomes (FINISHED/ERROR) are published once to the
    status handlers; whoever receives ERROR is expected to call ``stop()``.
    """

    def __init__(
        self,
        params: RecordingParams,
        call_session: CallSession,
        capturer: Capturer,
        path_manager: Optional[RecordingPathManager] = None,
        finalize_runner: Optional[FinalizeRunner] = None,
        max_restarts: int = CAPTURE_RESTART_ATTEMPTS,
        monitor_initial_delay: float = MONITOR_INITIAL_DELAY,
        monitor_interval: float = MONITOR_INTERVAL,
        scheduler_factory: Callable[..., Any] = FixedRateScheduler
    ):
        self.params = params
        self.call_session = call_session
        self.capturer = capturer
        self.path_manager = path_manager or RecordingPathManager(
            params.call_params.call_name,
            output_dir=params.recording_directory
        )
        self.finalize_runner = finalize_runner or FinalizeRunner(params.finalize_script_path)
        self.monitor_initial_delay = monitor_initial_delay
        self.monitor_interval = monitor_interval
        self.scheduler_factory = scheduler_factory
        self.logger = logging.getLogger(__name__)

        self.publisher = StatusPublisher()
        self.sink_holder: SinkHolder = SinkHolder()
        self.restart_policy = RestartPolicy(
            capturer,
            self.path_manager,
            self.sink_holder,
            self.publisher,
            max_restarts=max_restarts
        )
        self.monitor_task: Optional[Any] = None

        self._state = RecordingState.IDLE
        self._state_lock = threading.Lock()
        self._start_attempted = False
        self._capture_started = False
        self._stop_requested = False
        self._left_call = False
        self._stop_lock = threading.Lock()

        self.call_session.add_status_handler(self._on_session_status)

    # State helpers

    @property
    def state(self) -> RecordingState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: RecordingState) -> None:
        with self._state_lock:
            self.logger.debug(f"State {self._state.name} -> {state.name}")
            self._state = state

    def _transition(self, allowed_from: Iterable[RecordingState], state: RecordingState) -> bool:
        """Move to ``state`` only if currently in one of ``allowed_from``."""
        with self._state_lock:
            if self._state not in allowed_from:
                return False
            self.logger.debug(f"State {self._state.name} -> {state.name}")
            self._state = state
            return True

    @property
    def status(self) -> Optional[ServiceStatus]:
        return self.publisher.status

    @property
    def current_sink(self):
        return self.sink_holder.get()

    @property
    def stop_requested(self) -> bool:
        """True once ``stop()`` has been called; the state alone can read STOPPING earlier."""
        with self._stop_lock:
            return self._stop_requested

    @property
    def restart_count(self) -> int:
        return self.restart_policy.restart_count

    def add_status_handler(self, handler: StatusHandler) -> None:
        """Register a handler for the job's terminal status."""
        self.publisher.add_handler(handler)

    def _on_session_status(self, status: Any) -> None:
        if not isinstance(status, ServiceStatus):
            self.logger.warning(f"Ignoring unknown call session status: {status!r}")
            return
        self.logger.info(f"Call session reported status {status.name}")
        self.publisher.publish(status)

    # Lifecycle

    def start(self) -> bool:
        """Join the call, start capturing and arm the process monitor.

        Returns:
            True if the recording is running. On False nothing is capturing,
            a joined call has been left again and the service is back in IDLE.
        """
        with self._stop_lock:
            if self._start_attempted or self._stop_requested:
                self.logger.warning("Recording service can only be started once")
                return False
            self._start_attempted = True

        if not self._transition({RecordingState.IDLE}, RecordingState.JOINING):
            return False

        try:
            self._join_call()
        except CallJoinError as e:
            self.logger.error(str(e))
            self._transition({RecordingState.JOINING}, RecordingState.IDLE)
            return False

        try:
            self.path_manager.ensure_output_directory()
            sink = self.path_manager.allocate_sink()
            self.sink_holder.set(sink)
            started = self.capturer.start(sink)
        except Exception as e:
            self.logger.error(f"Error starting capture: {e}", exc_info=True)
            started = False
        if not started:
            self.logger.error("Capturer failed to start, leaving the call")
            self._run_teardown_step("leave call", self.call_session.leave)
            self._left_call = True
            self._transition({RecordingState.JOINING}, RecordingState.IDLE)
            return False
        self._capture_started = True

        if not self._transition({RecordingState.JOINING}, RecordingState.CAPTURING):
            # stop() got in while we were starting; it will tear the capture down
            return False

        monitor = ProcessMonitor(self.capturer, self._on_capture_unhealthy)
        self.monitor_task = self.scheduler_factory(
            monitor.check,
            self.monitor_initial_delay,
            self.monitor_interval,
            name="RecordingService-monitor"
        )
        self.monitor_task.start()
        self.logger.info(f"Recording started: {sink.path}")
        return True

    def _join_call(self) -> None:
        """Join the call.

        Raises:
            CallJoinError: If the session refuses or raises while joining
        """
        call_name = self.params.call_params.call_name
        try:
            joined = self.call_session.join(call_name, self.params.credentials)
        except Exception as e:
            self.logger.debug("Call session raised while joining", exc_info=True)
            raise CallJoinError(call_name, str(e)) from e
        if not joined:
            raise CallJoinError(call_name, "call session reported failure")

    def _on_capture_unhealthy(self, exit_code: Optional[int]) -> None:
        """Runs on the monitor thread, one call at a time."""
        if not self._transition({RecordingState.CAPTURING}, RecordingState.RESTARTING):
            self.logger.info(f"[MONITOR] Unhealthy capture ignored in state {self.state.name}")
            return

        try:
            decision = self.restart_policy.handle_unhealthy(exit_code)
        except Exception as e:
            self.logger.error(f"[MONITOR] Restart policy failed: {e}", exc_info=True)
            self.restart_policy.fail(CaptureProcessError(exit_code, str(e)))
            decision = RestartDecision.RESTART_FAILED

        if decision == RestartDecision.RESTARTED:
            self._transition({RecordingState.RESTARTING}, RecordingState.CAPTURING)
            return

        if decision == RestartDecision.IGNORED:
            self._transition({RecordingState.RESTARTING}, RecordingState.CAPTURING)
        else:
            self._transition({RecordingState.RESTARTING}, RecordingState.STOPPING)
        if self.monitor_task is not None:
            self.monitor_task.cancel(wait=False)

    def stop(self) -> None:
        """Tear the recording down and run the finalize step.

        Blocks until finalize returns. Every step runs even if an earlier one
        failed. Calling it again, or after ERROR was published, is harmless.
        """
        with self._stop_lock:
            if self._stop_requested:
                self.logger.info("Recording service already stopped")
                return
            self._stop_requested = True
        self._set_state(RecordingState.STOPPING)

        if self.monitor_task is not None:
            # Lets a tick that is mid-restart finish before the capturer is stopped
            self.monitor_task.cancel(wait=True)

        if self._capture_started:
            self.logger.info("Stopping capturer")
            self._run_teardown_step("stop capturer", self.capturer.stop)

        participants = self._run_teardown_step("fetch participants", self.call_session.get_participants)
        participants = list(participants) if participants else []
        self.logger.info(f"Participants in this recording: {participants}")

        self._run_teardown_step("write metadata", self._write_metadata, participants)

        if not self._left_call:
            self.logger.info("Leaving the call")
            self._run_teardown_step("leave call", self.call_session.leave)
            self._left_call = True

        self.logger.info("Finalizing the recording")
        self._run_teardown_step("finalize", self.finalize_runner.run, self.params.recording_directory)

        if self._capture_started:
            self.publisher.publish(ServiceStatus.FINISHED)
        self._set_state(RecordingState.STOPPED)
        self.logger.info("Recording service stopped")

    def _write_metadata(self, participants: List[Dict[str, Any]]) -> str:
        sink = self.sink_holder.get()
        if sink is not None and not sink.is_stream:
            directory = os.path.dirname(sink.path) or self.params.recording_directory
        else:
            directory = self.params.recording_directory
        metadata = RecordingMetadata(self.params.call_params.call_url, participants)
        return write_metadata(directory, metadata)

    def _run_teardown_step(self, name: str, step: Callable[..., Any], *args: Any) -> Any:
        try:
            return step(*args)
        except Exception as e:
            self.logger.error(f"Teardown step '{name}' failed: {e}", exc_info=True)
            return None

    def get_status_summary(self) -> Dict[str, Any]:
        """Snapshot of the job for status reporting."""
        sink = self.sink_holder.get()
        status = self.status
        failure = self.restart_policy.failure
        return {
            'call_name': self.params.call_params.call_name,
            'call_url': self.params.call_params.call_url,
            'state': self.state.value,
            'status': status.value if status else None,
            'current_output': sink.path if sink else None,
            'restart_count': self.restart_count,
            'max_restarts': self.restart_policy.max_restarts,
            'error': str(failure) if failure else None,
        }
