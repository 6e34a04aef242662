#!/usr/bin/env python3
"""
Services module for the call recorder.
Provides the recording service and the components it supervises.
"""

from .recording_service import RecordingService, RecordingParams, RecordingState
from .status import ServiceStatus, StatusPublisher
from .call_session import CallSession, CallParams, CallCredentials
from .capturer import Capturer, FfmpegCapturer

# Export recording components for advanced usage
from .sink import FileSink, StreamSink
from .recording_path_manager import RecordingPathManager
from .ffmpeg_command_builder import FFmpegCommandBuilder
from .process_monitor import ProcessMonitor
from .restart_policy import RestartPolicy, RestartDecision
from .scheduler import FixedRateScheduler
from .metadata import RecordingMetadata, write_metadata
from .finalizer import FinalizeRunner
from .status_notifier import WebhookStatusNotifier

__all__ = [
    'RecordingService',
    'RecordingParams',
    'RecordingState',
    'ServiceStatus',
    'StatusPublisher',
    'CallSession',
    'CallParams',
    'CallCredentials',
    'Capturer',
    'FfmpegCapturer',
    'FileSink',
    'StreamSink',
    'RecordingPathManager',
    'FFmpegCommandBuilder',
    'ProcessMonitor',
    'RestartPolicy',
    'RestartDecision',
    'FixedRateScheduler',
    'RecordingMetadata',
    'write_metadata',
    'FinalizeRunner',
    'WebhookStatusNotifier',
]
