"""Pytest configuration and shared fixtures."""

import pytest
from unittest.mock import MagicMock

from config import AppConfig, RECORDING_TZ
from services.call_session import CallCredentials, CallParams
from services.recording_service import RecordingParams, RecordingService
from tests.fakes import FakeCallSession, FakeCapturer, ManualScheduler


@pytest.fixture
def temp_output_dir(tmp_path):
    """Provide a temporary output directory for recordings."""
    output_dir = tmp_path / "recordings"
    output_dir.mkdir()
    return str(output_dir)


@pytest.fixture
def call_params():
    """Provide call parameters for a sample call."""
    return CallParams(call_url="https://meet.example.com/WeeklySync#config.iAmRecorder=true")


@pytest.fixture
def recording_params(call_params, temp_output_dir):
    """Provide recording parameters writing to the temporary output directory."""
    return RecordingParams(
        call_params=call_params,
        credentials=CallCredentials(domain="recorder.meet.example.com", username="recorder", password="secret"),
        finalize_script_path="/opt/recorder/finalize.sh",
        recording_directory=temp_output_dir
    )


@pytest.fixture
def fake_capturer():
    return FakeCapturer()


@pytest.fixture
def fake_session():
    return FakeCallSession(participants=[
        {'id': 'abc', 'name': 'Alice'},
        {'id': 'def', 'name': 'Bob'},
    ])


@pytest.fixture
def finalize_runner(fake_session):
    """Finalize runner mock that succeeds with exit code 0.

    Each run is recorded in the session's event list so tests can check it
    happens after the call is left.
    """
    runner = MagicMock()
    runner.run.side_effect = lambda directory: fake_session.events.append('finalize') or 0
    return runner


@pytest.fixture
def make_service(recording_params, fake_session, fake_capturer, finalize_runner):
    """Build a RecordingService wired to fakes and a manual scheduler."""
    ManualScheduler.instances = []

    def _make(max_restarts: int = 1, **overrides) -> RecordingService:
        kwargs = dict(
            params=recording_params,
            call_session=fake_session,
            capturer=fake_capturer,
            finalize_runner=finalize_runner,
            max_restarts=max_restarts,
            monitor_initial_delay=30,
            monitor_interval=10,
            scheduler_factory=ManualScheduler,
        )
        kwargs.update(overrides)
        return RecordingService(**kwargs)

    return _make


@pytest.fixture
def valid_config(tmp_path):
    """Provide a valid configuration pointing at a temporary directory."""
    return AppConfig(
        output_dir=str(tmp_path / "recordings"),
        log_dir=str(tmp_path / "logs"),
        log_level="INFO",
        finalize_script_path="/opt/recorder/finalize.sh",
        finalize_timeout=0,
        ffmpeg_command="ffmpeg",
        process_stop_timeout=10,
        recording_format="mp4",
        capture_restart_attempts=1,
        monitor_initial_delay=30,
        monitor_interval=10,
        min_output_growth_kb=1,
        capture_display=":0",
        capture_resolution="1280x720",
        capture_framerate=30,
        capture_preset="veryfast",
        capture_queue_size=4096,
        capture_audio_device="hw:0,1,0",
        capture_max_bitrate=2976,
        capture_crf=25,
        web_host="0.0.0.0",
        web_port=2222,
        status_webhook_urls=[],
        webhook_timeout=10,
        timezone=RECORDING_TZ
    )

