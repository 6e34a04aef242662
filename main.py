#!/usr/bin/env python3
"""
Command line entry point: record one call until it ends or is stopped.
"""

import sys
import signal
import logging
import argparse
import importlib
import threading
from typing import Callable, Optional

from config import AppConfig, validate_config
from exceptions import CallRecorderError, ConfigurationError
from logging_config import setup_logging
from shared_state import active_service
from services import (
    CallCredentials,
    CallParams,
    CallSession,
    FFmpegCommandBuilder,
    FfmpegCapturer,
    FinalizeRunner,
    RecordingParams,
    RecordingPathManager,
    RecordingService,
    ServiceStatus,
    WebhookStatusNotifier,
)

logger = logging.getLogger(__name__)


def load_session_factory(factory_path: str) -> Callable[[], CallSession]:
    """Resolve a 'module:callable' string to a call session factory.

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    module_name, _, attr = factory_path.partition(':')
    if not module_name or not attr:
        raise ConfigurationError("Session factory must look like 'module:callable'", factory_path)
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load session factory {factory_path}", str(e)) from e


def run_recording_job(
    service: RecordingService,
    stop_event: Optional[threading.Event] = None
) -> Optional[ServiceStatus]:
    """
    Run one job: start, wait for a terminal status or a stop request, then stop.

    Args:
        service: The recording service to run
        stop_event: Set by the caller (e.g. a signal handler) to end the recording

    Returns:
        The job's final status, or None if it never started
    """
    stop_event = stop_event or threading.Event()
    service.add_status_handler(lambda status: stop_event.set())

    if not service.start():
        logger.error("Recording failed to start")
        service.stop()
        return None

    stop_event.wait()
    logger.info("Stopping recording...")
    service.stop()
    return service.status


def build_service(config: AppConfig, args: argparse.Namespace, session: CallSession) -> RecordingService:
    """Wire a RecordingService from validated configuration."""
    call_params = CallParams(call_url=args.call_url, call_name=args.call_name or "")
    params = RecordingParams(
        call_params=call_params,
        credentials=CallCredentials(
            domain=args.domain,
            username=args.username,
            password=args.password
        ),
        finalize_script_path=config.finalize_script_path,
        recording_directory=config.output_dir
    )
    command_builder = FFmpegCommandBuilder(
        ffmpeg_command=config.ffmpeg_command,
        display=config.capture_display,
        resolution=config.capture_resolution,
        framerate=config.capture_framerate,
        preset=config.capture_preset,
        queue_size=config.capture_queue_size,
        audio_device=config.capture_audio_device,
        max_bitrate=config.capture_max_bitrate,
        crf=config.capture_crf
    )
    capturer = FfmpegCapturer(
        command_builder,
        min_output_growth_kb=config.min_output_growth_kb,
        stop_timeout=config.process_stop_timeout
    )
    service = RecordingService(
        params,
        session,
        capturer,
        path_manager=RecordingPathManager(
            call_params.call_name,
            output_dir=config.output_dir,
            recording_format=config.recording_format,
            timezone=config.timezone
        ),
        finalize_runner=FinalizeRunner(
            config.finalize_script_path,
            timeout=config.finalize_timeout,
            stop_timeout=config.process_stop_timeout
        ),
        max_restarts=config.capture_restart_attempts,
        monitor_initial_delay=config.monitor_initial_delay,
        monitor_interval=config.monitor_interval
    )
    if config.status_webhook_urls:
        service.add_status_handler(WebhookStatusNotifier(
            call_params.call_name,
            urls=config.status_webhook_urls,
            timeout=config.webhook_timeout,
            timezone=config.timezone
        ))
    return service


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Record a web call to file')
    parser.add_argument('--call-url', required=True, help='URL of the call to record')
    parser.add_argument('--call-name', help='Call name (default: last segment of the URL)')
    parser.add_argument('--domain', default='', help='Login domain for the hidden recorder user')
    parser.add_argument('--username', default='', help='Login user for the hidden recorder user')
    parser.add_argument('--password', default='', help='Login password for the hidden recorder user')
    parser.add_argument('--session-factory', required=True,
                        help="Call session factory as 'module:callable'")
    parser.add_argument('--no-web', action='store_true', help='Do not serve the status API')
    args = parser.parse_args(argv)

    try:
        config = validate_config()
        setup_logging(log_level=config.log_level, log_dir=config.log_dir)
        session = load_session_factory(args.session_factory)()
        service = build_service(config, args, session)
    except CallRecorderError as e:
        logging.getLogger(__name__).error(str(e))
        return 2

    active_service.register(service)
    if not args.no_web:
        from web_server import run_web_server
        run_web_server(config.web_host, config.web_port)

    stop_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down recorder...")
        stop_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    status = run_recording_job(service, stop_event)
    active_service.clear()
    return 0 if status == ServiceStatus.FINISHED else 1


if __name__ == '__main__':
    sys.exit(main())
