#!/usr/bin/env python3
"""
Configuration module for the call recorder.
Centralizes all configuration values for easier testing and maintenance.
"""

import os
import logging
import pytz
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Timezone used for sink timestamps
RECORDING_TZ = pytz.timezone(os.getenv("RECORDING_TZ", "UTC"))

# Directory paths
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "./recordings")
LOG_DIR = os.getenv("LOG_DIR", "./logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Finalize settings
FINALIZE_SCRIPT_PATH = os.getenv("FINALIZE_SCRIPT_PATH", "/opt/recorder/finalize.sh")
FINALIZE_TIMEOUT = int(os.getenv("FINALIZE_TIMEOUT", "0"))  # 0 waits until the script exits

# External command settings
FFMPEG_COMMAND = os.getenv("FFMPEG_COMMAND", "ffmpeg")
PROCESS_STOP_TIMEOUT = int(os.getenv("PROCESS_STOP_TIMEOUT", "10"))  # Seconds to wait after SIGINT

# Recording settings
RECORDING_FORMAT = os.getenv("RECORDING_FORMAT", "mp4")  # mp4 or mkv
CAPTURE_RESTART_ATTEMPTS = int(os.getenv("CAPTURE_RESTART_ATTEMPTS", "1"))

# Process monitor settings (in seconds)
MONITOR_INITIAL_DELAY = int(os.getenv("MONITOR_INITIAL_DELAY", "30"))  # Allow ffmpeg to spin up
MONITOR_INTERVAL = int(os.getenv("MONITOR_INTERVAL", "10"))
MIN_OUTPUT_GROWTH_KB = int(os.getenv("MIN_OUTPUT_GROWTH_KB", "1"))  # Minimum KB growth per check

# Capture settings (x11grab + ALSA loopback)
CAPTURE_DISPLAY = os.getenv("CAPTURE_DISPLAY", ":0")
CAPTURE_RESOLUTION = os.getenv("CAPTURE_RESOLUTION", "1280x720")
CAPTURE_FRAMERATE = int(os.getenv("CAPTURE_FRAMERATE", "30"))
CAPTURE_PRESET = os.getenv("CAPTURE_PRESET", "veryfast")
CAPTURE_QUEUE_SIZE = int(os.getenv("CAPTURE_QUEUE_SIZE", "4096"))
CAPTURE_AUDIO_DEVICE = os.getenv("CAPTURE_AUDIO_DEVICE", "hw:0,1,0")
CAPTURE_MAX_BITRATE = int(os.getenv("CAPTURE_MAX_BITRATE", "2976"))  # kbit/s, stream sinks only
CAPTURE_CRF = int(os.getenv("CAPTURE_CRF", "25"))

# Status webhook settings
STATUS_WEBHOOK_URLS = [
    url.strip() for url in os.getenv("STATUS_WEBHOOK_URLS", "").split(",") if url.strip()
]
WEBHOOK_TIMEOUT = int(os.getenv("WEBHOOK_TIMEOUT", "10"))

# Web server settings
WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("WEB_PORT", "2222"))


@dataclass
class AppConfig:
    """
    Type-safe configuration with validation.

    This dataclass provides a validated, type-safe interface to the recorder
    configuration. It ensures all required settings are present and valid
    before a recording job starts.
    """

    # Directory paths
    output_dir: str
    log_dir: str
    log_level: str

    # Finalize settings
    finalize_script_path: str
    finalize_timeout: int

    # External command settings
    ffmpeg_command: str
    process_stop_timeout: int

    # Recording settings
    recording_format: str
    capture_restart_attempts: int

    # Process monitor settings
    monitor_initial_delay: int
    monitor_interval: int
    min_output_growth_kb: int

    # Capture settings
    capture_display: str
    capture_resolution: str
    capture_framerate: int
    capture_preset: str
    capture_queue_size: int
    capture_audio_device: str
    capture_max_bitrate: int
    capture_crf: int

    # Web server settings
    web_host: str
    web_port: int

    # Status webhook settings
    status_webhook_urls: List[str] = field(default_factory=list)
    webhook_timeout: int = 10

    # Timezone
    timezone: pytz.tzinfo.BaseTzInfo = field(default_factory=lambda: RECORDING_TZ)

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """
        Create an AppConfig instance from environment variables.

        Returns:
            AppConfig: Validated configuration instance

        Raises:
            ConfigurationError: If any configuration validation fails
        """
        config = cls(
            output_dir=OUTPUT_DIR,
            log_dir=LOG_DIR,
            log_level=LOG_LEVEL,
            finalize_script_path=FINALIZE_SCRIPT_PATH,
            finalize_timeout=FINALIZE_TIMEOUT,
            ffmpeg_command=FFMPEG_COMMAND,
            process_stop_timeout=PROCESS_STOP_TIMEOUT,
            recording_format=RECORDING_FORMAT,
            capture_restart_attempts=CAPTURE_RESTART_ATTEMPTS,
            monitor_initial_delay=MONITOR_INITIAL_DELAY,
            monitor_interval=MONITOR_INTERVAL,
            min_output_growth_kb=MIN_OUTPUT_GROWTH_KB,
            capture_display=CAPTURE_DISPLAY,
            capture_resolution=CAPTURE_RESOLUTION,
            capture_framerate=CAPTURE_FRAMERATE,
            capture_preset=CAPTURE_PRESET,
            capture_queue_size=CAPTURE_QUEUE_SIZE,
            capture_audio_device=CAPTURE_AUDIO_DEVICE,
            capture_max_bitrate=CAPTURE_MAX_BITRATE,
            capture_crf=CAPTURE_CRF,
            web_host=WEB_HOST,
            web_port=WEB_PORT,
            status_webhook_urls=list(STATUS_WEBHOOK_URLS),
            webhook_timeout=WEBHOOK_TIMEOUT,
            timezone=RECORDING_TZ,
        )

        config.validate()

        return config

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If any validation check fails, listing every problem found
        """
        errors = []

        # Validate directory paths
        if not self.output_dir:
            errors.append("OUTPUT_DIR must not be empty")
        else:
            output_path = Path(self.output_dir)
            try:
                output_path.mkdir(parents=True, exist_ok=True)
                test_file = output_path / ".write_test"
                try:
                    test_file.touch()
                    test_file.unlink()
                except (OSError, PermissionError) as e:
                    errors.append(f"OUTPUT_DIR '{self.output_dir}' is not writable: {e}")
            except (OSError, PermissionError) as e:
                errors.append(f"Cannot create OUTPUT_DIR '{self.output_dir}': {e}")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"LOG_LEVEL must be a standard logging level (got '{self.log_level}')")

        # Validate finalize settings
        if not self.finalize_script_path:
            errors.append("FINALIZE_SCRIPT_PATH must not be empty")

        if self.finalize_timeout < 0:
            errors.append(
                f"FINALIZE_TIMEOUT must be non-negative, 0 disables the timeout "
                f"(got {self.finalize_timeout})"
            )

        if self.process_stop_timeout <= 0:
            errors.append(
                f"PROCESS_STOP_TIMEOUT must be positive (got {self.process_stop_timeout})"
            )

        # Validate recording settings
        valid_formats = ["mp4", "mkv"]
        if self.recording_format not in valid_formats:
            errors.append(
                f"RECORDING_FORMAT must be one of {valid_formats} "
                f"(got '{self.recording_format}')"
            )

        if self.capture_restart_attempts < 0:
            errors.append(
                f"CAPTURE_RESTART_ATTEMPTS must be non-negative "
                f"(got {self.capture_restart_attempts})"
            )

        # Validate monitor settings
        if self.monitor_initial_delay < 0:
            errors.append(
                f"MONITOR_INITIAL_DELAY must be non-negative (got {self.monitor_initial_delay})"
            )
        if self.monitor_interval <= 0:
            errors.append(f"MONITOR_INTERVAL must be positive (got {self.monitor_interval})")
        if self.min_output_growth_kb < 0:
            errors.append(
                f"MIN_OUTPUT_GROWTH_KB must be non-negative (got {self.min_output_growth_kb})"
            )

        # Validate capture settings
        width, _, height = self.capture_resolution.partition("x")
        if not (width.isdigit() and height.isdigit()):
            errors.append(
                f"CAPTURE_RESOLUTION must look like WIDTHxHEIGHT (got '{self.capture_resolution}')"
            )
        if self.capture_framerate <= 0:
            errors.append(f"CAPTURE_FRAMERATE must be positive (got {self.capture_framerate})")
        if self.capture_max_bitrate <= 0:
            errors.append(f"CAPTURE_MAX_BITRATE must be positive (got {self.capture_max_bitrate})")
        if not (0 <= self.capture_crf <= 51):
            errors.append(f"CAPTURE_CRF must be between 0 and 51 (got {self.capture_crf})")

        # Validate webhook settings
        for url in self.status_webhook_urls:
            if not url.startswith(("http://", "https://")):
                errors.append(f"STATUS_WEBHOOK_URLS entry is not an http(s) URL: '{url}'")
        if self.webhook_timeout <= 0:
            errors.append(f"WEBHOOK_TIMEOUT must be positive (got {self.webhook_timeout})")

        # Validate web server settings
        if self.web_port < 1 or self.web_port > 65535:
            errors.append(
                f"WEB_PORT must be between 1 and 65535 (got {self.web_port})"
            )

        if errors:
            error_message = "Configuration validation failed:\n" + "\n".join(
                f"  - {error}" for error in errors
            )
            logger.error(error_message)
            raise ConfigurationError(error_message)

        logger.info("Configuration validation passed")


def validate_config() -> AppConfig:
    """
    Convenience function to validate configuration from environment.

    Returns:
        AppConfig: Validated configuration instance

    Raises:
        ConfigurationError: If any configuration validation fails
    """
    return AppConfig.from_env()
