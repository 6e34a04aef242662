"""Custom exception types for the call recorder.

This module defines a hierarchy of domain-specific exceptions that provide
clear error handling and improved debugging capabilities.

Exception Hierarchy:
    CallRecorderError (base)
    ├── ConfigurationError
    ├── CallSessionError
    │   └── CallJoinError
    ├── CaptureError
    │   ├── CaptureStartError
    │   └── CaptureProcessError
    ├── RecordingStorageError
    ├── FinalizeError
    │   └── FinalizeTimeoutError
    └── StatusNotificationError
"""

from typing import Optional


class CallRecorderError(Exception):
    """Base exception for all call recorder errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """Initialize the exception with a message and optional details.

        Args:
            message: Human-readable error message
            details: Additional technical details about the error
        """
        self.message = message
        self.details = details
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message."""
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


# Configuration Errors
class ConfigurationError(CallRecorderError):
    """Raised when there's an issue with recorder configuration."""
    pass


# Call Session Errors
class CallSessionError(CallRecorderError):
    """Base class for errors reported by the call session."""
    pass


class CallJoinError(CallSessionError):
    """Raised when the call session cannot join a call."""

    def __init__(self, call_name: str, reason: Optional[str] = None):
        """Initialize with the call name and optional reason.

        Args:
            call_name: Name of the call that could not be joined
            reason: Optional reason reported by the session
        """
        self.call_name = call_name
        message = f"Failed to join call: {call_name}"
        super().__init__(message, reason)


# Capture Errors
class CaptureError(CallRecorderError):
    """Base class for capture-related errors."""
    pass


class CaptureStartError(CaptureError):
    """Raised when the capture process cannot be launched."""

    def __init__(self, sink_path: str, error: Optional[str] = None):
        """Initialize with the sink path and optional error details.

        Args:
            sink_path: Output target the capture was meant to write to
            error: Error details from the launch attempt
        """
        self.sink_path = sink_path
        message = f"Failed to start capture to: {sink_path}"
        super().__init__(message, error)


class CaptureProcessError(CaptureError):
    """Raised when a running capture process fails."""

    def __init__(self, exit_code: Optional[int] = None, error: Optional[str] = None):
        """Initialize with optional exit code and error details.

        Args:
            exit_code: Exit code of the process, None if it is still running
            error: Error details about the failure
        """
        self.exit_code = exit_code
        message = "Capture process failed"
        if exit_code is not None:
            message += f" (exit code: {exit_code})"
        super().__init__(message, error)


# Storage Errors
class RecordingStorageError(CallRecorderError):
    """Raised when unable to store or access recording artifacts."""

    def __init__(self, file_path: str, operation: str, error: Optional[str] = None):
        """Initialize with file path, operation, and optional error.

        Args:
            file_path: Path to the artifact
            operation: The operation that failed (e.g., 'write', 'create')
            error: Optional error details
        """
        self.file_path = file_path
        self.operation = operation
        message = f"Failed to {operation} recording artifact: {file_path}"
        super().__init__(message, error)


# Finalize Errors
class FinalizeError(CallRecorderError):
    """Raised when the finalize script cannot be run."""

    def __init__(self, script_path: str, error: Optional[str] = None):
        """Initialize with the script path and optional error details.

        Args:
            script_path: Path to the finalize script
            error: Error details from the launch attempt
        """
        self.script_path = script_path
        message = f"Failed to run finalize script: {script_path}"
        super().__init__(message, error)


class FinalizeTimeoutError(FinalizeError):
    """Raised when the finalize script does not finish within its timeout."""

    def __init__(self, script_path: str, timeout: float):
        """Initialize with the script path and the timeout that expired.

        Args:
            script_path: Path to the finalize script
            timeout: Seconds the script was allowed to run
        """
        self.timeout = timeout
        super().__init__(script_path, f"Timed out after {timeout}s")


# Notification Errors
class StatusNotificationError(CallRecorderError):
    """Raised when a status notification cannot be delivered."""

    def __init__(self, url: str, error: Optional[str] = None):
        """Initialize with the target URL and optional error details.

        Args:
            url: Webhook URL the notification was sent to
            error: Error details from the request
        """
        self.url = url
        message = f"Failed to deliver status notification to: {url}"
        super().__init__(message, error)
