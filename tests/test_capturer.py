"""Tests for the ffmpeg capturer."""

import os
import pytest
from unittest.mock import MagicMock, patch

from services.capturer import FfmpegCapturer
from services.sink import FileSink, StreamSink


@pytest.fixture
def sink(temp_output_dir):
    return FileSink(temp_output_dir, 'WeeklySync', '2026-01-27-09-30-00_001')


def running_process(pid=4321):
    process = MagicMock()
    process.pid = pid
    process.poll.return_value = None
    process.returncode = None
    return process


@pytest.mark.unit
class TestFfmpegCapturerStart:

    @patch('services.capturer.start_process')
    def test_start_launches_ffmpeg(self, mock_start, sink):
        mock_start.return_value = running_process()
        capturer = FfmpegCapturer()

        assert capturer.start(sink) is True

        cmd = mock_start.call_args[0][0]
        assert cmd[-1] == sink.path
        assert os.path.exists(sink.path + '.ffmpeg.log')
        assert capturer.current_sink is sink

    @patch('services.capturer.start_process')
    def test_start_failure_returns_false(self, mock_start, sink):
        mock_start.side_effect = FileNotFoundError("ffmpeg not found")
        capturer = FfmpegCapturer()

        assert capturer.start(sink) is False
        assert capturer.current_process is None

    @patch('services.capturer.start_process')
    def test_refuses_second_start_while_running(self, mock_start, sink):
        mock_start.return_value = running_process()
        capturer = FfmpegCapturer()

        capturer.start(sink)
        assert capturer.start(sink) is False
        assert mock_start.call_count == 1

    @patch('services.capturer.start_process')
    def test_stream_sink_has_no_log_file(self, mock_start):
        mock_start.return_value = running_process()
        capturer = FfmpegCapturer()

        assert capturer.start(StreamSink('rtmp://live.example.com/app/key', 'WeeklySync')) is True
        assert mock_start.call_args[1]['output'] is None


@pytest.mark.unit
class TestFfmpegCapturerStop:

    def test_stop_without_start_is_noop(self):
        capturer = FfmpegCapturer()
        with patch('services.capturer.stop_process') as mock_stop:
            capturer.stop()
        mock_stop.assert_not_called()

    @patch('services.capturer.stop_process')
    @patch('services.capturer.start_process')
    def test_stop_is_idempotent(self, mock_start, mock_stop, sink):
        process = running_process()
        mock_start.return_value = process
        capturer = FfmpegCapturer(stop_timeout=7)
        capturer.start(sink)

        capturer.stop()
        capturer.stop()

        mock_stop.assert_called_once_with(process, 7)
        assert capturer.current_process is None

    @patch('services.capturer.stop_process')
    @patch('services.capturer.start_process')
    def test_restart_after_stop(self, mock_start, mock_stop, sink, temp_output_dir):
        mock_start.side_effect = [running_process(1), running_process(2)]
        capturer = FfmpegCapturer()
        capturer.start(sink)
        capturer.stop()

        new_sink = FileSink(temp_output_dir, 'WeeklySync', '2026-01-27-09-31-00_002')
        assert capturer.start(new_sink) is True
        assert capturer.current_process.pid == 2


@pytest.mark.unit
class TestFfmpegCapturerHealth:

    def test_not_started_is_unhealthy(self):
        capturer = FfmpegCapturer()
        assert capturer.is_healthy() is False
        assert capturer.exit_code is None

    @patch('services.capturer.start_process')
    def test_exited_process_reports_exit_code(self, mock_start, sink):
        process = running_process()
        mock_start.return_value = process
        capturer = FfmpegCapturer()
        capturer.start(sink)

        process.poll.return_value = 1

        assert capturer.is_healthy() is False
        assert capturer.exit_code == 1

    @patch('services.capturer.start_process')
    def test_growing_output_is_healthy(self, mock_start, sink):
        mock_start.return_value = running_process()
        capturer = FfmpegCapturer(min_output_growth_kb=1)
        capturer.start(sink)

        with open(sink.path, 'wb') as f:
            f.write(b'\0' * 4096)
        assert capturer.is_healthy() is True

        with open(sink.path, 'ab') as f:
            f.write(b'\0' * 4096)
        assert capturer.is_healthy() is True

    @patch('services.capturer.start_process')
    def test_stalled_output_is_unhealthy_without_exit_code(self, mock_start, sink):
        mock_start.return_value = running_process()
        capturer = FfmpegCapturer(min_output_growth_kb=1)
        capturer.start(sink)

        with open(sink.path, 'wb') as f:
            f.write(b'\0' * 4096)
        assert capturer.is_healthy() is True
        assert capturer.is_healthy() is False
        assert capturer.exit_code is None

    @patch('services.capturer.start_process')
    def test_missing_output_is_unhealthy(self, mock_start, sink):
        mock_start.return_value = running_process()
        capturer = FfmpegCapturer()
        capturer.start(sink)

        assert capturer.is_healthy() is False

    @patch('services.capturer.stop_process')
    @patch('services.capturer.start_process')
    def test_restart_resets_growth_baseline(self, mock_start, mock_stop, sink, temp_output_dir):
        mock_start.side_effect = [running_process(1), running_process(2)]
        capturer = FfmpegCapturer(min_output_growth_kb=1)
        capturer.start(sink)
        with open(sink.path, 'wb') as f:
            f.write(b'\0' * 4096)
        capturer.is_healthy()
        capturer.stop()

        new_sink = FileSink(temp_output_dir, 'WeeklySync', '2026-01-27-09-31-00_002')
        capturer.start(new_sink)
        with open(new_sink.path, 'wb') as f:
            f.write(b'\0' * 100)

        assert capturer.is_healthy() is True
