#!/usr/bin/env python3
"""
FFmpeg command builder for constructing call capture commands.
"""

from config import (
    FFMPEG_COMMAND,
    CAPTURE_DISPLAY,
    CAPTURE_RESOLUTION,
    CAPTURE_FRAMERATE,
    CAPTURE_PRESET,
    CAPTURE_QUEUE_SIZE,
    CAPTURE_AUDIO_DEVICE,
    CAPTURE_MAX_BITRATE,
    CAPTURE_CRF,
)


class FFmpegCommandBuilder:
    """Builds ffmpeg commands that grab the call's display and audio loopback."""

    def __init__(
        self,
        ffmpeg_command: str = FFMPEG_COMMAND,
        display: str = CAPTURE_DISPLAY,
        resolution: str = CAPTURE_RESOLUTION,
        framerate: int = CAPTURE_FRAMERATE,
        preset: str = CAPTURE_PRESET,
        queue_size: int = CAPTURE_QUEUE_SIZE,
        audio_device: str = CAPTURE_AUDIO_DEVICE,
        max_bitrate: int = CAPTURE_MAX_BITRATE,
        crf: int = CAPTURE_CRF
    ):
        self.ffmpeg_command = ffmpeg_command
        self.display = display
        self.resolution = resolution
        self.framerate = framerate
        self.preset = preset
        self.queue_size = queue_size
        self.audio_device = audio_device
        self.max_bitrate = max_bitrate
        self.crf = crf

    def build_command(self, sink) -> list[str]:
        """Build the ffmpeg capture command for a sink.

        Args:
            sink: FileSink or StreamSink to write to

        Returns:
            List of command arguments for ffmpeg
        """
        if not sink.path:
            raise ValueError("sink path cannot be empty")

        cmd = [self.ffmpeg_command, '-y', '-v', 'info']

        # Video: the virtual display the browser renders the call into
        cmd.extend([
            '-f', 'x11grab',
            '-draw_mouse', '0',
            '-r', str(self.framerate),
            '-s', self.resolution,
            '-thread_queue_size', str(self.queue_size),
            '-i', f"{self.display}.0+0,0"
        ])

        # Audio: ALSA loopback device
        cmd.extend([
            '-f', 'alsa',
            '-thread_queue_size', str(self.queue_size),
            '-i', self.audio_device,
            '-acodec', 'aac', '-strict', '-2', '-ar', '44100'
        ])

        cmd.extend(['-c:v', 'libx264', '-preset', self.preset])

        if sink.is_stream:
            cmd.extend([
                '-maxrate', f"{self.max_bitrate}k",
                '-bufsize', f"{self.max_bitrate * 2}k"
            ])
        else:
            cmd.extend(['-profile:v', 'main', '-level', '3.1'])

        cmd.extend([
            '-pix_fmt', 'yuv420p',
            '-r', str(self.framerate),
            '-crf', str(self.crf),
            '-g', str(self.framerate * 2),
            '-tune', 'zerolatency'
        ])

        if sink.is_stream:
            cmd.extend(['-f', 'flv'])
        elif sink.format == 'mkv':
            cmd.extend(['-f', 'matroska'])
        else:
            cmd.extend(['-f', 'mp4'])

        cmd.append(sink.path)

        return cmd
