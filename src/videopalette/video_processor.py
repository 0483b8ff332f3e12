import logging
import os
from typing import Iterator

import av

from videopalette.errors import VideoOpenError
from videopalette.frame.frame import Frame
from videopalette.utils.logger import LOGGER_NAME
from videopalette.utils.timecode import format_timestamp, validate_window

logger = logging.getLogger(LOGGER_NAME)


class VideoFrameSource:
    """Decode RGB frames from a video file within an optional time window."""

    def __init__(
        self,
        path: str,
        start: float | None = None,
        end: float | None = None,
    ):
        """
        Open the video and read its stream properties.

        Args:
            path: Path to the video file
            start: Start of the window in seconds (None for the beginning)
            end: End of the window in seconds (None for the end of the video)

        Raises:
            VideoOpenError: If the path is not a file or cannot be decoded
            TimestampError: If the window is invalid
        """
        validate_window(start, end)

        if not os.path.isfile(path):
            raise VideoOpenError(f"Video path is not a file: {path}")

        self.path = path
        self.start = start
        self.end = end
        self.container = self._open_container()

        try:
            self.stream = self.container.streams.video[0]
        except IndexError:
            self.close()
            raise VideoOpenError(f"No video stream found in {path}")

        self.stream.codec_context.thread_type = "AUTO"
        logger.info(
            f"Opened {path}: {self.stream.codec_context.width}x"
            f"{self.stream.codec_context.height} @ {self.fps:.2f} fps, "
            f"{format_timestamp(self.duration)} long"
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _open_container(self):
        try:
            return av.open(self.path)
        except av.error.FFmpegError as e:
            raise VideoOpenError(f"Could not open video {self.path}: {e}") from e

    def close(self):
        """Release the container"""
        if self.container is not None:
            self.container.close()
            self.container = None

    @property
    def fps(self) -> float:
        rate = self.stream.average_rate or self.stream.guessed_rate
        return float(rate) if rate else 0.0

    @property
    def duration(self) -> float:
        """Duration of the video in seconds (0 when unknown)."""
        if self.stream.duration is not None and self.stream.time_base is not None:
            return float(self.stream.duration * self.stream.time_base)
        if self.container is not None and self.container.duration is not None:
            return self.container.duration / av.time_base
        return 0.0

    @property
    def expected_frame_count(self) -> int | None:
        """Approximate number of frames in the window, for progress reporting."""
        fps = self.fps
        start_frame = round((self.start or 0) * fps)

        if self.end is not None and fps > 0:
            end_frame = round(self.end * fps)
        elif self.stream.frames:
            end_frame = self.stream.frames
        elif self.duration and fps > 0:
            end_frame = round(self.duration * fps)
        else:
            return None

        return max(0, end_frame - start_frame)

    def _seek(self, seconds: float):
        if self.stream.time_base is not None:
            self.container.seek(int(seconds / self.stream.time_base), stream=self.stream)
        else:
            self.container.seek(int(seconds * av.time_base))

    def _timed_frames(self):
        """
        Yield (seconds, video_frame) pairs from the seek position onwards.

        Frames without a timestamp are timed by their position in the stream,
        which is only known when decoding from the beginning. If the first frame
        after a seek has no timestamp, decoding restarts from the first frame.
        """
        fps = self.fps
        seeked = bool(self.start)
        if seeked:
            self._seek(self.start)

        while True:
            index = 0
            seconds = None
            for video_frame in self.container.decode(self.stream):
                if video_frame.time is not None:
                    seconds = video_frame.time
                elif not seeked:
                    seconds = index / fps if fps > 0 else 0.0
                elif seconds is not None:
                    seconds += 1 / fps if fps > 0 else 0.0
                else:
                    break

                yield seconds, video_frame
                index += 1
            else:
                return

            logger.warning(
                f"Frames in {self.path} carry no timestamps, decoding from the start of the video"
            )
            seeked = False
            self._seek(0)

    def frames(self) -> Iterator[Frame]:
        """
        Generator that yields decoded frames one at a time.

        Frames before the window start are skipped; decoding stops at the
        first frame at or past the window end.

        Yields:
            Frame objects with RGB pixels and timestamps in milliseconds
        """
        if self.container is None:
            raise VideoOpenError(f"Video {self.path} is closed")

        try:
            for seconds, video_frame in self._timed_frames():
                if self.start is not None and seconds < self.start:
                    continue
                if self.end is not None and seconds >= self.end:
                    break

                yield Frame(video_frame.to_ndarray(format="rgb24"), max(0.0, seconds) * 1000)
        except av.error.FFmpegError as e:
            raise VideoOpenError(f"Error decoding {self.path}: {e}") from e
