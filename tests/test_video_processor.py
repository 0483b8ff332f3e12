"""
Integration tests for PyAV frame decoding and whole-file extraction.
"""
from fractions import Fraction
from types import SimpleNamespace

import numpy as np
import pytest

from videopalette.config.palette_config import PaletteConfig
from videopalette.errors import TimestampError, VideoOpenError
from videopalette.pipeline import extract_palette
from videopalette.video_processor import VideoFrameSource


class TestVideoFrameSource:
    def test_missing_file(self, tmp_path):
        with pytest.raises(VideoOpenError):
            VideoFrameSource(str(tmp_path / "missing.mp4"))

    def test_directory_is_not_a_video(self, tmp_path):
        with pytest.raises(VideoOpenError):
            VideoFrameSource(str(tmp_path))

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "notes.mp4"
        path.write_text("this is not a video")

        with pytest.raises(VideoOpenError):
            VideoFrameSource(str(path))

    def test_end_before_start(self, red_video):
        with pytest.raises(TimestampError):
            VideoFrameSource(red_video, start=2.0, end=1.0)

    def test_stream_properties(self, red_video):
        with VideoFrameSource(red_video) as source:
            assert source.fps == pytest.approx(10.0)
            assert source.duration == pytest.approx(3.0, abs=0.2)
            assert source.expected_frame_count == pytest.approx(30, abs=1)

    def test_decodes_every_frame(self, red_video):
        with VideoFrameSource(red_video) as source:
            frames = list(source.frames())

        assert 28 <= len(frames) <= 31
        assert frames[0].pixels.shape == (48, 64, 3)
        times = [frame.time for frame in frames]
        assert times == sorted(times)

    def test_time_window(self, red_video):
        with VideoFrameSource(red_video, start=1.0, end=2.0) as source:
            expected = source.expected_frame_count
            frames = list(source.frames())

        assert expected == 10
        assert 8 <= len(frames) <= 11
        assert all(1000 <= frame.time < 2000 for frame in frames)

    def test_closed_source(self, red_video):
        source = VideoFrameSource(red_video)
        source.close()

        with pytest.raises(VideoOpenError):
            next(source.frames())


class TestExtractPalette:
    def test_solid_video(self, red_video):
        config = PaletteConfig(color_clusters=1, random_state=0)

        result = extract_palette(red_video, config, show_progress=False)

        assert len(result.palette) == 1
        assert result.palette.total_weight == result.sample_count
        # 64x48 frames reduce to 16x12
        assert result.sample_count == result.frame_count * 16 * 12
        assert np.abs(np.array(result.palette[0].color) - (200, 30, 30)).max() <= 20

    def test_window(self, red_video):
        config = PaletteConfig(start=1.0, end=2.0, random_state=0)

        result = extract_palette(red_video, config, show_progress=False)

        assert 8 <= result.frame_count <= 11


class UntimedFrame:
    time = None

    def to_ndarray(self, format):
        return np.zeros((2, 2, 3), dtype=np.uint8)


class UntimedContainer:
    """Container whose frames carry no pts; seeks land on an earlier keyframe."""

    def __init__(self, total_frames, keyframe):
        self.total_frames = total_frames
        self.keyframe = keyframe
        self.position = 0
        self.seeks = []

    def seek(self, offset, stream=None):
        self.seeks.append(offset)
        self.position = min(offset, self.keyframe)

    def decode(self, stream):
        for _ in range(self.position, self.total_frames):
            yield UntimedFrame()

    def close(self):
        pass


def untimed_source(start, end, keyframe=6):
    source = VideoFrameSource.__new__(VideoFrameSource)
    source.path = "untimed.mp4"
    source.start = start
    source.end = end
    source.container = UntimedContainer(total_frames=30, keyframe=keyframe)
    source.stream = SimpleNamespace(
        average_rate=Fraction(10), guessed_rate=None, time_base=Fraction(1, 10)
    )
    return source


class TestUntimedFrames:
    def test_window_after_seek_is_timed_from_stream_start(self):
        source = untimed_source(start=1.0, end=1.5)

        frames = list(source.frames())

        assert [frame.time for frame in frames] == pytest.approx([1000, 1100, 1200, 1300, 1400])
        assert source.container.seeks == [10, 0]

    def test_without_start_frames_are_timed_by_index(self):
        source = untimed_source(start=None, end=0.5)

        frames = list(source.frames())

        assert [frame.time for frame in frames] == pytest.approx([0, 100, 200, 300, 400])
        assert source.container.seeks == []
