"""
Unit tests for frame reduction.
"""
import numpy as np
import pytest

from videopalette.errors import ConfigError
from videopalette.frame.frame import Frame
from videopalette.frame.frame_reducer import FrameReducer

from conftest import RED, solid_frame


class TestFrameReducer:
    def test_reduces_to_target_height_keeping_aspect_ratio(self):
        frame = Frame(np.zeros((720, 1280, 3), dtype=np.uint8), time=40)

        reduced = FrameReducer(12).reduce(frame)

        assert reduced.height == 12
        assert reduced.width == 21
        assert reduced.time == 40

    @pytest.mark.parametrize(
        "height,width,target",
        [(720, 1280, 12), (1080, 1920, 7), (480, 640, 5), (100, 37, 9), (3, 500, 2)],
    )
    def test_width_within_one_pixel_of_exact_ratio(self, height, width, target):
        reducer = FrameReducer(target)

        new_width, new_height = reducer.target_size(width, height)

        assert new_height == min(target, height)
        assert abs(new_width - width * target / height) <= 1
        assert new_width * new_height <= width * height

    def test_frames_at_or_below_target_pass_through(self):
        small = solid_frame(RED, height=10, width=20)
        exact = solid_frame(RED, height=12, width=20)
        reducer = FrameReducer(12)

        assert reducer.reduce(small) is small
        assert reducer.reduce(exact) is exact

    def test_area_averaging(self):
        pixels = np.array(
            [[[0, 0, 0], [100, 100, 100]], [[200, 200, 200], [100, 100, 100]]],
            dtype=np.uint8,
        )

        reduced = FrameReducer(1).reduce(Frame(pixels))

        assert reduced.pixels.shape == (1, 1, 3)
        np.testing.assert_array_equal(reduced.pixels[0, 0], [100, 100, 100])

    def test_source_frame_is_not_mutated(self, rng):
        pixels = rng.integers(0, 256, size=(40, 60, 3), dtype=np.uint8)
        frame = Frame(pixels.copy())

        FrameReducer(4).reduce(frame)

        np.testing.assert_array_equal(frame.pixels, pixels)

    def test_very_narrow_frames_keep_at_least_one_column(self):
        frame = Frame(np.zeros((100, 1, 3), dtype=np.uint8))

        reduced = FrameReducer(10).reduce(frame)

        assert reduced.pixels.shape == (10, 1, 3)

    @pytest.mark.parametrize("target", [0, -3, 12.5, "12", True])
    def test_rejects_invalid_height(self, target):
        with pytest.raises(ConfigError):
            FrameReducer(target)


class TestFrame:
    def test_rejects_negative_time(self):
        with pytest.raises(ValueError):
            Frame(np.zeros((2, 2, 3), dtype=np.uint8), time=-1)

    def test_rejects_malformed_pixels(self):
        with pytest.raises(ValueError):
            Frame(np.zeros((2, 2), dtype=np.uint8))
        with pytest.raises(ValueError):
            Frame(np.zeros((0, 4, 3), dtype=np.uint8))

    def test_dimensions(self):
        frame = solid_frame(RED, height=3, width=5)

        assert (frame.height, frame.width, frame.pixel_count) == (3, 5, 15)
