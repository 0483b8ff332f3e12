"""
Shared fixtures for the palette extraction tests.
"""
import av
import numpy as np
import pytest

from videopalette.frame.frame import Frame

BLUE = (0, 0, 255)
GREEN = (0, 255, 0)
RED = (255, 0, 0)


def solid_frame(color, height=8, width=16, time=0):
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    return Frame(pixels, time)


def split_frame(top_color, bottom_color, top_rows=7, height=10, width=10, time=0):
    """Frame whose first top_rows rows are top_color and the rest bottom_color"""
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:top_rows, :] = top_color
    pixels[top_rows:, :] = bottom_color
    return Frame(pixels, time)


def write_test_video(path, color, seconds=3, fps=10, width=64, height=48):
    """Encode a solid color MPEG-4 clip with PyAV."""
    container = av.open(str(path), mode="w")
    stream = container.add_stream("mpeg4", rate=fps)
    stream.width = width
    stream.height = height
    stream.pix_fmt = "yuv420p"

    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    for _ in range(seconds * fps):
        frame = av.VideoFrame.from_ndarray(pixels, format="rgb24")
        for packet in stream.encode(frame):
            container.mux(packet)

    for packet in stream.encode():
        container.mux(packet)
    container.close()
    return path


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture(scope="session")
def red_video(tmp_path_factory):
    path = tmp_path_factory.mktemp("videos") / "red.mp4"
    return str(write_test_video(path, (200, 30, 30)))


@pytest.fixture(scope="session")
def gray_video(tmp_path_factory):
    path = tmp_path_factory.mktemp("videos") / "gray.mp4"
    return str(write_test_video(path, (128, 128, 128), seconds=1))
