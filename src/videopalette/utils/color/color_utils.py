import cv2
import numpy as np

from videopalette.constants import BLACK_THRESHOLD, WHITE_THRESHOLD


def rgb_to_hex(rgb) -> str:
    """Convert an RGB triple (0-255) to a #RRGGBB string."""
    r, g, b = [int(channel) for channel in rgb]
    return f"#{r:02X}{g:02X}{b:02X}"


def rgb_to_hsv(pixels: np.ndarray) -> np.ndarray:
    """
    Convert RGB pixels to HSV.

    Saturation and value are computed exactly from the channel extremes so
    threshold comparisons are not affected by 8-bit rounding. Hue comes from
    OpenCV and is only as precise as its 2 degree steps.

    Args:
        pixels: NumPy array of RGB colors with shape (n, 3), values 0-255

    Returns:
        Float64 array of shape (n, 3): hue in degrees (0-360),
        saturation and value in 0.0-1.0
    """
    if len(pixels) == 0:
        return np.empty((0, 3), dtype=np.float64)

    rgb = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(-1, 3)
    high = rgb.max(axis=1).astype(np.float64)
    low = rgb.min(axis=1).astype(np.float64)

    saturation = np.zeros(len(rgb), dtype=np.float64)
    np.divide(high - low, high, out=saturation, where=high > 0)

    # OpenCV hue is 0-179
    hue = cv2.cvtColor(rgb.reshape(-1, 1, 3), cv2.COLOR_RGB2HSV)[:, 0, 0]

    return np.column_stack([hue.astype(np.float64) * 2.0, saturation, high / 255.0])


def extreme_mask(
    pixels: np.ndarray,
    white_threshold: int = WHITE_THRESHOLD,
    black_threshold: int = BLACK_THRESHOLD,
) -> np.ndarray:
    """Boolean mask of near-white and near-black pixels in an (n, 3) RGB array"""
    near_white = np.all(pixels >= white_threshold, axis=1)
    near_black = np.all(pixels <= black_threshold, axis=1)
    return near_white | near_black
