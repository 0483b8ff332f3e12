import numpy as np

from videopalette.constants import LUMINANCE_THRESHOLD, SATURATION_THRESHOLD
from videopalette.errors import ConfigError
from videopalette.frame.frame import Frame
from videopalette.utils.color.color_utils import extreme_mask, rgb_to_hsv


class PixelFilter:
    """
    Keeps the pixels of a frame that meet saturation and luminance thresholds.

    Luminance is measured as the HSV value channel. Surviving pixels are
    returned in their original RGB values.
    """

    def __init__(
        self,
        saturation: float = SATURATION_THRESHOLD,
        luminance: float = LUMINANCE_THRESHOLD,
        exclude_extremes: bool = False,
    ):
        for name, value in (("saturation", saturation), ("luminance", luminance)):
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be between 0 and 1, got {value}")

        self.saturation = saturation
        self.luminance = luminance
        self.exclude_extremes = exclude_extremes

    def keep_mask(self, pixels: np.ndarray) -> np.ndarray:
        """Boolean mask over an (n, 3) RGB array of the pixels to keep"""
        hsv = rgb_to_hsv(pixels)
        keep = (hsv[:, 1] >= self.saturation) & (hsv[:, 2] >= self.luminance)

        if self.exclude_extremes:
            keep &= ~extreme_mask(pixels)

        return keep

    def filter(self, frame: Frame) -> np.ndarray:
        """
        Filter a frame's pixels.

        Args:
            frame: Frame to filter, usually already reduced

        Returns:
            Surviving RGB pixels as an (n, 3) uint8 array
        """
        pixels = frame.pixels.reshape(-1, 3)
        return pixels[self.keep_mask(pixels)]
