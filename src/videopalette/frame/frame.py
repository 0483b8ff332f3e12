import numpy as np


class Frame:
    """
    Class representing a single decoded video frame.

    Attributes:
        pixels: RGB pixel grid as a (height, width, 3) uint8 array
        time: Time in milliseconds
    """

    def __init__(self, pixels: np.ndarray, time: float = 0):
        """
        Initialize a Frame object.

        Args:
            pixels: RGB pixel grid of shape (height, width, 3)
            time: Time in milliseconds

        Raises:
            ValueError: If time is negative or if the pixel grid is malformed
        """
        if time < 0:
            raise ValueError("Time cannot be negative")

        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError("Pixels must be a (height, width, 3) RGB array")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Frame cannot be empty")

        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
        self.time = time

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def pixel_count(self) -> int:
        return self.height * self.width

    def __repr__(self) -> str:
        """String representation of the Frame."""
        return f"Frame(time={self.time}ms, size={self.width}x{self.height})"
