import cv2

from videopalette.config.palette_config import is_integer
from videopalette.constants import RESIZE_HEIGHT
from videopalette.errors import ConfigError
from videopalette.frame.frame import Frame


class FrameReducer:
    """Downsamples frames to a fixed height before their pixels are filtered."""

    def __init__(self, target_height: int = RESIZE_HEIGHT):
        if not is_integer(target_height) or target_height <= 0:
            raise ConfigError(
                f"resize_height must be a positive integer, got {target_height}"
            )
        self.target_height = target_height

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        """
        Compute the reduced (width, height), keeping the aspect ratio.

        Frames already at or below the target height keep their size.
        """
        if self.target_height >= height:
            return width, height

        new_width = int(width * self.target_height / height + 0.5)
        return max(1, new_width), self.target_height

    def reduce(self, frame: Frame) -> Frame:
        """
        Area-average a frame down to the target height.

        Args:
            frame: Source frame, left untouched

        Returns:
            The reduced frame, or the source frame itself when no reduction
            is needed
        """
        width, height = self.target_size(frame.width, frame.height)
        if height == frame.height:
            return frame

        resized = cv2.resize(
            frame.pixels,
            (width, height),
            interpolation=cv2.INTER_AREA,
        )
        return Frame(resized, frame.time)
