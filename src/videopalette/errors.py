class PaletteExtractionError(Exception):
    """Base class for errors raised while extracting a palette."""

    pass


class InputError(PaletteExtractionError):
    """Custom exception raised when the input video or its time window is unusable."""

    pass


class VideoOpenError(InputError):
    """Custom exception raised when a video file cannot be opened or decoded."""

    pass


class TimestampError(InputError):
    """Custom exception raised for malformed timestamps or an end before the start."""

    pass


class ConfigError(PaletteExtractionError):
    """Custom exception raised when a configuration value is out of range."""

    pass
