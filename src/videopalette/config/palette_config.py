import numbers
import os
from dataclasses import dataclass

from videopalette.constants import (
    COLOR_CLUSTERS,
    FRAME_QUEUE_SIZE,
    LUMINANCE_THRESHOLD,
    MAX_ITERATIONS,
    RESIZE_HEIGHT,
    SATURATION_THRESHOLD,
    TOP_COLORS,
    WORKERS,
)
from videopalette.errors import ConfigError
from videopalette.utils.timecode import parse_timestamp, validate_window

ENV_PREFIX = "PALETTE_"


@dataclass
class PaletteConfig:
    saturation: float = SATURATION_THRESHOLD
    luminance: float = LUMINANCE_THRESHOLD
    resize_height: int = RESIZE_HEIGHT
    color_clusters: int = COLOR_CLUSTERS
    start: float | None = None
    end: float | None = None
    exclude_extremes: bool = False
    max_iterations: int = MAX_ITERATIONS
    random_state: int | None = None
    workers: int = WORKERS
    queue_size: int = FRAME_QUEUE_SIZE
    top_colors: int = TOP_COLORS

    def validate(self) -> "PaletteConfig":
        """
        Check every option before any frame is processed.

        Raises:
            ConfigError: If a threshold or count is out of range or of the wrong type
            TimestampError: If the time window is invalid
        """
        for name in ("saturation", "luminance"):
            value = getattr(self, name)
            if not is_number(value):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be between 0 and 1, got {value}")

        for name in (
            "resize_height",
            "color_clusters",
            "max_iterations",
            "workers",
            "queue_size",
        ):
            value = getattr(self, name)
            if not is_integer(value):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value}")

        if not is_integer(self.top_colors):
            raise ConfigError(f"top_colors must be an integer, got {self.top_colors!r}")
        if self.top_colors < 0:
            raise ConfigError(f"top_colors cannot be negative, got {self.top_colors}")

        if self.random_state is not None and not is_integer(self.random_state):
            raise ConfigError(
                f"random_state must be an integer or None, got {self.random_state!r}"
            )

        for name in ("start", "end"):
            value = getattr(self, name)
            if value is not None and not is_number(value):
                raise ConfigError(f"{name} must be a number of seconds, got {value!r}")

        validate_window(self.start, self.end)
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "PaletteConfig":
        """Build a config from a dict, falling back to defaults for missing keys."""
        defaults = cls()
        return cls(
            saturation=float(data.get("saturation", defaults.saturation)),
            luminance=float(data.get("luminance", defaults.luminance)),
            resize_height=int(data.get("resize_height", defaults.resize_height)),
            color_clusters=int(data.get("color_clusters", defaults.color_clusters)),
            start=data.get("start"),
            end=data.get("end"),
            exclude_extremes=bool(
                data.get("exclude_extremes", defaults.exclude_extremes)
            ),
            max_iterations=int(data.get("max_iterations", defaults.max_iterations)),
            random_state=data.get("random_state"),
            workers=int(data.get("workers", defaults.workers)),
            queue_size=int(data.get("queue_size", defaults.queue_size)),
            top_colors=int(data.get("top_colors", defaults.top_colors)),
        )

    def to_dict(self) -> dict:
        return {
            "saturation": self.saturation,
            "luminance": self.luminance,
            "resize_height": self.resize_height,
            "color_clusters": self.color_clusters,
            "start": self.start,
            "end": self.end,
            "exclude_extremes": self.exclude_extremes,
            "max_iterations": self.max_iterations,
            "random_state": self.random_state,
            "workers": self.workers,
            "queue_size": self.queue_size,
            "top_colors": self.top_colors,
        }

    @classmethod
    def from_env(cls) -> "PaletteConfig":
        """
        Read PALETTE_* environment variables, e.g. PALETTE_COLOR_CLUSTERS=8.

        PALETTE_START and PALETTE_END use HH:MM:SS format.
        """
        data = {}
        for key in cls().to_dict():
            value = os.getenv(ENV_PREFIX + key.upper())
            if value is None or value == "":
                continue
            if key in ("start", "end"):
                data[key] = parse_timestamp(value)
            elif key == "exclude_extremes":
                data[key] = value.strip().lower() in ("1", "true", "yes", "on")
            elif key == "random_state":
                data[key] = _env_int(key, value)
            else:
                data[key] = value

        try:
            return cls.from_dict(data)
        except ValueError as e:
            raise ConfigError(f"Invalid {ENV_PREFIX}* environment value: {e}") from e


def is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _env_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{key.upper()} must be an integer") from e
