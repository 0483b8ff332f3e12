from videopalette.clustering.color_clusterer import Cluster, ColorClusterer
from videopalette.config.palette_config import PaletteConfig
from videopalette.errors import (
    ConfigError,
    InputError,
    PaletteExtractionError,
    TimestampError,
    VideoOpenError,
)
from videopalette.frame.frame import Frame
from videopalette.palette import Palette, PaletteEntry, assemble_palette
from videopalette.pipeline import ExtractionResult, PalettePipeline, extract_palette

__version__ = "0.1.0"
