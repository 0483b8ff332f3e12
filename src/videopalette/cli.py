import argparse
import logging
import sys

from dotenv import load_dotenv

from videopalette.config.palette_config import PaletteConfig
from videopalette.errors import ConfigError, InputError
from videopalette.pipeline import ExtractionResult, extract_palette
from videopalette.utils.color.color_utils import rgb_to_hex
from videopalette.utils.logger import LOGGER_NAME, configure_logging
from videopalette.utils.timecode import parse_timestamp

logger = logging.getLogger(LOGGER_NAME)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_EMPTY_PALETTE = 3


def _timestamp(value: str) -> float:
    try:
        return parse_timestamp(value)
    except InputError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser(defaults: PaletteConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="video-palette",
        description="Extracts the color palette from a video",
    )
    parser.add_argument("video", metavar="FILE", help="The input video to parse for colors")
    parser.add_argument(
        "-s",
        "--saturation",
        type=float,
        default=defaults.saturation,
        help="Saturation threshold for colors (0-1)",
    )
    parser.add_argument(
        "-l",
        "--luminance",
        type=float,
        default=defaults.luminance,
        help="Luminance threshold for colors (0-1)",
    )
    parser.add_argument(
        "-r",
        "--resize-height",
        type=int,
        default=defaults.resize_height,
        help="Resize the video to this height (maintains aspect ratio)",
    )
    parser.add_argument(
        "-c",
        "--color-clusters",
        type=int,
        default=defaults.color_clusters,
        help="Number of color clusters to create",
    )
    parser.add_argument(
        "--start",
        type=_timestamp,
        default=defaults.start,
        help="Start time of the video to extract colors (format: HH:MM:SS)",
    )
    parser.add_argument(
        "--end",
        type=_timestamp,
        default=defaults.end,
        help="End time of the video to extract colors (format: HH:MM:SS)",
    )
    parser.add_argument(
        "--exclude-extremes",
        action="store_true",
        default=defaults.exclude_extremes,
        help="Ignore near-white and near-black pixels",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.random_state,
        help="Random seed for reproducible clustering",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=defaults.workers,
        help="Number of frame filtering threads",
    )
    parser.add_argument(
        "--top-colors",
        type=int,
        default=defaults.top_colors,
        help="Also list this many most frequent exact colors (0 to disable)",
    )
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-dir", default=None, help="Also write logs to this directory")
    return parser


def config_from_args(args: argparse.Namespace, defaults: PaletteConfig) -> PaletteConfig:
    config = PaletteConfig.from_dict(
        {
            **defaults.to_dict(),
            "saturation": args.saturation,
            "luminance": args.luminance,
            "resize_height": args.resize_height,
            "color_clusters": args.color_clusters,
            "start": args.start,
            "end": args.end,
            "exclude_extremes": args.exclude_extremes,
            "random_state": args.seed,
            "workers": args.workers,
            "top_colors": args.top_colors,
        }
    )
    return config.validate()


def print_result(result: ExtractionResult, out=None):
    out = out or sys.stdout
    if result.ranking:
        print(f"Top {len(result.ranking)} colors in the video:", file=out)
        for idx, (color, count) in enumerate(result.ranking, start=1):
            print(f"{idx}. {rgb_to_hex(color)} (count: {count})", file=out)

    print("Color clusters:", file=out)
    total = result.palette.total_weight
    for idx, entry in enumerate(result.palette, start=1):
        print(
            f"{idx}. {entry.hex} weight: {entry.weight} ({entry.proportion(total):.1%})",
            file=out,
        )


def main(argv=None) -> int:
    load_dotenv()

    try:
        defaults = PaletteConfig.from_env()
    except (InputError, ConfigError) as e:
        print(f"Invalid environment configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    args = build_parser(defaults).parse_args(argv)
    configure_logging(verbose=args.verbose, log_dir=args.log_dir)

    try:
        config = config_from_args(args, defaults)
        result = extract_palette(args.video, config, show_progress=not args.no_progress)
    except (InputError, ConfigError) as e:
        logger.error(str(e))
        return EXIT_ERROR
    except KeyboardInterrupt:
        logger.info("Program interrupted by user")
        return EXIT_ERROR

    if result.palette.is_empty:
        print(
            "No colors passed the filter. Try lowering --saturation or --luminance.",
            file=sys.stderr,
        )
        return EXIT_EMPTY_PALETTE

    print_result(result)
    return EXIT_OK
