import logging
import queue
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from tqdm import tqdm

from videopalette.accumulator import ColorAccumulator
from videopalette.clustering.color_clusterer import ColorClusterer
from videopalette.config.palette_config import PaletteConfig
from videopalette.constants import QUEUE_POLL_INTERVAL_SEC
from videopalette.frame.frame import Frame
from videopalette.frame.frame_reducer import FrameReducer
from videopalette.frame.pixel_filter import PixelFilter
from videopalette.palette import Palette, assemble_palette
from videopalette.utils.logger import LOGGER_NAME
from videopalette.video_processor import VideoFrameSource

logger = logging.getLogger(LOGGER_NAME)

_END_OF_FRAMES = object()


class _ProducerFailure:
    def __init__(self, error: BaseException):
        self.error = error


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of a pipeline run.

    Attributes:
        palette: Clustered colors, most dominant first
        frame_count: Number of frames reduced and filtered
        sample_count: Number of pixels that passed the filter
        ranking: Most frequent distinct colors as ((r, g, b), count)
        cancelled: Whether the run stopped early because of cancel()
    """

    palette: Palette
    frame_count: int
    sample_count: int
    ranking: List[Tuple[Tuple[int, int, int], int]] = field(default_factory=list)
    cancelled: bool = False


class PalettePipeline:
    """
    Turns a stream of frames into a palette.

    A producer thread feeds frames through a bounded queue, worker threads
    reduce and filter them into a shared accumulator, and the merged samples
    are clustered once every frame has been consumed.
    """

    def __init__(self, config: PaletteConfig | None = None, show_progress: bool = True):
        self.config = (config or PaletteConfig()).validate()
        self.show_progress = show_progress
        self.reducer = FrameReducer(self.config.resize_height)
        self.pixel_filter = PixelFilter(
            saturation=self.config.saturation,
            luminance=self.config.luminance,
            exclude_extremes=self.config.exclude_extremes,
        )
        self.clusterer = ColorClusterer(
            n_clusters=self.config.color_clusters,
            max_iter=self.config.max_iterations,
            random_state=self.config.random_state,
            n_jobs=self.config.workers,
        )
        self._cancelled = threading.Event()
        self._stopped = threading.Event()

    def cancel(self):
        """
        Stop consuming frames; whatever was accumulated so far is still clustered.

        A cancel issued while no run is active applies to the next run, which
        then returns without consuming any frame.
        """
        self._cancelled.set()
        self._stopped.set()

    @property
    def cancelled(self) -> bool:
        """True while a cancellation is pending."""
        return self._cancelled.is_set()

    def _put(self, frame_queue: queue.Queue, item) -> bool:
        while not self._stopped.is_set():
            try:
                frame_queue.put(item, timeout=QUEUE_POLL_INTERVAL_SEC)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self, frames: Iterable[Frame], frame_queue: queue.Queue):
        """Pull frames from the source into the bounded queue"""
        if self._stopped.is_set():
            return
        try:
            for frame in frames:
                if not self._put(frame_queue, frame):
                    logger.debug("Frame producer stopped early")
                    return
        except Exception as e:
            logger.error(f"Error in frame producer: {e}")
            self._put(frame_queue, _ProducerFailure(e))
            return
        self._put(frame_queue, _END_OF_FRAMES)

    def _process_frame(self, frame: Frame, accumulator: ColorAccumulator) -> int:
        reduced = self.reducer.reduce(frame)
        samples = self.pixel_filter.filter(reduced)
        accumulator.add(samples)
        return len(samples)

    def _consume(
        self,
        frame_queue: queue.Queue,
        accumulator: ColorAccumulator,
        progress: tqdm,
    ) -> int:
        max_in_flight = self.config.workers * 2
        pending = set()
        frame_count = 0

        def collect(done):
            nonlocal frame_count
            for future in done:
                future.result()
                frame_count += 1
                progress.update(1)

        with ThreadPoolExecutor(
            max_workers=self.config.workers, thread_name_prefix="filter"
        ) as executor:
            try:
                while not self._stopped.is_set():
                    try:
                        item = frame_queue.get(timeout=QUEUE_POLL_INTERVAL_SEC)
                    except queue.Empty:
                        continue

                    if item is _END_OF_FRAMES:
                        break
                    if isinstance(item, _ProducerFailure):
                        raise item.error

                    if len(pending) >= max_in_flight:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        collect(done)

                    pending.add(executor.submit(self._process_frame, item, accumulator))

                done, _ = wait(pending)
                collect(done)
            except BaseException:
                self._stopped.set()
                for future in pending:
                    future.cancel()
                raise

        return frame_count

    def run(self, frames: Iterable[Frame], expected_frames: int | None = None) -> ExtractionResult:
        """
        Extract a palette from a stream of frames.

        Args:
            frames: Frames in decode order, consumed lazily
            expected_frames: Frame count estimate for the progress bar

        Returns:
            ExtractionResult with the palette and sampling statistics
        """
        accumulator = ColorAccumulator()
        frame_queue = queue.Queue(maxsize=self.config.queue_size)

        producer = threading.Thread(
            target=self._produce,
            args=(frames, frame_queue),
            name="FrameProducerThread",
            daemon=True,
        )

        start = time.time()
        producer.start()
        try:
            with tqdm(
                total=expected_frames,
                desc="Extracting colors",
                unit="frame",
                disable=not self.show_progress,
            ) as progress:
                frame_count = self._consume(frame_queue, accumulator, progress)
        finally:
            cancelled = self._cancelled.is_set()
            self._stopped.set()
            producer.join()
            self._cancelled.clear()
            self._stopped.clear()

        samples = accumulator.merge()
        logger.info(
            f"TIME - reduced and filtered {frame_count} frames into {len(samples)} samples: "
            f"{time.time() - start:.2f} seconds"
        )

        ranking = accumulator.ranking(self.config.top_colors) if self.config.top_colors else []
        accumulator.clear()

        if len(samples) == 0:
            logger.warning(
                "No pixels passed the filter; try lowering the saturation or luminance thresholds"
            )
            return ExtractionResult(Palette(), frame_count, 0, ranking, cancelled)

        palette = assemble_palette(self.clusterer.fit(samples))
        return ExtractionResult(palette, frame_count, len(samples), ranking, cancelled)


def extract_palette(
    video_path: str,
    config: PaletteConfig | None = None,
    show_progress: bool = True,
) -> ExtractionResult:
    """
    Extract a palette from a video file.

    Args:
        video_path: Path to the video file
        config: Extraction options (defaults when None)
        show_progress: Whether to display a progress bar

    Returns:
        ExtractionResult for the configured time window
    """
    pipeline = PalettePipeline(config, show_progress=show_progress)

    with VideoFrameSource(video_path, pipeline.config.start, pipeline.config.end) as source:
        return pipeline.run(source.frames(), source.expected_frame_count)
