import logging
import threading
from typing import List, Tuple

import numpy as np

from videopalette.utils.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class ColorAccumulator:
    """
    Unordered multiset of RGB samples gathered across all processed frames.

    Each thread appends to its own shard so concurrent filter workers never
    contend on a shared container. Shards are concatenated by merge().
    """

    def __init__(self):
        self._shards: List[List[np.ndarray]] = []
        self._lock = threading.Lock()
        self._local = threading.local()

    def _shard(self) -> List[np.ndarray]:
        shard = getattr(self._local, "shard", None)
        if shard is None:
            shard = []
            self._local.shard = shard
            with self._lock:
                self._shards.append(shard)
        return shard

    def add(self, samples: np.ndarray):
        """Append an (n, 3) array of RGB samples to the calling thread's shard."""
        if len(samples):
            self._shard().append(samples)

    @property
    def count(self) -> int:
        with self._lock:
            return sum(len(chunk) for shard in self._shards for chunk in shard)

    def merge(self) -> np.ndarray:
        """Concatenate all shards into a single (N, 3) uint8 array."""
        with self._lock:
            chunks = [chunk for shard in self._shards for chunk in shard]

        if not chunks:
            return np.empty((0, 3), dtype=np.uint8)

        merged = np.concatenate(chunks).astype(np.uint8, copy=False)
        logger.debug(f"Merged {len(chunks)} sample chunks into {len(merged)} samples")
        return merged

    def ranking(self, limit: int | None = None) -> List[Tuple[Tuple[int, int, int], int]]:
        """
        Distinct colors with their occurrence counts, most frequent first.

        Args:
            limit: Maximum number of colors to return (None for all)

        Returns:
            List of ((r, g, b), count) tuples; equal counts keep color order
        """
        samples = self.merge()
        if len(samples) == 0:
            return []

        colors, counts = np.unique(samples, axis=0, return_counts=True)
        order = np.argsort(-counts, kind="stable")
        if limit is not None:
            order = order[:limit]

        return [(tuple(int(c) for c in colors[i]), int(counts[i])) for i in order]

    def clear(self):
        """Discard every sample, e.g. once the buffer has been clustered."""
        with self._lock:
            for shard in self._shards:
                shard.clear()
