import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from sklearn.cluster import kmeans_plusplus

from videopalette.config.palette_config import is_integer
from videopalette.constants import (
    ASSIGNMENT_CHUNK_SIZE,
    COLOR_CLUSTERS,
    MAX_ITERATIONS,
)
from videopalette.errors import ConfigError
from videopalette.utils.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class Cluster:
    """
    A converged color cluster.

    Attributes:
        index: Stable cluster index in [0, k)
        centroid: Mean RGB color, rounded to 0-255
        weight: Number of samples assigned to the cluster
        members: Distinct RGB colors assigned to the cluster
    """

    index: int
    centroid: Tuple[int, int, int]
    weight: int
    members: Tuple[Tuple[int, int, int], ...] = ()


def collapse_samples(samples: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Collapse an (N, 3) sample multiset into distinct colors and their counts.

    Colors come back in lexicographic order, so the result does not depend on
    the order samples were accumulated in.
    """
    samples = np.asarray(samples).reshape(-1, 3)
    if len(samples) == 0:
        return np.empty((0, 3), dtype=np.uint8), np.empty(0, dtype=np.int64)

    colors, counts = np.unique(samples, axis=0, return_counts=True)
    return colors, counts.astype(np.int64)


def squared_distances(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """(n, k) matrix of squared Euclidean distances between points and centers"""
    diff = points[:, None, :] - centers[None, :, :]
    return np.einsum("nkc,nkc->nk", diff, diff)


def assign_labels(
    points: np.ndarray,
    centers: np.ndarray,
    chunk_size: int = ASSIGNMENT_CHUNK_SIZE,
    executor: Executor | None = None,
) -> np.ndarray:
    """
    Index of the nearest center for every point.

    Equidistant centers resolve to the lowest index. Chunks are independent
    and may be spread over an executor.
    """

    def assign_chunk(start):
        distances = squared_distances(points[start : start + chunk_size], centers)
        return np.argmin(distances, axis=1)

    starts = range(0, len(points), chunk_size)
    if executor is not None:
        parts = list(executor.map(assign_chunk, starts))
    else:
        parts = [assign_chunk(start) for start in starts]

    if not parts:
        return np.empty(0, dtype=np.intp)
    return np.concatenate(parts)


def update_centroids(
    points: np.ndarray,
    weights: np.ndarray,
    labels: np.ndarray,
    centers: np.ndarray,
    reseed_empty: bool = True,
) -> np.ndarray:
    """
    Recompute each center as the weighted mean of its assigned points.

    A center left without points is moved onto the point farthest from all
    other current centers, or kept in place when reseed_empty is False.

    Returns:
        New (k, 3) float array of centers
    """
    k = len(centers)
    totals = np.bincount(labels, weights=weights, minlength=k)
    sums = np.stack(
        [
            np.bincount(labels, weights=weights * points[:, channel], minlength=k)
            for channel in range(points.shape[1])
        ],
        axis=1,
    )

    new_centers = centers.astype(np.float64, copy=True)
    active = totals > 0
    new_centers[active] = sums[active] / totals[active, None]

    if not reseed_empty:
        return new_centers

    for index in np.flatnonzero(~active):
        nearest = squared_distances(points, new_centers[active]).min(axis=1)
        farthest = int(np.argmax(nearest))
        logger.debug(
            f"Cluster {index} is empty, reseeding at color {points[farthest].tolist()}"
        )
        new_centers[index] = points[farthest]
        active[index] = True

    return new_centers


class ColorClusterer:
    """
    Groups RGB samples into a fixed number of colors with k-means.

    Seeds with k-means++ and refines with Lloyd iterations. Samples are
    clustered as distinct colors weighted by their counts, which yields the
    same partition as clustering every sample individually.
    """

    def __init__(
        self,
        n_clusters: int = COLOR_CLUSTERS,
        max_iter: int = MAX_ITERATIONS,
        random_state: int | None = None,
        n_jobs: int = 1,
    ):
        if not is_integer(n_clusters) or n_clusters <= 0:
            raise ConfigError(
                f"color_clusters must be a positive integer, got {n_clusters}"
            )
        if not is_integer(max_iter) or max_iter <= 0:
            raise ConfigError(
                f"max_iterations must be a positive integer, got {max_iter}"
            )

        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.random_state = random_state
        self.n_jobs = max(1, n_jobs)

        self.n_iter_ = 0
        self.converged_ = False

    def _executor(self):
        if self.n_jobs > 1:
            return ThreadPoolExecutor(
                max_workers=self.n_jobs, thread_name_prefix="assign"
            )
        return nullcontext()

    def fit(self, samples: np.ndarray) -> List[Cluster]:
        """
        Cluster an (N, 3) array of RGB samples.

        Args:
            samples: RGB samples, values 0-255

        Returns:
            min(n_clusters, distinct colors) clusters ordered by index.
            Empty when there are no samples.
        """
        colors, counts = collapse_samples(samples)
        self.n_iter_ = 0
        self.converged_ = False

        if len(colors) == 0:
            logger.warning("No color samples to cluster")
            return []

        k = min(self.n_clusters, len(colors))
        if k < self.n_clusters:
            logger.warning(
                f"Only {len(colors)} distinct colors available, "
                f"reducing clusters from {self.n_clusters} to {k}"
            )

        start = time.time()
        points = colors.astype(np.float64)
        weights = counts.astype(np.float64)

        centers, _ = kmeans_plusplus(
            points,
            n_clusters=k,
            sample_weight=weights,
            random_state=self.random_state,
        )

        with self._executor() as executor:
            labels = assign_labels(points, centers, executor=executor)
            for iteration in range(1, self.max_iter + 1):
                centers = update_centroids(points, weights, labels, centers)
                new_labels = assign_labels(points, centers, executor=executor)
                self.n_iter_ = iteration

                if np.array_equal(new_labels, labels):
                    self.converged_ = True
                    break
                labels = new_labels

        if not self.converged_:
            logger.warning(f"k-means did not converge within {self.max_iter} iterations")
            # Centroids must describe the labels that are reported
            centers = update_centroids(
                points, weights, labels, centers, reseed_empty=False
            )

        logger.info(
            f"TIME - clustering {int(counts.sum())} samples ({len(colors)} distinct) "
            f"into {k} colors in {self.n_iter_} iterations: {time.time() - start:.2f} seconds"
        )

        return self._build_clusters(colors, counts, labels, centers)

    @staticmethod
    def _build_clusters(colors, counts, labels, centers) -> List[Cluster]:
        rounded = np.clip(np.rint(centers), 0, 255).astype(np.uint8)

        clusters = []
        for index in range(len(centers)):
            member_mask = labels == index
            clusters.append(
                Cluster(
                    index=index,
                    centroid=tuple(int(c) for c in rounded[index]),
                    weight=int(counts[member_mask].sum()),
                    members=tuple(
                        tuple(int(c) for c in color) for color in colors[member_mask]
                    ),
                )
            )
        return clusters
