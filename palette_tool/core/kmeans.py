"""Adaptive-k k-means in Lab space.

k grows with the square root of the number of unique colours, clamped to
[k_min, k_max]. Seeding is k-means++ (next centroid drawn with probability
proportional to squared ΔE76 to the nearest existing centroid), then plain
Lloyd iterations with ΔE76 assignment until no centroid moves more than
the convergence threshold.

All randomness comes from the numpy Generator passed in, so a seeded
generator gives a reproducible palette.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from loguru import logger

from palette_tool.core.colour import delta_e76, delta_e76_matrix
from palette_tool.core.types import Cluster, ColourPoint


@dataclass
class KMeansResult:
    centroids: np.ndarray  # (k, 3) Lab
    iterations: int
    converged: bool


def choose_k(n: int, k_min: int = 4, k_max: int = 16) -> int:
    """clamp(round(sqrt(n)), k_min, k_max), rounding halves up."""
    return max(k_min, min(k_max, math.floor(math.sqrt(n) + 0.5)))


def kmeans_pp_init(points: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Pick k seed centroids from `points` with k-means++ weighting.

    When every point already coincides with a centroid (fewer distinct
    points than k) the remaining seeds are drawn uniformly, so some
    centroids repeat and simply end up empty.
    """
    n = len(points)
    chosen = [int(rng.integers(n))]
    closest = delta_e76(points, points[chosen[0]])
    while len(chosen) < k:
        weights = closest**2
        total = float(weights.sum())
        if total > 0.0:
            idx = int(rng.choice(n, p=weights / total))
        else:
            idx = int(rng.integers(n))
        chosen.append(idx)
        closest = np.minimum(closest, delta_e76(points, points[idx]))
    return points[chosen].copy()


def assign(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid (ΔE76) for every point. Ties go to the lower index."""
    return np.argmin(delta_e76_matrix(points, centroids), axis=1)


def lloyd(
    points: np.ndarray,
    centroids: np.ndarray,
    max_iterations: int = 20,
    convergence_delta: float = 0.5,
) -> KMeansResult:
    """Refine a copy of `centroids`. Empty clusters keep their previous centroid."""
    centroids = centroids.astype(np.float64, copy=True)
    k = len(centroids)
    for iteration in range(1, max_iterations + 1):
        labels = assign(points, centroids)
        sums = np.zeros_like(centroids)
        np.add.at(sums, labels, points)
        counts = np.bincount(labels, minlength=k)
        filled = counts > 0

        updated = centroids.copy()
        updated[filled] = sums[filled] / counts[filled, None]
        moved = delta_e76(updated, centroids)
        centroids = updated
        if not np.any(moved > convergence_delta):
            return KMeansResult(centroids=centroids, iterations=iteration, converged=True)
    return KMeansResult(centroids=centroids, iterations=max_iterations, converged=False)


def kmeans_lab(
    points: np.ndarray,
    k: int,
    rng: np.random.Generator,
    max_iterations: int = 20,
    convergence_delta: float = 0.5,
) -> KMeansResult:
    seeds = kmeans_pp_init(points, k, rng)
    result = lloyd(points, seeds, max_iterations, convergence_delta)
    logger.debug(
        f'k-means: k={k} n={len(points)} iterations={result.iterations} '
        f'{"converged" if result.converged else "hit iteration cap"}'
    )
    return result


def build_clusters(colour_points: list[ColourPoint], centroids: np.ndarray) -> list[Cluster]:
    """Attach each colour point to its nearest final centroid; empty clusters are dropped."""
    labs = np.array([p.lab for p in colour_points], dtype=np.float64)
    labels = assign(labs, centroids)
    clusters = [Cluster(centroid=tuple(float(v) for v in c)) for c in centroids]
    for point, label in zip(colour_points, labels):
        clusters[label].points.append(point)
    return [c for c in clusters if c.points]
