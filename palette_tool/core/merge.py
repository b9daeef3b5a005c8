"""Greedy ΔE00 merge of near-identical clusters, then a population floor.

The merge is first-fit against clusters already accepted, in input order.
The result depends on input order. Palettes hold at most a handful of
clusters, so one O(k²) pass is enough.
"""

import math

import numpy as np
from loguru import logger

from palette_tool.core.colour import delta_e2000
from palette_tool.core.types import Cluster


def _mean_lab(cluster: Cluster) -> tuple[float, float, float]:
    mean = np.array([p.lab for p in cluster.points], dtype=np.float64).mean(axis=0)
    return (float(mean[0]), float(mean[1]), float(mean[2]))


def merge_clusters(clusters: list[Cluster], merge_delta: float = 10.0) -> list[Cluster]:
    merged: list[Cluster] = []
    for cluster in clusters:
        target = next((m for m in merged if delta_e2000(cluster.centroid, m.centroid) < merge_delta), None)
        if target is None:
            merged.append(Cluster(centroid=cluster.centroid, points=list(cluster.points)))
        else:
            target.points.extend(cluster.points)
            target.centroid = _mean_lab(target)
    return merged


def min_cluster_size(total: int, min_percent: float = 1.5) -> int:
    return max(1, math.floor(min_percent / 100.0 * total))


def filter_small(clusters: list[Cluster], min_percent: float = 1.5) -> list[Cluster]:
    """Drop clusters holding fewer than `min_percent` of all points (at least one point)."""
    total = sum(c.count for c in clusters)
    floor = min_cluster_size(total, min_percent)
    return [c for c in clusters if c.count >= floor]


def merge_and_filter(clusters: list[Cluster], merge_delta: float = 10.0, min_percent: float = 1.5) -> list[Cluster]:
    if len(clusters) <= 1:
        return clusters
    merged = merge_clusters(clusters, merge_delta)
    kept = filter_small(merged, min_percent)
    logger.debug(f'Merged {len(clusters)} -> {len(merged)} clusters, {len(kept)} above the population floor')
    return kept
