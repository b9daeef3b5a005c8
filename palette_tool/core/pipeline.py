"""Dominant-colour extraction pipeline.

    sample -> background suppression -> quantize/dedup -> Lab k-means
           -> ΔE00 merge + population floor -> representative colour per cluster

Every emitted colour is an exact RGB value that occurs in the sampled
pixels, never an average. Entries are ordered by cluster population,
largest first.

Entry points:
  extract_palette(buffer)   palette tuple, raises PaletteError subclasses
  run_extraction(buffer)    ExtractionResult, never raises PaletteError
  extract_file(path)        decode + run_extraction
  extract_file_async(path)  the same, off the event loop
"""

from __future__ import annotations

import asyncio
import os
from collections import Counter
from typing import Any

import numpy as np
from loguru import logger

from palette_tool.core.background import detect_background, remove_background
from palette_tool.core.colour import rgb_to_hex
from palette_tool.core.config import ExtractionConfig
from palette_tool.core.errors import PaletteError
from palette_tool.core.image_io import load_pixel_buffer
from palette_tool.core.kmeans import build_clusters, choose_k, kmeans_lab
from palette_tool.core.merge import merge_and_filter
from palette_tool.core.quantize import deduplicate, most_common
from palette_tool.core.sampler import choose_stride, sample_pixels
from palette_tool.core.types import (
    RGB,
    Cluster,
    ExtractionResult,
    ExtractionStats,
    PaletteEntry,
    PixelBuffer,
)


def representative_rgb(cluster: Cluster) -> RGB:
    """Most frequent original sample colour in the cluster; ties go to the smallest (r, g, b)."""
    tally: Counter = Counter()
    for point in cluster.points:
        tally.update(point.samples)
    return most_common(tally)


def build_palette(clusters: list[Cluster]) -> tuple[PaletteEntry, ...]:
    total = sum(c.count for c in clusters)
    ordered = sorted(clusters, key=lambda c: -c.count)
    entries = []
    for cluster in ordered:
        rgb = representative_rgb(cluster)
        entries.append(
            PaletteEntry(
                rgb=rgb,
                hex=rgb_to_hex(rgb),
                count=cluster.count,
                share=cluster.count / total if total else 0.0,
            )
        )
    return tuple(entries)


def _extract(
    buffer: PixelBuffer,
    config: ExtractionConfig,
    rng: np.random.Generator,
    progress: dict[str, Any],
) -> tuple[PaletteEntry, ...]:
    stride = choose_stride(buffer.width, buffer.height)
    progress['stride'] = stride
    samples = sample_pixels(buffer, config, stride=stride)
    progress['samples'] = len(samples)

    background = detect_background(buffer, config)
    progress['background'] = background
    samples = remove_background(samples, background, config)
    progress['after_background'] = len(samples)

    points = deduplicate(samples, config.quant_step)
    progress['unique'] = len(points)

    k = choose_k(len(points), config.k_min, config.k_max)
    progress['k'] = k
    labs = np.array([p.lab for p in points], dtype=np.float64)
    result = kmeans_lab(labs, k, rng, config.max_iterations, config.convergence_delta)
    progress['iterations'] = result.iterations

    clusters = build_clusters(points, result.centroids)
    progress['clusters'] = len(clusters)
    merged = merge_and_filter(clusters, config.merge_delta, config.min_percent)
    progress['merged'] = len(merged)

    palette = build_palette(merged)
    logger.info(f'Extracted {len(palette)} colours from {buffer.width}x{buffer.height} image')
    return palette


def _rng_for(config: ExtractionConfig, rng: np.random.Generator | None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng(config.seed)


def extract_palette(
    buffer: PixelBuffer,
    config: ExtractionConfig | None = None,
    rng: np.random.Generator | None = None,
) -> tuple[PaletteEntry, ...]:
    """Run the pipeline and return the palette. Raises EmptyInput or NoColorsRemain."""
    config = config or ExtractionConfig()
    return _extract(buffer, config, _rng_for(config, rng), {})


def run_extraction(
    buffer: PixelBuffer,
    config: ExtractionConfig | None = None,
    rng: np.random.Generator | None = None,
) -> ExtractionResult:
    """Run the pipeline and wrap the outcome; failures come back in `error`."""
    config = config or ExtractionConfig()
    progress: dict[str, Any] = {}
    try:
        palette = _extract(buffer, config, _rng_for(config, rng), progress)
    except PaletteError as e:
        logger.warning(f'Extraction failed ({e.kind}): {e.message}')
        return ExtractionResult(error=e, stats=ExtractionStats(**progress))
    return ExtractionResult(palette=palette, stats=ExtractionStats(**progress))


def extract_file(
    path: str | os.PathLike,
    config: ExtractionConfig | None = None,
    rng: np.random.Generator | None = None,
) -> ExtractionResult:
    """Decode `path`, downscale it and run the pipeline."""
    config = config or ExtractionConfig()
    try:
        buffer, _original = load_pixel_buffer(path, config.max_side)
    except PaletteError as e:
        logger.warning(f'Extraction failed ({e.kind}): {e.message}')
        return ExtractionResult(error=e)
    return run_extraction(buffer, config, rng)


async def extract_file_async(
    path: str | os.PathLike,
    config: ExtractionConfig | None = None,
    rng: np.random.Generator | None = None,
) -> ExtractionResult:
    """extract_file in a worker thread. Once started it runs to completion."""
    return await asyncio.to_thread(extract_file, path, config, rng)
