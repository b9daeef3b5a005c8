"""Uniform background detection from the image border.

Only the four border lines are inspected. If most border pixels sit close
(ΔE00) to their mean colour, the border is treated as a uniform
background and its most frequent exact colour is reported. Samples near
that colour are then removed before clustering.
"""

from collections import Counter

import numpy as np
from loguru import logger

from palette_tool.core.colour import delta_e2000, rgb_to_lab
from palette_tool.core.config import ExtractionConfig
from palette_tool.core.quantize import most_common
from palette_tool.core.types import RGB, Background, BackgroundOutcome, NoBackground, PixelBuffer


def border_pixels(buffer: PixelBuffer, alpha_threshold: int = 200) -> np.ndarray:
    """Top row, bottom row, left column, right column as (n, 3) uint8.

    Corners appear once per line that crosses them, as do the rows/columns
    of a 1-pixel-wide or -tall image.
    """
    arr = buffer.as_array()
    lines = np.concatenate([arr[0], arr[-1], arr[:, 0], arr[:, -1]])
    return lines[lines[:, 3] >= alpha_threshold][:, :3]


def most_frequent_rgb(pixels) -> RGB:
    """Most common exact colour; ties go to the smallest (r, g, b)."""
    counts = Counter(tuple(int(c) for c in px) for px in pixels)
    if not counts:
        return (0, 0, 0)
    return most_common(counts)


def detect_background(buffer: PixelBuffer, config: ExtractionConfig | None = None) -> BackgroundOutcome:
    config = config or ExtractionConfig()
    border = border_pixels(buffer, config.border_alpha_threshold)
    if len(border) < config.min_border_pixels:
        logger.debug(f'Only {len(border)} opaque border pixels, skipping background detection')
        return NoBackground()

    labs = rgb_to_lab(border)
    centroid = labs.mean(axis=0)
    within = float(np.mean(delta_e2000(labs, centroid) <= config.border_uniform_delta))
    if within < config.border_uniform_fraction:
        logger.debug(f'Border not uniform ({within:.0%} near mean)')
        return NoBackground()

    rgb = most_frequent_rgb(border)
    logger.debug(f'Background detected: {rgb} ({within:.0%} of border near mean)')
    return Background(rgb)


def remove_background(
    samples: np.ndarray, outcome: BackgroundOutcome, config: ExtractionConfig | None = None
) -> np.ndarray:
    """Drop samples within ΔE00 `background_delta` of the detected background."""
    if not isinstance(outcome, Background) or len(samples) == 0:
        return samples
    config = config or ExtractionConfig()
    distances = delta_e2000(rgb_to_lab(samples), rgb_to_lab(outcome.rgb))
    return samples[distances > config.background_delta]
