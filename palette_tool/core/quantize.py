"""Coarse quantization and de-duplication of sampled colours."""

from collections import Counter

import numpy as np
from loguru import logger

from palette_tool.core.colour import rgb_to_lab
from palette_tool.core.errors import NoColorsRemain
from palette_tool.core.types import ColourPoint


def quantize(rgb: np.ndarray, step: int = 8) -> np.ndarray:
    """Clamp to 0..255, then round half-up to the nearest multiple of `step`.

    The top bucket can land above 255 (256 for step 8). It is only a
    clustering coordinate; reported colours come from the original samples.
    """
    c = np.clip(np.asarray(rgb, dtype=np.int64), 0, 255)
    return np.floor(c / step + 0.5).astype(np.int64) * step


def deduplicate(samples: np.ndarray, step: int = 8) -> list[ColourPoint]:
    """One ColourPoint per quantization bucket, in first-seen order.

    Each point keeps a tally of the original samples that landed in its
    bucket so a real colour can be reported later. Raises NoColorsRemain
    when there is nothing to bucket.
    """
    if len(samples) == 0:
        raise NoColorsRemain()

    buckets: dict[tuple[int, int, int], Counter] = {}
    for q, px in zip(quantize(samples, step).tolist(), np.asarray(samples).tolist()):
        buckets.setdefault(tuple(q), Counter())[tuple(px)] += 1

    keys = list(buckets)
    labs = rgb_to_lab(np.array(keys))
    points = [
        ColourPoint(rgb=key, lab=(float(lab[0]), float(lab[1]), float(lab[2])), samples=buckets[key])
        for key, lab in zip(keys, labs)
    ]
    logger.debug(f'{len(samples)} samples -> {len(points)} unique colours (step {step})')
    return points


def most_common(tally: Counter) -> tuple[int, int, int]:
    """Highest-count colour in a tally; ties go to the smallest (r, g, b)."""
    best = max(tally.values())
    return min(rgb for rgb, n in tally.items() if n == best)
