"""Grid sampling of a downscaled pixel buffer.

The stride widens with pixel count so large inputs cost about the same as
small ones. Near-transparent pixels and the extreme neutrals (near-white,
near-black) are dropped: they are almost always background or noise.
"""

import numpy as np
from loguru import logger

from palette_tool.core.config import ExtractionConfig
from palette_tool.core.errors import EmptyInput
from palette_tool.core.types import PixelBuffer

# (pixel count above which, stride), checked in order
STRIDE_TABLE = ((800_000, 6), (400_000, 4), (150_000, 3))
DEFAULT_STRIDE = 2


def choose_stride(width: int, height: int) -> int:
    pixels = width * height
    for limit, stride in STRIDE_TABLE:
        if pixels > limit:
            return stride
    return DEFAULT_STRIDE


def neutral_mask(rgb: np.ndarray) -> np.ndarray:
    """True where a pixel is near-white or near-black."""
    hi = rgb.max(axis=-1)
    lo = rgb.min(axis=-1)
    near_white = (hi > 250) & (lo > 245)
    near_black = hi < 10
    return near_white | near_black


def sample_pixels(buffer: PixelBuffer, config: ExtractionConfig | None = None, stride: int | None = None) -> np.ndarray:
    """Walk the grid at `stride` and return the surviving pixels as an (n, 3) uint8 array.

    Raises EmptyInput if nothing survives.
    """
    config = config or ExtractionConfig()
    if stride is None:
        stride = choose_stride(buffer.width, buffer.height)
    stride = max(1, stride)

    grid = buffer.as_array()[::stride, ::stride].reshape(-1, 4)
    keep = grid[:, 3] >= config.alpha_threshold
    rgb = grid[:, :3]
    keep &= ~neutral_mask(rgb)
    samples = rgb[keep]

    logger.debug(f'Sampled {len(samples)}/{len(grid)} grid pixels at stride {stride}')
    if len(samples) == 0:
        raise EmptyInput()
    return samples
