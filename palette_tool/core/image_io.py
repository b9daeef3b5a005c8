"""Image decoding into a PixelBuffer (RGBA, sRGB), with downscaling.

The pipeline expects max(width, height) <= max_side; resizing happens here,
before the core ever sees the pixels.
"""

from __future__ import annotations

import os

import numpy as np
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from palette_tool.core.errors import DecodeUnavailable
from palette_tool.core.types import PixelBuffer


def scaled_size(width: int, height: int, max_side: int = 600) -> tuple[int, int]:
    """Fit (width, height) inside max_side, never upscaling and never below 1px."""
    scale = min(1.0, max_side / max(width, height))
    return max(1, int(width * scale + 0.5)), max(1, int(height * scale + 0.5))


def to_pixel_buffer(image: Image.Image, max_side: int = 600) -> PixelBuffer:
    """Convert a PIL image to an RGBA PixelBuffer, downscaling if needed."""
    image = ImageOps.exif_transpose(image)
    rgba = image.convert('RGBA')
    size = scaled_size(rgba.width, rgba.height, max_side)
    if size != rgba.size:
        rgba = rgba.resize(size, Image.Resampling.LANCZOS)
    return PixelBuffer.from_array(np.asarray(rgba, dtype=np.uint8))


def load_pixel_buffer(path: str | os.PathLike, max_side: int = 600) -> tuple[PixelBuffer, tuple[int, int]]:
    """Open, decode and downscale an image file.

    Returns the buffer and the original (width, height).
    Raises DecodeUnavailable when the file is missing, not a readable image,
    or larger than Pillow's decompression-bomb limit.
    """
    try:
        with Image.open(path) as img:
            img.load()
            original = img.size
            buffer = to_pixel_buffer(img, max_side)
    except FileNotFoundError as e:
        raise DecodeUnavailable(f'Image not found: {path}') from e
    except Image.DecompressionBombError as e:
        raise DecodeUnavailable(f'Failed to load image: {path} ({e})') from e
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeUnavailable(f'Failed to load image: {path}') from e

    logger.debug(f'Loaded {path}: {original[0]}x{original[1]} -> {buffer.width}x{buffer.height}')
    return buffer, original
