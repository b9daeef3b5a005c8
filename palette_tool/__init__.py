"""palette-tool: dominant colour extraction from raster images.

Quick start:
  from palette_tool import extract_file
  result = extract_file('photo.jpg')
  for entry in result.unwrap():
      print(entry.hex, entry.share)
"""

__version__ = '0.1.0'

from palette_tool.core.config import ExtractionConfig  # noqa: E402
from palette_tool.core.errors import DecodeUnavailable, EmptyInput, NoColorsRemain, PaletteError  # noqa: E402
from palette_tool.core.pipeline import (  # noqa: E402
    extract_file,
    extract_file_async,
    extract_palette,
    run_extraction,
)
from palette_tool.core.types import ExtractionResult, PaletteEntry, PixelBuffer  # noqa: E402

__all__ = [
    '__version__',
    'DecodeUnavailable',
    'EmptyInput',
    'ExtractionConfig',
    'ExtractionResult',
    'NoColorsRemain',
    'PaletteEntry',
    'PaletteError',
    'PixelBuffer',
    'extract_file',
    'extract_file_async',
    'extract_palette',
    'run_extraction',
]
