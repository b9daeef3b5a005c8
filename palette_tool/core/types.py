"""Shared types for palette-tool: pixel buffers, colour points, clusters, results, Technique, Report."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from palette_tool.core.errors import PaletteError

RGB = tuple[int, int, int]
Lab = tuple[float, float, float]


@dataclass(frozen=True)
class PixelBuffer:
    """A decoded image: row-major RGBA bytes, 8 bits per channel."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f'Invalid dimensions {self.width}x{self.height}')
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(f'Pixel data is {len(self.data)} bytes, expected {expected}')

    @classmethod
    def from_array(cls, arr: np.ndarray) -> PixelBuffer:
        """Build from an (h, w, 4) uint8 array. (h, w, 3) gets an opaque alpha."""
        arr = np.asarray(arr, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f'Expected (h, w, 3|4) array, got shape {arr.shape}')
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        h, w = arr.shape[:2]
        return cls(width=w, height=h, data=np.ascontiguousarray(arr).tobytes())

    def as_array(self) -> np.ndarray:
        """Read-only (h, w, 4) uint8 view of the pixel data."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)


@dataclass
class ColourPoint:
    """One quantization bucket: the clustering coordinate plus the real samples behind it."""

    rgb: RGB  # quantized value, 256 possible in the top bucket
    lab: Lab
    samples: Counter = field(default_factory=Counter)  # original RGB -> occurrences


@dataclass
class Cluster:
    centroid: Lab
    points: list[ColourPoint] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class NoBackground:
    """Border is not uniform (or too small to judge)."""


@dataclass(frozen=True)
class Background:
    """Border is uniform; rgb is its most frequent exact colour."""

    rgb: RGB


BackgroundOutcome = NoBackground | Background


@dataclass(frozen=True)
class PaletteEntry:
    """One output colour. rgb is always a colour that occurs in the image."""

    rgb: RGB
    hex: str
    count: int = 0  # member count of the source cluster
    share: float = 0.0  # count / surviving population

    @property
    def css(self) -> str:
        r, g, b = self.rgb
        return f'rgb({r}, {g}, {b})'

    def to_dict(self) -> dict[str, Any]:
        return {
            'hex': self.hex,
            'rgb': {'r': self.rgb[0], 'g': self.rgb[1], 'b': self.rgb[2]},
            'css': self.css,
            'count': self.count,
            'pct': round(self.share * 100, 1),
        }


@dataclass(frozen=True)
class ExtractionStats:
    """Diagnostics collected while the pipeline runs."""

    stride: int = 0
    samples: int = 0
    background: BackgroundOutcome = NoBackground()
    after_background: int = 0
    unique: int = 0
    k: int = 0
    iterations: int = 0
    clusters: int = 0
    merged: int = 0


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one extraction: a palette or a typed failure, never both."""

    palette: tuple[PaletteEntry, ...] = ()
    error: PaletteError | None = None
    stats: ExtractionStats = ExtractionStats()

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> tuple[PaletteEntry, ...]:
        """Return the palette or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.palette


@dataclass
class ImageJob:
    """An image ready for analysis, handed to each technique."""

    path: str
    buffer: PixelBuffer
    original_size: tuple[int, int]


class Technique:
    """A self-registering analysis technique.

    Usage in a technique module:

        technique = Technique(name='extract', help='Extract the dominant palette')

        @technique.run
        def run(job, report, args):
            ...
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._run_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def execute(self, job: ImageJob, report: Report, args: Any) -> None:
        """Execute the technique's run function."""
        if self._run_fn is None:
            raise RuntimeError(f'Technique {self.name} has no run function')
        self._run_fn(job, report, args)


@dataclass
class Report:
    """Accumulates results from techniques for text/JSON output."""

    image_path: str = ''
    image_width: int = 0
    image_height: int = 0
    original_size: tuple[int, int] | None = None
    techniques: dict[str, dict[str, Any]] = field(default_factory=dict)
    errors: list[dict[str, str]] = field(default_factory=list)

    def add(self, technique_name: str, data: dict[str, Any]) -> None:
        """Add results for a technique."""
        self.techniques[technique_name] = data

    def record_error(self, technique_name: str, error: PaletteError) -> None:
        self.errors.append({'technique': technique_name, 'kind': error.kind, 'message': error.message})

    @property
    def failed(self) -> bool:
        return bool(self.errors)
