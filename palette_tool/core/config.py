"""Pipeline tuning constants, overridable from the environment.

Recognised variables (read after .env loading, see core.env):
  PALETTE_SEED            integer seed for k-means++ (unset: unseeded)
  PALETTE_MAX_SIDE        longest image side after downscaling
  PALETTE_QUANT_STEP      channel rounding step before de-duplication
  PALETTE_MERGE_DELTA     ΔE00 below which clusters merge
  PALETTE_MIN_PERCENT     population floor, in percent
  PALETTE_MAX_ITERATIONS  Lloyd iteration cap
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ExtractionConfig:
    max_side: int = 600
    alpha_threshold: int = 160
    border_alpha_threshold: int = 200
    min_border_pixels: int = 20
    border_uniform_delta: float = 6.0
    border_uniform_fraction: float = 0.6
    background_delta: float = 8.0
    quant_step: int = 8
    k_min: int = 4
    k_max: int = 16
    max_iterations: int = 20
    convergence_delta: float = 0.5
    merge_delta: float = 10.0
    min_percent: float = 1.5
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.quant_step < 1:
            raise ValueError(f'quant_step must be >= 1, got {self.quant_step}')
        if not 1 <= self.k_min <= self.k_max:
            raise ValueError(f'Need 1 <= k_min <= k_max, got {self.k_min}..{self.k_max}')
        if self.max_side < 1:
            raise ValueError(f'max_side must be >= 1, got {self.max_side}')
        if self.max_iterations < 1:
            raise ValueError(f'max_iterations must be >= 1, got {self.max_iterations}')

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> ExtractionConfig:
        """Build a config from PALETTE_* variables; explicit overrides win."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for var, (name, parse) in _ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw.strip() == '':
                continue
            try:
                values[name] = parse(raw.strip())
            except ValueError:
                raise ValueError(f'Invalid value for {var}: {raw!r}') from None
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


_ENV_VARS: dict[str, tuple[str, Callable[[str], Any]]] = {
    'PALETTE_SEED': ('seed', int),
    'PALETTE_MAX_SIDE': ('max_side', int),
    'PALETTE_QUANT_STEP': ('quant_step', int),
    'PALETTE_MERGE_DELTA': ('merge_delta', float),
    'PALETTE_MIN_PERCENT': ('min_percent', float),
    'PALETTE_MAX_ITERATIONS': ('max_iterations', int),
}
