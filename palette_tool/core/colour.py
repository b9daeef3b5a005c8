"""Colour conversions and difference metrics (sRGB, D65).

Exports:
  rgb_to_linear(srgb)          sRGB 0..1 -> linear 0..1
  rgb_to_lab(rgb)              uint8-range RGB [...,3] -> Lab [...,3]
  lab_to_rgb(lab)              Lab [...,3] -> RGB ints [...,3]
  delta_e76(p, q)              Euclidean Lab distance, broadcasting
  delta_e76_matrix(pts, cens)  [N,K] distance table for assignment
  delta_e2000(p, q)            CIEDE2000, broadcasting
  rgb_to_hex(rgb)              (r, g, b) -> #RRGGBB
"""

from __future__ import annotations

import numpy as np

from palette_tool.core.types import RGB

# Linear RGB -> XYZ (sRGB primaries, D65)
_RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ]
)
_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)

WHITE_D65 = np.array([0.95047, 1.00000, 1.08883])

_EPSILON = 216.0 / 24389.0
_SLOPE = 841.0 / 108.0
_OFFSET = 4.0 / 29.0
_DELTA = 6.0 / 29.0


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """sRGB (non-linear 0..1) to linear RGB (0..1)."""
    c = np.asarray(srgb, dtype=np.float64)
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def linear_to_rgb(linear: np.ndarray) -> np.ndarray:
    """Linear RGB (0..1) back to sRGB (0..1). Out-of-gamut values are clipped first."""
    c = np.clip(np.asarray(linear, dtype=np.float64), 0.0, 1.0)
    return np.where(c <= 0.0031308, c * 12.92, 1.055 * c ** (1.0 / 2.4) - 0.055)


def _f(t: np.ndarray) -> np.ndarray:
    return np.where(t > _EPSILON, np.cbrt(t), _SLOPE * t + _OFFSET)


def _f_inv(t: np.ndarray) -> np.ndarray:
    return np.where(t > _DELTA, t**3, (t - _OFFSET) / _SLOPE)


def rgb_to_lab(rgb) -> np.ndarray:
    """sRGB 0..255 to CIE Lab (D65). Accepts a triple or any [...,3] array; shape preserved."""
    arr = np.asarray(rgb, dtype=np.float64) / 255.0
    xyz = rgb_to_linear(arr) @ _RGB_TO_XYZ.T
    fx, fy, fz = (_f(xyz[..., i] / WHITE_D65[i]) for i in range(3))
    return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1)


def lab_to_rgb(lab) -> np.ndarray:
    """CIE Lab (D65) to sRGB ints 0..255, rounded and clamped."""
    arr = np.asarray(lab, dtype=np.float64)
    fy = (arr[..., 0] + 16.0) / 116.0
    fx = fy + arr[..., 1] / 500.0
    fz = fy - arr[..., 2] / 200.0
    xyz = np.stack([_f_inv(fx), _f_inv(fy), _f_inv(fz)], axis=-1) * WHITE_D65
    srgb = linear_to_rgb(xyz @ _XYZ_TO_RGB.T)
    return np.clip(np.floor(srgb * 255.0 + 0.5), 0, 255).astype(int)


def delta_e76(p, q) -> np.ndarray | float:
    """Euclidean distance in Lab. Scalars in, float out; arrays broadcast."""
    d = np.linalg.norm(np.asarray(p, dtype=np.float64) - np.asarray(q, dtype=np.float64), axis=-1)
    return float(d) if np.ndim(d) == 0 else d


def delta_e76_matrix(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """[N,3] x [K,3] -> [N,K] table of ΔE76."""
    diff = points[:, None, :] - centroids[None, :, :]
    return np.sqrt(np.einsum('nkc,nkc->nk', diff, diff))


def delta_e2000(lab1, lab2) -> np.ndarray | float:
    """CIEDE2000 colour difference with kL = kC = kH = 1.

    Inputs are Lab triples or [...,3] arrays that broadcast against each
    other. Returns a float for a single pair.
    """
    p = np.asarray(lab1, dtype=np.float64)
    q = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = p[..., 0], p[..., 1], p[..., 2]
    L2, a2, b2 = q[..., 0], q[..., 1], q[..., 2]

    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    C_bar7 = (0.5 * (C1 + C2)) ** 7
    G = 0.5 * (1.0 - np.sqrt(C_bar7 / (C_bar7 + 25.0**7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = np.hypot(a1p, b1)
    C2p = np.hypot(a2p, b2)
    h1p = np.degrees(np.arctan2(b1, a1p)) % 360.0
    h2p = np.degrees(np.arctan2(b2, a2p)) % 360.0

    zero_chroma = C1p * C2p == 0.0

    dLp = L2 - L1
    dCp = C2p - C1p
    dhp = h2p - h1p
    dhp = np.where(dhp > 180.0, dhp - 360.0, np.where(dhp < -180.0, dhp + 360.0, dhp))
    dhp = np.where(zero_chroma, 0.0, dhp)
    dHp = 2.0 * np.sqrt(C1p * C2p) * np.sin(np.radians(dhp / 2.0))

    L_bar = 0.5 * (L1 + L2)
    C_bar_p = 0.5 * (C1p + C2p)

    h_sum = h1p + h2p
    h_bar_p = np.where(
        np.abs(h1p - h2p) <= 180.0,
        0.5 * h_sum,
        np.where(h_sum < 360.0, 0.5 * (h_sum + 360.0), 0.5 * (h_sum - 360.0)),
    )
    h_bar_p = np.where(zero_chroma, h_sum, h_bar_p)

    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar_p))
        + 0.32 * np.cos(np.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar_p - 63.0))
    )

    d_theta = 30.0 * np.exp(-(((h_bar_p - 275.0) / 25.0) ** 2))
    C_bar_p7 = C_bar_p**7
    R_c = 2.0 * np.sqrt(C_bar_p7 / (C_bar_p7 + 25.0**7))
    R_t = -np.sin(np.radians(2.0 * d_theta)) * R_c

    L50 = (L_bar - 50.0) ** 2
    S_l = 1.0 + 0.015 * L50 / np.sqrt(20.0 + L50)
    S_c = 1.0 + 0.045 * C_bar_p
    S_h = 1.0 + 0.015 * C_bar_p * T

    tl = dLp / S_l
    tc = dCp / S_c
    th = dHp / S_h
    # Rounding can push the radicand a hair below zero for identical inputs
    d = np.sqrt(np.maximum(tl**2 + tc**2 + th**2 + R_t * tc * th, 0.0))
    return float(d) if np.ndim(d) == 0 else d


def rgb_to_hex(rgb: RGB) -> str:
    """(r, g, b) -> '#RRGGBB' (uppercase)."""
    r, g, b = (max(0, min(255, int(c))) for c in rgb)
    return f'#{r:02X}{g:02X}{b:02X}'
