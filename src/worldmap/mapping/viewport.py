"""
viewport.py

World (projection space) <-> device pixel transforms.

Transforms are `affine.Affine` objects mapping world (x, y) to pixel
(col, row). Rows grow downwards, so the y axis is flipped to keep north up.
"""
from typing import Optional, Tuple

import numpy as np
from affine import Affine

from worldmap.mapping.config import VIEWPORT
from worldmap.mapping.coords import Bounds


def fit_transform(bounds: Bounds, width: float, height: float,
                  margin: Optional[float] = None) -> Affine:
    """Uniform-scale transform centring `bounds` in a width x height surface.

    `margin` is the fraction of the surface left empty on each side.
    """
    if margin is None:
        margin = VIEWPORT['margin']
    if not (width > 0 and height > 0):
        raise ValueError(f'viewport size must be positive, got {width!r} x {height!r}')
    if not 0.0 <= margin < 0.5:
        raise ValueError(f'margin must be in [0, 0.5), got {margin!r}')
    if bounds.is_empty():
        raise ValueError(f'cannot fit empty bounds {bounds!r}')

    usable = 1.0 - 2.0 * margin
    scale = min(width * usable / bounds.width, height * usable / bounds.height)
    cx, cy = bounds.center
    return (Affine.translation(0.5 * width, 0.5 * height)
            * Affine.scale(scale, -scale)
            * Affine.translation(-cx, -cy))


def world_to_pixel(transform: Affine, x, y) -> Tuple[np.ndarray, np.ndarray]:
    """Apply `transform` to world coordinates; returns (cols, rows) as floats.

    Scalars in, floats out; arrays in, arrays out.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    cols = transform.a * xs + transform.b * ys + transform.c
    rows = transform.d * xs + transform.e * ys + transform.f
    if cols.ndim == 0:
        return float(cols), float(rows)
    return cols, rows


def pixel_to_world(transform: Affine, col, row) -> Tuple[np.ndarray, np.ndarray]:
    """Inverse of `world_to_pixel`."""
    return world_to_pixel(~transform, col, row)
