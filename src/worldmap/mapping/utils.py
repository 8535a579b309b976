"""
utils.py

Small helpers shared by the cache, picker and loaders.

The public helpers:
- `safe_log_exception(msg, exc, **ctx)` : logs exceptions robustly
- `safe_build_kdtree(points, name='KDTree')` : returns a cKDTree or None
- `as_ring_array(points)` : (N, 2) float array from GeoPoint/ProjPoint pairs
- `first_present(mapping, keys, default)` : first non-empty value under aliases
"""

from typing import Any, Iterable, Mapping, Optional, Sequence
import math
import sys
import logging
import numpy as np

logger = logging.getLogger(__name__)


def safe_log_exception(msg: str, exc: Exception, **ctx: Any) -> None:
    """Log an exception robustly.

    Attempts to call `logger.exception`. If logging fails for any reason,
    falls back to writing a compact message to `sys.stderr`.
    """
    try:
        if ctx:
            ctx_s = ' | '.join(f"{k}={v!r}" for k, v in ctx.items())
            logger.exception('%s | %s | %s', msg, exc, ctx_s)
        else:
            logger.exception('%s | %s', msg, exc)
    except Exception:
        try:
            sys.stderr.write(f'LOGGING FAILURE: {msg} {exc}\n')
        except Exception:
            pass


def safe_build_kdtree(points: Any, name: str = 'KDTree') -> Optional[object]:
    """Build a `scipy.spatial.cKDTree` for ``points``.

    Returns the tree instance or ``None`` for empty or ``None`` input.
    Malformed input (not an (N, k) array) raises ValueError.
    """
    if points is None:
        logger.debug('%s: points is None, not building tree', name)
        return None
    pts = np.asarray(points, dtype=float)
    if pts.size == 0:
        logger.debug('%s: points empty, not building tree', name)
        return None
    if pts.ndim != 2:
        raise ValueError(f'{name}: expected an (N, k) array, got shape {pts.shape}')
    from scipy.spatial import cKDTree

    return cKDTree(pts)


def as_ring_array(points: Iterable[Sequence[float]]) -> np.ndarray:
    """Stack an iterable of 2-sequences into an (N, 2) float array."""
    arr = np.asarray(list(points), dtype=float)
    if arr.size == 0:
        return np.empty((0, 2), dtype=float)
    return arr.reshape(-1, 2)


def first_present(mapping: Mapping[str, Any], keys: Sequence[str], default: Any = None) -> Any:
    """Return the first value in `mapping` under any of `keys` that is not empty.

    None, NaN and blank strings count as empty.
    """
    for key in keys:
        if key not in mapping:
            continue
        value = mapping[key]
        if value is None:
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default
