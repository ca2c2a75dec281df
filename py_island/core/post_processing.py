"""
Post-processing passes over a finished elevation buffer.

Each pass takes a heightmap and returns a new one; they can run in any order
after the base pipeline.
"""

from datetime import datetime
from typing import Optional

import noise
import numpy as np
import structlog
from scipy import ndimage

logger = structlog.get_logger()

_KERNEL = np.ones((3, 3), dtype=np.float64)


def time_offset() -> float:
    """Noise offset taken from the current millisecond, in [0, 1)."""
    return (datetime.now().microsecond // 1000) / 1000.0


def add_perlin_noise(
    heights: np.ndarray,
    noise_height: float,
    noise_scale: float,
    offset: Optional[float] = None,
) -> np.ndarray:
    """
    Add a Perlin layer of amplitude ``noise_height``.

    Coordinates are normalised to [0, 1) across the buffer, shifted by
    ``offset`` and multiplied by ``noise_scale``. Without an explicit
    offset the layer differs from run to run.
    """
    if offset is None:
        offset = time_offset()

    width, height = heights.shape
    layer = np.empty((width, height), dtype=np.float64)
    for x in range(width):
        px = (x / width + offset) * noise_scale
        for y in range(height):
            py = (y / height + offset) * noise_scale
            # pnoise2 is roughly in [-1, 1]; shift it to [0, 1]
            layer[x, y] = (noise.pnoise2(px, py) + 1.0) / 2.0

    logger.debug("Perlin layer added", noise_height=noise_height, noise_scale=noise_scale, offset=offset)
    return (heights + noise_height * layer).astype(heights.dtype)


def blend_heights(heights: np.ndarray) -> np.ndarray:
    """
    Replace every cell with the mean of its in-bounds 3x3 neighbourhood.

    Edge cells average over fewer samples.
    """
    totals = ndimage.convolve(heights.astype(np.float64), _KERNEL, mode="constant", cval=0.0)
    counts = ndimage.convolve(np.ones(heights.shape, dtype=np.float64), _KERNEL, mode="constant", cval=0.0)
    return (totals / counts).astype(heights.dtype)


def reset_sea_floor(heights: np.ndarray, step: float = 0.001) -> np.ndarray:
    """
    Lower the whole buffer in ``step`` increments until its minimum is at or below zero.

    The buffer is always lowered at least once, and every cell drops by the
    same amount so relative relief is unchanged.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")

    lowest = float(np.min(heights))
    if not np.isfinite(lowest):
        raise ValueError("heightmap contains non-finite values")

    drop = 0.0
    steps = 0
    while True:
        drop += step
        steps += 1
        if lowest - drop <= 0:
            break

    logger.debug("Sea floor reset", drop=drop, steps=steps)
    return (heights - drop).astype(heights.dtype)
