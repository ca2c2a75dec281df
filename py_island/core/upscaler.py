"""Nearest-neighbour upscaling of land/water masks."""

from typing import Tuple

import numpy as np
import structlog

logger = structlog.get_logger()


def upscale_mask(mask: np.ndarray) -> np.ndarray:
    """Return a new mask of double width and height; each cell becomes a 2x2 block."""
    return np.repeat(np.repeat(mask, 2, axis=0), 2, axis=1)


def upscale_to_size(mask: np.ndarray, target_size: int) -> Tuple[np.ndarray, int]:
    """
    Double the mask until its height reaches ``target_size``.

    The mask is always doubled at least once. The result may overshoot the
    target when the target is not a power-of-two multiple of the mask size.

    Returns:
        Tuple of (scaled mask, number of doublings)
    """
    scaled = upscale_mask(mask)
    steps = 1
    while scaled.shape[1] < target_size:
        scaled = upscale_mask(scaled)
        steps += 1

    logger.debug(
        "Mask upscaled",
        source_shape=mask.shape,
        scaled_shape=scaled.shape,
        target_size=target_size,
        steps=steps,
    )
    return scaled, steps
