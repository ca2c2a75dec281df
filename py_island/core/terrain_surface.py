"""Terrain surface the generator reads heights from and writes them back to."""

from typing import Optional, Protocol

import numpy as np


class TerrainSurface(Protocol):
    """Square heightmap owned by the host."""

    @property
    def heightmap_resolution(self) -> int:
        ...

    def get_heights(self, origin_x: int, origin_y: int, width: int, height: int) -> np.ndarray:
        ...

    def set_heights(self, origin_x: int, origin_y: int, heights: np.ndarray) -> None:
        ...


class InMemoryTerrainSurface:
    """
    Numpy-backed terrain surface.

    Like a host terrain, it keeps heights in [0, 1] and clips anything
    written outside that range.
    """

    def __init__(self, resolution: int, heights: Optional[np.ndarray] = None):
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self._resolution = resolution
        self._heights = np.zeros((resolution, resolution), dtype=np.float32)
        if heights is not None:
            self.set_heights(0, 0, heights)

    @property
    def heightmap_resolution(self) -> int:
        return self._resolution

    def get_heights(self, origin_x: int, origin_y: int, width: int, height: int) -> np.ndarray:
        """Copy of the rectangle starting at (origin_x, origin_y)."""
        return self._heights[origin_x:origin_x + width, origin_y:origin_y + height].copy()

    def set_heights(self, origin_x: int, origin_y: int, heights: np.ndarray) -> None:
        """Write a rectangle, dropping whatever falls outside the surface."""
        width = min(heights.shape[0], self._resolution - origin_x)
        height = min(heights.shape[1], self._resolution - origin_y)
        self._heights[origin_x:origin_x + width, origin_y:origin_y + height] = np.clip(
            heights[:width, :height], 0.0, 1.0
        )

    @property
    def heights(self) -> np.ndarray:
        """Full heightmap (a copy)."""
        return self._heights.copy()
