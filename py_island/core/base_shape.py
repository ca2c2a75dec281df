"""
Base island shape from a cellular automaton.

The automaton runs on a small working grid (about 64x64); large grids give
noisy coastlines, so the result is upscaled afterwards.
"""

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .generation_config import GenerationConfig

logger = structlog.get_logger()

WATER = 0
LAND = 1


class BaseShapeGenerator:
    """
    Grows a binary land/water mask with a smoothing automaton.

    Masks are indexed ``mask[x, y]`` with shape ``(width, height)``.
    """

    def __init__(self, config: GenerationConfig, width: int, height: int, prng: AleaPRNG):
        self.config = config
        self.width = width
        self.height = height
        self.prng = prng

    def generate(self) -> np.ndarray:
        """Fill, smooth and invert a fresh working mask."""
        mask = np.zeros((self.width, self.height), dtype=np.int8)

        self.random_fill(mask)

        for _ in range(self.config.smooth_times):
            self.smooth(mask)

        # The automaton grows walls; the island is what the walls enclose,
        # so every downstream stage expects the flipped polarity.
        invert(mask)

        land = int(mask.sum())
        logger.debug(
            "Base shape generated",
            width=self.width,
            height=self.height,
            land_cells=land,
            seed=self.prng.seed,
        )
        return mask

    def random_fill(self, mask: np.ndarray) -> None:
        """Border cells are always walls; interior cells are walls with probability fill%."""
        fill = self.config.random_fill_percent
        for x in range(self.width):
            for y in range(self.height):
                if x == 0 or x == self.width - 1 or y == 0 or y == self.height - 1:
                    mask[x, y] = LAND
                else:
                    mask[x, y] = LAND if self.prng.next_int(0, 100) < fill else WATER

    def smooth(self, mask: np.ndarray) -> None:
        """
        One automaton pass, updated in place.

        Cells later in the scan see the already-updated values of earlier
        cells, so the result is order dependent but deterministic.
        """
        threshold = self.config.neighboring_walls
        for x in range(self.width):
            for y in range(self.height):
                walls = surrounding_wall_count(mask, x, y)
                if walls > threshold:
                    mask[x, y] = LAND
                elif walls < threshold:
                    mask[x, y] = WATER


def surrounding_wall_count(mask: np.ndarray, grid_x: int, grid_y: int) -> int:
    """Count walls among the 8 neighbours; cells outside the grid count as walls."""
    width, height = mask.shape
    wall_count = 0
    for nx in range(grid_x - 1, grid_x + 2):
        for ny in range(grid_y - 1, grid_y + 2):
            if 0 <= nx < width and 0 <= ny < height:
                if nx != grid_x or ny != grid_y:
                    wall_count += int(mask[nx, ny])
            else:
                wall_count += 1
    return wall_count


def invert(mask: np.ndarray) -> None:
    """Flip every cell between water and land in place."""
    mask[...] = np.where(mask == WATER, LAND, WATER)
