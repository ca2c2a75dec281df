"""Shore detection on an upscaled land/water mask."""

import numpy as np
import structlog
from scipy import ndimage

logger = structlog.get_logger()

WATER = 0
LAND = 1
SHORE = 2

_NEIGHBOURHOOD = np.ones((3, 3), dtype=bool)


def classify_shores(mask: np.ndarray) -> np.ndarray:
    """
    Mark water cells in the 3x3 neighbourhood of land as shore candidates.

    Rows and columns 0 and max are left untouched, both as land centres and
    as marked cells. Interior land and water away from land keep their
    values. The mask is modified in place and returned.
    """
    interior = np.zeros(mask.shape, dtype=bool)
    interior[1:-1, 1:-1] = True

    land = (mask == LAND) & interior
    near_land = ndimage.binary_dilation(land, structure=_NEIGHBOURHOOD)
    mask[near_land & interior & (mask == WATER)] = SHORE

    logger.debug("Shores classified", shore_cells=int(np.count_nonzero(mask == SHORE)))
    return mask
