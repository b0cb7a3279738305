"""Thinning pre-pass for centerline tracing."""

import numpy as np
import numpy.typing as npt
from skimage.morphology import skeletonize

from retrace.domain import PixelGrid


def thin(grid: PixelGrid) -> PixelGrid:
    """Reduce foreground regions to one-pixel-wide skeletons.

    Uses Lee's 1994 thinning, which keeps the skeleton inside the original
    foreground and preserves the end points of strokes.

    Args:
        grid: Binary image

    Returns:
        Grid of the same size containing only skeleton pixels
    """
    if grid.is_empty():
        return grid
    skeleton: npt.NDArray[np.bool_] = skeletonize(np.array(grid.pixels), method="lee").astype(bool)
    # The skeleton must stay inside the original foreground.
    return PixelGrid.from_array(skeleton & grid.pixels)
