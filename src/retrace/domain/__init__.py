"""Domain models for retrace.

This module contains the core domain models representing bitmaps, traced
contours and fitted curves. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of Pillow and svgwrite implementation details

Key classes:
- PixelGrid: Immutable binary image
- Point: A 2D point in image coordinates
- Contour: A traced boundary or centerline
- CubicSegment: One cubic Bezier segment
- CurvePath: The fitted curves of one contour
"""

from retrace.domain.contour import Contour, CornerTag, Orientation, Point
from retrace.domain.curve import CubicSegment, CurvePath
from retrace.domain.grid import PixelGrid

__all__: list[str] = [
    # Enums
    "CornerTag",
    "Orientation",
    # Core types
    "PixelGrid",
    "Point",
    "Contour",
    "CubicSegment",
    "CurvePath",
]
