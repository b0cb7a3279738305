"""Core geometric types for traced contours.

This module defines the fundamental geometric types produced by the tracer:
- Point: A 2D point in image coordinates
- Contour: A closed boundary or an open centerline stroke
- Orientation: Enum telling outer boundaries from holes
- CornerTag: Enum for the per-vertex corner classification
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Orientation(Enum):
    """Role of a closed contour.

    Image coordinates have y growing downward. With foreground kept on the
    tracer's left as seen on screen:
    - OUTER boundaries have negative signed area
    - HOLE boundaries have positive signed area
    """

    OUTER = "outer"
    HOLE = "hole"


class CornerTag(Enum):
    """Corner classification of a contour vertex.

    HARD vertices are forced curve breaks, SMOOTH vertices may be fitted
    through with a continuous curve.
    """

    HARD = "hard"
    SMOOTH = "smooth"


@dataclass(frozen=True, slots=True)
class Point:
    """A point in image space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in pixels
        y: Y coordinate in pixels, growing downward
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"])


@dataclass
class Contour:
    """A traced boundary or centerline.

    Closed contours do not repeat their first point at the end; the last
    point connects back to the first implicitly.

    Attributes:
        points: Ordered points of the contour
        closed: False only for open strokes found in center mode
        orientation: OUTER or HOLE for closed boundaries, None for strokes
    """

    points: list[Point]
    closed: bool = True
    orientation: Orientation | None = field(default=None)
    _cached_area: float | None = field(default=None, repr=False, init=False, compare=False)
    _cached_bbox: tuple[float, float, float, float] | None = field(
        default=None, repr=False, init=False, compare=False
    )

    def signed_area(self) -> float:
        """Calculate signed area using shoelace formula.

        Negative for outer boundaries, positive for holes (y grows downward).
        Result is cached for efficiency.

        Returns:
            Signed area of the contour
        """
        if self._cached_area is not None:
            return self._cached_area

        n = len(self.points)
        if n < 3:
            self._cached_area = 0.0
            return 0.0

        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += self.points[i].x * self.points[j].y
            area -= self.points[j].x * self.points[i].y

        self._cached_area = area / 2.0
        return self._cached_area

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Calculate bounding box of the contour.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if self._cached_bbox is not None:
            return self._cached_bbox

        if not self.points:
            self._cached_bbox = (0.0, 0.0, 0.0, 0.0)
            return self._cached_bbox

        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]

        self._cached_bbox = (min(xs), min(ys), max(xs), max(ys))
        return self._cached_bbox

    def contains_point(self, x: float, y: float) -> bool:
        """Check if point is inside contour using ray casting algorithm.

        Open strokes enclose nothing and always return False.

        Args:
            x: X coordinate of point to test
            y: Y coordinate of point to test

        Returns:
            True if point is inside contour, False otherwise
        """
        n = len(self.points)
        if n < 3 or not self.closed:
            return False

        inside = False
        j = n - 1

        for i in range(n):
            xi, yi = self.points[i].x, self.points[i].y
            xj, yj = self.points[j].x, self.points[j].y

            if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
                inside = not inside

            j = i

        return inside

    def is_outer(self) -> bool:
        """Check whether this is an outer boundary."""
        return self.orientation is Orientation.OUTER

    def is_hole(self) -> bool:
        """Check whether this is a hole boundary."""
        return self.orientation is Orientation.HOLE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "points": [p.to_dict() for p in self.points],
            "closed": self.closed,
            "orientation": self.orientation.value if self.orientation else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contour":
        """Deserialize from dictionary."""
        points = [Point.from_dict(p) for p in data["points"]]
        orientation = (
            Orientation(data["orientation"])
            if data.get("orientation") is not None
            else None
        )
        return cls(points=points, closed=data.get("closed", True), orientation=orientation)
