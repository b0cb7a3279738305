"""Curve geometry produced by the fitter.

- CubicSegment: One cubic Bezier segment
- CurvePath: The fitted curves of one contour, ready for output
"""

from dataclasses import dataclass, field
from typing import Any

from retrace.domain.contour import Orientation, Point


@dataclass(frozen=True, slots=True)
class CubicSegment:
    """A cubic Bezier segment.

    Attributes:
        p0: Start point (on curve)
        p1: First control point
        p2: Second control point
        p3: End point (on curve)
    """

    p0: Point
    p1: Point
    p2: Point
    p3: Point

    def points(self) -> tuple[Point, Point, Point, Point]:
        """Return the four control points in order."""
        return (self.p0, self.p1, self.p2, self.p3)

    def scaled(self, factor: float) -> "CubicSegment":
        """Return a copy with every coordinate multiplied by factor."""
        return CubicSegment(*(Point(p.x * factor, p.y * factor) for p in self.points()))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"points": [p.to_dict() for p in self.points()]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CubicSegment":
        """Deserialize from dictionary."""
        return cls(*(Point.from_dict(p) for p in data["points"]))


@dataclass
class CurvePath:
    """The fitted output of one traced contour.

    Attributes:
        segments: Cubic segments joined end to start
        closed: Whether the path returns to its start point
        orientation: Copied from the source contour
        parent: Index of the enclosing path, if any
    """

    segments: list[CubicSegment]
    closed: bool = True
    orientation: Orientation | None = None
    parent: int | None = field(default=None)

    @property
    def start(self) -> Point | None:
        """First on-curve point, or None for an empty path."""
        return self.segments[0].p0 if self.segments else None

    def scaled(self, factor: float) -> "CurvePath":
        """Return a copy with every coordinate multiplied by factor."""
        return CurvePath(
            segments=[seg.scaled(factor) for seg in self.segments],
            closed=self.closed,
            orientation=self.orientation,
            parent=self.parent,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "segments": [seg.to_dict() for seg in self.segments],
            "closed": self.closed,
            "orientation": self.orientation.value if self.orientation else None,
            "parent": self.parent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurvePath":
        """Deserialize from dictionary."""
        orientation = (
            Orientation(data["orientation"])
            if data.get("orientation") is not None
            else None
        )
        return cls(
            segments=[CubicSegment.from_dict(s) for s in data["segments"]],
            closed=data.get("closed", True),
            orientation=orientation,
            parent=data.get("parent"),
        )
