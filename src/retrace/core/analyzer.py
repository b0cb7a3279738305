"""Contour nesting analysis.

This module works out how traced boundaries nest inside each other:
- Outer contours (negative signed area)
- Hole contours (positive signed area)
- The immediate parent of every closed boundary
- Nesting depth (0 for top-level outlines)

Open strokes and centerline loops carry no orientation and take no part in
the nesting tree.
"""

import math
from dataclasses import dataclass, field

from retrace.core.geometry import point_in_polygon
from retrace.domain import Contour, Orientation, Point

# How far into the neighbouring foreground pixel the inside point sits.
_INSIDE_OFFSET = 0.25


@dataclass
class ContourNode:
    """A node in the contour nesting tree.

    Attributes:
        index: Index of this contour in the traced contour list
        is_outer: True for outer boundaries, False for holes
        parent: Index of parent contour (None if root)
        children: Indices of child contours
        depth: Nesting depth (0 for top-level)
    """

    index: int
    is_outer: bool
    parent: int | None
    children: list[int]
    depth: int


@dataclass
class ContourHierarchy:
    """Classification and nesting of traced contours.

    Attributes:
        outer_contours: Indices of outer boundaries
        hole_contours: Indices of hole boundaries
        open_contours: Indices of contours without orientation
        nesting_tree: ContourNode for every oriented contour
    """

    outer_contours: list[int] = field(default_factory=list)
    hole_contours: list[int] = field(default_factory=list)
    open_contours: list[int] = field(default_factory=list)
    nesting_tree: dict[int, ContourNode] = field(default_factory=dict)

    def parent_of(self, index: int) -> int | None:
        """Index of the contour immediately enclosing index, if any."""
        node = self.nesting_tree.get(index)
        return node.parent if node else None

    def has_holes(self) -> bool:
        """Check whether any hole boundaries were traced."""
        return len(self.hole_contours) > 0


def _inside_point(contour: Contour) -> Point | None:
    """A point just inside the foreground next to the contour's first edge.

    Foreground lies on the tracer's left as seen on screen, which in image
    coordinates is the direction (dy, -dx) for an edge heading (dx, dy).
    """
    pts = contour.points
    if len(pts) < 2:
        return None
    a, b = pts[0], pts[1]
    dx, dy = b.x - a.x, b.y - a.y
    length = math.hypot(dx, dy)
    if length == 0.0:
        return None
    mx, my = (a.x + b.x) / 2.0, (a.y + b.y) / 2.0
    return Point(mx + _INSIDE_OFFSET * dy / length, my - _INSIDE_OFFSET * dx / length)


class ContourAnalyzer:
    """Builds the nesting tree of traced contours.

    The analyzer is stateless and safe for use in parallel processing.
    """

    def analyze(self, contours: list[Contour]) -> ContourHierarchy:
        """Analyze contours to determine their nesting.

        Args:
            contours: Contours as returned by the tracer

        Returns:
            ContourHierarchy with classification and parent links
        """
        hierarchy = ContourHierarchy()
        oriented: list[int] = []

        for idx, contour in enumerate(contours):
            if contour.orientation is Orientation.OUTER:
                hierarchy.outer_contours.append(idx)
                oriented.append(idx)
            elif contour.orientation is Orientation.HOLE:
                hierarchy.hole_contours.append(idx)
                oriented.append(idx)
            else:
                hierarchy.open_contours.append(idx)

        areas = {idx: abs(contours[idx].signed_area()) for idx in oriented}
        parent_map: dict[int, int | None] = {}

        for idx in oriented:
            inside = _inside_point(contours[idx])
            if inside is None:
                parent_map[idx] = None
                continue

            candidates = [
                other
                for other in oriented
                if other != idx and point_in_polygon(inside, contours[other].points)
            ]
            parent_map[idx] = min(candidates, key=lambda i: (areas[i], i)) if candidates else None

        def get_depth(idx: int, memo: dict[int, int]) -> int:
            if idx in memo:
                return memo[idx]
            parent = parent_map.get(idx)
            memo[idx] = 0 if parent is None else get_depth(parent, memo) + 1
            return memo[idx]

        depth_memo: dict[int, int] = {}
        for idx in oriented:
            hierarchy.nesting_tree[idx] = ContourNode(
                index=idx,
                is_outer=contours[idx].orientation is Orientation.OUTER,
                parent=parent_map[idx],
                children=[],
                depth=get_depth(idx, depth_memo),
            )

        for idx, node in hierarchy.nesting_tree.items():
            if node.parent is not None:
                hierarchy.nesting_tree[node.parent].children.append(idx)

        return hierarchy
