"""Geometric operations on polylines.

This module provides core mathematical utilities for:
- Signed area calculation (shoelace formula)
- Point-in-polygon testing (ray casting algorithm)
- Nearest point and distance to a segment
- Edge subdivision (midpoints and length limited)
- Turn deviation at a polyline vertex

All functions are pure, stateless, and designed for use in parallel processing.
"""

import math

from retrace.domain import Point


def signed_area(points: list[Point]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    In image coordinates (y down) a boundary walked with its interior on the
    left as seen on screen has negative area.

    Args:
        points: List of points forming the polygon boundary

    Returns:
        Signed area in square pixels. Returns 0.0 for degenerate polygons.

    Examples:
        >>> square = [Point(0, 0), Point(0, 1), Point(1, 1), Point(1, 0)]
        >>> signed_area(square)
        -1.0
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


def point_in_polygon(point: Point, polygon: list[Point]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.

    Args:
        point: The point to test
        polygon: List of points forming the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    x, y = point.x, point.y
    j = n - 1

    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def nearest_point_on_segment(point: Point, seg_start: Point, seg_end: Point) -> Point:
    """Find the nearest point on a line segment to a given point.

    Projects the point onto the line and clamps to the segment endpoints.

    Args:
        point: The point to find nearest to
        seg_start: Start point of line segment
        seg_end: End point of line segment

    Returns:
        Point on segment closest to the given point
    """
    dx = seg_end.x - seg_start.x
    dy = seg_end.y - seg_start.y

    seg_len_sq = dx * dx + dy * dy
    if seg_len_sq < 1e-20:
        return seg_start

    t = ((point.x - seg_start.x) * dx + (point.y - seg_start.y) * dy) / seg_len_sq
    t = max(0.0, min(1.0, t))

    return Point(seg_start.x + t * dx, seg_start.y + t * dy)


def distance_to_segment(point: Point, seg_start: Point, seg_end: Point) -> float:
    """Distance from a point to the closest point of a segment."""
    nearest = nearest_point_on_segment(point, seg_start, seg_end)
    return math.hypot(point.x - nearest.x, point.y - nearest.y)


def midpoint(a: Point, b: Point) -> Point:
    """Midpoint of two points."""
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def subdivide(points: list[Point], closed: bool) -> list[Point]:
    """Insert the midpoint of every edge.

    Guarantees at least one knot between any two original vertices, which
    gives the fitter a middle tangent to work with.

    Args:
        points: Polyline vertices
        closed: Whether the last vertex connects back to the first

    Returns:
        New polyline starting at the same vertex
    """
    if len(points) < 2:
        return list(points)

    result: list[Point] = []
    n = len(points)
    edge_count = n if closed else n - 1
    for i in range(edge_count):
        curr = points[i]
        nxt = points[(i + 1) % n]
        result.append(curr)
        result.append(midpoint(curr, nxt))
    if not closed:
        result.append(points[-1])
    return result


def subdivide_to_limit(points: list[Point], closed: bool, limit: float) -> list[Point]:
    """Split edges so no edge is much longer than limit.

    An edge of length L > limit is split into floor(L / limit) equal parts,
    evening out point density between axis-aligned and diagonal runs.

    Args:
        points: Polyline vertices
        closed: Whether the last vertex connects back to the first
        limit: Target maximum edge length in pixels

    Returns:
        New polyline starting at the same vertex
    """
    if len(points) < 2 or limit <= 0.0:
        return list(points)

    result: list[Point] = []
    n = len(points)
    edge_count = n if closed else n - 1
    for i in range(edge_count):
        curr = points[i]
        nxt = points[(i + 1) % n]
        result.append(curr)
        length = math.hypot(nxt.x - curr.x, nxt.y - curr.y)
        if length > limit:
            parts = int(math.floor(length / limit))
            for k in range(1, parts):
                t = k / parts
                result.append(Point(curr.x + (nxt.x - curr.x) * t, curr.y + (nxt.y - curr.y) * t))
    if not closed:
        result.append(points[-1])
    return result


def turn_deviation(prev: Point, curr: Point, nxt: Point) -> float:
    """Deviation from straight at curr, in degrees.

    0 means the polyline continues straight, 180 means a full reversal.
    Uses atan2 of the cross and dot products, which stays accurate for both
    tiny and near-opposite edge vectors.

    Args:
        prev: Previous vertex
        curr: Vertex being measured
        nxt: Next vertex

    Returns:
        Angle between the incoming and outgoing edge vectors, 0 to 180
    """
    ax, ay = curr.x - prev.x, curr.y - prev.y
    bx, by = nxt.x - curr.x, nxt.y - curr.y
    cross = ax * by - ay * bx
    dot = ax * bx + ay * by
    return math.degrees(math.atan2(abs(cross), dot))
