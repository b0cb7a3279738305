"""Internal cubic Bezier evaluation helpers.

This is an internal module containing helper functions for the curve fitter.
Not intended for public use.
"""

from retrace.domain import CubicSegment, Point


def evaluate(seg: CubicSegment, t: float) -> tuple[float, float]:
    """Evaluate a cubic at parameter t.

    Args:
        seg: Cubic segment
        t: Parameter in [0, 1]

    Returns:
        (x, y) on the curve
    """
    u = 1.0 - t
    b0 = u * u * u
    b1 = 3.0 * u * u * t
    b2 = 3.0 * u * t * t
    b3 = t * t * t
    return (
        b0 * seg.p0.x + b1 * seg.p1.x + b2 * seg.p2.x + b3 * seg.p3.x,
        b0 * seg.p0.y + b1 * seg.p1.y + b2 * seg.p2.y + b3 * seg.p3.y,
    )


def first_derivative(seg: CubicSegment, t: float) -> tuple[float, float]:
    """First derivative of a cubic at parameter t."""
    u = 1.0 - t
    q0x, q0y = seg.p1.x - seg.p0.x, seg.p1.y - seg.p0.y
    q1x, q1y = seg.p2.x - seg.p1.x, seg.p2.y - seg.p1.y
    q2x, q2y = seg.p3.x - seg.p2.x, seg.p3.y - seg.p2.y
    return (
        3.0 * (u * u * q0x + 2.0 * u * t * q1x + t * t * q2x),
        3.0 * (u * u * q0y + 2.0 * u * t * q1y + t * t * q2y),
    )


def second_derivative(seg: CubicSegment, t: float) -> tuple[float, float]:
    """Second derivative of a cubic at parameter t."""
    ax = seg.p2.x - 2.0 * seg.p1.x + seg.p0.x
    ay = seg.p2.y - 2.0 * seg.p1.y + seg.p0.y
    bx = seg.p3.x - 2.0 * seg.p2.x + seg.p1.x
    by = seg.p3.y - 2.0 * seg.p2.y + seg.p1.y
    return (
        6.0 * ((1.0 - t) * ax + t * bx),
        6.0 * ((1.0 - t) * ay + t * by),
    )


def line_segment(p0: Point, p3: Point) -> CubicSegment:
    """A cubic tracing the straight line from p0 to p3."""
    return CubicSegment(
        p0,
        Point(p0.x + (p3.x - p0.x) / 3.0, p0.y + (p3.y - p0.y) / 3.0),
        Point(p3.x + (p0.x - p3.x) / 3.0, p3.y + (p0.y - p3.y) / 3.0),
        p3,
    )
