"""Least-squares cubic Bezier fitting of polylines.

Follows Schneider's algorithm from Graphics Gems: each span between forced
breaks is fitted with one cubic whose end tangents are fixed; if the worst
point is too far away the parameters are refined with Newton steps, and
failing that the span is split at the worst point with a shared tangent so
the two halves join smoothly.

The optional exhaustive pass then tries to merge neighbouring segments of a
span back into a single cubic, always taking the merge with the smallest
error first, for as long as the merged error stays within tolerance.
"""

import math

from retrace.core._bezier import evaluate, first_derivative, line_segment, second_derivative
from retrace.domain import CubicSegment, Point

EPSILON = 1e-12
MAX_REPARAMETERIZE = 4

Vector = tuple[float, float]
# A fitted segment with the first and last polyline index it covers.
Piece = tuple[CubicSegment, int, int]


def _unit(dx: float, dy: float) -> Vector:
    length = math.hypot(dx, dy)
    if length < EPSILON:
        return (0.0, 0.0)
    return (dx / length, dy / length)


def _direction(a: Point, b: Point) -> Vector:
    return _unit(b.x - a.x, b.y - a.y)


def _center_tangent(before: Point, at: Point, after: Point) -> Vector:
    """Forward tangent at a knot, averaging the incoming and outgoing edges."""
    v1 = _direction(before, at)
    v2 = _direction(at, after)
    tangent = _unit(v1[0] + v2[0], v1[1] + v2[1])
    if tangent == (0.0, 0.0):
        return v1 if v1 != (0.0, 0.0) else v2
    return tangent


def chord_length_parameterize(points: list[Point]) -> list[float]:
    """Assign parameters in [0, 1] proportional to distance along the polyline."""
    u = [0.0]
    total = 0.0
    for a, b in zip(points, points[1:]):
        total += math.hypot(b.x - a.x, b.y - a.y)
        u.append(total)
    if total < EPSILON:
        return [i / (len(points) - 1) for i in range(len(points))]
    return [value / total for value in u]


def _generate_bezier(
    points: list[Point], u: list[float], t1: Vector, t2: Vector
) -> CubicSegment:
    """Least-squares handle lengths for fixed end points and tangents."""
    first, last = points[0], points[-1]
    c00 = c01 = c11 = x0 = x1 = 0.0

    for p, t in zip(points, u):
        s = 1.0 - t
        b0 = s * s * s
        b1 = 3.0 * s * s * t
        b2 = 3.0 * s * t * t
        b3 = t * t * t
        a0 = (t1[0] * b1, t1[1] * b1)
        a1 = (t2[0] * b2, t2[1] * b2)
        rx = p.x - (first.x * (b0 + b1) + last.x * (b2 + b3))
        ry = p.y - (first.y * (b0 + b1) + last.y * (b2 + b3))
        c00 += a0[0] * a0[0] + a0[1] * a0[1]
        c01 += a0[0] * a1[0] + a0[1] * a1[1]
        c11 += a1[0] * a1[0] + a1[1] * a1[1]
        x0 += a0[0] * rx + a0[1] * ry
        x1 += a1[0] * rx + a1[1] * ry

    det = c00 * c11 - c01 * c01
    seg_len = math.hypot(last.x - first.x, last.y - first.y)
    if abs(det) > EPSILON:
        alpha_l = (x0 * c11 - x1 * c01) / det
        alpha_r = (c00 * x1 - c01 * x0) / det
    else:
        alpha_l = alpha_r = 0.0

    # Degenerate or inverted handles fall back to the Wu/Barsky heuristic.
    eps = 1e-6 * seg_len
    if not (math.isfinite(alpha_l) and math.isfinite(alpha_r)) or alpha_l < eps or alpha_r < eps:
        alpha_l = alpha_r = seg_len / 3.0

    return CubicSegment(
        first,
        Point(first.x + t1[0] * alpha_l, first.y + t1[1] * alpha_l),
        Point(last.x + t2[0] * alpha_r, last.y + t2[1] * alpha_r),
        last,
    )


def _max_error(points: list[Point], seg: CubicSegment, u: list[float]) -> tuple[float, int]:
    """Largest squared distance from a point to its curve position, and where."""
    worst = 0.0
    split = len(points) // 2
    for i in range(1, len(points) - 1):
        x, y = evaluate(seg, u[i])
        d2 = (x - points[i].x) ** 2 + (y - points[i].y) ** 2
        if d2 >= worst:
            worst = d2
            split = i
    return worst, split


def _reparameterize(points: list[Point], seg: CubicSegment, u: list[float]) -> list[float]:
    """One Newton-Raphson step toward each point's closest curve parameter."""
    result = [0.0] * len(u)
    result[-1] = 1.0
    for i in range(1, len(u) - 1):
        t = u[i]
        qx, qy = evaluate(seg, t)
        d1x, d1y = first_derivative(seg, t)
        d2x, d2y = second_derivative(seg, t)
        dx, dy = qx - points[i].x, qy - points[i].y
        numerator = dx * d1x + dy * d1y
        denominator = d1x * d1x + d1y * d1y + dx * d2x + dy * d2y
        if abs(denominator) < EPSILON:
            result[i] = t
        else:
            result[i] = min(1.0, max(0.0, t - numerator / denominator))
    return result


def _fit_single(
    points: list[Point], t1: Vector, t2: Vector, max_err2: float
) -> tuple[CubicSegment, float, int]:
    """Best single cubic for a run of points.

    Returns:
        Tuple of (segment, squared error, index of the worst point)
    """
    if len(points) == 2:
        return line_segment(points[0], points[1]), 0.0, 1

    u = chord_length_parameterize(points)
    seg = _generate_bezier(points, u, t1, t2)
    error, split = _max_error(points, seg, u)
    if error <= max_err2 or error > max_err2 * 4.0:
        return seg, error, split

    for _ in range(MAX_REPARAMETERIZE):
        u = _reparameterize(points, seg, u)
        candidate = _generate_bezier(points, u, t1, t2)
        cand_error, cand_split = _max_error(points, candidate, u)
        if cand_error < error:
            seg, error, split = candidate, cand_error, cand_split
        if error <= max_err2:
            break
    return seg, error, split


def _fit_span(points: list[Point], t1: Vector, t2: Vector, max_err2: float) -> list[Piece]:
    """Fit a span with as many cubics as needed, splitting at the worst point."""
    pieces: list[Piece] = []
    stack = [(0, len(points) - 1, t1, t2)]

    while stack:
        start, end, left_tangent, right_tangent = stack.pop()
        run = points[start : end + 1]
        seg, error, split = _fit_single(run, left_tangent, right_tangent, max_err2)
        if error <= max_err2 or len(run) <= 2:
            pieces.append((seg, start, end))
            continue

        split = max(1, min(len(run) - 2, split))
        knot = start + split
        center = _center_tangent(points[knot - 1], points[knot], points[knot + 1])
        # Right half is pushed first so the left half is emitted first.
        stack.append((knot, end, center, right_tangent))
        stack.append((start, knot, left_tangent, (-center[0], -center[1])))

    return pieces


def _handle_tangents(seg: CubicSegment, points: list[Point], start: int, end: int) -> tuple[Vector, Vector]:
    t1 = _direction(seg.p0, seg.p1)
    if t1 == (0.0, 0.0):
        t1 = _direction(points[start], points[start + 1])
    t2 = _direction(seg.p3, seg.p2)
    if t2 == (0.0, 0.0):
        t2 = _direction(points[end], points[end - 1])
    return t1, t2


def _merge_exhaustive(points: list[Point], pieces: list[Piece], max_err2: float) -> list[Piece]:
    """Merge neighbouring pieces, cheapest first, while the error allows."""
    pieces = list(pieces)

    def candidate(k: int) -> tuple[float, Piece]:
        left, a, _ = pieces[k]
        right, _, b = pieces[k + 1]
        t1, _ = _handle_tangents(left, points, a, pieces[k][2])
        _, t2 = _handle_tangents(right, points, pieces[k + 1][1], b)
        seg, error, _ = _fit_single(points[a : b + 1], t1, t2, max_err2)
        return error, (seg, a, b)

    candidates = [candidate(k) for k in range(len(pieces) - 1)]
    while candidates:
        best = min(range(len(candidates)), key=lambda k: (candidates[k][0], k))
        error, merged = candidates[best]
        if error > max_err2:
            break
        pieces[best : best + 2] = [merged]
        del candidates[best]
        if best > 0:
            candidates[best - 1] = candidate(best - 1)
        if best < len(pieces) - 1:
            candidates[best] = candidate(best)

    return pieces


def _dedupe(points: list[Point], corners: list[int], closed: bool) -> tuple[list[Point], list[int]]:
    """Drop consecutive duplicates, remapping corner indices onto survivors."""
    unique: list[Point] = []
    remap: list[int] = []
    for p in points:
        if not unique or p != unique[-1]:
            unique.append(p)
        remap.append(len(unique) - 1)
    if closed and len(unique) > 1 and unique[-1] == unique[0]:
        unique.pop()
        remap = [0 if i == len(unique) else i for i in remap]
    mapped = sorted({remap[i] for i in corners if 0 <= i < len(remap)})
    return unique, mapped


def fit(
    points: list[Point],
    corners: list[int],
    max_error: float,
    exhaustive: bool = False,
    closed: bool = True,
) -> list[CubicSegment]:
    """Fit cubic Bezier segments through a polyline.

    Every corner index becomes a segment boundary; the fitted curve passes
    exactly through each corner and through the end points of open
    polylines. Segments join end to start.

    Args:
        points: Polyline vertices
        corners: Indices of forced breaks
        max_error: Maximum distance, in pixels, from a point to the curve
        exhaustive: Also try merging neighbouring segments
        closed: Whether the last vertex connects back to the first

    Returns:
        Ordered cubic segments; for a closed polyline the last segment ends
        where the first begins
    """
    points, corners = _dedupe(points, corners, closed)
    if len(points) < 2:
        return []

    max_err2 = max_error * max_error
    n = len(points)

    if closed and n < 3:
        corners = list(range(n))

    spans: list[tuple[list[Point], Vector, Vector]] = []
    if closed and not corners:
        loop = points + [points[0]]
        seam = _center_tangent(points[-1], points[0], points[1])
        spans.append((loop, seam, (-seam[0], -seam[1])))
    else:
        if closed:
            # Start the loop at the first corner so every span ends on one.
            first = corners[0]
            ring = points[first:] + points[:first] + [points[first]]
            breaks = [c - first for c in corners] + [n]
        else:
            ring = points
            breaks = sorted({0, n - 1, *corners})
        for a, b in zip(breaks, breaks[1:]):
            span = ring[a : b + 1]
            spans.append(
                (span, _direction(span[0], span[1]), _direction(span[-1], span[-2]))
            )

    segments: list[CubicSegment] = []
    for span, t1, t2 in spans:
        pieces = _fit_span(span, t1, t2, max_err2)
        if exhaustive and len(pieces) > 1:
            pieces = _merge_exhaustive(span, pieces, max_err2)
        segments.extend(seg for seg, _, _ in pieces)
    return segments
