"""Angle-threshold corner classification.

A vertex is a HARD corner when the polyline's direction changes there by at
least the threshold angle; all other vertices are SMOOTH. The tags are
passed to the curve fitter as forced segment breaks.
"""

from retrace.core.geometry import turn_deviation
from retrace.domain import Contour, CornerTag, Point

# Deviation angles never exceed this, so no vertex can qualify.
DISABLED_THRESHOLD = 180.0


def _run_starts(points: list[Point], closed: bool) -> list[int]:
    """Indices that start a run of identical consecutive points."""
    starts = [i for i in range(len(points)) if i == 0 or points[i] != points[i - 1]]
    if closed and len(starts) > 1 and points[0] == points[-1]:
        # Index 0 continues the run that ends the sequence.
        starts = starts[1:]
    return starts


def classify_points(
    points: list[Point],
    closed: bool,
    angle_threshold: float,
) -> list[CornerTag]:
    """Tag every vertex of a polyline as HARD or SMOOTH.

    Consecutive duplicate points are merged before measuring: the first point
    of a run carries the tag, the rest are SMOOTH. End points of open
    polylines are always SMOOTH, and so is every vertex of a polyline with
    fewer than three distinct points.

    Args:
        points: Polyline vertices
        closed: Whether the last vertex connects back to the first
        angle_threshold: Minimum deviation from straight, in degrees

    Returns:
        One tag per input point
    """
    tags = [CornerTag.SMOOTH] * len(points)
    if angle_threshold >= DISABLED_THRESHOLD:
        return tags

    starts = _run_starts(points, closed)
    count = len(starts)
    # A polyline doubling back over two points has no corners either.
    if count < 3 or len({points[i] for i in starts}) < 3:
        return tags

    for k, index in enumerate(starts):
        if not closed and (k == 0 or k == count - 1):
            continue
        prev = points[starts[k - 1]]
        nxt = points[starts[(k + 1) % count]]
        if turn_deviation(prev, points[index], nxt) >= angle_threshold:
            tags[index] = CornerTag.HARD

    return tags


def corner_indices(tags: list[CornerTag]) -> list[int]:
    """Indices of the HARD tags."""
    return [i for i, tag in enumerate(tags) if tag is CornerTag.HARD]


class CornerClassifier:
    """Classifies contour vertices by turn angle.

    Stateless and safe for use in worker processes.
    """

    def __init__(self, angle_threshold: float = 30.0) -> None:
        self.angle_threshold = angle_threshold

    def classify(self, contour: Contour, angle_threshold: float | None = None) -> list[CornerTag]:
        """Tag each vertex of a contour.

        Args:
            contour: Traced contour
            angle_threshold: Overrides the classifier's threshold, in degrees

        Returns:
            One tag per contour point
        """
        threshold = self.angle_threshold if angle_threshold is None else angle_threshold
        return classify_points(contour.points, contour.closed, threshold)
