"""Near-collinear vertex removal.

Vertices are removed cheapest first, where the cost of a vertex is its
distance to the segment joining its two neighbours. Removal stops once
every remaining vertex costs at least the tolerance, which is exactly the
condition checked before the first removal, so simplifying twice with the
same tolerance changes nothing the second time.
"""

import heapq

from retrace.core.geometry import distance_to_segment
from retrace.domain import Point

MIN_CLOSED_POINTS = 4
MIN_OPEN_POINTS = 2


def simplify(points: list[Point], closed: bool, tolerance: float) -> list[Point]:
    """Remove vertices that lie within tolerance of their neighbours' chord.

    Closed polylines keep at least 4 vertices, open polylines at least 2,
    and the end points of open polylines are never removed.

    Args:
        points: Polyline vertices
        closed: Whether the last vertex connects back to the first
        tolerance: Maximum distance, in pixels, of a removable vertex

    Returns:
        Remaining vertices in their original order
    """
    n = len(points)
    min_points = MIN_CLOSED_POINTS if closed else MIN_OPEN_POINTS
    if tolerance <= 0.0 or n <= min_points:
        return list(points)

    prev = [(i - 1) % n for i in range(n)]
    nxt = [(i + 1) % n for i in range(n)]
    alive = [True] * n
    version = [0] * n
    remaining = n

    def removable(i: int) -> bool:
        return closed or (i != 0 and i != n - 1)

    def cost(i: int) -> float:
        return distance_to_segment(points[i], points[prev[i]], points[nxt[i]])

    heap: list[tuple[float, int, int]] = []
    for i in range(n):
        if removable(i):
            c = cost(i)
            if c < tolerance:
                heap.append((c, i, 0))
    heapq.heapify(heap)

    while heap and remaining > min_points:
        c, i, ver = heapq.heappop(heap)
        if not alive[i] or ver != version[i]:
            continue

        alive[i] = False
        remaining -= 1
        p, q = prev[i], nxt[i]
        nxt[p] = q
        prev[q] = p

        for j in (p, q):
            if not removable(j):
                continue
            version[j] += 1
            c = cost(j)
            if c < tolerance:
                heapq.heappush(heap, (c, j, version[j]))

    return [points[i] for i in range(n) if alive[i]]
