"""Outline extraction by walking pixel boundary edges.

Boundary edges live on the lattice of pixel corners. For a grid of
width x height pixels there are (width + 1) * (height + 1) corners, each
owning one byte of direction bits for the boundary edges that leave it.
Every foreground pixel contributes one directed edge per background
4-neighbour, oriented so the pixel lies on the tracer's left as seen on
screen (image y grows downward):

    west neighbour empty   SOUTH edge (x, y)         -> (x, y + 1)
    south neighbour empty  EAST edge  (x, y + 1)     -> (x + 1, y + 1)
    east neighbour empty   NORTH edge (x + 1, y + 1) -> (x + 1, y)
    north neighbour empty  WEST edge  (x + 1, y)     -> (x, y)

Every corner has as many incoming as outgoing edges, so each walk that
consumes the edges it follows ends where it started. Outer boundaries come
out with negative signed area, holes with positive.

A corner with two outgoing edges is a checkerboard junction. Turning right
there keeps the two diagonal foreground pixels in one contour, turning left
separates them; connects_foreground() makes that choice from the turn policy.
"""

import numpy as np

from retrace.config import TurnPolicy
from retrace.core.geometry import signed_area
from retrace.domain import Contour, Orientation, PixelGrid, Point

EAST = 1
SOUTH = 2
WEST = 4
NORTH = 8

_RIGHT_TURN = {EAST: SOUTH, SOUTH: WEST, WEST: NORTH, NORTH: EAST}
_LEFT_TURN = {EAST: NORTH, NORTH: WEST, WEST: SOUTH, SOUTH: EAST}

# Rings around a junction inspected by the majority policies.
_MAJORITY_RADII = (2, 3, 4)


def _majority_foreground(grid: PixelGrid, x: int, y: int) -> bool:
    """Whether foreground outnumbers background around corner (x, y).

    Inspects square rings of pixels of growing radius centred on the corner;
    the first ring that is not a tie decides. A tie on every ring counts as
    background.
    """
    for radius in _MAJORITY_RADII:
        balance = 0
        lo_x, hi_x = x - radius, x + radius - 1
        lo_y, hi_y = y - radius, y + radius - 1
        for px in range(lo_x, hi_x + 1):
            balance += 1 if grid.get(px, lo_y) else -1
            balance += 1 if grid.get(px, hi_y) else -1
        for py in range(lo_y + 1, hi_y):
            balance += 1 if grid.get(lo_x, py) else -1
            balance += 1 if grid.get(hi_x, py) else -1
        if balance > 0:
            return True
        if balance < 0:
            return False
    return False


def connects_foreground(policy: TurnPolicy, grid: PixelGrid, x: int, y: int) -> bool:
    """Decide whether a checkerboard junction joins its foreground diagonals.

    Args:
        policy: Turn policy
        grid: The grid being traced
        x: Corner column
        y: Corner row

    Returns:
        True to keep the diagonal foreground pixels in one contour
    """
    if policy is TurnPolicy.BLACK:
        return True
    if policy is TurnPolicy.WHITE:
        return False
    if policy is TurnPolicy.MAJORITY:
        return _majority_foreground(grid, x, y)
    return not _majority_foreground(grid, x, y)


def build_edge_masks(grid: PixelGrid) -> bytearray:
    """Build per-corner direction bits for every boundary edge.

    Args:
        grid: Binary image

    Returns:
        Row-major bytearray of (width + 1) * (height + 1) direction masks
    """
    w, h = grid.width, grid.height
    padded = np.pad(grid.pixels, 1, constant_values=False)
    fg = padded[1:-1, 1:-1]
    west_empty = fg & ~padded[1:-1, :-2]
    east_empty = fg & ~padded[1:-1, 2:]
    north_empty = fg & ~padded[:-2, 1:-1]
    south_empty = fg & ~padded[2:, 1:-1]

    masks = np.zeros((h + 1, w + 1), dtype=np.uint8)
    masks[:h, :w] |= np.where(west_empty, SOUTH, 0).astype(np.uint8)
    masks[1:, :w] |= np.where(south_empty, EAST, 0).astype(np.uint8)
    masks[1:, 1:] |= np.where(east_empty, NORTH, 0).astype(np.uint8)
    masks[:h, 1:] |= np.where(north_empty, WEST, 0).astype(np.uint8)
    return bytearray(masks.tobytes())


def _walk(
    grid: PixelGrid,
    masks: bytearray,
    seed: int,
    policy: TurnPolicy,
) -> list[Point]:
    """Follow boundary edges from a SOUTH edge at seed until the loop closes.

    The seed edge stays marked until the walk is about to re-take it, so a
    junction at the seed corner still sees both of its choices.
    """
    stride = grid.width + 1
    steps = {EAST: 1, WEST: -1, SOUTH: stride, NORTH: -stride}

    points: list[Point] = []
    heading = SOUTH
    index = seed + stride

    while True:
        bits = masks[index]
        if bits & (bits - 1):
            y, x = divmod(index, stride)
            if connects_foreground(policy, grid, x, y):
                out = _RIGHT_TURN[heading]
            else:
                out = _LEFT_TURN[heading]
        else:
            out = bits

        if index == seed and out == SOUTH:
            masks[index] = bits & ~SOUTH
            if heading != SOUTH:
                y, x = divmod(index, stride)
                points.append(Point(float(x), float(y)))
            break

        masks[index] = bits & ~out
        if out != heading:
            y, x = divmod(index, stride)
            points.append(Point(float(x), float(y)))
        heading = out
        index += steps[out]

    # The seed corner is found last; put it first.
    if points and heading != SOUTH:
        points.insert(0, points.pop())
    return points


def extract_outline(grid: PixelGrid, policy: TurnPolicy) -> list[Contour]:
    """Trace every foreground/background boundary of a grid.

    Contours are returned in the row-major order of their top-left-most
    SOUTH edge, so the output is fully determined by grid and policy.

    Args:
        grid: Binary image
        policy: Turn policy at checkerboard junctions

    Returns:
        Closed contours tagged OUTER or HOLE
    """
    if grid.width == 0 or grid.height == 0:
        return []

    masks = build_edge_masks(grid)
    contours: list[Contour] = []

    for seed in range(len(masks)):
        if not masks[seed] & SOUTH:
            continue
        points = _walk(grid, masks, seed, policy)
        area = signed_area(points)
        orientation = Orientation.OUTER if area < 0 else Orientation.HOLE
        contours.append(Contour(points=points, closed=True, orientation=orientation))

    return contours
