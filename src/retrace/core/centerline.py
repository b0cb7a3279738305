"""Centerline extraction from a one-pixel-wide skeleton.

Each skeleton pixel gets a mask of the neighbours it can step to. Diagonal
neighbours only count when neither adjacent orthogonal neighbour is set, so
a staircase is walked along its diagonal. Pixels with three or more
neighbours are junctions: walks may end on them but never start from them.
"""

from retrace.domain import Contour, PixelGrid, Point

LEFT = 1 << 0
RIGHT = 1 << 1
UP = 1 << 2
DOWN = 1 << 3
LEFT_UP = 1 << 4
LEFT_DOWN = 1 << 5
RIGHT_UP = 1 << 6
RIGHT_DOWN = 1 << 7

# Lowest bit first: direction -> (dx, dy, bit cleared at the destination)
_MOVES: tuple[tuple[int, int, int, int], ...] = (
    (LEFT, -1, 0, RIGHT),
    (RIGHT, 1, 0, LEFT),
    (UP, 0, -1, DOWN),
    (DOWN, 0, 1, UP),
    (LEFT_UP, -1, -1, RIGHT_DOWN),
    (LEFT_DOWN, -1, 1, RIGHT_UP),
    (RIGHT_UP, 1, -1, LEFT_DOWN),
    (RIGHT_DOWN, 1, 1, LEFT_UP),
)


def build_neighbour_masks(grid: PixelGrid) -> bytearray:
    """Direction masks of walkable skeleton pixels, row-major."""
    w, h = grid.width, grid.height
    masks = bytearray(w * h)
    get = grid.get

    for y in range(h):
        for x in range(w):
            if not get(x, y):
                continue
            mask = 0
            if get(x - 1, y):
                mask |= LEFT
            if get(x + 1, y):
                mask |= RIGHT
            if get(x, y - 1):
                mask |= UP
            if get(x, y + 1):
                mask |= DOWN
            if not mask & (LEFT | UP) and get(x - 1, y - 1):
                mask |= LEFT_UP
            if not mask & (LEFT | DOWN) and get(x - 1, y + 1):
                mask |= LEFT_DOWN
            if not mask & (RIGHT | UP) and get(x + 1, y - 1):
                mask |= RIGHT_UP
            if not mask & (RIGHT | DOWN) and get(x + 1, y + 1):
                mask |= RIGHT_DOWN

            count = bin(mask).count("1")
            if 0 < count < 3:
                masks[y * w + x] = mask

    return masks


def _continues_run(a: tuple[int, int], b: tuple[int, int], c: tuple[int, int]) -> bool:
    """Whether a -> b -> c keeps the same axis or diagonal heading."""
    if a[0] == b[0] == c[0] or a[1] == b[1] == c[1]:
        return True
    dx_ab, dy_ab = b[0] - a[0], b[1] - a[1]
    dx_bc, dy_bc = c[0] - b[0], c[1] - b[1]
    if dx_ab == 0 or dy_ab == 0:
        return False
    return (
        abs(dx_ab) == abs(dy_ab)
        and abs(dx_bc) == abs(dy_bc)
        and (dx_ab > 0) == (dx_bc > 0)
        and (dy_ab > 0) == (dy_bc > 0)
    )


def _walk_half(
    masks: bytearray, width: int, x_init: int, y_init: int
) -> tuple[bool, list[tuple[int, int]]]:
    """Walk from (x_init, y_init) along the first available direction.

    Returns:
        Tuple of (cyclic, pixel positions); straight runs are collapsed to
        their end points
    """
    path: list[tuple[int, int]] = []
    x, y = x_init, y_init

    while True:
        here = (x, y)
        if len(path) > 1 and _continues_run(path[-2], path[-1], here):
            path[-1] = here
        else:
            path.append(here)

        index = y * width + x
        mask = masks[index]
        masks[index] = 0

        for bit, dx, dy, reverse in _MOVES:
            if mask & bit:
                x += dx
                y += dy
                dest = y * width + x
                masks[dest] &= ~reverse & 0xFF
                break
        else:
            return False, path

        if x == x_init and y == y_init:
            return True, path


def extract_centerline(skeleton: PixelGrid) -> list[Contour]:
    """Walk a skeleton into open strokes and closed loops.

    Points sit at pixel centres, so every point lies on a skeleton pixel and
    hence inside the original foreground.

    Args:
        skeleton: One-pixel-wide binary image

    Returns:
        Contours in row-major order of their starting pixel; open strokes have
        closed=False and no orientation
    """
    width = skeleton.width
    masks = build_neighbour_masks(skeleton)
    contours: list[Contour] = []

    for index in range(len(masks)):
        first_mask = masks[index]
        if not first_mask:
            continue
        y_init, x_init = divmod(index, width)

        cyclic, path = _walk_half(masks, width, x_init, y_init)
        if not cyclic:
            # Drop the direction already walked and go the other way.
            remaining = first_mask & (first_mask - 1)
            masks[index] = remaining
            _, other = _walk_half(masks, width, x_init, y_init)
            path.reverse()
            path.pop()
            path.extend(other)

        points = [Point(px + 0.5, py + 0.5) for px, py in path]
        contours.append(Contour(points=points, closed=cyclic, orientation=None))

    return contours
