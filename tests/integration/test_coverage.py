"""Integration tests checking traced outlines against the source pixels.

Every pixel centre must be enclosed by an odd number of traced contours
exactly when the pixel is foreground, whatever the turn policy.
"""

import random

import pytest

from retrace.config import TraceMode, TurnPolicy
from retrace.core import ContourTracer, TracePipeline
from retrace.core.geometry import point_in_polygon
from retrace.domain import Orientation, PixelGrid, Point


def _random_grid(seed: int, width: int, height: int, density: float) -> PixelGrid:
    rng = random.Random(seed)
    bits = [rng.random() < density for _ in range(width * height)]
    return PixelGrid.from_bits(width, height, bits)


def _rasterize(contours, width: int, height: int) -> list[str]:
    rows = []
    for y in range(height):
        row = []
        for x in range(width):
            centre = Point(x + 0.5, y + 0.5)
            hits = sum(1 for c in contours if point_in_polygon(centre, c.points))
            row.append("#" if hits % 2 else ".")
        rows.append("".join(row))
    return rows


class TestOutlineCoverage:
    """Traced outlines reproduce the bitmap exactly."""

    @pytest.mark.parametrize("policy", list(TurnPolicy))
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_random_grid(self, policy, seed):
        """Even-odd rasterization of the contours gives back the grid."""
        grid = _random_grid(seed, 17, 13, 0.45)
        contours = ContourTracer().trace(grid, TraceMode.OUTLINE, policy)
        assert _rasterize(contours, grid.width, grid.height) == grid.to_strings()

    @pytest.mark.parametrize("policy", list(TurnPolicy))
    def test_total_area(self, policy):
        """Signed areas add up to minus the foreground pixel count."""
        grid = _random_grid(7, 20, 20, 0.5)
        contours = ContourTracer().trace(grid, TraceMode.OUTLINE, policy)
        assert sum(c.signed_area() for c in contours) == -grid.foreground_count()

    @pytest.mark.parametrize("policy", list(TurnPolicy))
    def test_orientation_matches_area(self, policy):
        """Outer contours have negative area, holes positive."""
        grid = _random_grid(11, 15, 15, 0.6)
        for contour in ContourTracer().trace(grid, TraceMode.OUTLINE, policy):
            assert contour.closed
            if contour.orientation is Orientation.OUTER:
                assert contour.signed_area() < 0
            else:
                assert contour.signed_area() > 0

    def test_black_never_more_contours_than_white(self):
        """Joining diagonals can only merge shapes."""
        grid = _random_grid(5, 20, 20, 0.5)
        black = ContourTracer().trace(grid, TraceMode.OUTLINE, TurnPolicy.BLACK)
        white = ContourTracer().trace(grid, TraceMode.OUTLINE, TurnPolicy.WHITE)
        black_outers = sum(1 for c in black if c.is_outer())
        white_outers = sum(1 for c in white if c.is_outer())
        assert black_outers <= white_outers


class TestPipelineOutput:
    """Fitted paths stay faithful to the traced shapes."""

    def test_paths_are_closed_loops(self):
        """Each outline path ends where it starts."""
        grid = _random_grid(3, 24, 24, 0.55)
        result = TracePipeline().run(grid)
        assert len(result.paths) == len(result.hierarchy.nesting_tree)
        for path in result.paths:
            assert path.closed
            assert path.segments
            assert path.segments[-1].p3 == path.segments[0].p0
            for a, b in zip(path.segments, path.segments[1:]):
                assert a.p3 == b.p0

    def test_paths_inside_bitmap(self):
        """On-curve points stay within the bitmap bounds."""
        grid = _random_grid(9, 24, 16, 0.5)
        result = TracePipeline().run(grid)
        for path in result.paths:
            for seg in path.segments:
                for p in (seg.p0, seg.p3):
                    assert 0.0 <= p.x <= grid.width
                    assert 0.0 <= p.y <= grid.height

    def test_centerline_of_ring(self):
        """A thick ring thins to unoriented paths inside the bitmap."""
        grid = PixelGrid.from_strings(
            [
                "..........",
                ".########.",
                ".########.",
                ".##....##.",
                ".##....##.",
                ".##....##.",
                ".########.",
                ".########.",
                "..........",
            ]
        )
        result = TracePipeline().run(grid, mode=TraceMode.CENTER)
        assert result.paths
        for path in result.paths:
            for seg in path.segments:
                for p in (seg.p0, seg.p3):
                    assert 0.0 <= p.x <= grid.width
                    assert 0.0 <= p.y <= grid.height
            assert path.orientation is None
