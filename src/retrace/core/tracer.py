"""Contour tracing entry point."""

from retrace.config import TraceMode, TurnPolicy
from retrace.core.centerline import extract_centerline
from retrace.core.outline import extract_outline
from retrace.core.skeleton import thin
from retrace.domain import Contour, PixelGrid


class ContourTracer:
    """Extracts contours from a binary image.

    OUTLINE mode follows the boundary between foreground and background and
    always yields closed contours tagged OUTER or HOLE. CENTER mode thins the
    foreground first and follows the middle of each stroke, yielding open
    strokes as well as closed loops.

    The tracer is stateless and tracing is a total function over any grid:
    an empty or 0x0 grid simply yields no contours.

    Example:
        tracer = ContourTracer()
        contours = tracer.trace(grid, TraceMode.OUTLINE, TurnPolicy.MAJORITY)
    """

    def trace(
        self,
        grid: PixelGrid,
        mode: TraceMode = TraceMode.OUTLINE,
        policy: TurnPolicy = TurnPolicy.MAJORITY,
    ) -> list[Contour]:
        """Trace all contours of a grid.

        Args:
            grid: Binary image
            mode: OUTLINE or CENTER extraction
            policy: Turn policy at checkerboard junctions (OUTLINE only)

        Returns:
            Contours in a deterministic order
        """
        if grid.is_empty():
            return []
        if mode is TraceMode.CENTER:
            return extract_centerline(thin(grid))
        return extract_outline(grid, policy)
