"""SVG writer for fitted curves.

This module provides the SVGWriter class, which builds the document with
svgwrite and renders path data with fontTools' SVGPathPen.
"""

from pathlib import Path

import svgwrite
from fontTools.pens.svgPathPen import SVGPathPen

from retrace.config import TraceMode
from retrace.domain import Contour, CurvePath
from retrace.exceptions import OutputWriteError


def _format_number(value: float) -> str:
    """Format a coordinate with at most two decimals."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def curves_to_path_data(paths: list[CurvePath]) -> str:
    """Render curve paths as SVG path data.

    Closed paths end with Z; open paths are left open.

    Args:
        paths: Fitted paths

    Returns:
        The value of a path's d attribute
    """
    pen = SVGPathPen(None, ntos=_format_number)
    for path in paths:
        if not path.segments:
            continue
        pen.moveTo(path.segments[0].p0.to_tuple())
        for seg in path.segments:
            pen.curveTo(seg.p1.to_tuple(), seg.p2.to_tuple(), seg.p3.to_tuple())
        if path.closed:
            pen.closePath()
        else:
            pen.endPath()
    return pen.getCommands()


def polylines_to_path_data(contours: list[Contour]) -> str:
    """Render polylines as SVG path data."""
    pen = SVGPathPen(None, ntos=_format_number)
    for contour in contours:
        if not contour.points:
            continue
        pen.moveTo(contour.points[0].to_tuple())
        for point in contour.points[1:]:
            pen.lineTo(point.to_tuple())
        if contour.closed:
            pen.closePath()
        else:
            pen.endPath()
    return pen.getCommands()


class SVGWriter:
    """Writes traced curves as an SVG document.

    Outline results are drawn as one filled path so the opposite winding of
    holes cuts them out under the nonzero fill rule. Centerline results are
    drawn as stroked paths without fill.

    Example:
        writer = SVGWriter(Path("logo.svg"), width=64, height=64)
        writer.add_result(TraceMode.OUTLINE, paths)
        writer.save()
    """

    def __init__(self, output_path: Path, width: int, height: int, scale: float = 1.0) -> None:
        """Initialize the SVG writer.

        Args:
            output_path: Path where the document will be saved
            width: Bitmap width in pixels
            height: Bitmap height in pixels
            scale: Output scale already applied to the geometry
        """
        self._output_path = Path(output_path)
        doc_width = _format_number(width * scale)
        doc_height = _format_number(height * scale)
        self._drawing = svgwrite.Drawing(
            filename=str(self._output_path),
            size=(doc_width, doc_height),
            viewBox=f"0 0 {doc_width} {doc_height}",
            profile="full",
            debug=False,
        )

    @property
    def drawing(self) -> svgwrite.Drawing:
        """The underlying svgwrite document."""
        return self._drawing

    def add_result(self, mode: TraceMode, paths: list[CurvePath]) -> None:
        """Add the fitted paths in the style matching the trace mode."""
        if mode is TraceMode.CENTER:
            self.add_centerline_paths(paths)
        else:
            self.add_filled_paths(paths)

    def add_filled_paths(self, paths: list[CurvePath]) -> None:
        """Add closed outlines as a single filled path."""
        group = self._drawing.g(fill="black", stroke="none", fill_rule="nonzero")
        data = curves_to_path_data(paths)
        if data:
            group.add(self._drawing.path(d=data))
        self._drawing.add(group)

    def add_centerline_paths(self, paths: list[CurvePath]) -> None:
        """Add centerlines as stroked paths, one element per curve."""
        group = self._drawing.g(fill="none", stroke="black", stroke_width=1)
        for path in paths:
            data = curves_to_path_data([path])
            if data:
                group.add(self._drawing.path(d=data))
        self._drawing.add(group)

    def add_polyline_layer(
        self,
        mode: TraceMode,
        contours: list[Contour],
        pass_scale: float = 1.0,
    ) -> None:
        """Add intermediate polygons as a translucent debug layer."""
        if mode is TraceMode.CENTER:
            group = self._drawing.g(
                fill="none",
                stroke="grey",
                stroke_opacity=0.75,
                stroke_width=_format_number(0.5 * pass_scale),
            )
        else:
            group = self._drawing.g(
                fill="black",
                fill_opacity=0.5,
                stroke="white",
                stroke_opacity=0.5,
                stroke_width=_format_number(0.5 * pass_scale),
            )
        data = polylines_to_path_data(contours)
        if data:
            group.add(self._drawing.path(d=data))
        self._drawing.add(group)

    def add_tangent_layer(self, paths: list[CurvePath], pass_scale: float = 1.0) -> None:
        """Add Bezier handles and control point markers as a debug layer."""
        handles = self._drawing.g(
            stroke="black",
            stroke_opacity=0.5,
            stroke_width=_format_number(2.0 * pass_scale),
        )
        markers = self._drawing.g(
            fill="black",
            fill_opacity=0.5,
            stroke="white",
            stroke_width=_format_number(1.0 * pass_scale),
        )
        radius = _format_number(2.0 * pass_scale)

        for path in paths:
            for seg in path.segments:
                handles.add(self._drawing.line(seg.p0.to_tuple(), seg.p1.to_tuple()))
                handles.add(self._drawing.line(seg.p3.to_tuple(), seg.p2.to_tuple()))
                for point in seg.points():
                    markers.add(self._drawing.circle(point.to_tuple(), r=radius))

        self._drawing.add(handles)
        self._drawing.add(markers)

    def tostring(self) -> str:
        """Serialize the document without writing it."""
        return self._drawing.tostring()

    def save(self) -> None:
        """Save the document to the output path.

        Raises:
            OutputWriteError: If the file cannot be written
        """
        try:
            self._drawing.save(pretty=True)
        except OSError as e:
            raise OutputWriteError(str(self._output_path), str(e)) from e

    @staticmethod
    def get_output_path(input_path: Path) -> Path:
        """Generate the default output path for a bitmap.

        Converts: logo.pbm -> logo.svg
                  scans/page-1.ppm -> scans/page-1.svg

        Args:
            input_path: Original bitmap path

        Returns:
            Path with the .svg extension in the same directory
        """
        return Path(input_path).with_suffix(".svg")
