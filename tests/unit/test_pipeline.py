"""Unit tests for the trace pipeline.

Tests for process_contour, TracePipeline.run and TracePipeline.process.
"""

from pathlib import Path

import pytest
from PIL import Image

from retrace.config import (
    DebugPass,
    FitConfig,
    OutputConfig,
    ProcessingConfig,
    RetraceSettings,
    TraceMode,
    TurnPolicy,
)
from retrace.core.pipeline import TracePipeline, process_contour
from retrace.domain import Contour, CurvePath, Orientation, PixelGrid, Point
from retrace.exceptions import (
    BitmapLoadError,
    ConfigError,
    ContourProcessingError,
    EmptyInputWarning,
)

SQUARE = PixelGrid.from_strings(["###", "###", "###"])
RING = PixelGrid.from_strings(["###", "#.#", "###"])


def _save_pbm(path: Path, rows: list[str]) -> Path:
    image = Image.new("1", (len(rows[0]), len(rows)), 1)
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch == "#":
                image.putpixel((x, y), 0)
    image.save(path)
    return path


class TestProcessContour:
    """Tests for the worker entry point."""

    def test_square_contour(self):
        """A traced square fits four straight segments."""
        contour = Contour(
            points=[Point(0, 0), Point(0, 3), Point(3, 3), Point(3, 0)],
            orientation=Orientation.OUTER,
        )
        result = process_contour(contour.to_dict(), FitConfig().model_dump())
        assert "error" not in result
        path = CurvePath.from_dict(result["path"])
        assert len(path.segments) == 4
        assert path.orientation is Orientation.OUTER
        assert result["input_points"] == 4
        assert result["pre_fit"] is None

    def test_pre_fit_points(self):
        """The simplified polygon is returned on request."""
        contour = Contour(points=[Point(0, 0), Point(0, 3), Point(3, 3), Point(3, 0)])
        result = process_contour(contour.to_dict(), FitConfig().model_dump(), keep_pre_fit=True)
        assert [Point.from_dict(p) for p in result["pre_fit"]] == contour.points

    def test_error_is_reported(self):
        """Bad input is returned as an error instead of raised."""
        result = process_contour({"points": "bad"}, FitConfig().model_dump())
        assert "error" in result
        assert "traceback" in result
        assert result["duration_ms"] >= 0.0


class TestTracePipelineRun:
    """Tests for TracePipeline.run()."""

    def test_square(self):
        """A solid square becomes one closed path through its corners."""
        result = TracePipeline().run(SQUARE)
        assert len(result.paths) == 1
        path = result.paths[0]
        assert path.closed
        assert path.orientation is Orientation.OUTER
        assert path.parent is None
        assert [s.p0 for s in path.segments] == [
            Point(0, 0),
            Point(0, 3),
            Point(3, 3),
            Point(3, 0),
        ]
        assert result.stats.contour_count == 1
        assert result.stats.segment_count == 4

    def test_hole_keeps_winding_and_parent(self):
        """Holes keep their orientation and point at the enclosing path."""
        result = TracePipeline().run(RING)
        assert len(result.paths) == 2
        outer, hole = result.paths
        assert outer.orientation is Orientation.OUTER
        assert hole.orientation is Orientation.HOLE
        assert hole.parent == 0
        assert result.hierarchy.has_holes()

    def test_scale_applied(self):
        """Output scale multiplies every coordinate."""
        settings = RetraceSettings(output=OutputConfig(scale=2.0))
        result = TracePipeline(settings).run(SQUARE)
        assert result.scale == 2.0
        assert [s.p0 for s in result.paths[0].segments] == [
            Point(0, 0),
            Point(0, 6),
            Point(6, 6),
            Point(6, 0),
        ]

    def test_overrides(self):
        """Per-call arguments override the settings."""
        grid = PixelGrid.from_strings(["#.", ".#"])
        black = TracePipeline().run(grid, policy=TurnPolicy.BLACK)
        white = TracePipeline().run(grid, policy=TurnPolicy.WHITE)
        assert len(black.paths) == 1
        assert len(white.paths) == 2

    def test_invalid_override(self):
        """Out of range overrides raise ConfigError."""
        with pytest.raises(ConfigError):
            TracePipeline().run(SQUARE, error_pixels=-1.0)

    def test_empty_grid_warns(self):
        """An empty bitmap gives an empty result and a warning."""
        with pytest.warns(EmptyInputWarning):
            result = TracePipeline().run(PixelGrid.empty(4, 4))
        assert result.is_empty()
        assert result.width == 4
        assert result.height == 4

    def test_debug_layers(self):
        """Requested debug passes are collected."""
        settings = RetraceSettings(
            output=OutputConfig(debug_passes={DebugPass.PIXEL, DebugPass.PRE_FIT})
        )
        result = TracePipeline(settings).run(SQUARE)
        assert set(result.debug_layers) == {DebugPass.PIXEL, DebugPass.PRE_FIT}
        assert result.debug_layers[DebugPass.PIXEL][0].points == [
            Point(0, 0),
            Point(0, 3),
            Point(3, 3),
            Point(3, 0),
        ]
        assert len(result.debug_layers[DebugPass.PRE_FIT]) == 1

    def test_no_debug_layers_by_default(self):
        """Debug layers are only collected on request."""
        assert TracePipeline().run(SQUARE).debug_layers == {}

    def test_center_mode(self):
        """Center mode produces unoriented paths."""
        rows = ["................"] + ["." + "#" * 14 + "."] * 5 + ["................"]
        result = TracePipeline().run(PixelGrid.from_strings(rows), mode=TraceMode.CENTER)
        assert result.mode is TraceMode.CENTER
        assert result.paths
        for path in result.paths:
            assert path.orientation is None
            assert path.parent is None

    def test_parallel_matches_serial(self):
        """Worker processes produce the same paths as in-process fitting."""
        grid = PixelGrid.from_strings(["##..##", "##..##", "......", "######"])
        serial = TracePipeline().run(grid)
        settings = RetraceSettings(processing=ProcessingConfig(max_workers=2))
        parallel = TracePipeline(settings).run(grid)
        assert parallel.paths == serial.paths

    def test_deterministic(self):
        """Identical input produces identical paths."""
        grid = PixelGrid.from_strings([".##.", "####", "#..#", ".##."])
        assert TracePipeline().run(grid).paths == TracePipeline().run(grid).paths

    def test_fitting_failure_raises(self, monkeypatch):
        """A failing contour aborts the run."""

        def explode(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("retrace.core.pipeline.fit", explode)
        with pytest.raises(ContourProcessingError, match="boom"):
            TracePipeline().run(SQUARE)


class TestTracePipelineProcess:
    """Tests for TracePipeline.process()."""

    def test_writes_svg(self, tmp_path):
        """A bitmap file is traced into an SVG document."""
        input_path = _save_pbm(tmp_path / "ring.pbm", ["###", "#.#", "###"])
        output_path = tmp_path / "out.svg"
        stats = TracePipeline().process(input_path, output_path)
        assert output_path.exists()
        assert "<svg" in output_path.read_text()
        assert stats.contour_count == 2
        assert stats.hole_count == 1

    def test_default_output_path(self, tmp_path):
        """Without an output path the SVG lands next to the input."""
        input_path = _save_pbm(tmp_path / "logo.pbm", ["##", "##"])
        TracePipeline().process(input_path)
        assert (tmp_path / "logo.svg").exists()

    def test_missing_input(self, tmp_path):
        """A missing bitmap raises BitmapLoadError and writes nothing."""
        output_path = tmp_path / "out.svg"
        with pytest.raises(BitmapLoadError):
            TracePipeline().process(tmp_path / "missing.pbm", output_path)
        assert not output_path.exists()

    def test_debug_layers_written(self, tmp_path):
        """Debug passes add groups to the document."""
        input_path = _save_pbm(tmp_path / "dot.pbm", ["##", "##"])
        output_path = tmp_path / "dot.svg"
        settings = RetraceSettings(
            output=OutputConfig(debug_passes={DebugPass.PIXEL, DebugPass.TANGENT})
        )
        TracePipeline(settings).process(input_path, output_path)
        text = output_path.read_text()
        assert "<circle" in text
        assert text.count("<g") >= 4

    def test_save_writes_run_result(self, tmp_path):
        """save() writes a grid traced in memory without reading any file."""
        pipeline = TracePipeline()
        result = pipeline.run(RING)
        output_path = tmp_path / "ring.svg"
        pipeline.save(result, output_path)
        text = output_path.read_text()
        assert text.count("<path") == 1
        assert text.count("Z") == 2
