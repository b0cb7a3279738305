"""Trace pipeline orchestration.

This module coordinates the full workflow from bitmap to SVG, with optional
parallel processing of individual contours using ProcessPoolExecutor.

Key components:
- process_contour: Top-level picklable function fitting curves to one contour
- TracePipeline: Main orchestrator class
- TraceResult: Everything produced by one run
"""

import time
import traceback
import warnings
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from retrace.config import DebugPass, FitConfig, RetraceSettings, TraceMode, TurnPolicy
from retrace.core.analyzer import ContourAnalyzer, ContourHierarchy
from retrace.core.corners import classify_points, corner_indices
from retrace.core.fitting import fit
from retrace.core.geometry import subdivide, subdivide_to_limit
from retrace.core.simplify import simplify
from retrace.core.tracer import ContourTracer
from retrace.domain import Contour, CurvePath, PixelGrid, Point
from retrace.exceptions import ConfigError, ContourProcessingError, EmptyInputWarning
from retrace.io import BitmapReader, SVGWriter
from retrace.utils import TraceLogger, TraceStats, configure_logging


def process_contour(
    contour_dict: dict[str, Any],
    fit_dict: dict[str, Any],
    keep_pre_fit: bool = False,
) -> dict[str, Any]:
    """Simplify, classify and fit one traced contour.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes the contour, runs the polygon pre-pass and the curve fitter,
    and returns the result.

    Args:
        contour_dict: Serialized contour (from Contour.to_dict())
        fit_dict: Serialized fit configuration
        keep_pre_fit: Also return the simplified polygon for debugging

    Returns:
        Dictionary containing either:
        - Success: {"path": path_dict, "pre_fit": points or None,
          "input_points": int, "duration_ms": float}
        - Error: {"error": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        contour = Contour.from_dict(contour_dict)
        config = FitConfig(**fit_dict)
        closed = contour.closed

        # Midpoints guarantee a knot between neighbouring corners.
        points = subdivide(contour.points, closed)
        points = simplify(points, closed, config.simplify_threshold)
        pre_fit = [p.to_dict() for p in points] if keep_pre_fit else None
        points = subdivide(points, closed)
        points = subdivide_to_limit(points, closed, config.length_threshold)

        tags = classify_points(points, closed, config.corner_threshold)
        segments = fit(
            points,
            corner_indices(tags),
            config.error_threshold,
            exhaustive=config.optimize_exhaustive,
            closed=closed,
        )
        path = CurvePath(segments=segments, closed=closed, orientation=contour.orientation)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "path": path.to_dict(),
            "pre_fit": pre_fit,
            "input_points": len(contour.points),
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


def _scale_contour(contour: Contour, factor: float) -> Contour:
    return Contour(
        points=[Point(p.x * factor, p.y * factor) for p in contour.points],
        closed=contour.closed,
        orientation=contour.orientation,
    )


@dataclass
class TraceResult:
    """Output of one pipeline run.

    All coordinates are already multiplied by scale.

    Attributes:
        width: Bitmap width in pixels
        height: Bitmap height in pixels
        mode: Trace mode used
        scale: Output scale applied to every coordinate
        paths: One fitted path per traced contour, in trace order
        debug_layers: Intermediate polygons for the requested debug passes
        hierarchy: Nesting of the traced contours
        stats: Counts and timings of the run
    """

    width: int
    height: int
    mode: TraceMode
    scale: float
    paths: list[CurvePath] = field(default_factory=list)
    debug_layers: dict[DebugPass, list[Contour]] = field(default_factory=dict)
    hierarchy: ContourHierarchy = field(default_factory=ContourHierarchy)
    stats: TraceStats = field(default_factory=TraceStats)

    def is_empty(self) -> bool:
        """Check whether no paths were produced."""
        return not self.paths


class TracePipeline:
    """Orchestrates bitmap tracing and curve fitting.

    Manages the complete workflow:
    1. Trace contours from the pixel grid
    2. Classify contour nesting
    3. Simplify, classify corners and fit curves per contour
    4. Apply the output scale
    5. Optionally write the SVG document

    Example:
        settings = RetraceSettings()
        pipeline = TracePipeline(settings)
        stats = pipeline.process(
            input_path=Path("logo.pbm"),
            output_path=Path("logo.svg"),
        )
    """

    def __init__(
        self,
        config: RetraceSettings | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the pipeline with configuration.

        Args:
            config: Settings for tracing, fitting, output and logging
            logger: Logger to use instead of configuring a new one
        """
        self.config = config or RetraceSettings()
        if logger is None:
            logger = configure_logging(
                log_file=self.config.logging.log_file,
                console_level=self.config.logging.log_level,
                file_level=self.config.logging.file_log_level,
            )
        self.logger = logger
        self.tracer = ContourTracer()
        self.analyzer = ContourAnalyzer()

    def run(
        self,
        grid: PixelGrid,
        mode: TraceMode | None = None,
        policy: TurnPolicy | None = None,
        simplify_pixels: float | None = None,
        angle_threshold: float | None = None,
        error_pixels: float | None = None,
        exhaustive: bool | None = None,
    ) -> TraceResult:
        """Trace a grid and fit curves to every contour.

        Arguments left as None fall back to the pipeline settings.

        Args:
            grid: Binary image
            mode: OUTLINE or CENTER extraction
            policy: Turn policy at checkerboard junctions
            simplify_pixels: Vertex removal tolerance
            angle_threshold: Corner threshold in degrees
            error_pixels: Maximum curve fitting error
            exhaustive: Enable the segment merge search

        Returns:
            TraceResult with one path per contour, in trace order

        Raises:
            ConfigError: If an override is out of range
            ContourProcessingError: If fitting fails for any contour
        """
        mode = mode or self.config.trace.mode
        policy = policy or self.config.trace.turn_policy
        overrides = {
            "simplify_threshold": simplify_pixels,
            "corner_threshold": angle_threshold,
            "error_threshold": error_pixels,
            "optimize_exhaustive": exhaustive,
        }
        fit_values = self.config.fit.model_dump()
        fit_values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            fit_config = FitConfig.model_validate(fit_values)
        except ValidationError as e:
            raise ConfigError(str(e)) from e
        debug_passes = self.config.output.debug_passes
        scale = self.config.output.scale

        trace_logger = TraceLogger(self.logger)
        stats = trace_logger.stats
        stats.start_time = time.time()
        result = TraceResult(
            width=grid.width, height=grid.height, mode=mode, scale=scale, stats=stats
        )

        if grid.is_empty():
            trace_logger.log_empty_input(grid.width, grid.height)
            warnings.warn(
                EmptyInputWarning(
                    f"Bitmap {grid.width}x{grid.height} has no foreground pixels"
                ),
                stacklevel=2,
            )
            stats.end_time = time.time()
            return result

        trace_start = time.time()
        contours = self.tracer.trace(grid, mode, policy)
        trace_logger.log_trace_complete(
            mode=mode.value,
            contour_count=len(contours),
            duration_ms=(time.time() - trace_start) * 1000,
        )

        hierarchy = self.analyzer.analyze(contours)
        trace_logger.log_contour_analysis(
            total_contours=len(contours),
            outer_count=len(hierarchy.outer_contours),
            hole_count=len(hierarchy.hole_contours),
            open_count=len(hierarchy.open_contours),
        )
        result.hierarchy = hierarchy

        if DebugPass.PIXEL in debug_passes:
            result.debug_layers[DebugPass.PIXEL] = [_scale_contour(c, scale) for c in contours]

        keep_pre_fit = DebugPass.PRE_FIT in debug_passes
        outputs = self._process_contours(contours, fit_config, keep_pre_fit, trace_logger)

        pre_fit_layer: list[Contour] = []
        for idx, (contour, output) in enumerate(zip(contours, outputs)):
            path = CurvePath.from_dict(output["path"])
            path.parent = hierarchy.parent_of(idx)
            result.paths.append(path.scaled(scale))
            if output.get("pre_fit") is not None:
                pre_fit = Contour(
                    points=[Point.from_dict(p) for p in output["pre_fit"]],
                    closed=contour.closed,
                    orientation=contour.orientation,
                )
                pre_fit_layer.append(_scale_contour(pre_fit, scale))
        if keep_pre_fit:
            result.debug_layers[DebugPass.PRE_FIT] = pre_fit_layer

        stats.end_time = time.time()
        self.logger.info(
            "Trace complete",
            contours=stats.contour_count,
            segments=stats.segment_count,
            duration_seconds=round(stats.duration_seconds, 3),
        )
        return result

    def _process_contours(
        self,
        contours: list[Contour],
        fit_config: FitConfig,
        keep_pre_fit: bool,
        trace_logger: TraceLogger,
    ) -> list[dict[str, Any]]:
        """Fit every contour, in process or in a worker pool.

        Returns:
            Successful results in contour order

        Raises:
            ContourProcessingError: If any contour failed
        """
        fit_dict = fit_config.model_dump()
        max_workers = self.config.processing.max_workers
        results: list[dict[str, Any]] = [{} for _ in contours]

        if max_workers > 1 and len(contours) > 1:
            self.logger.info(
                "Starting parallel processing",
                contour_count=len(contours),
                max_workers=max_workers,
            )
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                pending = {
                    executor.submit(process_contour, c.to_dict(), fit_dict, keep_pre_fit): idx
                    for idx, c in enumerate(contours)
                }
                for future in as_completed(pending):
                    idx = pending[future]
                    try:
                        results[idx] = future.result()
                    except Exception as e:
                        results[idx] = {
                            "error": str(e),
                            "traceback": traceback.format_exc(),
                            "duration_ms": 0.0,
                        }
        else:
            for idx, contour in enumerate(contours):
                results[idx] = process_contour(contour.to_dict(), fit_dict, keep_pre_fit)

        failures: list[tuple[int, str]] = []
        for idx, output in enumerate(results):
            if "error" in output:
                trace_logger.log_contour_error(
                    index=idx,
                    error=Exception(output["error"]),
                    traceback=output.get("traceback"),
                )
                failures.append((idx, output["error"]))
            else:
                trace_logger.log_contour_fitted(
                    index=idx,
                    input_points=output["input_points"],
                    segments=len(output["path"]["segments"]),
                    duration_ms=output.get("duration_ms", 0.0),
                )

        if failures:
            index, reason = failures[0]
            raise ContourProcessingError(index, reason)

        return results

    def process(self, input_path: Path, output_path: Path | None = None) -> TraceStats:
        """Trace a bitmap file and write the SVG document.

        Nothing is written unless every step succeeds.

        Args:
            input_path: Path to a PBM, PGM or PPM file
            output_path: Path for the SVG (derived from input if None)

        Returns:
            TraceStats with counts and timing

        Raises:
            BitmapLoadError: If the bitmap cannot be read
            ContourProcessingError: If fitting fails for any contour
            OutputWriteError: If the SVG cannot be written
        """
        if output_path is None:
            output_path = SVGWriter.get_output_path(input_path)

        self.logger.info(
            "Starting trace",
            input=str(input_path),
            output=str(output_path),
            mode=self.config.trace.mode.value,
            policy=self.config.trace.turn_policy.value,
        )

        with BitmapReader(input_path) as reader:
            self.logger.info(
                "Bitmap loaded",
                format=reader.format,
                width=reader.width,
                height=reader.height,
            )
            grid = reader.to_grid()

        result = self.run(grid)
        self.save(result, output_path)
        return result.stats

    def save(self, result: TraceResult, output_path: Path) -> None:
        """Write a trace result and its debug layers as an SVG document.

        Args:
            result: Output of run()
            output_path: Path for the SVG

        Raises:
            OutputWriteError: If the SVG cannot be written
        """
        writer = SVGWriter(output_path, result.width, result.height, scale=result.scale)
        writer.add_result(result.mode, result.paths)
        for debug_pass in (DebugPass.PIXEL, DebugPass.PRE_FIT):
            if debug_pass in result.debug_layers:
                writer.add_polyline_layer(
                    result.mode,
                    result.debug_layers[debug_pass],
                    pass_scale=self.config.output.pass_scale,
                )
        if DebugPass.TANGENT in self.config.output.debug_passes:
            writer.add_tangent_layer(result.paths, pass_scale=self.config.output.pass_scale)
        writer.save()

        self.logger.info("SVG saved", output=str(output_path), paths=len(result.paths))
