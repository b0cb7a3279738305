"""CLI application entry point for retrace.

This module provides the main CLI interface using Typer.
"""

import warnings
from pathlib import Path
from typing import Annotated, Any

import typer

from retrace import __version__
from retrace.cli.output import (
    _format_file_size,
    console,
    print_bitmap_info,
    print_cancellation_notice,
    print_empty_notice,
    print_error,
    print_header,
    print_step,
    print_success,
    print_trace_settings,
)
from retrace.config import DebugPass, TraceMode, TurnPolicy, load_settings
from retrace.core import TracePipeline
from retrace.exceptions import (
    BitmapFormatError,
    BitmapLoadError,
    EmptyInputWarning,
    OutputWriteError,
    RetraceError,
)
from retrace.io import BitmapReader, SVGWriter
from retrace.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="retrace",
    help="Trace PBM/PGM/PPM bitmaps into SVG outlines or centerlines.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Retrace[/bold blue] v{__version__}")
        raise typer.Exit()


def _parse_choice(value: str, enum_type: type, option: str) -> Any:
    try:
        return enum_type(value.strip().lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_type)
        print_error(f"Invalid {option}: {value}", details=f"Valid values: {valid}")
        raise typer.Exit(code=1)


def _parse_passes(value: str | None) -> set[DebugPass]:
    """Parse a comma separated list of debug pass names."""
    if not value:
        return set()
    return {
        _parse_choice(name, DebugPass, "debug pass")
        for name in value.split(",")
        if name.strip()
    }


@app.command()
def trace(
    input_bitmap: Annotated[
        Path,
        typer.Argument(
            help="Path to input PBM/PGM/PPM bitmap",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}.svg)",
        ),
    ] = None,
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="Trace mode (outline|center)",
        ),
    ] = "outline",
    turn_policy: Annotated[
        str,
        typer.Option(
            "--turn-policy",
            "-z",
            help="Ambiguous junction handling (black|white|majority|minority)",
        ),
    ] = "majority",
    error_threshold: Annotated[
        float,
        typer.Option(
            "--error-threshold",
            "-e",
            help="Maximum curve fitting error in pixels",
        ),
    ] = 1.0,
    simplify_threshold: Annotated[
        float,
        typer.Option(
            "--simplify-threshold",
            "-t",
            help="Polygon simplification tolerance in pixels",
        ),
    ] = 2.5,
    corner_threshold: Annotated[
        float,
        typer.Option(
            "--corner-threshold",
            "-c",
            help="Turn angle in degrees above which a vertex is a corner",
        ),
    ] = 30.0,
    optimize_exhaustive: Annotated[
        bool,
        typer.Option(
            "--optimize-exhaustive",
            help="Merge adjacent curve segments where the error allows",
        ),
    ] = False,
    scale: Annotated[
        float,
        typer.Option(
            "--scale",
            "-s",
            help="Scale applied to all output coordinates",
        ),
    ] = 1.0,
    passes: Annotated[
        str | None,
        typer.Option(
            "--passes",
            "-p",
            help="Debug layers to draw, comma separated (pixel,pre_fit,tangent)",
        ),
    ] = None,
    pass_scale: Annotated[
        float,
        typer.Option(
            "--pass-scale",
            help="Stroke width multiplier for debug layers",
        ),
    ] = 1.0,
    workers: Annotated[
        int,
        typer.Option(
            "--workers",
            "-j",
            help="Number of worker processes for curve fitting",
            min=1,
        ),
    ] = 1,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Trace a bitmap into an SVG document.

    Outline mode follows pixel boundaries and writes filled shapes with holes.
    Center mode thins the foreground and writes stroked centerlines.

    Example:
        retrace logo.pbm

    This will create logo.svg next to the input bitmap.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not input_bitmap.exists():
        print_error(
            f"Input file not found: {input_bitmap}",
            details=f"The file '{input_bitmap}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_bitmap.is_file():
        print_error(
            f"Input path is not a file: {input_bitmap}",
            details="Please provide a path to a PBM, PGM or PPM bitmap.",
        )
        raise typer.Exit(code=1)

    trace_mode = _parse_choice(mode, TraceMode, "mode")
    policy = _parse_choice(turn_policy, TurnPolicy, "turn policy")
    debug_passes = _parse_passes(passes)

    if not quiet:
        print_header(__version__)

    actual_output_path = output if output is not None else SVGWriter.get_output_path(input_bitmap)

    try:
        settings = load_settings(
            {
                "trace": {"mode": trace_mode, "turn_policy": policy},
                "fit": {
                    "error_threshold": error_threshold,
                    "simplify_threshold": simplify_threshold,
                    "corner_threshold": corner_threshold,
                    "optimize_exhaustive": optimize_exhaustive,
                },
                "output": {
                    "scale": scale,
                    "debug_passes": debug_passes,
                    "pass_scale": pass_scale,
                },
                "processing": {"max_workers": workers},
                "logging": {
                    "log_file": log_file,
                    "log_level": "INFO" if verbose else log_level,
                },
            }
        )

        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )

        if not quiet:
            print_step("Loading bitmap")
        with BitmapReader(input_bitmap) as reader:
            if not quiet:
                print_bitmap_info(
                    bitmap_path=str(input_bitmap),
                    bitmap_format=reader.format,
                    width=reader.width,
                    height=reader.height,
                )
            logger.info(
                "Bitmap loaded",
                input=str(input_bitmap),
                format=reader.format,
                width=reader.width,
                height=reader.height,
            )
            grid = reader.to_grid()

        if not quiet:
            print_step("Tracing")
            print_trace_settings(trace_mode.value, policy.value, workers)

        pipeline = TracePipeline(settings, logger=logger)

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", EmptyInputWarning)
                result = pipeline.run(grid)
                pipeline.save(result, actual_output_path)
            stats = result.stats
        except KeyboardInterrupt:
            if not quiet:
                print_cancellation_notice()
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        if not quiet:
            for warning in caught:
                if issubclass(warning.category, EmptyInputWarning):
                    print_empty_notice(str(warning.message))

            print_success(
                output_path=str(actual_output_path),
                file_size=_format_file_size(actual_output_path),
                total_time_s=stats.duration_seconds,
                contours=stats.contour_count,
                segments=stats.segment_count,
                errors=stats.error_count,
                avg_time_ms=stats.avg_contour_time_ms if verbose else None,
            )

    except (BitmapLoadError, BitmapFormatError) as e:
        print_error(f"Could not load bitmap: {e}")
        raise typer.Exit(code=1)
    except OutputWriteError as e:
        print_error(f"Could not save SVG: {e.reason}")
        raise typer.Exit(code=1)
    except RetraceError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
