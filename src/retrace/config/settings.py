"""Configuration settings for retrace."""

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from retrace.exceptions import ConfigError


class TraceMode(str, Enum):
    """Which boundary the tracer extracts."""

    OUTLINE = "outline"
    CENTER = "center"


class TurnPolicy(str, Enum):
    """How the outline tracer resolves checkerboard junctions."""

    BLACK = "black"
    WHITE = "white"
    MAJORITY = "majority"
    MINORITY = "minority"


class DebugPass(str, Enum):
    """Extra SVG layers for inspecting intermediate results."""

    PIXEL = "pixel"
    PRE_FIT = "pre_fit"
    TANGENT = "tangent"


class TraceConfig(BaseModel):
    """Configuration for contour extraction."""

    mode: TraceMode = Field(
        default=TraceMode.OUTLINE,
        description="Trace the region outline or the stroke centerline",
    )
    turn_policy: TurnPolicy = Field(
        default=TurnPolicy.MAJORITY,
        description="Turn policy at ambiguous diagonal junctions",
    )


class FitConfig(BaseModel):
    """Configuration for polygon simplification and curve fitting.

    All distances are in pixels of the input bitmap.
    """

    error_threshold: float = Field(
        default=1.0,
        ge=0.0,
        description="Maximum distance between the fitted curve and the polygon",
    )
    simplify_threshold: float = Field(
        default=2.5,
        ge=0.0,
        description="Tolerance for removing near-collinear polygon vertices",
    )
    corner_threshold: float = Field(
        default=30.0,
        ge=0.0,
        description="Deviation in degrees at which a vertex becomes a hard corner",
    )
    optimize_exhaustive: bool = Field(
        default=False,
        description="Search for adjacent curve segments that can be merged",
    )
    length_threshold: float = Field(
        default=0.75,
        gt=0.0,
        description="Maximum polygon edge length passed to the fitter",
    )


class OutputConfig(BaseModel):
    """Configuration for the SVG document."""

    scale: float = Field(
        default=1.0,
        gt=0.0,
        description="Uniform scale applied to all output coordinates",
    )
    debug_passes: set[DebugPass] = Field(
        default_factory=set,
        description="Debug layers to draw over the traced paths",
    )
    pass_scale: float = Field(
        default=1.0,
        gt=0.0,
        description="Stroke width and marker size multiplier for debug layers",
    )


class ProcessingConfig(BaseModel):
    """Configuration for per-contour processing."""

    max_workers: int = Field(
        default=1,
        ge=1,
        description="Worker processes for curve fitting (1 = in-process)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class RetraceSettings(BaseModel):
    """Main application settings."""

    trace: TraceConfig = Field(default_factory=TraceConfig)
    fit: FitConfig = Field(default_factory=FitConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> RetraceSettings:
    """Get default application settings."""
    return RetraceSettings()


def load_settings(data: Mapping[str, Any]) -> RetraceSettings:
    """Build settings from a nested mapping, reporting bad values as ConfigError.

    Args:
        data: Mapping with optional trace, fit, output, processing and
            logging sections

    Returns:
        Validated settings

    Raises:
        ConfigError: If any value is out of range or of the wrong type
    """
    try:
        return RetraceSettings.model_validate(dict(data))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(problems) from e
