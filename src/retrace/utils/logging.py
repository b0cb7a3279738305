"""Logging utilities for retrace."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class TraceStats:
    """Statistics from a trace run."""

    contour_count: int = 0
    outer_count: int = 0
    hole_count: int = 0
    open_count: int = 0
    fitted_count: int = 0
    error_count: int = 0
    input_points: int = 0
    segment_count: int = 0
    errors: list[tuple[int, str]] = field(default_factory=list)
    contour_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_contour_time_ms(self) -> float | None:
        """Average fitting time per contour."""
        if not self.contour_timings_ms:
            return None
        return sum(self.contour_timings_ms) / len(self.contour_timings_ms)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Replace handlers from an earlier call in the same process.
    for handler in list(root_logger.handlers):
        if getattr(handler, "_retrace", False):
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        file_handler._retrace = True  # type: ignore[attr-defined]
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler._retrace = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("retrace")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class TraceLogger:
    """Logger for tracking per-contour progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = TraceStats()

    def log_trace_complete(
        self,
        mode: str,
        contour_count: int,
        duration_ms: float,
    ) -> None:
        """Log the end of the tracing pass."""
        self._logger.info(
            "Bitmap traced",
            mode=mode,
            contours=contour_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.contour_count = contour_count

    def log_contour_analysis(
        self,
        total_contours: int,
        outer_count: int,
        hole_count: int,
        open_count: int,
    ) -> None:
        """Log contour classification results."""
        self._logger.debug(
            "Contour analysis",
            total=total_contours,
            outer=outer_count,
            hole=hole_count,
            open=open_count,
        )
        self._stats.outer_count = outer_count
        self._stats.hole_count = hole_count
        self._stats.open_count = open_count

    def log_contour_fitted(
        self,
        index: int,
        input_points: int,
        segments: int,
        duration_ms: float,
    ) -> None:
        """Log successful curve fitting of one contour."""
        self._logger.debug(
            "Contour fitted",
            contour=index,
            points=input_points,
            segments=segments,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.fitted_count += 1
        self._stats.input_points += input_points
        self._stats.segment_count += segments
        self._stats.contour_timings_ms.append(duration_ms)

    def log_contour_error(
        self,
        index: int,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log contour processing error."""
        self._logger.error(
            "Contour processing failed",
            contour=index,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((index, str(error)))

    def log_empty_input(self, width: int, height: int) -> None:
        """Log a bitmap without foreground pixels."""
        self._logger.warning("Bitmap has no foreground pixels", width=width, height=height)

    @property
    def stats(self) -> TraceStats:
        """Get current processing statistics."""
        return self._stats
