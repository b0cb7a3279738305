"""Unit tests for settings and logging setup."""

import logging

import pytest

from retrace.config import (
    DebugPass,
    FitConfig,
    RetraceSettings,
    TraceMode,
    TurnPolicy,
    get_default_settings,
    load_settings,
)
from retrace.exceptions import ConfigError
from retrace.utils import TraceLogger, TraceStats, configure_logging


class TestSettings:
    """Tests for the pydantic settings models."""

    def test_defaults(self):
        """Defaults match the documented values."""
        settings = get_default_settings()
        assert settings.trace.mode is TraceMode.OUTLINE
        assert settings.trace.turn_policy is TurnPolicy.MAJORITY
        assert settings.fit.error_threshold == 1.0
        assert settings.fit.simplify_threshold == 2.5
        assert settings.fit.corner_threshold == 30.0
        assert settings.fit.optimize_exhaustive is False
        assert settings.fit.length_threshold == 0.75
        assert settings.output.scale == 1.0
        assert settings.output.debug_passes == set()
        assert settings.processing.max_workers == 1

    def test_load_from_mapping(self):
        """Nested mappings with plain strings are accepted."""
        settings = load_settings(
            {
                "trace": {"mode": "center", "turn_policy": "white"},
                "output": {"scale": 3, "debug_passes": ["pixel", "tangent"]},
            }
        )
        assert settings.trace.mode is TraceMode.CENTER
        assert settings.trace.turn_policy is TurnPolicy.WHITE
        assert settings.output.scale == 3.0
        assert settings.output.debug_passes == {DebugPass.PIXEL, DebugPass.TANGENT}

    @pytest.mark.parametrize(
        "data",
        [
            {"fit": {"error_threshold": -0.5}},
            {"fit": {"simplify_threshold": -1}},
            {"output": {"scale": 0}},
            {"output": {"pass_scale": -1}},
            {"trace": {"turn_policy": "sideways"}},
            {"processing": {"max_workers": 0}},
        ],
    )
    def test_invalid_values(self, data):
        """Out of range or unknown values raise ConfigError."""
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(data)

    def test_error_names_field(self):
        """The error message names the offending field."""
        with pytest.raises(ConfigError, match="fit.error_threshold"):
            load_settings({"fit": {"error_threshold": -1}})

    def test_fit_config_serializes(self):
        """FitConfig round-trips through a plain dict for worker processes."""
        config = FitConfig(error_threshold=0.5, optimize_exhaustive=True)
        assert FitConfig(**config.model_dump()) == config

    def test_settings_model(self):
        """RetraceSettings can be built directly."""
        settings = RetraceSettings()
        assert settings.logging.log_level == "WARNING"


class TestLogging:
    """Tests for logging setup and statistics."""

    def test_configure_without_file(self):
        """Only a console handler is installed without a log file."""
        configure_logging()
        handlers = [h for h in logging.getLogger().handlers if getattr(h, "_retrace", False)]
        assert len(handlers) == 1
        assert not isinstance(handlers[0], logging.FileHandler)

    def test_configure_with_file(self, tmp_path):
        """A log file receives structured records."""
        log_file = tmp_path / "trace.log"
        logger = configure_logging(log_file=log_file)
        logger.info("hello", answer=42)
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = log_file.read_text()
        assert "hello" in text
        assert "42" in text
        configure_logging()

    def test_repeat_configuration_replaces_handlers(self):
        """Calling configure_logging twice does not duplicate handlers."""
        configure_logging()
        configure_logging()
        handlers = [h for h in logging.getLogger().handlers if getattr(h, "_retrace", False)]
        assert len(handlers) == 1

    def test_quiet_console(self):
        """Quiet mode only lets errors through to the console."""
        configure_logging(console_level="DEBUG", quiet=True)
        handlers = [h for h in logging.getLogger().handlers if getattr(h, "_retrace", False)]
        assert handlers[0].level == logging.ERROR

    def test_trace_logger_stats(self):
        """TraceLogger accumulates per-contour statistics."""
        trace_logger = TraceLogger(configure_logging())
        trace_logger.log_trace_complete(mode="outline", contour_count=2, duration_ms=1.0)
        trace_logger.log_contour_fitted(index=0, input_points=4, segments=4, duration_ms=2.0)
        trace_logger.log_contour_error(index=1, error=ValueError("bad"))
        stats = trace_logger.stats
        assert stats.contour_count == 2
        assert stats.fitted_count == 1
        assert stats.segment_count == 4
        assert stats.error_count == 1
        assert stats.errors == [(1, "bad")]
        assert stats.avg_contour_time_ms == 2.0

    def test_stats_duration(self):
        """Duration is zero until both timestamps are set."""
        stats = TraceStats()
        assert stats.duration_seconds == 0.0
        stats.start_time = 10.0
        stats.end_time = 12.5
        assert stats.duration_seconds == 2.5
        assert stats.avg_contour_time_ms is None
