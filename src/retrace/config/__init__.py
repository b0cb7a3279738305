"""Configuration management for retrace.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- TraceConfig: Trace mode and turn policy
- FitConfig: Simplification, corner and curve fitting thresholds
- OutputConfig: Output scale and debug layers
- ProcessingConfig: Worker process settings
- LoggingConfig: Logging settings
- RetraceSettings: Main application settings
"""

from retrace.config.settings import (
    DebugPass,
    FitConfig,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
    RetraceSettings,
    TraceConfig,
    TraceMode,
    TurnPolicy,
    get_default_settings,
    load_settings,
)

__all__ = [
    "DebugPass",
    "FitConfig",
    "LoggingConfig",
    "OutputConfig",
    "ProcessingConfig",
    "RetraceSettings",
    "TraceConfig",
    "TraceMode",
    "TurnPolicy",
    "get_default_settings",
    "load_settings",
]
