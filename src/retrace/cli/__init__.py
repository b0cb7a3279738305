"""Command-line interface for retrace.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Outline and centerline tracing modes
- Verbose/quiet output modes
- Debug layers for inspecting intermediate polygons
- Detailed error reporting
"""

from retrace.cli.app import cli

__all__ = ["cli"]
