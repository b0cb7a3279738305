"""Bitmap and SVG I/O layer for retrace.

This module handles reading netpbm bitmaps with Pillow and writing SVG
documents with svgwrite. It provides a clean abstraction layer between
those libraries and the domain models.

Key responsibilities:
- Load PBM/PGM/PPM bitmaps and threshold them to a PixelGrid
- Render fitted curves and debug layers as SVG
- Derive the default output path

Key classes:
- BitmapReader: Load bitmaps
- SVGWriter: Save SVG documents
"""

from retrace.io.reader import BitmapReader
from retrace.io.writer import SVGWriter

__all__ = [
    "BitmapReader",
    "SVGWriter",
]
