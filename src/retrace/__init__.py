"""retrace - Convert binary bitmaps into scalable vector outlines.

retrace is a CLI tool that traces the boundaries of a black/white bitmap (PBM,
PGM or PPM), fits smooth cubic curves through them and writes an SVG document.
Outline mode follows the edges between foreground and background; center mode
follows the middle of thin strokes instead.

Example:
    $ retrace logo.pbm

This will create logo.svg next to the input file.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
