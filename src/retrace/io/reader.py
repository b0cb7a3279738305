"""Bitmap reader for netpbm images.

This module provides the BitmapReader class for loading PBM, PGM and PPM
files with Pillow and thresholding them into a PixelGrid.
"""

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from retrace.domain import PixelGrid
from retrace.exceptions import BitmapFormatError, BitmapLoadError

# Pillow's plugin id covering the whole netpbm family.
NETPBM_FORMAT = "PPM"

_KIND_BY_MODE = {
    "1": "PBM",
    "L": "PGM",
    "I": "PGM",
    "I;16": "PGM",
    "I;16B": "PGM",
    "RGB": "PPM",
}


class BitmapReader:
    """Loads netpbm bitmaps and converts them to a PixelGrid.

    Dark pixels are foreground: a pixel is foreground when the sum of its
    red, green and blue samples is below half the maximum value, times
    three. Grey and bilevel images are treated as three equal channels.

    Example:
        with BitmapReader(Path("logo.pbm")) as reader:
            grid = reader.to_grid()
    """

    def __init__(self, bitmap_path: Path) -> None:
        """Initialize the bitmap reader.

        Args:
            bitmap_path: Path to the PBM, PGM or PPM file
        """
        self._bitmap_path = Path(bitmap_path)
        self._image: Image.Image | None = None

    def load(self) -> None:
        """Load the bitmap file.

        Raises:
            BitmapLoadError: If the file does not exist or cannot be read
            BitmapFormatError: If the file is not a netpbm image
        """
        if not self._bitmap_path.exists():
            raise BitmapLoadError(str(self._bitmap_path), "file not found")

        try:
            image = Image.open(self._bitmap_path, formats=[NETPBM_FORMAT])
            image.load()
        except UnidentifiedImageError as e:
            raise BitmapFormatError(
                str(self._bitmap_path), "not a PBM, PGM or PPM image"
            ) from e
        except (OSError, ValueError) as e:
            raise BitmapLoadError(str(self._bitmap_path), str(e)) from e

        if image.mode not in _KIND_BY_MODE:
            image.close()
            raise BitmapFormatError(str(self._bitmap_path), f"unsupported pixel mode {image.mode}")

        self._image = image

    def _require_image(self) -> Image.Image:
        if self._image is None:
            raise RuntimeError("Bitmap not loaded. Call load() first.")
        return self._image

    @property
    def format(self) -> str:
        """Return the netpbm kind: 'PBM', 'PGM' or 'PPM'.

        Raises:
            RuntimeError: If the bitmap has not been loaded yet
        """
        return _KIND_BY_MODE[self._require_image().mode]

    @property
    def width(self) -> int:
        """Bitmap width in pixels."""
        return self._require_image().width

    @property
    def height(self) -> int:
        """Bitmap height in pixels."""
        return self._require_image().height

    def to_grid(self) -> PixelGrid:
        """Threshold the bitmap into foreground and background.

        Returns:
            PixelGrid with dark pixels as foreground

        Raises:
            RuntimeError: If the bitmap has not been loaded yet
        """
        image = self._require_image()
        if image.mode.startswith("I"):
            samples = np.asarray(image, dtype=np.int64)
            return PixelGrid.from_array(samples < 65535 // 2)

        rgb = np.asarray(image.convert("RGB"), dtype=np.int32)
        return PixelGrid.from_array(rgb.sum(axis=2) < (255 // 2) * 3)

    def close(self) -> None:
        """Close the bitmap file and free resources."""
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self) -> "BitmapReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
