"""Binary pixel grid consumed by the tracer."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt


@dataclass(frozen=True, eq=False)
class PixelGrid:
    """An immutable black/white image.

    Pixel (x, y) covers the unit square [x, x+1] x [y, y+1] with y growing
    downward. Foreground pixels are True. Reads outside the grid return
    background so tracers never have to special-case the border.

    Attributes:
        width: Number of columns
        height: Number of rows
        pixels: Read-only boolean array of shape (height, width)
    """

    width: int
    height: int
    pixels: npt.NDArray[np.bool_] = field(repr=False)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Grid size must be non-negative, got {self.width}x{self.height}")
        pixels = np.array(self.pixels, dtype=bool, copy=True).reshape(self.height, self.width)
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_array(cls, array: npt.ArrayLike) -> "PixelGrid":
        """Create a grid from a 2D array; non-zero entries are foreground."""
        data = np.asarray(array)
        if data.ndim != 2:
            raise ValueError(f"Expected a 2D array, got {data.ndim} dimensions")
        height, width = data.shape
        return cls(width=width, height=height, pixels=data != 0)

    @classmethod
    def from_bits(cls, width: int, height: int, bits: Sequence[bool]) -> "PixelGrid":
        """Create a grid from a flat row-major sequence of bits."""
        if len(bits) != width * height:
            raise ValueError(
                f"Expected {width * height} bits for a {width}x{height} grid, got {len(bits)}"
            )
        return cls(width=width, height=height, pixels=np.asarray(bits, dtype=bool))

    @classmethod
    def from_strings(cls, rows: Iterable[str], foreground: str = "#") -> "PixelGrid":
        """Create a grid from text rows, e.g. ``["#.#", ".#."]``."""
        rows = list(rows)
        if not rows:
            return cls.empty(0, 0)
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("All rows must have the same length")
        return cls.from_array([[ch == foreground for ch in row] for row in rows])

    @classmethod
    def empty(cls, width: int, height: int) -> "PixelGrid":
        """Create an all-background grid."""
        return cls(width=width, height=height, pixels=np.zeros((height, width), dtype=bool))

    def get(self, x: int, y: int) -> bool:
        """Return True if (x, y) is a foreground pixel inside the grid."""
        if 0 <= x < self.width and 0 <= y < self.height:
            return bool(self.pixels[y, x])
        return False

    def foreground_count(self) -> int:
        """Number of foreground pixels."""
        return int(np.count_nonzero(self.pixels))

    def is_empty(self) -> bool:
        """Check whether the grid has no foreground pixels."""
        return self.pixels.size == 0 or not self.pixels.any()

    def to_strings(self, foreground: str = "#", background: str = ".") -> list[str]:
        """Render the grid as text rows."""
        return [
            "".join(foreground if bit else background for bit in row)
            for row in self.pixels
        ]
