"""
Super-cell geometry.

This module implements the partition of a width x height context into a regular
grid of square cells of size K, optionally overlapping. Cells start at multiples
of the stride K - overlap; the last cell on each axis is clipped to the context,
so every point of the context belongs to at least one cell.

Queries on points or cells outside the context are contract violations. They are
checked with assert statements, which disappear when Python runs with -O.
"""

import numpy as np
from typing import Tuple, List


def _cells_along_axis(length: int, K: int, stride: int) -> int:
    """Smallest number of cells starting at multiples of stride that reach length."""
    # Ceiling division on integers
    return -(-(length - K) // stride) + 1


class CellGrid:
    """
    Grid of (possibly overlapping) square cells over a 2-D context.

    The grid is immutable after construction and only answers geometric queries:
    which cells contain a point, whether a point is in a given cell and where a
    cell is centered.
    """

    def __init__(self,
                 width: int,
                 height: int,
                 K: int,
                 overlap: int = 0) -> None:
        """
        Initialize the cell grid.

        Args:
            width: Width of the context
            height: Height of the context
            K: Size of the cells
            overlap: Overlap between neighbouring cells
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Context size must be positive, got ({width}, {height})")
        if K <= 0:
            raise ValueError(f"Cell size K must be positive, got {K}")
        if overlap < 0:
            raise ValueError(f"Overlap must not be negative, got {overlap}")
        if overlap >= K:
            raise ValueError(f"Overlap ({overlap}) must be smaller than the cell size ({K})")
        if K > min(width, height):
            raise ValueError(f"Cell size ({K}) must not exceed the context size ({width}, {height})")

        self.width = int(width)
        self.height = int(height)
        self.K = int(K)
        self.overlap = int(overlap)
        self.stride = self.K - self.overlap

        # Number of cells along each axis
        self.wcell = _cells_along_axis(self.width, self.K, self.stride)
        self.hcell = _cells_along_axis(self.height, self.K, self.stride)

    def _axis_range(self, e: int, ncell: int) -> range:
        """Indices of the cells along one axis whose window contains coordinate e."""
        first = max(0, (e - self.K) // self.stride + 1)
        last = min(e // self.stride, ncell - 1)
        return range(first, last + 1)

    def find_cells(self, ex: int, ey: int) -> List[Tuple[int, int]]:
        """
        Find the cells containing a point.

        More than one cell is returned only if overlap > 0.

        Args:
            ex: x coordinate of the event
            ey: y coordinate of the event

        Returns:
            List of (cx, cy) cell coordinates, by ascending cy then ascending cx
        """
        assert 0 <= ex < self.width and 0 <= ey < self.height, \
            f"Point ({ex}, {ey}) outside context ({self.width}, {self.height})"

        xs = self._axis_range(ex, self.wcell)
        return [(cx, cy) for cy in self._axis_range(ey, self.hcell) for cx in xs]

    def get_cell_window(self, cx: int, cy: int) -> Tuple[int, int, int, int]:
        """
        Get the clipped window of a cell.

        Args:
            cx: Cell x
            cy: Cell y

        Returns:
            Tuple (x0, x1, y0, y1) of half-open bounds in event space
        """
        assert 0 <= cx < self.wcell and 0 <= cy < self.hcell, \
            f"Cell ({cx}, {cy}) outside grid ({self.wcell}, {self.hcell})"

        x0 = cx * self.stride
        y0 = cy * self.stride
        return x0, min(x0 + self.K, self.width), y0, min(y0 + self.K, self.height)

    def is_in_cell(self, cx: int, cy: int, ex: int, ey: int) -> bool:
        """
        Check whether a point lies in a cell.

        Args:
            cx: Cell x
            cy: Cell y
            ex: Event x
            ey: Event y

        Returns:
            True if the point is inside the clipped window of the cell
        """
        x0, x1, y0, y1 = self.get_cell_window(cx, cy)
        return x0 <= ex < x1 and y0 <= ey < y1

    def get_cell_center(self, cx: int, cy: int) -> Tuple[int, int]:
        """
        Get the center of a cell in event space.

        Args:
            cx: Cell x
            cy: Cell y

        Returns:
            Integer coordinates of the center of the clipped window
        """
        x0, x1, y0, y1 = self.get_cell_window(cx, cy)
        return (x0 + x1) // 2, (y0 + y1) // 2

    def get_cell_centers(self) -> np.ndarray:
        """
        Get the centers of all cells.

        Returns:
            Integer array of shape (hcell, wcell, 2) with (x, y) centers
        """
        x_starts, x_ends, y_starts, y_ends = self.cell_bounds()
        xx, yy = np.meshgrid((x_starts + x_ends) // 2, (y_starts + y_ends) // 2, indexing='xy')
        return np.stack([xx, yy], axis=-1)

    def cell_bounds(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """
        Get the clipped window bounds along each axis.

        Returns:
            Tuple (x_starts, x_ends, y_starts, y_ends) of integer arrays
        """
        x_starts = np.arange(self.wcell, dtype=np.int64) * self.stride
        y_starts = np.arange(self.hcell, dtype=np.int64) * self.stride
        x_ends = np.minimum(x_starts + self.K, self.width)
        y_ends = np.minimum(y_starts + self.K, self.height)
        return x_starts, x_ends, y_starts, y_ends

    def membership_mask(self, ex: int, ey: int) -> np.ndarray:
        """
        Get the cells containing a point as a mask.

        Args:
            ex: x coordinate of the event
            ey: y coordinate of the event

        Returns:
            Boolean array of shape (hcell, wcell)
        """
        x_starts, x_ends, y_starts, y_ends = self.cell_bounds()
        in_x = (x_starts <= ex) & (ex < x_ends)
        in_y = (y_starts <= ey) & (ey < y_ends)
        return in_y[:, None] & in_x[None, :]

    def get_size(self) -> Tuple[int, int]:
        """
        Get the size of the context.

        Returns:
            Tuple (width, height)
        """
        return self.width, self.height

    def get_cell_sizes(self) -> Tuple[int, int]:
        """
        Get the number of horizontal and vertical cells.

        Returns:
            Tuple (wcell, hcell)
        """
        return self.wcell, self.hcell

    def __repr__(self) -> str:
        return (f"CellGrid(width={self.width}, height={self.height}, "
                f"K={self.K}, overlap={self.overlap})")
