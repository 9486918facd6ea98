"""
Running averages of feature surfaces over super cells.

This module implements a grid of accumulators, one per cell of a CellGrid. Each
accumulator keeps the running mean of the feature surfaces (time surfaces) that
were assigned to its cell and the number of contributions. The mean is updated
incrementally, so past contributions are never stored.
"""

import numpy as np
import torch
from typing import Tuple, List, Dict, Union, Optional

from hots_cells.cell_grid import CellGrid


SurfaceType = Union[torch.Tensor, np.ndarray, List]


class CellAverageGrid:
    """
    Per-cell running average of feature surfaces.

    The geometry is delegated to an owned CellGrid; this class only adds the
    accumulator storage. Accumulators start empty and are cleared with reset().
    """

    def __init__(self,
                 width: int,
                 height: int,
                 K: int,
                 overlap: int = 0,
                 device: str = "cpu") -> None:
        """
        Initialize the accumulator grid.

        Args:
            width: Width of the context
            height: Height of the context
            K: Size of the cells
            overlap: Overlap between neighbouring cells
            device: Device to store the running means on ("cpu" or "cuda")
        """
        self.grid = CellGrid(width, height, K, overlap)
        self.device = device

        wcell, hcell = self.grid.get_cell_sizes()
        self.counts = np.zeros((hcell, wcell), dtype=np.int64)
        self.means: List[List[Optional[torch.Tensor]]] = [[None] * wcell for _ in range(hcell)]

    def _to_surface(self, surface: SurfaceType) -> torch.Tensor:
        """Convert a surface to a floating point tensor on the grid device."""
        if not isinstance(surface, torch.Tensor):
            surface = torch.as_tensor(np.asarray(surface))
        if not torch.is_floating_point(surface):
            surface = surface.to(torch.float64)
        return surface.to(self.device)

    def _check_cell(self, cx: int, cy: int) -> None:
        wcell, hcell = self.grid.get_cell_sizes()
        assert 0 <= cx < wcell and 0 <= cy < hcell, \
            f"Cell ({cx}, {cy}) outside grid ({wcell}, {hcell})"

    def average_ts(self, surface: SurfaceType, cx: int, cy: int) -> torch.Tensor:
        """
        Merge a surface into the running average of a cell.

        The first contribution is stored as is; later contributions update the
        mean as mean + (surface - mean) / (count + 1).

        Args:
            surface: New feature surface
            cx: x coordinate of the cell
            cy: y coordinate of the cell

        Returns:
            The averaged surface after the update
        """
        self._check_cell(cx, cy)
        surface = self._to_surface(surface)

        count = int(self.counts[cy, cx])
        if count == 0:
            mean = surface.clone()
        else:
            mean = self.means[cy][cx]
            if mean.shape != surface.shape:
                raise ValueError(f"Surface shape {tuple(surface.shape)} does not match "
                                 f"cell shape {tuple(mean.shape)}")
            mean = mean + (surface - mean) / (count + 1)

        self.means[cy][cx] = mean
        self.counts[cy, cx] = count + 1

        return mean.clone()

    def reset(self) -> None:
        """Clear all accumulators."""
        self.counts[:] = 0
        for row in self.means:
            for cx in range(len(row)):
                row[cx] = None

    def get_count(self, cx: int, cy: int) -> int:
        """
        Get the number of contributions received by a cell.

        Args:
            cx: x coordinate of the cell
            cy: y coordinate of the cell

        Returns:
            Number of contributions since construction or the last reset
        """
        self._check_cell(cx, cy)
        return int(self.counts[cy, cx])

    def get_counts(self) -> np.ndarray:
        """
        Get the contribution counts of all cells.

        Returns:
            Integer array of shape (hcell, wcell)
        """
        return self.counts.copy()

    def get_average(self, cx: int, cy: int) -> Optional[torch.Tensor]:
        """
        Get the current average of a cell.

        Args:
            cx: x coordinate of the cell
            cy: y coordinate of the cell

        Returns:
            Copy of the running mean, or None if the cell is empty
        """
        self._check_cell(cx, cy)
        mean = self.means[cy][cx]
        return None if mean is None else mean.clone()

    def get_averages(self) -> Dict[Tuple[int, int], torch.Tensor]:
        """
        Get the averages of all non-empty cells.

        Returns:
            Dictionary mapping (cx, cy) to a copy of the running mean
        """
        averages = {}
        for cy, row in enumerate(self.means):
            for cx, mean in enumerate(row):
                if mean is not None:
                    averages[(cx, cy)] = mean.clone()
        return averages

    # Geometry, delegated to the owned grid

    def find_cells(self, ex: int, ey: int) -> List[Tuple[int, int]]:
        """Find the cells containing a point, see CellGrid.find_cells."""
        return self.grid.find_cells(ex, ey)

    def is_in_cell(self, cx: int, cy: int, ex: int, ey: int) -> bool:
        """Check whether a point lies in a cell."""
        return self.grid.is_in_cell(cx, cy, ex, ey)

    def get_cell_center(self, cx: int, cy: int) -> Tuple[int, int]:
        """Get the center of a cell in event space."""
        return self.grid.get_cell_center(cx, cy)

    def get_size(self) -> Tuple[int, int]:
        """Get the size of the context as (width, height)."""
        return self.grid.get_size()

    def get_cell_sizes(self) -> Tuple[int, int]:
        """Get the number of cells as (wcell, hcell)."""
        return self.grid.get_cell_sizes()

    def __repr__(self) -> str:
        g = self.grid
        return (f"CellAverageGrid(width={g.width}, height={g.height}, "
                f"K={g.K}, overlap={g.overlap})")
