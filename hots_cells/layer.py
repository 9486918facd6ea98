"""
Layer wiring remappers and super cells around external collaborators.

A CellLayer receives raw events, asks an external time surface function for the
feature surface of each event and an external clusterer for its cluster id, and
emits the resulting events through the configured cell grid and remapper. The
time surface and the clustering are not implemented here; they are passed in as
callables.
"""

from typing import Callable, Optional, Union, Any

from hots_cells.events import Event, Events
from hots_cells.remappers import EventRemapper, IdentityRemapper
from hots_cells.cell_grid import CellGrid
from hots_cells.cell_average import CellAverageGrid


class CellLayer:
    """
    Event processor combining a remapper and an optional cell grid.

    Without a cell grid, every valid event produces exactly one output event.
    With a CellGrid, the event is moved to the coordinates of every cell that
    contains it. With a CellAverageGrid, the feature surface is additionally
    averaged over each of those cells before clustering.
    """

    def __init__(self,
                 surface_fn: Callable[[Event], Any],
                 cluster_fn: Callable[[Any], int],
                 remapper: Optional[EventRemapper] = None,
                 cells: Optional[Union[CellGrid, CellAverageGrid]] = None,
                 emit_centers: bool = False,
                 valid_fn: Optional[Callable[[Any], bool]] = None) -> None:
        """
        Initialize the layer.

        Args:
            surface_fn: Computes the feature surface of an event
            cluster_fn: Assigns a cluster id to a feature surface
            remapper: Output encoding (identity if None)
            cells: Optional cell grid or accumulator grid
            emit_centers: Emit cell centers in event space instead of cell coordinates
            valid_fn: Optional check on surfaces; invalid ones produce no output
        """
        self.surface_fn = surface_fn
        self.cluster_fn = cluster_fn
        self.remapper = remapper if remapper is not None else IdentityRemapper()
        self.cells = cells
        self.emit_centers = emit_centers
        self.valid_fn = valid_fn

    def _cell_event(self, event: Event, cx: int, cy: int) -> Event:
        if self.emit_centers:
            x, y = self.cells.get_cell_center(cx, cy)
        else:
            x, y = cx, cy
        return Event(event.t, x, y, event.p)

    def process(self, event: Event, skip_check: bool = False) -> Events:
        """
        Process a single event.

        Args:
            event: The incoming event
            skip_check: If True, consider all surfaces valid

        Returns:
            List of emitted events (possibly empty, or several with overlapping cells)
        """
        surface = self.surface_fn(event)
        if not skip_check and self.valid_fn is not None and not self.valid_fn(surface):
            return []

        if self.cells is None:
            k = int(self.cluster_fn(surface))
            return [self.remapper.remap_event(event, k)]

        averaging = isinstance(self.cells, CellAverageGrid)
        if not averaging:
            k = int(self.cluster_fn(surface))

        emitted = []
        for cx, cy in self.cells.find_cells(event.x, event.y):
            if averaging:
                k = int(self.cluster_fn(self.cells.average_ts(surface, cx, cy)))
            emitted.append(self.remapper.remap_event(self._cell_event(event, cx, cy), k))

        return emitted

    def reset(self) -> None:
        """Reset the per-cell averages and the time surface, if it has state."""
        if isinstance(self.cells, CellAverageGrid):
            self.cells.reset()

        reset_fn = getattr(self.surface_fn, "reset", None)
        if callable(reset_fn):
            reset_fn()
