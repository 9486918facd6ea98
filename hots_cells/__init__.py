"""
hots_cells: event remapping and super-cell aggregation for event-based vision.

This package provides the stage between a clustering layer and its consumer in a
hierarchy of time surfaces: remappers that change the encoding of the output
events, a grid of (possibly overlapping) cells that subsamples event coordinates,
and per-cell running averages of feature surfaces.
"""

from hots_cells.events import Event, events_to_array, events_from_array
from hots_cells.remappers import (
    RemapperKind,
    EventRemapper,
    IdentityRemapper,
    ArrayRemapper,
    SerializingRemapper,
    make_remapper
)
from hots_cells.cell_grid import CellGrid
from hots_cells.cell_average import CellAverageGrid
from hots_cells.layer import CellLayer
from hots_cells.run import process
from hots_cells.config import Config

__all__ = [
    'Event',
    'events_to_array',
    'events_from_array',
    'RemapperKind',
    'EventRemapper',
    'IdentityRemapper',
    'ArrayRemapper',
    'SerializingRemapper',
    'make_remapper',
    'CellGrid',
    'CellAverageGrid',
    'CellLayer',
    'process',
    'Config'
]

__version__ = '0.1.0'
