"""
Utility functions for hots_cells.

This package provides visualization helpers for cell grids, events and
averaged surfaces.
"""

from hots_cells.utils.visualization import (
    plot_cells,
    plot_events,
    plot_cell_counts,
    plot_surface,
    save_figure
)

__all__ = [
    'plot_cells',
    'plot_events',
    'plot_cell_counts',
    'plot_surface',
    'save_figure'
]
