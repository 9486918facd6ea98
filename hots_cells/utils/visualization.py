"""
Visualization tools for hots_cells.

This module provides visualization tools for cell grids, event streams, and the
per-cell counts and averaged surfaces of an accumulator grid.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import torch
from typing import Tuple, Union, Optional

from hots_cells.cell_grid import CellGrid


def plot_cells(grid: CellGrid,
               ax: Optional[plt.Axes] = None,
               title: str = 'Cells',
               show_centers: bool = True,
               show_axes: bool = True,
               figsize: Tuple[int, int] = (8, 6)) -> plt.Figure:
    """
    Plot the clipped windows and centers of the cells of a grid.

    Args:
        grid: The cell grid
        ax: Optional matplotlib axes to plot on
        title: Title for the plot
        show_centers: Whether to mark the cell centers
        show_axes: Whether to show axes
        figsize: Figure size

    Returns:
        Matplotlib figure
    """
    # Create figure and axes if not provided
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    # Plot cell windows, overlapping ones show as darker areas
    x_starts, x_ends, y_starts, y_ends = grid.cell_bounds()
    for y0, y1 in zip(y_starts, y_ends):
        for x0, x1 in zip(x_starts, x_ends):
            ax.add_patch(mpatches.Rectangle(
                (x0 - 0.5, y0 - 0.5), x1 - x0, y1 - y0,
                facecolor='gray',
                edgecolor='black',
                alpha=0.15
            ))

    # Plot cell centers if requested
    if show_centers:
        centers = grid.get_cell_centers().reshape(-1, 2)
        ax.scatter(
            centers[:, 0], centers[:, 1],
            color='red',
            marker='x',
            s=50,
            alpha=0.8
        )

    # Set title and labels
    ax.set_title(title)
    if show_axes:
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_aspect('equal')
    else:
        ax.axis('off')

    # Set limits
    width, height = grid.get_size()
    ax.set_xlim(-0.5, width - 0.5)
    ax.set_ylim(-0.5, height - 0.5)

    return fig


def plot_events(events: Union[np.ndarray, torch.Tensor],
                ax: Optional[plt.Axes] = None,
                title: Optional[str] = None,
                figsize: Tuple[int, int] = (8, 6),
                s: float = 5.0) -> plt.Figure:
    """
    Scatter events in the plane, colored by timestamp.

    Args:
        events: Array/tensor of shape (N, 4) with columns t, x, y, p
        ax: Optional matplotlib axes to plot on
        title: Optional title for the plot
        figsize: Figure size
        s: Point size

    Returns:
        Matplotlib figure
    """
    # Convert to numpy if needed
    if isinstance(events, torch.Tensor):
        events = events.detach().cpu().numpy()
    events = np.asarray(events).reshape(-1, 4)

    # Create figure and axes if not provided
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    ax.scatter(events[:, 1], events[:, 2], c=events[:, 0], cmap='viridis', s=s, alpha=0.8)

    if title is not None:
        ax.set_title(title)

    return fig


def plot_cell_counts(counts: np.ndarray,
                     ax: Optional[plt.Axes] = None,
                     title: str = 'Contributions per cell',
                     cmap: str = 'viridis',
                     show_colorbar: bool = True,
                     figsize: Tuple[int, int] = (8, 6)) -> plt.Figure:
    """
    Plot the number of contributions received by each cell.

    Args:
        counts: Integer array of shape (hcell, wcell)
        ax: Optional matplotlib axes to plot on
        title: Title for the plot
        cmap: Colormap to use
        show_colorbar: Whether to show a colorbar
        figsize: Figure size

    Returns:
        Matplotlib figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    im = ax.imshow(np.asarray(counts), cmap=cmap, origin='lower', interpolation='nearest')

    if show_colorbar:
        plt.colorbar(im, ax=ax)

    ax.set_title(title)
    ax.set_xlabel('Cell X')
    ax.set_ylabel('Cell Y')

    return fig


def plot_surface(surface: Union[np.ndarray, torch.Tensor],
                 ax: Optional[plt.Axes] = None,
                 title: str = 'Surface',
                 cmap: str = 'hot',
                 show_colorbar: bool = True,
                 figsize: Tuple[int, int] = (6, 6)) -> plt.Figure:
    """
    Plot a 2-D feature surface, such as the average of a cell.

    Args:
        surface: Surface as 2D array/tensor
        ax: Optional matplotlib axes to plot on
        title: Title for the plot
        cmap: Colormap to use
        show_colorbar: Whether to show a colorbar
        figsize: Figure size

    Returns:
        Matplotlib figure
    """
    # Convert to numpy if needed
    if isinstance(surface, torch.Tensor):
        surface = surface.detach().cpu().numpy()

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    im = ax.imshow(surface, cmap=cmap, origin='lower', interpolation='nearest')

    if show_colorbar:
        plt.colorbar(im, ax=ax)

    ax.set_title(title)
    ax.axis('off')

    return fig


def save_figure(fig: plt.Figure, filepath: str, dpi: int = 300) -> None:
    """
    Save a figure to file.

    Args:
        fig: Matplotlib figure
        filepath: Path to save the figure
        dpi: Resolution in dots per inch
    """
    fig.savefig(filepath, dpi=dpi, bbox_inches='tight')
