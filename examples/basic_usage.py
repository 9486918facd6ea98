"""
Basic usage example for hots_cells.

This example remaps a synthetic stream of clustered events through overlapping
super cells, averaging a toy feature surface over each cell, and plots the
resulting cell grid and per-cell counts.
"""

import numpy as np
import torch
import matplotlib.pyplot as plt
import os
import sys

# Add parent directory to path to import hots_cells package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hots_cells import Event, CellAverageGrid, CellLayer, SerializingRemapper, process
from hots_cells.utils import plot_cells, plot_events, plot_cell_counts, plot_surface, save_figure


class DecayingSurface:
    """Toy time surface: exponentially decaying activity in a 5x5 patch."""

    def __init__(self, width, height, tau=50.0):
        self.tau = tau
        self.last = torch.full((height + 4, width + 4), -np.inf, dtype=torch.float64)

    def __call__(self, event):
        self.last[event.y + 2, event.x + 2] = event.t
        patch = self.last[event.y:event.y + 5, event.x:event.x + 5]
        return torch.exp((patch - event.t) / self.tau)

    def reset(self):
        self.last.fill_(-np.inf)


def main():
    """Run the basic usage example."""
    print("hots_cells Basic Usage Example")
    os.makedirs("examples/output", exist_ok=True)

    width, height = 32, 32
    rng = np.random.default_rng(0)

    # Events moving along a diagonal
    events = [
        Event(t, int(np.clip(t // 4 + rng.integers(-2, 3), 0, width - 1)),
              int(np.clip(t // 4 + rng.integers(-2, 3), 0, height - 1)), int(rng.integers(0, 2)))
        for t in range(128)
    ]

    cells = CellAverageGrid(width, height, K=8, overlap=4)
    wcell, hcell = cells.get_cell_sizes()
    print(f"Cells: {wcell} x {hcell}")

    layer = CellLayer(
        surface_fn=DecayingSurface(width, height),
        cluster_fn=lambda surface: int(surface.sum().item() > 2.0),
        remapper=SerializingRemapper(wcell, hcell),
        cells=cells
    )

    output = process(layer, events, show_progress=True)
    print(f"{len(events)} input events, {len(output)} output events")

    fig = plot_cells(cells.grid, title="Cells and events")
    plot_events(np.array(events), ax=fig.axes[0])
    save_figure(fig, "examples/output/cells.png")
    plt.close(fig)

    fig = plot_cell_counts(cells.get_counts())
    save_figure(fig, "examples/output/counts.png")
    plt.close(fig)

    busiest = np.unravel_index(np.argmax(cells.get_counts()), cells.get_counts().shape)
    cy, cx = int(busiest[0]), int(busiest[1])
    fig = plot_surface(cells.get_average(cx, cy), title=f"Average of cell ({cx}, {cy})")
    save_figure(fig, "examples/output/average.png")
    plt.close(fig)

    print("Plots saved to examples/output")


if __name__ == "__main__":
    main()
