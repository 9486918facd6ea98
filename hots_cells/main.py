"""Main entry point for hots_cells."""

import numpy as np
import torch
from typing import Dict, Any, Optional
import argparse
import sys
import time
from tqdm import tqdm
import matplotlib.pyplot as plt

from .config import Config, make_remapper_from_config, make_cell_grid_from_config
from .cell_average import CellAverageGrid
from .events import Event, events_to_array
from .remappers import RemapperKind
from . import io
from .utils.visualization import plot_cells, plot_events, save_figure


def remap_event_file(
    input_file: str,
    output_file: str,
    config: Optional[Config] = None,
    surfaces_file: Optional[str] = None,
    averages_file: Optional[str] = None,
    emitted_surfaces_file: Optional[str] = None,
    plot_file: Optional[str] = None,
    verbose: bool = False
) -> Dict[str, Any]:
    """
    Remap a file of clustered events.

    Args:
        input_file: Path to input events (.npy, columns t, x, y, p, k)
        output_file: Path to save the remapped events (.npy)
        config: Configuration (defaults if None)
        surfaces_file: Feature surfaces aligned with the events (.npy), needed to average
        averages_file: Path to save the per-cell averages (.npz)
        emitted_surfaces_file: Path to save the averaged surface of each output event (.npy)
        plot_file: Path to save a plot of the cells and the input events
        verbose: Whether to print verbose output

    Returns:
        Dictionary with the remapped events and processing statistics
    """
    start_time = time.time()
    config = config if config is not None else Config()
    device = config.get("system", "device")

    if verbose:
        print(f"Loading events from {input_file}")

    events, cluster_ids = io.load_events(input_file)
    remapper = make_remapper_from_config(config)
    cells = make_cell_grid_from_config(config)

    if verbose:
        print(f"Loaded {events.shape[0]} events")
        print(f"Remapper: {remapper}")
        print(f"Cells: {cells}")

    if cluster_ids is None:
        if remapper.kind is not RemapperKind.IDENTITY:
            raise ValueError(f"Input file '{input_file}' has no cluster ids, required by {remapper}")
        cluster_ids = np.zeros(events.shape[0], dtype=np.int64)

    averaging = isinstance(cells, CellAverageGrid)
    surfaces = None
    output_surfaces = None
    if averaging:
        if surfaces_file is None:
            raise ValueError("Averaging over cells requires a surfaces file")
        surfaces = io.load_surfaces(surfaces_file, num_events=events.shape[0], device=device)

    # Fast path, no cells
    if cells is None:
        output = remapper.remap_events(events, cluster_ids)
    else:
        emit_centers = config.get("cells", "emit_centers")
        emitted = []
        emitted_surfaces = []
        rows = range(events.shape[0])
        iterator = tqdm(rows) if config.get("system", "show_progress") else rows

        for i in iterator:
            event = Event(*(int(v) for v in events[i]))
            k = int(cluster_ids[i])
            for cx, cy in cells.find_cells(event.x, event.y):
                # Cluster ids are precomputed, the averaged surface is kept per output event
                if averaging:
                    emitted_surfaces.append(cells.average_ts(surfaces[i], cx, cy))
                x, y = cells.get_cell_center(cx, cy) if emit_centers else (cx, cy)
                emitted.append(remapper.remap_event(Event(event.t, x, y, event.p), k))

        output = events_to_array(emitted)
        if averaging:
            output_surfaces = torch.stack(emitted_surfaces) if emitted_surfaces else surfaces[:0]

    processing_time = time.time() - start_time

    if verbose:
        print(f"Processing completed in {processing_time:.2f} seconds")
        print(f"Saving {output.shape[0]} events to {output_file}")

    io.save_events(output, output_file)

    if averaging and averages_file is not None:
        io.save_cell_averages(cells, averages_file)
        if verbose:
            print(f"Cell averages saved to {averages_file}")

    if output_surfaces is not None and emitted_surfaces_file is not None:
        io.save_surfaces(output_surfaces, emitted_surfaces_file)
        if verbose:
            print(f"Emitted surfaces saved to {emitted_surfaces_file}")

    if plot_file is not None and cells is not None:
        grid = cells.grid if averaging else cells
        fig = plot_cells(grid, title="Cells and events")
        plot_events(events, ax=fig.axes[0])
        save_figure(fig, plot_file)
        plt.close(fig)
        if verbose:
            print(f"Plot saved to {plot_file}")

    return {
        "events": output,
        "num_input": int(events.shape[0]),
        "num_output": int(output.shape[0]),
        "counts": cells.get_counts() if averaging else None,
        "surfaces": output_surfaces,
        "processing_time": processing_time,
    }


def build_config(args: argparse.Namespace) -> Config:
    """Build a configuration from a file and command line overrides."""
    config = Config.load(args.config) if args.config else Config()

    overrides = [
        ("context", "width", args.width),
        ("context", "height", args.height),
        ("cells", "size", args.cell_size),
        ("cells", "overlap", args.overlap),
        ("remapper", "kind", args.remapper),
    ]
    # Overrides are validated together
    updated = config.to_dict()
    for section, param, value in overrides:
        if value is not None:
            updated[section][param] = value

    if args.cell_size is not None:
        updated["cells"]["enabled"] = True
    if args.average:
        updated["cells"]["enabled"] = True
        updated["cells"]["average"] = True
    if args.centers:
        updated["cells"]["emit_centers"] = True
    if args.cpu:
        updated["system"]["device"] = "cpu"
    if args.quiet:
        updated["system"]["show_progress"] = False

    return Config(updated)


def cli_main(argv: Optional[list] = None) -> Dict[str, Any]:
    """Command-line interface entry point."""
    parser = argparse.ArgumentParser(description="Remap clustered events and subsample them into cells")
    parser.add_argument("input", help="Input events file (.npy, columns t x y p k)")
    parser.add_argument("output", help="Output events file (.npy)")

    # Basic options
    parser.add_argument("--config", "-c", help="Configuration file (.json)")
    parser.add_argument("--width", type=int, help="Width of the context")
    parser.add_argument("--height", type=int, help="Height of the context")
    parser.add_argument("--remapper", "-r", choices=["identity", "array", "serializing"], help="Output encoding")
    parser.add_argument("--cpu", action="store_true", help="Force CPU usage")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Disable progress bars")

    # Cell options
    parser.add_argument("--cell-size", "-k", type=int, help="Size of the cells (enables cells)")
    parser.add_argument("--overlap", "-o", type=int, help="Overlap between cells")
    parser.add_argument("--average", "-a", action="store_true", help="Average surfaces over cells")
    parser.add_argument("--centers", action="store_true", help="Emit cell centers instead of cell coordinates")
    parser.add_argument("--surfaces", help="Feature surfaces aligned with the events (.npy)")
    parser.add_argument("--averages", help="Output file for the cell averages (.npz)")
    parser.add_argument("--emitted-surfaces", help="Output file for the averaged surface of each output event (.npy)")
    parser.add_argument("--plot", help="Output file for a plot of cells and events")

    args = parser.parse_args(argv)

    return remap_event_file(
        args.input,
        args.output,
        config=build_config(args),
        surfaces_file=args.surfaces,
        averages_file=args.averages,
        emitted_surfaces_file=args.emitted_surfaces,
        plot_file=args.plot,
        verbose=args.verbose
    )


def main():
    """Main entry point when run as a module."""
    if len(sys.argv) > 1:
        cli_main()
    else:
        print("No arguments provided.")
        print("For CLI usage, run with --help flag.")


# Allow running as a script
if __name__ == "__main__":
    main()
