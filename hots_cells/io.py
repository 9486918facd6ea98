"""Input/output functions for hots_cells."""

import numpy as np
import torch
from typing import Tuple, Optional, Dict, Union
import os

from hots_cells.cell_average import CellAverageGrid


def load_events(filepath: str) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Load events from a .npy file.

    Args:
        filepath: Path to the .npy file

    Returns:
        Tuple of (events, cluster_ids) where:
            events: Integer array of shape [N, 4] with columns t, x, y, p
            cluster_ids: Integer array of shape [N] if the file has a fifth column, None otherwise
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Event file '{filepath}' not found")

    data = np.load(filepath)

    # Handle different formats
    if data.ndim != 2:
        raise ValueError(f"Unexpected event array dimensions: {data.ndim}")

    if data.shape[1] == 5:  # [t, x, y, p, k]
        return data[:, :4].astype(np.int64), data[:, 4].astype(np.int64)
    elif data.shape[1] == 4:  # [t, x, y, p]
        return data.astype(np.int64), None
    else:
        raise ValueError(f"Unexpected event array shape: {data.shape}")


def save_events(events: Union[np.ndarray, torch.Tensor],
                filepath: str,
                cluster_ids: Optional[Union[np.ndarray, torch.Tensor]] = None) -> None:
    """
    Save events to a .npy file.

    Args:
        events: Array/tensor of shape [N, 4] with columns t, x, y, p
        filepath: Path to save the .npy file
        cluster_ids: Optional cluster ids of shape [N], saved as a fifth column
    """
    # Convert to numpy if needed
    if isinstance(events, torch.Tensor):
        events = events.detach().cpu().numpy()
    events = np.asarray(events, dtype=np.int64).reshape(-1, 4)

    if cluster_ids is not None:
        if isinstance(cluster_ids, torch.Tensor):
            cluster_ids = cluster_ids.detach().cpu().numpy()
        events = np.column_stack((events, np.asarray(cluster_ids, dtype=np.int64)))

    # Create directory if it doesn't exist
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)

    np.save(filepath, events)


def load_surfaces(filepath: str,
                  num_events: Optional[int] = None,
                  device: str = "cpu") -> torch.Tensor:
    """
    Load feature surfaces from a .npy file.

    Args:
        filepath: Path to the .npy file with an array of shape [N, ...]
        num_events: If given, the expected number of surfaces
        device: Device to load the surfaces to

    Returns:
        Tensor of shape [N, ...]
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Surface file '{filepath}' not found")

    surfaces = torch.from_numpy(np.load(filepath)).to(device)

    if num_events is not None and surfaces.shape[0] != num_events:
        raise ValueError(f"Expected {num_events} surfaces, got {surfaces.shape[0]}")

    return surfaces


def save_surfaces(surfaces: Union[np.ndarray, torch.Tensor], filepath: str) -> None:
    """
    Save feature surfaces to a .npy file.

    Args:
        surfaces: Array/tensor of shape [N, ...]
        filepath: Path to save the .npy file
    """
    if isinstance(surfaces, torch.Tensor):
        surfaces = surfaces.detach().cpu().numpy()

    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)

    np.save(filepath, surfaces)


def save_cell_averages(cells: CellAverageGrid, filepath: str) -> None:
    """
    Save the averaged surfaces of an accumulator grid to a .npz file.

    The file holds the per-cell counts, the grid geometry and one array per
    non-empty cell, named "cell_<cx>_<cy>".

    Args:
        cells: The accumulator grid
        filepath: Path to save the .npz file
    """
    grid = cells.grid
    arrays = {
        "counts": cells.get_counts(),
        "geometry": np.array([grid.width, grid.height, grid.K, grid.overlap], dtype=np.int64),
    }
    for (cx, cy), mean in cells.get_averages().items():
        arrays[f"cell_{cx}_{cy}"] = mean.detach().cpu().numpy()

    # Create directory if it doesn't exist
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)

    np.savez(filepath, **arrays)


def load_cell_averages(filepath: str,
                       device: str = "cpu") -> Tuple[np.ndarray, Dict[Tuple[int, int], torch.Tensor]]:
    """
    Load averaged surfaces saved with save_cell_averages.

    Args:
        filepath: Path to the .npz file
        device: Device to load the surfaces to

    Returns:
        Tuple of (counts, averages) where averages maps (cx, cy) to a tensor
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Cell averages file '{filepath}' not found")

    averages = {}
    with np.load(filepath) as data:
        counts = data["counts"]
        for key in data.files:
            if key.startswith("cell_"):
                _, cx, cy = key.split("_")
                averages[(int(cx), int(cy))] = torch.from_numpy(data[key]).to(device)

    return counts, averages
