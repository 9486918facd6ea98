"""
Event value type for the cell remapping pipeline.

This module defines the atomic unit flowing through the pipeline: an event with a
timestamp, a 2-D position and a channel (polarity) field. It also provides
conversions between lists of events and (N, 4) numpy arrays.
"""

import numpy as np
import torch
from typing import NamedTuple, List, Sequence, Union


class Event(NamedTuple):
    """A single sensor event: timestamp, coordinates and channel."""

    t: int
    x: int
    y: int
    p: int


Events = List[Event]


def events_to_array(events: Sequence[Event]) -> np.ndarray:
    """
    Convert a sequence of events to an array.

    Args:
        events: Sequence of events

    Returns:
        Integer array of shape (N, 4) with columns t, x, y, p
    """
    if len(events) == 0:
        return np.zeros((0, 4), dtype=np.int64)

    return np.asarray(events, dtype=np.int64).reshape(-1, 4)


def events_from_array(array: Union[np.ndarray, torch.Tensor]) -> Events:
    """
    Convert an array of events to a list of events.

    Args:
        array: Array/tensor of shape (N, 4) with columns t, x, y, p

    Returns:
        List of events
    """
    # Convert to numpy if needed
    if isinstance(array, torch.Tensor):
        array = array.detach().cpu().numpy()
    array = np.asarray(array)

    if array.ndim != 2 or array.shape[1] != 4:
        raise ValueError(f"Expected an event array of shape (N, 4), got {array.shape}")

    return [Event(*(int(v) for v in row)) for row in array]
