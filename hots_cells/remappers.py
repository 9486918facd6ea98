"""
Event remappers.

A remapper changes the coordinates or the channel of an event emitted by a layer,
using the cluster id assigned to the event, without touching its timestamp. The set
of remappers is closed and enumerated by RemapperKind; make_remapper is the single
construction point used by the configuration and the command line.
"""

import numpy as np
from enum import Enum
from typing import Optional, Tuple, Union

from hots_cells.events import Event


class RemapperKind(Enum):
    """Available output encodings."""

    IDENTITY = "identity"
    ARRAY = "array"
    SERIALIZING = "serializing"


class EventRemapper:
    """
    Base class for remappers.

    Subclasses implement remap_event for single events and may override
    remap_events with a vectorized version for event arrays.
    """

    kind: RemapperKind

    def remap_event(self, event: Event, k: int) -> Event:
        """
        Remap a single event.

        Args:
            event: The event to remap
            k: Cluster id assigned to the event

        Returns:
            The remapped event
        """
        raise NotImplementedError

    def remap_events(self, events: np.ndarray, ks: np.ndarray) -> np.ndarray:
        """
        Remap an array of events.

        Args:
            events: Integer array of shape (N, 4) with columns t, x, y, p
            ks: Cluster ids of shape (N,)

        Returns:
            New array of shape (N, 4) with the remapped events
        """
        events = np.asarray(events, dtype=np.int64).reshape(-1, 4)
        ks = np.asarray(ks, dtype=np.int64).reshape(-1)
        out = np.empty_like(events)
        for i in range(len(events)):
            out[i] = self.remap_event(Event(*(int(v) for v in events[i])), int(ks[i]))
        return out

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class IdentityRemapper(EventRemapper):
    """Leaves events unchanged."""

    kind = RemapperKind.IDENTITY

    def remap_event(self, event: Event, k: int) -> Event:
        return event

    def remap_events(self, events: np.ndarray, ks: np.ndarray) -> np.ndarray:
        return np.array(events, dtype=np.int64).reshape(-1, 4)


class ArrayRemapper(EventRemapper):
    """
    Array output.

    Events are emitted as {t, k, y, 0}, so the horizontal axis of the output
    encodes the cluster id.
    """

    kind = RemapperKind.ARRAY

    def remap_event(self, event: Event, k: int) -> Event:
        return Event(event.t, k, event.y, 0)

    def remap_events(self, events: np.ndarray, ks: np.ndarray) -> np.ndarray:
        events = np.asarray(events, dtype=np.int64).reshape(-1, 4)
        out = np.zeros_like(events)
        out[:, 0] = events[:, 0]
        out[:, 1] = np.asarray(ks, dtype=np.int64).reshape(-1)
        out[:, 2] = events[:, 2]
        return out


class SerializingRemapper(EventRemapper):
    """
    Single dimension output.

    Events are emitted as {t, w*h*k + w*y + x, 0, 0}, where w and h are the
    dimensions of the context. The index is a bijection as long as x < w and
    y < h; ranges are not checked on each call.
    """

    kind = RemapperKind.SERIALIZING

    def __init__(self, width: int, height: int) -> None:
        """
        Initialize the serializing remapper.

        Args:
            width: Horizontal size of the context
            height: Vertical size of the context
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Context size must be positive, got ({width}, {height})")

        self.width = int(width)
        self.height = int(height)

    def remap_event(self, event: Event, k: int) -> Event:
        w, h = self.width, self.height
        return Event(event.t, w * h * k + w * event.y + event.x, 0, 0)

    def remap_events(self, events: np.ndarray, ks: np.ndarray) -> np.ndarray:
        events = np.asarray(events, dtype=np.int64).reshape(-1, 4)
        ks = np.asarray(ks, dtype=np.int64).reshape(-1)
        w, h = self.width, self.height
        out = np.zeros_like(events)
        out[:, 0] = events[:, 0]
        out[:, 1] = w * h * ks + w * events[:, 2] + events[:, 1]
        return out

    def get_size(self) -> Tuple[int, int]:
        """
        Get the size of the context.

        Returns:
            Tuple (width, height)
        """
        return self.width, self.height

    def __repr__(self) -> str:
        return f"SerializingRemapper(width={self.width}, height={self.height})"


def make_remapper(kind: Union[RemapperKind, str],
                  width: Optional[int] = None,
                  height: Optional[int] = None) -> EventRemapper:
    """
    Create a remapper.

    Args:
        kind: Remapper kind, as enum member or its string value
        width: Context width (serializing remapper only)
        height: Context height (serializing remapper only)

    Returns:
        The remapper instance
    """
    kind = RemapperKind(kind)

    if kind is RemapperKind.IDENTITY:
        return IdentityRemapper()
    if kind is RemapperKind.ARRAY:
        return ArrayRemapper()

    if width is None or height is None:
        raise ValueError("Serializing remapper requires width and height")
    return SerializingRemapper(width, height)
