"""
Unit tests for event remappers.

This module contains unit tests for the events and remappers of hots_cells.
"""

import unittest
import numpy as np
import torch
import sys
import os

# Add parent directory to path to import hots_cells package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hots_cells.events import Event, events_to_array, events_from_array
from hots_cells.remappers import (
    RemapperKind,
    IdentityRemapper,
    ArrayRemapper,
    SerializingRemapper,
    make_remapper
)


class TestEvents(unittest.TestCase):
    """Test cases for the event value type."""

    def test_event_fields(self):
        ev = Event(10, 1, 2, 1)
        self.assertEqual((ev.t, ev.x, ev.y, ev.p), (10, 1, 2, 1))
        self.assertEqual(ev, Event(10, 1, 2, 1))
        self.assertEqual(hash(ev), hash(Event(10, 1, 2, 1)))

    def test_array_conversion(self):
        events = [Event(1, 2, 3, 0), Event(4, 5, 6, 1)]
        array = events_to_array(events)
        self.assertEqual(array.shape, (2, 4))
        self.assertEqual(array.dtype, np.int64)
        self.assertEqual(events_from_array(array), events)

        # Tensors are accepted too
        self.assertEqual(events_from_array(torch.from_numpy(array)), events)

    def test_empty_conversion(self):
        self.assertEqual(events_to_array([]).shape, (0, 4))
        self.assertEqual(events_from_array(np.zeros((0, 4))), [])

    def test_bad_array_shape(self):
        with self.assertRaises(ValueError):
            events_from_array(np.zeros((3, 3)))


class TestRemappers(unittest.TestCase):
    """Test cases for remappers."""

    def test_identity(self):
        ev = Event(5, 6, 7, 1)
        self.assertEqual(IdentityRemapper().remap_event(ev, 3), ev)

    def test_array_output(self):
        remapped = ArrayRemapper().remap_event(Event(7, 1, 2, 9), 3)
        self.assertEqual(remapped, Event(7, 3, 2, 0))

    def test_serializing_output(self):
        remapper = SerializingRemapper(5, 5)
        remapped = remapper.remap_event(Event(100, 2, 3, 0), 4)
        self.assertEqual(remapped, Event(100, 117, 0, 0))
        self.assertEqual(remapper.get_size(), (5, 5))

    def test_serializing_is_bijective(self):
        width, height, n_clusters = 4, 3, 2
        remapper = SerializingRemapper(width, height)
        seen = set()
        for k in range(n_clusters):
            for y in range(height):
                for x in range(width):
                    seen.add(remapper.remap_event(Event(0, x, y, 0), k).x)
        self.assertEqual(seen, set(range(width * height * n_clusters)))

    def test_serializing_rejects_bad_size(self):
        with self.assertRaises(ValueError):
            SerializingRemapper(0, 5)
        with self.assertRaises(ValueError):
            SerializingRemapper(5, -1)

    def test_input_not_modified(self):
        ev = Event(7, 1, 2, 9)
        ArrayRemapper().remap_event(ev, 3)
        SerializingRemapper(5, 5).remap_event(ev, 3)
        self.assertEqual(ev, Event(7, 1, 2, 9))

        array = events_to_array([ev])
        ArrayRemapper().remap_events(array, np.array([3]))
        self.assertTrue(np.array_equal(array, [[7, 1, 2, 9]]))

    def test_batch_matches_single(self):
        rng = np.random.default_rng(0)
        events = np.column_stack([
            np.arange(50),
            rng.integers(0, 8, 50),
            rng.integers(0, 6, 50),
            rng.integers(0, 2, 50),
        ])
        ks = rng.integers(0, 4, 50)

        for remapper in [IdentityRemapper(), ArrayRemapper(), SerializingRemapper(8, 6)]:
            batch = remapper.remap_events(events, ks)
            single = events_to_array([
                remapper.remap_event(ev, int(k))
                for ev, k in zip(events_from_array(events), ks)
            ])
            self.assertTrue(np.array_equal(batch, single), msg=repr(remapper))

    def test_make_remapper(self):
        self.assertIsInstance(make_remapper("identity"), IdentityRemapper)
        self.assertIsInstance(make_remapper(RemapperKind.ARRAY), ArrayRemapper)

        remapper = make_remapper("serializing", 10, 20)
        self.assertIsInstance(remapper, SerializingRemapper)
        self.assertEqual(remapper.get_size(), (10, 20))
        self.assertIs(remapper.kind, RemapperKind.SERIALIZING)

        with self.assertRaises(ValueError):
            make_remapper("serializing")
        with self.assertRaises(ValueError):
            make_remapper("unknown")


if __name__ == "__main__":
    unittest.main()
