"""
Unit tests for configuration management.
"""

import unittest
import tempfile
import sys
import os

# Add parent directory to path to import hots_cells package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hots_cells.config import Config, make_remapper_from_config, make_cell_grid_from_config
from hots_cells.remappers import IdentityRemapper, SerializingRemapper
from hots_cells.cell_grid import CellGrid
from hots_cells.cell_average import CellAverageGrid


class TestConfig(unittest.TestCase):
    """Test cases for configuration management."""

    def test_defaults(self):
        config = Config()
        self.assertEqual(config.get("context", "width"), 128)
        self.assertEqual(config.get("remapper", "kind"), "identity")
        self.assertFalse(config.get("cells", "enabled"))
        self.assertIsInstance(make_remapper_from_config(config), IdentityRemapper)
        self.assertIsNone(make_cell_grid_from_config(config))

    def test_update(self):
        config = Config({"cells": {"enabled": True, "size": 8, "overlap": 4}})
        self.assertEqual(config.get("cells", "size"), 8)
        self.assertEqual(config.get("cells", "overlap"), 4)

        # Unchanged sections keep their defaults
        self.assertEqual(config.get("system", "device"), "cpu")

    def test_unknown_keys(self):
        with self.assertRaises(ValueError):
            Config({"unknown": {}})
        with self.assertRaises(ValueError):
            Config({"cells": {"unknown": 1}})
        with self.assertRaises(ValueError):
            Config({"cells": 4})
        with self.assertRaises(ValueError):
            Config().get("cells", "unknown")

    def test_validation(self):
        with self.assertRaises(AssertionError):
            Config({"cells": {"size": 4, "overlap": 4}})
        with self.assertRaises(AssertionError):
            Config({"context": {"width": 0}})
        with self.assertRaises(AssertionError):
            Config({"remapper": {"kind": "unknown"}})
        with self.assertRaises(AssertionError):
            Config({"context": {"width": 3}, "cells": {"enabled": True, "size": 4}})

        config = Config()
        with self.assertRaises(AssertionError):
            config.set("system", "device", "tpu")

    def test_save_load(self):
        config = Config({"remapper": {"kind": "array"}, "context": {"width": 32, "height": 16}})
        with tempfile.TemporaryDirectory() as tmpdir:
            filepath = os.path.join(tmpdir, "config.json")
            config.save(filepath)
            loaded = Config.load(filepath)
        self.assertEqual(loaded.to_dict(), config.to_dict())

        with self.assertRaises(FileNotFoundError):
            Config.load("does_not_exist.json")

    def test_builders(self):
        config = Config({
            "context": {"width": 10, "height": 10},
            "cells": {"enabled": True, "size": 4, "overlap": 2},
            "remapper": {"kind": "serializing"},
        })
        grid = make_cell_grid_from_config(config)
        self.assertIsInstance(grid, CellGrid)
        self.assertEqual(grid.get_cell_sizes(), (4, 4))

        # Serializing over cell coordinates
        remapper = make_remapper_from_config(config)
        self.assertIsInstance(remapper, SerializingRemapper)
        self.assertEqual(remapper.get_size(), (4, 4))

        # Serializing over cell centers uses the context size
        config.set("cells", "emit_centers", True)
        self.assertEqual(make_remapper_from_config(config).get_size(), (10, 10))

        config.set("cells", "average", True)
        self.assertIsInstance(make_cell_grid_from_config(config), CellAverageGrid)


if __name__ == "__main__":
    unittest.main()
