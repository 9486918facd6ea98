"""
Unit tests for per-cell running averages.

This module contains unit tests for the accumulator grid of hots_cells.
"""

import unittest
import numpy as np
import torch
import sys
import os

# Add parent directory to path to import hots_cells package
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hots_cells.cell_grid import CellGrid
from hots_cells.cell_average import CellAverageGrid


class TestCellAverageGrid(unittest.TestCase):
    """Test cases for the accumulator grid."""

    def setUp(self):
        """Set up test fixtures."""
        self.device = "cpu"
        self.cells = CellAverageGrid(10, 10, 4, overlap=2, device=self.device)
        self.surface_shape = (5, 5)

    def test_initialization(self):
        """Test that all accumulators start empty."""
        self.assertIsInstance(self.cells.grid, CellGrid)
        self.assertEqual(self.cells.get_cell_sizes(), (4, 4))
        self.assertEqual(self.cells.get_size(), (10, 10))
        self.assertEqual(self.cells.get_counts().shape, (4, 4))
        self.assertEqual(int(self.cells.get_counts().sum()), 0)
        self.assertEqual(self.cells.get_count(2, 3), 0)
        self.assertIsNone(self.cells.get_average(2, 3))
        self.assertEqual(self.cells.get_averages(), {})

    def test_invalid_construction(self):
        with self.assertRaises(ValueError):
            CellAverageGrid(10, 10, 4, overlap=4)
        with self.assertRaises(ValueError):
            CellAverageGrid(0, 10, 4)

    def test_first_contribution_unchanged(self):
        """Test that the first contribution is returned as is."""
        surface = torch.rand(self.surface_shape, dtype=torch.float64)
        result = self.cells.average_ts(surface, 1, 2)
        self.assertTrue(torch.equal(result, surface))
        self.assertEqual(self.cells.get_count(1, 2), 1)

    def test_incremental_average(self):
        """Test that repeated contributions converge to the batch mean."""
        torch.manual_seed(0)
        surfaces = [torch.rand(self.surface_shape, dtype=torch.float64) * 100 for _ in range(50)]

        for surface in surfaces:
            result = self.cells.average_ts(surface, 0, 0)

        expected = torch.stack(surfaces).sum(dim=0) / len(surfaces)
        self.assertTrue(torch.allclose(result, expected, rtol=1e-9, atol=0))
        self.assertEqual(self.cells.get_count(0, 0), 50)

    def test_running_values(self):
        """Test the post-update mean after each contribution."""
        values = [2.0, 4.0, 9.0]
        expected = [2.0, 3.0, 5.0]
        for value, mean in zip(values, expected):
            result = self.cells.average_ts(torch.full((2,), value, dtype=torch.float64), 3, 3)
            self.assertTrue(torch.allclose(result, torch.full((2,), mean, dtype=torch.float64)))

    def test_cells_are_independent(self):
        """Test that an update only changes the targeted cell."""
        self.cells.average_ts(torch.ones(3), 0, 0)
        self.cells.average_ts(torch.zeros(3), 1, 0)
        self.cells.average_ts(torch.zeros(3), 1, 0)

        self.assertTrue(torch.equal(self.cells.get_average(0, 0), torch.ones(3)))
        self.assertEqual(self.cells.get_count(0, 0), 1)
        self.assertEqual(self.cells.get_count(1, 0), 2)

        counts = self.cells.get_counts()
        self.assertEqual(int(counts.sum()), 3)
        self.assertEqual(set(self.cells.get_averages().keys()), {(0, 0), (1, 0)})

    def test_no_aliasing(self):
        """Test that results and inputs are not shared with the accumulators."""
        surface = torch.ones(4)
        result = self.cells.average_ts(surface, 0, 0)
        surface += 10
        result += 100
        self.assertTrue(torch.equal(self.cells.get_average(0, 0), torch.ones(4)))

        average = self.cells.get_average(0, 0)
        average -= 1
        self.assertTrue(torch.equal(self.cells.get_average(0, 0), torch.ones(4)))

    def test_numpy_and_integer_surfaces(self):
        """Test that numpy and integer surfaces are averaged in floating point."""
        self.cells.average_ts(np.array([1, 2]), 0, 0)
        result = self.cells.average_ts(np.array([2, 3]), 0, 0)
        self.assertTrue(torch.is_floating_point(result))
        self.assertTrue(torch.allclose(result, torch.tensor([1.5, 2.5], dtype=torch.float64)))

    def test_shape_mismatch(self):
        self.cells.average_ts(torch.zeros(3), 0, 0)
        with self.assertRaises(ValueError):
            self.cells.average_ts(torch.zeros(4), 0, 0)

    def test_reset(self):
        """Test that reset clears all accumulators."""
        self.cells.average_ts(torch.ones(2), 0, 0)
        self.cells.average_ts(torch.ones(2), 3, 3)
        self.cells.reset()

        self.assertEqual(int(self.cells.get_counts().sum()), 0)
        self.assertIsNone(self.cells.get_average(0, 0))

        # Averaging restarts from scratch
        surface = torch.full((2,), 7.0)
        self.assertTrue(torch.equal(self.cells.average_ts(surface, 0, 0), surface))

    def test_geometry_delegation(self):
        self.assertEqual(self.cells.find_cells(3, 3), [(0, 0), (1, 0), (0, 1), (1, 1)])
        self.assertEqual(self.cells.get_cell_center(0, 0), (2, 2))
        self.assertTrue(self.cells.is_in_cell(1, 1, 3, 3))

    def test_out_of_range_cell(self):
        """Test that out of range cells fail loudly."""
        if not __debug__:
            self.skipTest("assertions disabled")
        with self.assertRaises(AssertionError):
            self.cells.average_ts(torch.zeros(2), 4, 0)
        with self.assertRaises(AssertionError):
            self.cells.get_count(0, -1)


if __name__ == "__main__":
    unittest.main()
