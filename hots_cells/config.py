"""
Configuration management for hots_cells.

This module provides configuration management for the cell remapping stage,
including default parameters, validation, loading/saving configurations and
building remappers and cell grids from a configuration.
"""

import os
import json
from typing import Dict, Any, Optional, Union

from hots_cells.remappers import EventRemapper, RemapperKind, make_remapper
from hots_cells.cell_grid import CellGrid
from hots_cells.cell_average import CellAverageGrid


class Config:
    """
    Configuration manager for hots_cells.

    This class manages configuration parameters for the remapping stage,
    providing default values, validation, and loading/saving functionality.
    """

    # Default configuration parameters
    DEFAULT_CONFIG = {
        # Spatial context of the incoming events
        "context": {
            "width": 128,                 # Horizontal size of the context
            "height": 128,                # Vertical size of the context
        },

        # Super cell parameters
        "cells": {
            "enabled": False,             # Whether to subsample the output into cells
            "size": 4,                    # Size K of the cells
            "overlap": 0,                 # Overlap between neighbouring cells
            "average": False,             # Whether to average surfaces over cells
            "emit_centers": False,        # Emit cell centers instead of cell coordinates
        },

        # Output encoding
        "remapper": {
            "kind": "identity",           # One of "identity", "array", "serializing"
        },

        # System parameters
        "system": {
            "device": "cpu",              # Device to store surfaces on ("cpu" or "cuda")
            "show_progress": True,        # Whether to show progress bars
        }
    }

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_dict: Optional dictionary with configuration parameters
        """
        # Start with default configuration
        self.config = self._deep_copy_dict(self.DEFAULT_CONFIG)

        # Update with provided configuration if any
        if config_dict is not None:
            self._update_config(config_dict)

        # Validate configuration
        self._validate_config()

    def _deep_copy_dict(self, d: Dict[str, Any]) -> Dict[str, Any]:
        """Create a deep copy of a dictionary."""
        return json.loads(json.dumps(d))

    def _update_config(self, config_dict: Dict[str, Any]) -> None:
        """
        Update configuration with provided dictionary.

        Args:
            config_dict: Dictionary with configuration parameters to update
        """
        for section, params in config_dict.items():
            if section in self.config:
                if isinstance(params, dict):
                    for key, value in params.items():
                        if key in self.config[section]:
                            self.config[section][key] = value
                        else:
                            raise ValueError(f"Unknown parameter '{key}' in section '{section}'")
                else:
                    raise ValueError(f"Section '{section}' should be a dictionary")
            else:
                raise ValueError(f"Unknown section '{section}'")

    def _validate_config(self) -> None:
        """Validate configuration parameters."""
        # Context parameters
        width = self.config["context"]["width"]
        height = self.config["context"]["height"]
        assert isinstance(width, int) and width > 0, "Context width must be a positive integer"
        assert isinstance(height, int) and height > 0, "Context height must be a positive integer"

        # Cell parameters
        cells = self.config["cells"]
        assert isinstance(cells["enabled"], bool), "Cells enabled must be a boolean"
        assert isinstance(cells["size"], int) and cells["size"] > 0, "Cell size must be a positive integer"
        if cells["enabled"]:
            assert cells["size"] <= min(width, height), "Cell size must not exceed the context size"
        assert isinstance(cells["overlap"], int) and cells["overlap"] >= 0, "Cell overlap must be a non-negative integer"
        assert cells["overlap"] < cells["size"], "Cell overlap must be smaller than the cell size"
        assert isinstance(cells["average"], bool), "Cells average must be a boolean"
        assert isinstance(cells["emit_centers"], bool), "Cells emit_centers must be a boolean"

        # Remapper parameters
        kinds = [kind.value for kind in RemapperKind]
        assert self.config["remapper"]["kind"] in kinds, f"Remapper kind must be one of {kinds}"

        # System parameters
        assert self.config["system"]["device"] in ["cpu", "cuda"], "Device must be 'cpu' or 'cuda'"
        assert isinstance(self.config["system"]["show_progress"], bool), "Show progress must be a boolean"

    def get(self, section: str, param: Optional[str] = None) -> Any:
        """
        Get configuration parameter(s).

        Args:
            section: Configuration section
            param: Optional parameter name within section

        Returns:
            Configuration parameter value or section dictionary
        """
        if section not in self.config:
            raise ValueError(f"Unknown section '{section}'")

        if param is None:
            return self.config[section]

        if param not in self.config[section]:
            raise ValueError(f"Unknown parameter '{param}' in section '{section}'")

        return self.config[section][param]

    def set(self, section: str, param: str, value: Any) -> None:
        """
        Set configuration parameter.

        Args:
            section: Configuration section
            param: Parameter name within section
            value: Parameter value
        """
        if section not in self.config:
            raise ValueError(f"Unknown section '{section}'")

        if param not in self.config[section]:
            raise ValueError(f"Unknown parameter '{param}' in section '{section}'")

        self.config[section][param] = value

        # Validate configuration after update
        self._validate_config()

    def save(self, filepath: str) -> None:
        """
        Save configuration to file.

        Args:
            filepath: Path to save configuration file
        """
        with open(filepath, 'w') as f:
            json.dump(self.config, f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'Config':
        """
        Load configuration from file.

        Args:
            filepath: Path to configuration file

        Returns:
            Config object with loaded configuration
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Configuration file '{filepath}' not found")

        with open(filepath, 'r') as f:
            config_dict = json.load(f)

        return cls(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary with configuration parameters
        """
        return self._deep_copy_dict(self.config)

    def __str__(self) -> str:
        """String representation of configuration."""
        return json.dumps(self.config, indent=2)


def make_remapper_from_config(config: Config) -> EventRemapper:
    """
    Build the remapper described by a configuration.

    The serializing remapper uses the context size, or the cell grid size when
    cells are enabled.
    """
    width = config.get("context", "width")
    height = config.get("context", "height")

    if config.get("cells", "enabled") and not config.get("cells", "emit_centers"):
        width, height = make_cell_grid_from_config(config).get_cell_sizes()

    return make_remapper(config.get("remapper", "kind"), width, height)


def make_cell_grid_from_config(config: Config) -> Optional[Union[CellGrid, CellAverageGrid]]:
    """
    Build the cell grid described by a configuration.

    Returns:
        A CellAverageGrid if averaging is enabled, a CellGrid if only cells are
        enabled, None otherwise
    """
    cells = config.get("cells")
    if not cells["enabled"]:
        return None

    width = config.get("context", "width")
    height = config.get("context", "height")

    if cells["average"]:
        return CellAverageGrid(width, height, cells["size"], cells["overlap"],
                               device=config.get("system", "device"))
    return CellGrid(width, height, cells["size"], cells["overlap"])
