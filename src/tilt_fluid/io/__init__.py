# MIT License (see LICENSE)
"""
Input/Output utilities for the simulation.

This subpackage provides:
    - JSON serialization: Save and load SimulationConfig to/from JSON files.
    - Round-trip support: Serialized configs load back identically.

Typical usage:
    from tilt_fluid.io import load_config, save_config

    config = load_config("fluid.json")
    save_config(config, "fluid_copy.json")
"""
from .json_io import (
    config_from_json,
    config_to_json,
    load_config,
    save_config,
)

__all__ = [
    # Loading
    "load_config",
    "config_from_json",
    # Saving
    "save_config",
    "config_to_json",
]
