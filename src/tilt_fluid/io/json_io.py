# MIT License (see LICENSE)
"""
JSON serialization and deserialization for simulation configuration.

The layout mirrors how the toy groups its tuning knobs. Every key is
optional; missing keys fall back to the SimulationConfig defaults.

JSON Schema Overview:
---------------------
{
  "particles": {
    "count": int,                 # Default: 1000
    "radius": float,              # Default: 0.1
    "restitution": float,         # Default: 0.7
    "friction": float,            # Default: 0.1
    "density": float,             # Default: 0.001
    "airFriction": float          # Default: 0.01
  },
  "physics": {
    "gravityScale": float,        # Default: 1 (m/s² to units/s²)
    "viscosity": float,           # Per-tick damping, default: 0.01
    "surfaceTension": float,      # Default: 5e-6
    "interactionRadius": float,   # Default: 2
    "jitter": float               # Default: 0 (disabled), max 1e-4
  },
  "iterations": {"position": int, "velocity": int, "constraint": int},
  "container": {
    "width": float, "height": float,
    "wallThickness": float, "wallRestitution": float, "wallFriction": float
  },
  "touch": {"force": float, "radius": float},
  "spawnFraction": float,         # Default: 0.8
  "seed": int | null              # Default: null (fresh entropy)
}
"""
from __future__ import annotations
import json
import logging
from typing import Any

from ..config import IterationConfig, ParticleConfig, SimulationConfig, WallConfig

logger = logging.getLogger(__name__)


def config_from_json(data: dict[str, Any]) -> SimulationConfig:
    """
    Build a SimulationConfig from a parsed JSON dictionary.

    Unknown top-level keys are ignored for forward compatibility.

    Raises:
        ValueError: If a value is out of range (raised by the config classes).
    """
    defaults = SimulationConfig()
    p = data.get("particles", {})
    ph = data.get("physics", {})
    it = data.get("iterations", {})
    c = data.get("container", {})
    t = data.get("touch", {})

    pd, wd, itd = defaults.particle, defaults.wall, defaults.iterations
    seed = data.get("seed")

    return SimulationConfig(
        particle_count=int(p.get("count", defaults.particle_count)),
        container_width=float(c.get("width", defaults.container_width)),
        container_height=float(c.get("height", defaults.container_height)),
        viscosity=float(ph.get("viscosity", defaults.viscosity)),
        surface_tension=float(ph.get("surfaceTension", defaults.surface_tension)),
        gravity_scale=float(ph.get("gravityScale", defaults.gravity_scale)),
        touch_force=float(t.get("force", defaults.touch_force)),
        touch_radius=float(t.get("radius", defaults.touch_radius)),
        interaction_radius=float(ph.get("interactionRadius", defaults.interaction_radius)),
        iterations=IterationConfig(
            position=int(it.get("position", itd.position)),
            velocity=int(it.get("velocity", itd.velocity)),
            constraint=int(it.get("constraint", itd.constraint)),
        ),
        particle=ParticleConfig(
            radius=float(p.get("radius", pd.radius)),
            restitution=float(p.get("restitution", pd.restitution)),
            friction=float(p.get("friction", pd.friction)),
            density=float(p.get("density", pd.density)),
            air_friction=float(p.get("airFriction", pd.air_friction)),
        ),
        wall=WallConfig(
            thickness=float(c.get("wallThickness", wd.thickness)),
            restitution=float(c.get("wallRestitution", wd.restitution)),
            friction=float(c.get("wallFriction", wd.friction)),
        ),
        jitter=float(ph.get("jitter", defaults.jitter)),
        spawn_fraction=float(data.get("spawnFraction", defaults.spawn_fraction)),
        seed=None if seed is None else int(seed),
    )


def config_to_json(config: SimulationConfig) -> dict[str, Any]:
    """Serialize a SimulationConfig to a dictionary (round-trip compatible)."""
    return {
        "particles": {
            "count": config.particle_count,
            "radius": config.particle.radius,
            "restitution": config.particle.restitution,
            "friction": config.particle.friction,
            "density": config.particle.density,
            "airFriction": config.particle.air_friction,
        },
        "physics": {
            "gravityScale": config.gravity_scale,
            "viscosity": config.viscosity,
            "surfaceTension": config.surface_tension,
            "interactionRadius": config.interaction_radius,
            "jitter": config.jitter,
        },
        "iterations": {
            "position": config.iterations.position,
            "velocity": config.iterations.velocity,
            "constraint": config.iterations.constraint,
        },
        "container": {
            "width": config.container_width,
            "height": config.container_height,
            "wallThickness": config.wall.thickness,
            "wallRestitution": config.wall.restitution,
            "wallFriction": config.wall.friction,
        },
        "touch": {
            "force": config.touch_force,
            "radius": config.touch_radius,
        },
        "spawnFraction": config.spawn_fraction,
        "seed": config.seed,
    }


def load_config(path: str) -> SimulationConfig:
    """
    Load a SimulationConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file cannot be found.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If a value is out of range.
    """
    logger.info(f"Loading configuration from: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return config_from_json(json.load(f))


def save_config(config: SimulationConfig, path: str, indent: int = 2) -> None:
    """Save a SimulationConfig to a JSON file on disk."""
    logger.info(f"Saving configuration to: {path}")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_to_json(config), f, indent=indent)
