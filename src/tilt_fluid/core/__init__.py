# MIT License (see LICENSE)
"""
Core physics components.

This subpackage provides:
    - Force generators: gravity and air friction for the world engine;
      viscosity, surface tension and jitter for the fluid step.
    - Integrators: semi-implicit Euler.
    - Invariants: kinetic energy and momentum diagnostics.

Typical usage:
    from tilt_fluid.core import surface_tension_forces

    forces = surface_tension_forces(positions, strength=0.05)
"""
from .forces import (
    apply_gravity,
    apply_air_friction,
    damp_velocities,
    surface_tension_forces,
    jitter_forces,
)
from .integrators import integrate_velocity, integrate_position
from .invariants import kinetic_energy, linear_momentum

__all__ = [
    # Forces
    "apply_gravity",
    "apply_air_friction",
    "damp_velocities",
    "surface_tension_forces",
    "jitter_forces",
    # Integrators
    "integrate_velocity",
    "integrate_position",
    # Invariants
    "kinetic_energy",
    "linear_momentum",
]
