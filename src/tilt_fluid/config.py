# MIT License (see LICENSE)
"""
Immutable simulation configuration.

A SimulationConfig is built once at session start and threaded through
every component; nothing reconfigures a running session. Defaults follow
the tuning of the fluid toy (1000 particles in a 10 x 10 box), expressed in
World units: seconds, world units and a particle mass of density * pi r²
(about 3.1e-5 at the default size).
"""
from __future__ import annotations
from dataclasses import dataclass, field

from .constants import INTERACTION_RADIUS, MAX_JITTER, TOUCH_FORCE, TOUCH_RADIUS


@dataclass(frozen=True)
class IterationConfig:
    """
    Fixed engine solver iteration counts per step.

    Attributes:
        position: Position projection passes.
        velocity: Sequential impulse passes.
        constraint: Wall containment passes.
    """
    position: int = 6
    velocity: int = 4
    constraint: int = 4

    def __post_init__(self) -> None:
        for name in ("position", "velocity", "constraint"):
            if getattr(self, name) < 1:
                raise ValueError(f"iterations.{name} must be >= 1, got {getattr(self, name)}")


@dataclass(frozen=True)
class ParticleConfig:
    """Per-particle constants fixed at creation."""
    radius: float = 0.1
    restitution: float = 0.7
    friction: float = 0.1
    density: float = 0.001
    air_friction: float = 0.01

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise ValueError(f"particle radius must be positive, got {self.radius}")
        if self.density <= 0:
            raise ValueError(f"particle density must be positive, got {self.density}")
        if not 0.0 <= self.air_friction < 1.0:
            raise ValueError(f"air_friction must be in [0, 1), got {self.air_friction}")


@dataclass(frozen=True)
class WallConfig:
    """Container wall surface."""
    thickness: float = 1.0
    restitution: float = 0.7
    friction: float = 0.1

    def __post_init__(self) -> None:
        if self.thickness <= 0:
            raise ValueError(f"wall thickness must be positive, got {self.thickness}")


@dataclass(frozen=True)
class SimulationConfig:
    """
    Everything a session needs, fixed at start().

    Attributes:
        particle_count: Number of particles.
        container_width: Inner box width in world units.
        container_height: Inner box height in world units.
        viscosity: Fraction of velocity removed per tick, in [0, 1).
        surface_tension: Peak pairwise attraction force, on the scale of
                         the particle mass.
        gravity_scale: Multiplier from filtered acceleration (m/s²) to world
                       gravity (units/s²).
        touch_force: Peak touch impulse.
        touch_radius: Reach of a touch around its ray.
        interaction_radius: Surface tension cutoff distance.
        iterations: Engine solver iteration counts.
        particle: Particle material and size.
        wall: Container wall material.
        jitter: Max magnitude of the random per-particle force (0 disables).
        spawn_fraction: Fraction of the box particles are spawned in.
        seed: Seed of the session random number generator.
    """
    particle_count: int = 1000
    container_width: float = 10.0
    container_height: float = 10.0
    viscosity: float = 0.01
    surface_tension: float = 5e-6
    gravity_scale: float = 1.0
    touch_force: float = TOUCH_FORCE
    touch_radius: float = TOUCH_RADIUS
    interaction_radius: float = INTERACTION_RADIUS
    iterations: IterationConfig = field(default_factory=IterationConfig)
    particle: ParticleConfig = field(default_factory=ParticleConfig)
    wall: WallConfig = field(default_factory=WallConfig)
    jitter: float = 0.0
    spawn_fraction: float = 0.8
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.particle_count < 0:
            raise ValueError(f"particle_count must be >= 0, got {self.particle_count}")
        if self.container_width <= 0 or self.container_height <= 0:
            raise ValueError(
                f"container must have positive size, got {self.container_width}x{self.container_height}"
            )
        if not 0.0 <= self.viscosity < 1.0:
            raise ValueError(f"viscosity must be in [0, 1), got {self.viscosity}")
        if self.touch_radius <= 0 or self.interaction_radius <= 0:
            raise ValueError("touch_radius and interaction_radius must be positive")
        if not 0.0 <= self.jitter <= MAX_JITTER:
            raise ValueError(f"jitter must be in [0, {MAX_JITTER}], got {self.jitter}")
        if not 0.0 < self.spawn_fraction <= 1.0:
            raise ValueError(f"spawn_fraction must be in (0, 1], got {self.spawn_fraction}")
