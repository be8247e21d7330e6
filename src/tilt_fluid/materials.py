# MIT License (see LICENSE)
"""
Material properties for physics simulation.

Materials define surface interaction properties used during contact
resolution (friction, restitution) plus the bulk properties a body is
created with (density, air friction).
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Material:
    """
    Physical properties of a body, fixed at creation.

    Attributes:
        friction: Coefficient of friction μ (Coulomb friction model).
                  Range [0, 1+], where 0 = frictionless.
        restitution: Coefficient of restitution e (bounciness).
                     Range [0, 1], where 0 = perfectly inelastic,
                     1 = perfectly elastic.
        density: Mass per unit area. Body mass is density * area.
        air_friction: Fraction of velocity removed every engine step.
                      Range [0, 1).

    Note:
        When two bodies collide, effective friction is averaged and
        effective restitution uses the minimum of the two materials.
        See collision/contact.py for the combination rules.
    """
    friction: float = 0.1
    restitution: float = 0.7
    density: float = 0.001
    air_friction: float = 0.01
