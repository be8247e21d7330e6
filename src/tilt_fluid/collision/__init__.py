# MIT License (see LICENSE)
"""
Collision detection and resolution subsystem.

This subpackage provides:
    - Broadphase: Spatial hashing for efficient pair culling.
    - Narrowphase: Circle-circle and circle-wall contact generation.
    - Contact: Contact data, Sequential Impulse solver and position projection.
    - CCD: Swept test for particles that crossed a wall axis in one step.

Typical usage:
    from tilt_fluid.collision import detect_contact, SpatialHashBroadphase

    broadphase = SpatialHashBroadphase(cell_size=0.5)
    for a, b in broadphase.pairs(bodies):
        contact = detect_contact(a, b)
        if contact:
            # handle collision
"""
from .broadphase import SpatialHashBroadphase, aabb_for_body
from .ccd import segment_crossing
from .contact import (
    Contact,
    circle_circle_contact,
    circle_segment_contact,
    detect_contact,
    prepare_contacts,
    solve_contact_pgs,
    resolve_penetration,
)

__all__ = [
    # Broadphase
    "SpatialHashBroadphase",
    "aabb_for_body",
    # Contact
    "Contact",
    "circle_circle_contact",
    "circle_segment_contact",
    "detect_contact",
    "prepare_contacts",
    "solve_contact_pgs",
    "resolve_penetration",
    # CCD
    "segment_crossing",
]
