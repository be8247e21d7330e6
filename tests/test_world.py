import numpy as np
import pytest
from tilt_fluid.engine import SegmentGeometry
from tilt_fluid.errors import EngineError
from tilt_fluid.core.invariants import linear_momentum
from tilt_fluid.types import Circle, RigidBody2D
from tilt_fluid.world import World


def _particle(world, x, y):
    return world.create_body("circle", 0.1, 0.7, 0.1, 0.001, 0.0, position=(x, y))


def _box(world, half=5.0, t=1.0):
    e = 0.5 * t
    for start, end in [
        ((-half - e, half), (half + e, half)),
        ((-half - e, -half), (half + e, -half)),
        ((-half, -half - e), (-half, half + e)),
        ((half, -half - e), (half, half + e)),
    ]:
        world.create_static_segment(SegmentGeometry(start, end, thickness=t))


def test_freefall_without_contacts():
    """
    Semi-implicit Euler with gravity g over n steps of dt:
      v_n = n g dt
      y_n = y0 + g dt^2 n (n + 1) / 2
    """
    world = World(gravity=(0.0, -10.0))
    h = _particle(world, 0.0, 0.0)
    n, dt_ms = 10, 10.0
    for _ in range(n):
        world.step(dt_ms, 6, 4, 4)
    dt = dt_ms / 1000.0
    assert np.isclose(world.velocity(h)[1], -10.0 * n * dt)
    assert np.isclose(world.position(h)[1], -10.0 * dt * dt * n * (n + 1) / 2)
    assert np.isclose(world.time, n * dt)


def test_particles_stay_in_container():
    world = World(gravity=(3.0, -10.0))
    _box(world)
    rng = np.random.default_rng(0)
    handles = [_particle(world, x, y) for x, y in rng.uniform(-3.5, 3.5, size=(40, 2))]
    for _ in range(240):
        world.step(1000.0 / 60.0, 6, 4, 4)
    pos = world.positions(handles)
    inner = 4.5 - 0.1
    print("max |x|, |y|:", np.abs(pos).max(axis=0))
    assert np.all(np.abs(pos) <= inner + 1e-3)
    # Everything ends up piled in the lower-right corner region.
    assert pos[:, 1].mean() < -3.0


def test_forces_act_for_one_step():
    world = World()
    h = _particle(world, 0.0, 0.0)
    m = world.body(h).mass
    world.apply_force(h, (0.0, 0.0), m * 1.0, 0.0)
    world.step(100.0, 1, 1, 1)
    assert np.isclose(world.velocity(h)[0], 0.1)
    world.step(100.0, 1, 1, 1)
    assert np.isclose(world.velocity(h)[0], 0.1)
    assert np.array_equal(world.body(h).force, [0.0, 0.0])


def test_non_positive_dt_only_drops_forces():
    world = World(gravity=(0.0, -10.0))
    h = _particle(world, 1.0, 2.0)
    world.apply_force(h, (1.0, 2.0), 1.0, 1.0)
    world.step(0.0, 1, 1, 1)
    assert np.array_equal(world.position(h), [1.0, 2.0])
    assert np.array_equal(world.velocity(h), [0.0, 0.0])
    assert np.array_equal(world.body(h).force, [0.0, 0.0])


def test_failed_step_restores_state():
    world = World(gravity=(0.0, -10.0))
    good = _particle(world, 0.0, 0.0)
    bad = _particle(world, 3.0, 0.0)
    world.set_velocity(good, 1.0, 0.0)
    world.apply_force(bad, (3.0, 0.0), float("nan"), 0.0)

    with pytest.raises(EngineError):
        world.step(16.0, 6, 4, 4)

    assert np.array_equal(world.position(good), [0.0, 0.0])
    assert np.array_equal(world.velocity(good), [1.0, 0.0])
    assert np.array_equal(world.position(bad), [3.0, 0.0])
    assert np.array_equal(world.body(bad).force, [0.0, 0.0])
    assert world.time == 0.0

    # The world is usable again afterwards.
    world.step(16.0, 6, 4, 4)
    assert world.position(good)[0] > 0.0


def test_overlapping_particles_separate():
    world = World()
    a = _particle(world, 0.0, 0.0)
    b = _particle(world, 0.1, 0.0)
    for _ in range(5):
        world.step(16.0, 6, 4, 4)
    d = np.linalg.norm(world.position(b) - world.position(a))
    assert d >= 0.2 - 1e-3
    # Equal masses: the pair separates symmetrically.
    assert np.isclose(world.position(a)[0] + world.position(b)[0], 0.1)


def test_walls_are_static():
    world = World(gravity=(0.0, -10.0))
    h = world.create_static_segment(SegmentGeometry((-1.0, 0.0), (1.0, 0.0)))
    world.apply_force(h, (0.0, 0.0), 5.0, 5.0)
    world.step(16.0, 6, 4, 4)
    assert world.body(h).is_static
    assert np.array_equal(world.position(h), [0.0, 0.0])


def test_create_body_validation():
    world = World()
    with pytest.raises(ValueError):
        world.create_body("box", 0.1, 0.7, 0.1, 0.001, 0.01)
    with pytest.raises(ValueError):
        world.create_body("circle", 0.0, 0.7, 0.1, 0.001, 0.01)


def test_mass_from_density():
    world = World()
    h = world.create_body("circle", 0.1, 0.7, 0.1, 0.001, 0.01)
    assert np.isclose(world.body(h).mass, 0.001 * np.pi * 0.01)


def test_clear_releases_bodies():
    world = World()
    handles = [_particle(world, float(i), 0.0) for i in range(3)]
    world.add_body(RigidBody2D(Circle(0.2), mass=1.0))
    world.clear()
    assert world.bodies == []
    with pytest.raises(KeyError):
        world.position(handles[0])
    assert world.positions([]).shape == (0, 2)


def test_particle_collisions_conserve_momentum():
    """Without gravity, walls or drag, contacts only exchange momentum: P stays P0."""
    world = World()
    rng = np.random.default_rng(4)
    for x, y in rng.uniform(-0.6, 0.6, size=(12, 2)):
        h = _particle(world, float(x), float(y))
        world.set_velocity(h, *rng.normal(size=2))
    p0 = linear_momentum(world.bodies)
    for _ in range(30):
        world.step(16.0, 6, 4, 4)
    print("momentum", p0, linear_momentum(world.bodies))
    assert np.allclose(linear_momentum(world.bodies), p0, atol=1e-12)


def test_fast_particle_cannot_tunnel_through_a_wall():
    """
    At 2000 units/s a 60 Hz step moves 33 units, far past the right wall.
    The sweep stops it on the inner face x = 5 - 0.5 - 0.1 and bounces it
    with restitution 0.7: vx = 2000 - 1.7 * 2000 = -1400.
    """
    world = World()
    _box(world)
    h = _particle(world, 0.0, 0.0)
    world.set_velocity(h, 2000.0, 0.0)
    world.step(1000.0 / 60.0)
    assert np.allclose(world.position(h), [4.4, 0.0])
    assert np.isclose(world.velocity(h)[0], -1400.0)


def test_fast_particles_stay_in_container_at_any_angle():
    world = World(gravity=(0.0, -10.0))
    _box(world)
    rng = np.random.default_rng(9)
    handles = []
    for x, y in rng.uniform(-3.0, 3.0, size=(20, 2)):
        h = _particle(world, x, y)
        world.set_velocity(h, *rng.uniform(-900.0, 900.0, size=2))
        handles.append(h)
    for _ in range(30):
        world.step(1000.0 / 60.0)
        assert np.all(np.abs(world.positions(handles)) <= 4.5)


def test_step_defaults_match_iteration_config():
    from inspect import signature
    from tilt_fluid.config import IterationConfig

    params = signature(World.step).parameters
    it = IterationConfig()
    assert params["position_iterations"].default == it.position
    assert params["velocity_iterations"].default == it.velocity
    assert params["constraint_iterations"].default == it.constraint
