import numpy as np
from tilt_fluid.config import SimulationConfig, WallConfig
from tilt_fluid.session import container_walls, create_session, release_session, spawn_positions


def test_container_walls_close_the_box():
    config = SimulationConfig(container_width=10.0, container_height=6.0, wall=WallConfig(thickness=1.0))
    top, bottom, left, right = container_walls(config)
    assert top.start == (-5.5, 3.0) and top.end == (5.5, 3.0)
    assert bottom.start == (-5.5, -3.0)
    assert left.start == (-5.0, -3.5) and left.end == (-5.0, 3.5)
    assert right.end == (5.0, 3.5)
    assert all(w.thickness == 1.0 for w in (top, bottom, left, right))


def test_spawn_positions_inside_spawn_area():
    config = SimulationConfig(particle_count=500, spawn_fraction=0.8)
    pos = spawn_positions(np.random.default_rng(0), config)
    assert pos.shape == (500, 2)
    assert np.all(np.abs(pos) <= 4.0)


def test_session_is_reproducible_for_a_seed():
    config = SimulationConfig(particle_count=20, seed=42)
    a = create_session(config)
    b = create_session(config)
    assert np.array_equal(a.engine.positions(a.particles), b.engine.positions(b.particles))
    assert len(a.particles) == 20
    assert len(a.walls) == 4
    assert a.elapsed == 0.0 and a.frame == 0 and not a.running


def test_particle_material_from_config():
    state = create_session(SimulationConfig(particle_count=1))
    body = state.engine.body(state.particles[0])
    assert body.shape.radius == 0.1
    assert body.material.restitution == 0.7
    assert body.material.air_friction == 0.01


def test_release_session_drops_everything():
    state = create_session(SimulationConfig(particle_count=5))
    release_session(state)
    assert state.particles == [] and state.walls == []
    assert state.engine.bodies == []
