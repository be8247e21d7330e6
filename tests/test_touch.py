import numpy as np
import pytest
from tilt_fluid.config import SimulationConfig
from tilt_fluid.session import create_session
from tilt_fluid.touch import (
    PerspectiveRayProjector,
    Ray,
    Viewport,
    apply_touch,
    normalize_touch,
    ray_distance_to_point,
    ray_distances,
    touch_impulses,
)


def test_normalize_touch_corners_and_center():
    vp = Viewport(left=0.0, top=0.0, width=200.0, height=100.0)
    assert normalize_touch(100.0, 50.0, vp) == (0.0, 0.0)
    assert normalize_touch(0.0, 0.0, vp) == (-1.0, 1.0)
    assert normalize_touch(200.0, 100.0, vp) == (1.0, -1.0)


def test_normalize_touch_honors_offset():
    vp = Viewport(left=50.0, top=20.0, width=100.0, height=100.0)
    assert normalize_touch(100.0, 70.0, vp) == (0.0, 0.0)


def test_ray_direction_is_normalized():
    ray = Ray((0.0, 0.0, 0.0), (3.0, 4.0, 0.0))
    assert np.allclose(ray.direction, [0.6, 0.8, 0.0])
    with pytest.raises(ValueError):
        Ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))


def test_ray_distance_in_front_and_behind():
    """Points behind the origin measure to the origin itself."""
    ray = Ray((0.0, 1.0, 0.0), (1.0, 0.0, 0.0))
    assert np.isclose(ray_distance_to_point(ray, (5.0, 0.0, 0.0)), 1.0)
    assert np.isclose(ray_distance_to_point(ray, (-3.0, 0.0, 0.0)), np.sqrt(10.0))
    d = ray_distances(ray, np.array([[5.0, 0.0], [-3.0, 0.0]]))
    assert np.allclose(d, [1.0, np.sqrt(10.0)])


def test_touch_impulse_profile():
    """
    Analytic: touch_force = 0.005, touch_radius = 2
      d = 1  ->  0.005 * (1 - 1/2) = 0.0025 along the ray
      d >= 2 ->  0
    """
    ray = Ray((0.0, 1.0, 0.0), (1.0, 0.0, 0.0))
    pos = np.array([[5.0, 0.0], [5.0, 3.0], [5.0, -1.0], [5.0, 1.0]])
    imp = touch_impulses(pos, ray, touch_force=0.005, touch_radius=2.0)
    assert np.allclose(imp[0], [0.0025, 0.0])
    assert np.array_equal(imp[1], [0.0, 0.0])
    assert np.array_equal(imp[2], [0.0, 0.0])
    assert np.allclose(imp[3], [0.005, 0.0])


def test_perspective_projector_center_looks_down_z():
    ray = PerspectiveRayProjector(aspect=2.0)(0.0, 0.0)
    assert np.allclose(ray.origin, [0.0, 0.0, 15.0])
    assert np.allclose(ray.direction, [0.0, 0.0, -1.0])


def test_perspective_projector_edge_matches_fov():
    """At ndc_y = 1 the ray leaves at half the vertical field of view."""
    ray = PerspectiveRayProjector(fov_deg=90.0)(0.0, 1.0)
    assert np.allclose(ray.direction, [0.0, np.sqrt(0.5), -np.sqrt(0.5)])


def test_apply_touch_pushes_only_nearby_particles():
    state = create_session(SimulationConfig(particle_count=3, seed=1))
    world = state.engine
    for h, p in zip(state.particles, [(3.0, 0.0), (3.0, 4.0), (0.5, 0.0)]):
        world.body(h).position = np.array(p, dtype=np.float64)

    def projector(ndc_x, ndc_y):
        return Ray((0.0, 1.0, 0.0), (1.0, 0.0, 0.0))

    pushed = apply_touch(state, 0.0, 0.0, None, projector)
    assert pushed == 2
    a, b, c = (world.body(h) for h in state.particles)
    assert np.allclose(a.force, [0.0025, 0.0])
    assert np.array_equal(b.force, [0.0, 0.0])
    assert np.allclose(c.force, [0.0025, 0.0])


def test_apply_touch_normalizes_with_viewport():
    seen = []

    def projector(ndc_x, ndc_y):
        seen.append((ndc_x, ndc_y))
        return Ray((0.0, 0.0, 15.0), (0.0, 0.0, -1.0))

    state = create_session(SimulationConfig(particle_count=0))
    apply_touch(state, 0.0, 100.0, Viewport(0.0, 0.0, 100.0, 100.0), projector)
    assert seen == [(-1.0, -1.0)]


def test_viewport_from_dom_rect_ignores_extra_keys():
    rect = {"x": 10, "y": 20, "left": 10, "top": 20, "right": 310, "bottom": 220, "width": 300, "height": 200}
    assert Viewport.from_mapping(rect) == Viewport(10.0, 20.0, 300.0, 200.0)
    assert Viewport.from_mapping({"width": 50, "height": 40}) == Viewport(0.0, 0.0, 50.0, 40.0)


def test_empty_viewport():
    assert Viewport(0.0, 0.0, 100.0, 0.0).is_empty
    assert Viewport(0.0, 0.0, -1.0, 10.0).is_empty
    assert Viewport(0.0, 0.0, float("nan"), 10.0).is_empty
    assert not Viewport(0.0, 0.0, 1.0, 1.0).is_empty
    with pytest.raises(ValueError):
        normalize_touch(0.0, 0.0, Viewport(0.0, 0.0, 100.0, 0.0))


def test_apply_touch_on_empty_viewport_pushes_nothing():
    calls = []

    def projector(ndc_x, ndc_y):
        calls.append((ndc_x, ndc_y))
        return Ray((0.0, 0.0, 15.0), (0.0, 0.0, -1.0))

    state = create_session(SimulationConfig(particle_count=4, seed=2))
    assert apply_touch(state, 5.0, 5.0, Viewport(0.0, 0.0, 100.0, 0.0), projector) == 0
    assert calls == []
    assert all(np.array_equal(state.engine.body(h).force, [0.0, 0.0]) for h in state.particles)
