import logging

import numpy as np
import pytest
from tilt_fluid.config import SimulationConfig
from tilt_fluid.errors import EngineError, LifecycleError
from tilt_fluid.events import MOTION, ORIENTATION, TOUCH, EventHub
from tilt_fluid.loop import DISPOSED, IDLE, PAUSED, RUNNING, ManualScheduler, SimulationLoop
from tilt_fluid.profiler import Profiler
from tilt_fluid.renderer.adapter import BufferedRenderer
from tilt_fluid.world import World


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


class KeepAllScheduler(ManualScheduler):
    """Scheduler whose cancel_frame does nothing, like a host that already queued the frame."""

    def cancel_frame(self, handle):
        pass


class FailingWorld(World):
    def __init__(self, fail_after=0, **kwargs):
        super().__init__(**kwargs)
        self.fail_after = fail_after
        self.steps = 0

    def step(self, dt_ms, position_iterations=6, velocity_iterations=4, constraint_iterations=4):
        if self.steps >= self.fail_after:
            raise EngineError("solver diverged")
        self.steps += 1
        super().step(dt_ms, position_iterations, velocity_iterations, constraint_iterations)


def _loop(scheduler=None, config=None, **kwargs):
    clock = FakeClock()
    loop = SimulationLoop(
        config if config is not None else SimulationConfig(particle_count=8, seed=3),
        scheduler if scheduler is not None else ManualScheduler(),
        clock=clock,
        **kwargs,
    )
    return loop, clock


def _advance(loop, clock, frames=1, dt=1 / 60):
    for _ in range(frames):
        clock.t += dt
        loop.scheduler.advance()


def test_start_runs_ticks_with_measured_dt():
    renderer = BufferedRenderer()
    loop, clock = _loop(renderer=renderer)
    assert loop.status == IDLE and loop.session is None

    loop.start()
    assert loop.status == RUNNING
    assert loop.scheduler.pending == 1

    _advance(loop, clock, frames=3, dt=0.02)
    assert loop.session.frame == 3
    assert np.isclose(loop.session.elapsed, 0.06)
    assert loop.scheduler.pending == 1
    assert [f["index"] for f in renderer.frames] == [1, 2, 3]
    assert renderer.frames[0]["positions"].shape == (8, 2)
    assert loop.latest_frame.index == 3


def test_start_twice_raises():
    loop, _ = _loop()
    loop.start()
    with pytest.raises(LifecycleError):
        loop.start()
    loop.dispose()
    with pytest.raises(LifecycleError):
        loop.start()


def test_pause_stops_ticking():
    loop, clock = _loop()
    loop.start()
    _advance(loop, clock, 2)
    loop.pause()
    assert loop.status == PAUSED
    assert not loop.session.running
    assert loop.scheduler.pending == 0
    _advance(loop, clock, 5)
    assert loop.session.frame == 2


def test_resume_is_idempotent_and_skips_paused_interval():
    loop, clock = _loop()
    loop.start()
    _advance(loop, clock, 1)
    loop.pause()
    clock.t += 100.0
    loop.resume()
    loop.resume()
    assert loop.status == RUNNING
    assert loop.scheduler.pending == 1

    elapsed = loop.session.elapsed
    _advance(loop, clock, 1, dt=0.01)
    assert loop.session.frame == 2
    assert np.isclose(loop.session.elapsed - elapsed, 0.01)


def test_pause_and_resume_outside_their_states_are_noops():
    loop, clock = _loop()
    loop.pause()
    loop.resume()
    assert loop.status == IDLE
    loop.start()
    loop.resume()
    assert loop.scheduler.pending == 1
    loop.dispose()
    loop.pause()
    loop.resume()
    assert loop.status == DISPOSED


def test_stale_frame_callback_is_ignored():
    scheduler = KeepAllScheduler()
    loop, clock = _loop(scheduler)
    loop.start()
    loop.pause()
    loop.resume()
    # The first chain's callback was not cancelled by the host.
    assert scheduler.pending == 2
    _advance(loop, clock, 1)
    assert loop.session.frame == 1
    assert scheduler.pending == 1


def test_dispose_detaches_and_is_idempotent():
    hub = EventHub()
    loop, clock = _loop(events=hub)
    loop.start()
    assert hub.listener_count(MOTION) == 1
    assert hub.listener_count(ORIENTATION) == 1
    assert hub.listener_count(TOUCH) == 1

    loop.dispose()
    loop.dispose()
    assert loop.status == DISPOSED
    assert loop.session is None
    assert loop.scheduler.pending == 0
    assert hub.emit(MOTION, {"ax": 1.0}) == 0
    assert hub.listener_count(TOUCH) == 0


def test_sensor_events_drive_gravity_and_tilt():
    hub = EventHub()
    loop, clock = _loop(events=hub)
    loop.start()
    hub.emit(MOTION, {"accelerationIncludingGravity": {"x": 2.0, "y": 9.0, "z": 0.0}})
    hub.emit(ORIENTATION, {"alpha": 0.0, "beta": 90.0, "gamma": 0.0})
    hub.emit(MOTION, {"interval": 16})
    _advance(loop, clock, 1)

    frame = loop.latest_frame
    assert np.allclose(frame.gravity, [2.0, -9.0])
    assert np.isclose(frame.tilt[0], np.pi / 2)
    assert np.allclose(loop.session.engine.gravity, (2.0, -9.0))


def test_touch_event_pushes_particles():
    hub = EventHub()
    loop, clock = _loop(events=hub)
    loop.start()
    world = loop.session.engine
    h = loop.session.particles[0]
    world.body(h).position = np.array([1.0, 0.0])
    # A touch right of center on a square viewport tilts the ray toward +x.
    hub.emit(TOUCH, {"x": 60.0, "y": 50.0, "viewport": {"left": 0, "top": 0, "width": 100, "height": 100}})
    assert world.body(h).force[0] > 0.0


def test_engine_failure_disposes_and_reports():
    errors = []
    loop, clock = _loop(engine_factory=lambda: FailingWorld(fail_after=2), on_error=errors.append)
    loop.start()
    _advance(loop, clock, 5)

    assert loop.status == DISPOSED
    assert loop.session is None
    assert isinstance(loop.failure, EngineError)
    assert errors == [loop.failure]
    assert loop.latest_frame.index == 2
    assert loop.scheduler.pending == 0


def test_engine_failure_is_logged(caplog):
    loop, clock = _loop(engine_factory=lambda: FailingWorld(fail_after=0))
    loop.start()
    with caplog.at_level(logging.ERROR, logger="tilt_fluid"):
        _advance(loop, clock, 1)
    assert "Engine failure" in caplog.text


def test_profiler_sees_render_section():
    profiler = Profiler()
    loop, clock = _loop(profiler=profiler)
    loop.start()
    _advance(loop, clock, 4)
    summary = profiler.stats.summary()
    assert summary["forces"]["n"] == 4
    assert summary["engine"]["n"] == 4
    assert summary["render"]["n"] == 4


def test_current_frame_requires_session():
    loop, _ = _loop()
    with pytest.raises(LifecycleError):
        loop.current_frame()


class PausingRenderer(BufferedRenderer):
    """Renderer that stops its loop from inside render_frame, like a host closing its view."""

    def __init__(self, action):
        super().__init__()
        self.action = action
        self.loop = None

    def render_frame(self, frame):
        super().render_frame(frame)
        getattr(self.loop, self.action)()


@pytest.mark.parametrize("action, status", [("pause", PAUSED), ("dispose", DISPOSED)])
def test_renderer_stopping_the_loop_leaves_nothing_scheduled(action, status):
    renderer = PausingRenderer(action)
    loop, clock = _loop(renderer=renderer)
    renderer.loop = loop
    loop.start()
    _advance(loop, clock, 1)

    assert loop.status == status
    assert loop.scheduler.pending == 0
    assert len(renderer.frames) == 1
    _advance(loop, clock, 3)
    assert len(renderer.frames) == 1


def test_resume_after_renderer_pause_keeps_one_chain():
    renderer = PausingRenderer("pause")
    loop, clock = _loop(renderer=renderer)
    renderer.loop = loop
    loop.start()
    _advance(loop, clock, 1)
    loop.resume()
    assert loop.scheduler.pending == 1


def test_non_finite_motion_axes_do_not_end_the_session():
    hub = EventHub()
    loop, clock = _loop(events=hub)
    loop.start()
    hub.emit(MOTION, {"accelerationIncludingGravity": {"x": float("nan"), "y": 9.81, "z": None}})
    _advance(loop, clock, 3)
    hub.emit(MOTION, {"ax": float("inf"), "ay": 9.81})
    _advance(loop, clock, 3)

    assert loop.status == RUNNING
    assert loop.failure is None
    assert np.allclose(loop.latest_frame.gravity, [0.0, -9.81])
    assert np.all(np.isfinite(loop.latest_frame.positions))


def test_gravity_stays_zero_for_a_run_without_motion():
    hub = EventHub()
    renderer = BufferedRenderer()
    loop, clock = _loop(events=hub, renderer=renderer)
    loop.start()
    for i in range(30):
        hub.emit(ORIENTATION, {"alpha": 3.0 * i, "beta": 10.0, "gamma": -5.0})
        if i % 10 == 0:
            hub.emit(TOUCH, {"x": 0.1, "y": -0.2})
        _advance(loop, clock, 1)

    assert len(renderer.frames) == 30
    assert all(np.array_equal(f["gravity"], [0.0, 0.0]) for f in renderer.frames)
    assert loop.session.engine.gravity == (0.0, 0.0)


def test_touch_viewport_accepts_dom_rect_keys():
    hub = EventHub()
    loop, clock = _loop(events=hub)
    loop.start()
    world = loop.session.engine
    h = loop.session.particles[0]
    world.body(h).position = np.array([1.0, 0.0])
    rect = {"x": 0, "y": 0, "left": 0, "top": 0, "right": 100, "bottom": 100, "width": 100, "height": 100}
    hub.emit(TOUCH, {"x": 60.0, "y": 50.0, "viewport": rect})
    assert world.body(h).force[0] > 0.0


@pytest.mark.parametrize("rect", [
    {"left": 0, "top": 0, "width": 100, "height": 0},
    {"width": 0, "height": 0},
    {"width": 100},
])
def test_touch_on_empty_viewport_is_ignored(rect):
    hub = EventHub()
    loop, clock = _loop(events=hub)
    loop.start()
    world = loop.session.engine
    hub.emit(TOUCH, {"x": 10.0, "y": 10.0, "viewport": rect})
    assert all(np.array_equal(world.body(h).force, [0.0, 0.0]) for h in loop.session.particles)
    _advance(loop, clock, 1)
    assert loop.status == RUNNING


def test_default_physics_keeps_particles_in_the_box():
    """
    Default coefficients, a hard tilt that flips sides once and repeated touches:
    every particle stays inside the inner wall faces at +-(5 - 0.5).
    """
    hub = EventHub()
    renderer = BufferedRenderer()
    loop, clock = _loop(config=SimulationConfig(particle_count=150, seed=11), events=hub, renderer=renderer)
    loop.start()
    for i in range(150):
        side = -1.0 if i < 50 else 1.0
        hub.emit(MOTION, {"ax": 9.0 * side, "ay": 4.0})
        if i % 15 == 0:
            hub.emit(TOUCH, {"x": 0.5 * side, "y": 0.0})
        _advance(loop, clock, 1)

    assert loop.status == RUNNING
    worst = max(float(np.abs(f["positions"]).max()) for f in renderer.frames)
    print("max |coordinate| over the run:", worst)
    assert worst <= 4.5
    # The tilt is visible: the last frames lean toward the current side.
    assert renderer.frames[-1]["positions"][:, 0].mean() > 1.0
