# MIT License (see LICENSE)
"""
The simulation loop: lifecycle state machine and tick scheduling.

States:
    idle -> running <-> paused -> disposed (terminal)

The loop never owns a timer. Ticks are driven by an injected
FrameScheduler (a display's frame callback, or ManualScheduler for
headless runs and tests). Each scheduled callback carries a chain token;
pausing, disposing or rescheduling invalidates older tokens, so at most
one tick chain is ever alive and a stale callback returns without
touching state.

A tick measures dt with the injected clock, runs the physics step,
hands a Frame to the renderer and schedules the next tick.
"""
from __future__ import annotations
import logging
import time
from typing import Any, Callable, Mapping, Protocol

from .config import SimulationConfig
from .engine import RigidBodyEngine
from .errors import EngineError, LifecycleError
from .events import MOTION, ORIENTATION, TOUCH, EventHub
from .profiler import Profiler, maybe_section
from .renderer.adapter import Frame, NullRenderer, RendererAdapter
from .sensors.fusion import (
    MotionSample,
    OrientationSample,
    handle_motion,
    handle_orientation,
    tilt_radians,
)
from .session import SimulationState, create_session, release_session
from .step import tick
from .touch import PerspectiveRayProjector, RayProjector, Viewport, apply_touch
from .world import World

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
DISPOSED = "disposed"


class FrameScheduler(Protocol):
    """Host frame-callback mechanism (one callback per display frame)."""

    def request_frame(self, callback: Callable[[], None]) -> int: ...

    def cancel_frame(self, handle: int) -> None: ...


class ManualScheduler:
    """
    Headless FrameScheduler: frames happen when advance() is called.

    Example:
        scheduler = ManualScheduler()
        loop = SimulationLoop(config, scheduler)
        loop.start()
        for _ in range(600):
            scheduler.advance()
    """

    def __init__(self) -> None:
        self._pending: dict[int, Callable[[], None]] = {}
        self._next_handle = 1

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        """Number of callbacks waiting for the next frame."""
        return len(self._pending)

    def advance(self) -> int:
        """
        Fire every callback requested before this call.

        Callbacks requested while firing wait for the next advance().

        Returns:
            Number of callbacks fired.
        """
        due, self._pending = self._pending, {}
        for handle in sorted(due):
            due[handle]()
        return len(due)


class SimulationLoop:
    """
    Owns one simulation session and drives it frame by frame.

    Attributes:
        config: Immutable session configuration.
        scheduler: Host frame-callback mechanism.
        renderer: Receives one Frame per tick.
        events: Optional EventHub the loop subscribes to while alive.
        status: One of "idle", "running", "paused", "disposed".
        session: The live SimulationState, None before start and after dispose.
        latest_frame: The most recent Frame handed to the renderer.
        failure: The EngineError that ended the session, if any.
    """

    def __init__(
        self,
        config: SimulationConfig,
        scheduler: FrameScheduler,
        renderer: RendererAdapter | None = None,
        events: EventHub | None = None,
        projector: RayProjector | None = None,
        clock: Callable[[], float] = time.perf_counter,
        engine_factory: Callable[[], RigidBodyEngine] = World,
        profiler: Profiler | None = None,
        on_error: Callable[[EngineError], None] | None = None,
    ) -> None:
        self.config = config
        self.scheduler = scheduler
        self.renderer = renderer or NullRenderer()
        self.events = events
        self.projector = projector
        self.clock = clock
        self.engine_factory = engine_factory
        self.profiler = profiler
        self.on_error = on_error

        self.status = IDLE
        self.session: SimulationState | None = None
        self.latest_frame: Frame | None = None
        self.failure: EngineError | None = None

        self._chain = 0
        self._frame_handle: int | None = None
        self._last_time: float | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Build the session, subscribe to input and schedule the first tick.

        Raises:
            LifecycleError: If the loop is not idle.
        """
        if self.status != IDLE:
            raise LifecycleError(f"start() requires an idle loop, current state is {self.status!r}")

        self.session = create_session(self.config, self.engine_factory)
        self._attach()
        self.session.elapsed = 0.0
        self.session.frame = 0
        self.session.running = True
        self.status = RUNNING
        self._last_time = self.clock()
        self._schedule()
        logger.info("Simulation started")

    def pause(self) -> None:
        """Stop ticking. No-op unless running."""
        if self.status != RUNNING:
            return
        self.status = PAUSED
        self.session.running = False
        self._cancel()
        logger.info(f"Simulation paused at frame {self.session.frame}")

    def resume(self) -> None:
        """
        Continue ticking after pause(). No-op unless paused.

        The paused interval is not integrated: dt is measured from the
        moment of resuming.
        """
        if self.status != PAUSED:
            return
        self.status = RUNNING
        self.session.running = True
        self._last_time = self.clock()
        self._schedule()
        logger.info(f"Simulation resumed at frame {self.session.frame}")

    def dispose(self) -> None:
        """Tear everything down. Further calls are no-ops."""
        if self.status == DISPOSED:
            return
        self._cancel()
        self._detach()
        if self.session is not None:
            release_session(self.session)
            self.session = None
        self.status = DISPOSED
        logger.info("Simulation disposed")

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def _schedule(self) -> None:
        self._chain += 1
        token = self._chain
        self._frame_handle = self.scheduler.request_frame(lambda: self._on_frame(token))

    def _cancel(self) -> None:
        self._chain += 1
        if self._frame_handle is not None:
            self.scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _on_frame(self, token: int) -> None:
        session = self.session
        if token != self._chain or self.status != RUNNING or session is None or not session.running:
            return
        self._frame_handle = None

        now = self.clock()
        dt = max(now - self._last_time, 0.0)
        self._last_time = now

        try:
            tick(session, dt, profiler=self.profiler)
        except EngineError as exc:
            self._fail(exc)
            return

        frame = self.current_frame()
        with maybe_section(self.profiler, "render"):
            self.renderer.render_frame(frame)
        self.latest_frame = frame

        # The renderer may have paused or disposed the loop.
        if self.status == RUNNING:
            self._schedule()

    def _fail(self, exc: EngineError) -> None:
        frame = self.session.frame if self.session is not None else -1
        logger.error(f"Engine failure after frame {frame}, disposing session: {exc}")
        self.failure = exc
        self.dispose()
        if self.on_error is not None:
            self.on_error(exc)

    def current_frame(self) -> Frame:
        """Snapshot of the live session as a renderer Frame."""
        if self.session is None:
            raise LifecycleError("No live session")
        s = self.session
        return Frame(
            time=s.elapsed,
            index=s.frame,
            positions=s.engine.positions(s.particles),
            velocities=s.engine.velocities(s.particles),
            gravity=s.fusion.gravity.copy(),
            tilt=tilt_radians(s.fusion),
        )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _attach(self) -> None:
        if self.events is None:
            return
        self.events.add_listener(MOTION, self.handle_motion)
        self.events.add_listener(ORIENTATION, self.handle_orientation)
        self.events.add_listener(TOUCH, self.handle_touch)

    def _detach(self) -> None:
        if self.events is None:
            return
        self.events.remove_listener(MOTION, self.handle_motion)
        self.events.remove_listener(ORIENTATION, self.handle_orientation)
        self.events.remove_listener(TOUCH, self.handle_touch)

    def handle_motion(self, event: Mapping[str, Any]) -> None:
        """Fold a motion event into the sensor state; events without acceleration are ignored."""
        if self.session is None:
            return
        sample = MotionSample.from_event(event)
        if sample is None:
            return
        handle_motion(self.session.fusion, sample, self.config.gravity_scale)

    def handle_orientation(self, event: Mapping[str, Any]) -> None:
        if self.session is None:
            return
        handle_orientation(self.session.fusion, OrientationSample.from_event(event))

    def handle_touch(self, event: Mapping[str, Any]) -> None:
        """
        Push particles near a touch.

        The event carries "x" and "y", plus an optional "viewport"
        (a Viewport or a DOMRect-like mapping with width/height and
        optional left/top). Without a viewport, x and y are normalized
        device coordinates. Touches on a viewport without area are ignored.
        """
        if self.session is None or "x" not in event or "y" not in event:
            return
        viewport = event.get("viewport")
        if viewport is not None and not isinstance(viewport, Viewport):
            viewport = Viewport.from_mapping(viewport)
        if viewport is not None and viewport.is_empty:
            logger.debug(f"Ignoring touch on empty viewport {viewport}")
            return

        projector = self.projector
        if projector is None:
            aspect = viewport.width / viewport.height if viewport is not None else 1.0
            projector = PerspectiveRayProjector(aspect=aspect)

        apply_touch(self.session, float(event["x"]), float(event["y"]), viewport, projector)
