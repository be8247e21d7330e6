# examples/touch_splash.py
"""
Drop a settled pool, then push it with a single touch and record the frames.

Run:
  python examples/touch_splash.py
"""
import numpy as np

from tilt_fluid.config import SimulationConfig
from tilt_fluid.renderer import BufferedRenderer
from tilt_fluid.sensors.fusion import MotionSample, handle_motion
from tilt_fluid.session import create_session
from tilt_fluid.step import tick
from tilt_fluid.touch import PerspectiveRayProjector, Viewport, apply_touch

config = SimulationConfig(particle_count=150, seed=3)
state = create_session(config)
handle_motion(state.fusion, MotionSample(ax=0.0, ay=9.81), config.gravity_scale)

dt = 1.0 / 60.0
for _ in range(180):
    tick(state, dt)

before = state.engine.velocities(state.particles)
viewport = Viewport(left=0.0, top=0.0, width=800.0, height=600.0)
pushed = apply_touch(state, 500.0, 300.0, viewport, PerspectiveRayProjector(aspect=800.0 / 600.0))
tick(state, dt)
after = state.engine.velocities(state.particles)

print("pushed:", pushed)
print("mean dv:", (after - before).mean(axis=0))
print("max speed:", float(np.linalg.norm(after, axis=1).max()))
