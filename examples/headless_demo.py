# examples/headless_demo.py
"""
Run the fluid without a display: tilt the device to the right, then poke it.

Run:
  python examples/headless_demo.py
"""
import logging

from tilt_fluid import EventHub, ManualScheduler, SimulationConfig, SimulationLoop, setup_logging
from tilt_fluid.renderer import DebugRenderer

setup_logging(logging.INFO)

FPS = 60.0
t = 0.0


def clock():
    return t


hub = EventHub()
scheduler = ManualScheduler()
loop = SimulationLoop(
    SimulationConfig(particle_count=200, seed=7),
    scheduler,
    renderer=DebugRenderer(every=60),
    events=hub,
    clock=clock,
)
loop.start()

# Phone held upright, then tilted to the right.
for i in range(240):
    ax = 0.0 if i < 60 else 4.0
    hub.emit("devicemotion", {"accelerationIncludingGravity": {"x": ax, "y": 9.81, "z": 0.0}})
    hub.emit("deviceorientation", {"alpha": 0.0, "beta": 90.0, "gamma": 25.0 if i >= 60 else 0.0})
    if i == 180:
        hub.emit("touch", {"x": 0.2, "y": 0.0})
    t += 1.0 / FPS
    scheduler.advance()

frame = loop.latest_frame
print("frames:", frame.index)
print("mean position:", frame.positions.mean(axis=0))
loop.dispose()
