"""
Microbenchmark: time per tick vs number of particles.
Run:
  python benchmarks/bench_steps.py
"""
import time

from tilt_fluid.config import SimulationConfig
from tilt_fluid.profiler import Profiler
from tilt_fluid.sensors.fusion import MotionSample, handle_motion
from tilt_fluid.session import create_session
from tilt_fluid.step import tick


def run(n: int, ticks: int = 120):
    prof = Profiler()
    config = SimulationConfig(particle_count=n, seed=12345)  # determinism (seeded spawn)
    state = create_session(config)
    handle_motion(state.fusion, MotionSample(ax=1.0, ay=9.81), config.gravity_scale)

    dt = 1 / 60

    # warmup
    for _ in range(10):
        tick(state, dt)

    t0 = time.perf_counter()
    for _ in range(ticks):
        tick(state, dt, profiler=prof)
    t1 = time.perf_counter()

    total = t1 - t0
    per_tick = total / ticks
    return per_tick, prof.stats.summary()


if __name__ == "__main__":
    for n in [50, 100, 250, 500, 1000]:
        per_tick, summary = run(n)
        print(f"N={n:4d}  tick={1e3*per_tick:8.3f} ms  ticks/s={1/per_tick:8.1f}")
        for k in ["forces", "engine"]:
            if k in summary:
                print(" ", k, summary[k])
        print()
