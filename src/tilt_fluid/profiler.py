# MIT License (see LICENSE)
"""
Per-section timing of simulation ticks.

A tick has three phases worth watching: force accumulation ("forces"),
the engine step ("engine") and the renderer handoff ("render"). Passing a
Profiler to the loop (or to step.tick) records one sample per phase per
tick; without one, timing costs nothing.

Example:
    profiler = Profiler()
    loop = SimulationLoop(config, scheduler, profiler=profiler)
    ...
    for line in profiler.stats.report():
        print(line)
"""
from __future__ import annotations
import time
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class ProfileStats:
    """Raw timing samples in seconds, keyed by section name."""
    samples: dict[str, list[float]] = field(default_factory=dict)

    def add(self, name: str, dt: float) -> None:
        self.samples.setdefault(name, []).append(dt)

    def reset(self) -> None:
        self.samples.clear()

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Per-section statistics.

        Returns:
            {name: {"n": count, "mean_ms": average, "max_ms": worst}}
        """
        return {
            name: {
                "n": len(times),
                "mean_ms": 1e3 * sum(times) / len(times),
                "max_ms": 1e3 * max(times),
            }
            for name, times in self.samples.items()
            if times
        }

    def report(self) -> list[str]:
        """One formatted line per section, slowest mean first."""
        rows = sorted(self.summary().items(), key=lambda kv: -kv[1]["mean_ms"])
        return [
            f"{name:<8} n={s['n']:<6d} mean={s['mean_ms']:8.3f} ms  max={s['max_ms']:8.3f} ms"
            for name, s in rows
        ]


class Profiler:
    """
    Wall-clock profiler for named code sections.

    Usage:
        profiler = Profiler()
        with profiler.section("engine"):
            world.step(16.7, 6, 4, 4)
        stats = profiler.stats.summary()
    """

    def __init__(self, clock=time.perf_counter) -> None:
        self.stats = ProfileStats()
        self._clock = clock

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block; the sample is recorded even if it raises."""
        t0 = self._clock()
        try:
            yield
        finally:
            self.stats.add(name, self._clock() - t0)


def maybe_section(profiler: Profiler | None, name: str):
    """profiler.section(name), or a no-op context when profiling is off."""
    return profiler.section(name) if profiler is not None else nullcontext()
