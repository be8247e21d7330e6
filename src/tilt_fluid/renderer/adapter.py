# MIT License (see LICENSE)
"""
Renderer adapters for the particle simulation.

The simulation core has no rendering dependency. Every tick the loop hands
a Frame to a RendererAdapter; concrete adapters forward it to a graphics
backend, record it, print it, or drop it.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TextIO
import sys

import numpy as np

from ..core.invariants import kinetic_energy


@dataclass(frozen=True)
class Frame:
    """
    Per-tick output for the renderer.

    Attributes:
        time: Simulated time in seconds.
        index: Tick number (1 for the first tick).
        positions: Particle positions, shape (N, 2), in particle order.
        velocities: Particle velocities, shape (N, 2).
        gravity: Current world gravity [gx, gy].
        tilt: Container rotation (rx, ry, rz) in radians.
    """
    time: float
    index: int
    positions: np.ndarray
    velocities: np.ndarray
    gravity: np.ndarray
    tilt: tuple[float, float, float]


def speed_hues(velocities: np.ndarray) -> np.ndarray:
    """
    Hue in [0, 1) for each particle from its speed: (2 * |v|) mod 1.

    Used to color particles by how fast they move.
    """
    v = np.asarray(velocities, dtype=np.float64)
    if v.size == 0:
        return np.zeros(0, dtype=np.float64)
    return np.mod(2.0 * np.linalg.norm(v, axis=1), 1.0)


class RendererAdapter(ABC):
    """
    Abstract base class for renderer implementations.

    Subclasses implement the drawing methods to integrate with a graphics
    backend (three.js bridge, matplotlib, pygame, ...).

    Usage:
        renderer.begin_frame(frame.time)
        renderer.draw_particles(frame)
        renderer.end_frame()

    Or use the convenience method:
        renderer.render_frame(frame)
    """

    @abstractmethod
    def begin_frame(self, time: float) -> None:
        """
        Begin a new frame for rendering.

        Args:
            time: Current simulation time in seconds.
        """
        ...

    @abstractmethod
    def draw_particles(self, frame: Frame) -> None:
        """Draw all particles of a frame."""
        ...

    @abstractmethod
    def end_frame(self) -> None:
        """Finalize the current frame."""
        ...

    def render_frame(self, frame: Frame) -> None:
        """Convenience method running a full begin/draw/end cycle."""
        self.begin_frame(frame.time)
        self.draw_particles(frame)
        self.end_frame()


class DebugRenderer(RendererAdapter):
    """
    Text debug readout, written every `every` frames.

    Output:
        === Frame 10 t=0.1667 ===
        particles=1000 gravity=(0.0003, -0.0098) tilt=(0.35, -0.02, 0.00)
        ke(unit mass)=12.4410
    """

    def __init__(self, output: TextIO | None = None, every: int = 10):
        """
        Initialize the debug renderer.

        Args:
            output: Output stream (defaults to sys.stdout).
            every: Write one readout per this many frames.
        """
        if every < 1:
            raise ValueError(f"every must be >= 1, got {every}")
        self.output = output or sys.stdout
        self.every = every
        self._active = False

    def begin_frame(self, time: float) -> None:
        self._active = False

    def draw_particles(self, frame: Frame) -> None:
        if frame.index % self.every != 0:
            return
        self._active = True
        g = frame.gravity
        rx, ry, rz = frame.tilt
        self.output.write(f"=== Frame {frame.index} t={frame.time:.4f} ===\n")
        self.output.write(
            f"particles={len(frame.positions)} gravity=({g[0]:.4f}, {g[1]:.4f}) "
            f"tilt=({rx:.2f}, {ry:.2f}, {rz:.2f})\n"
        )
        self.output.write(f"ke(unit mass)={kinetic_energy(frame.velocities):.4f}\n")

    def end_frame(self) -> None:
        if self._active:
            self.output.write("\n")
            self.output.flush()


class NullRenderer(RendererAdapter):
    """
    No-op renderer that does nothing.

    Useful as a placeholder or for performance testing without rendering overhead.
    """

    def begin_frame(self, time: float) -> None:
        pass

    def draw_particles(self, frame: Frame) -> None:
        pass

    def end_frame(self) -> None:
        pass


class BufferedRenderer(RendererAdapter):
    """
    Renderer that buffers frame data for later retrieval.

    Example:
        renderer = BufferedRenderer()
        ...
        for frame in renderer.frames:
            print(frame["time"], frame["positions"].shape)
    """

    def __init__(self):
        self.frames: list[dict] = []
        self._current_frame: dict | None = None

    def begin_frame(self, time: float) -> None:
        self._current_frame = {"time": time}

    def draw_particles(self, frame: Frame) -> None:
        if self._current_frame is None:
            return
        self._current_frame.update({
            "index": frame.index,
            "positions": frame.positions.copy(),
            "velocities": frame.velocities.copy(),
            "gravity": frame.gravity.copy(),
            "tilt": frame.tilt,
            "hues": speed_hues(frame.velocities),
        })

    def end_frame(self) -> None:
        if self._current_frame is not None:
            self.frames.append(self._current_frame)
            self._current_frame = None

    def clear(self) -> None:
        """Clear all buffered frames."""
        self.frames.clear()
