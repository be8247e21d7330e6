# MIT License (see LICENSE)
"""
Rendering adapters for visualization.

This subpackage provides abstract and concrete renderer implementations:
    - RendererAdapter: Abstract base class defining the rendering interface.
    - DebugRenderer: Periodic text readout (gravity, tilt, energy).
    - NullRenderer: No-op renderer for performance testing.
    - BufferedRenderer: Records frames for playback or export.
    - Frame: The per-tick payload handed to a renderer.

Typical usage:
    from tilt_fluid.renderer import DebugRenderer

    loop = SimulationLoop(config, scheduler, renderer=DebugRenderer(every=30))
"""
from .adapter import (
    Frame,
    RendererAdapter,
    DebugRenderer,
    NullRenderer,
    BufferedRenderer,
    speed_hues,
)

__all__ = [
    "Frame",
    "RendererAdapter",
    "DebugRenderer",
    "NullRenderer",
    "BufferedRenderer",
    "speed_hues",
]
