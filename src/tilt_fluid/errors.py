# MIT License (see LICENSE)
"""
Exception types raised by the simulation core.
"""
from __future__ import annotations


class SimulationError(Exception):
    """Base class for all simulation errors."""


class EngineError(SimulationError):
    """
    The rigid-body engine failed to advance a step.

    The engine restores its pre-step state before raising, so a tick that
    sees this error leaves no partial state behind.
    """


class LifecycleError(SimulationError):
    """An operation was requested from a lifecycle state that does not allow it."""
