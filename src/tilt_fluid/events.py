# MIT License (see LICENSE)
"""
Listener registry for host input events.

The host (browser bridge, desktop shell, test) emits sensor and touch
events into an EventHub; the simulation loop subscribes while a session is
alive and unsubscribes on dispose. Everything runs on the host's single
event thread, so handlers run synchronously inside emit().
"""
from __future__ import annotations
from collections import defaultdict
from typing import Any, Callable, Mapping

MOTION = "devicemotion"
ORIENTATION = "deviceorientation"
TOUCH = "touch"

Listener = Callable[[Mapping[str, Any]], None]


class EventHub:
    """
    Named event channels with ordered listeners.

    Example:
        hub = EventHub()
        hub.add_listener(MOTION, loop.handle_motion)
        hub.emit(MOTION, {"ax": 0.2, "ay": -9.8, "az": 0.1})
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def add_listener(self, kind: str, listener: Listener) -> None:
        """Subscribe a listener; subscribing the same listener twice is a no-op."""
        if listener not in self._listeners[kind]:
            self._listeners[kind].append(listener)

    def remove_listener(self, kind: str, listener: Listener) -> None:
        """Unsubscribe a listener; unknown listeners are ignored."""
        if listener in self._listeners.get(kind, []):
            self._listeners[kind].remove(listener)

    def listener_count(self, kind: str) -> int:
        return len(self._listeners.get(kind, []))

    def emit(self, kind: str, payload: Mapping[str, Any]) -> int:
        """
        Deliver a payload to every listener of a kind.

        Returns:
            Number of listeners called.
        """
        listeners = list(self._listeners.get(kind, []))
        for listener in listeners:
            listener(payload)
        return len(listeners)
