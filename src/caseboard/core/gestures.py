"""normalize mouse and touch input into one start/move/end gesture stream.

coordinates are canvas pixels; timestamps are milliseconds from any
monotonic clock. the controller only ever sees GestureEvent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Phase(Enum):
    START = "start"
    MOVE = "move"
    END = "end"
    CANCEL = "cancel"


class Pointer(Enum):
    MOUSE = "mouse"
    TOUCH = "touch"


@dataclass(frozen=True)
class GestureEvent:
    """one normalized pointer event."""

    phase: Phase
    x: float
    y: float
    t_ms: float
    pointer: Pointer = Pointer.MOUSE
    node_id: Optional[str] = None  # node under the pointer on start, if any


_MOUSE_PHASES = {
    "mousedown": Phase.START,
    "mousemove": Phase.MOVE,
    "mouseup": Phase.END,
    "mouseleave": Phase.CANCEL,
}

_TOUCH_PHASES = {
    "touchstart": Phase.START,
    "touchmove": Phase.MOVE,
    "touchend": Phase.END,
    "touchcancel": Phase.CANCEL,
}


def from_mouse(
    event_type: str,
    x: float,
    y: float,
    t_ms: float,
    node_id: Optional[str] = None,
) -> GestureEvent:
    """adapt a mouse event. raises ValueError on unknown event types."""
    phase = _MOUSE_PHASES.get(event_type.lower())
    if phase is None:
        raise ValueError(f"unknown mouse event: {event_type}")
    return GestureEvent(phase, x, y, t_ms, Pointer.MOUSE, node_id)


def from_touch(
    event_type: str,
    x: float,
    y: float,
    t_ms: float,
    node_id: Optional[str] = None,
) -> GestureEvent:
    """adapt a touch event (first touch point). raises ValueError on unknown types."""
    phase = _TOUCH_PHASES.get(event_type.lower())
    if phase is None:
        raise ValueError(f"unknown touch event: {event_type}")
    return GestureEvent(phase, x, y, t_ms, Pointer.TOUCH, node_id)


def from_raw(
    event_type: str,
    x: float,
    y: float,
    t_ms: float,
    node_id: Optional[str] = None,
) -> GestureEvent:
    """adapt either kind of event by its name."""
    if event_type.lower().startswith("touch"):
        return from_touch(event_type, x, y, t_ms, node_id)
    return from_mouse(event_type, x, y, t_ms, node_id)
