"""interaction controller: turns gestures, clicks and drops into store operations.

one controller per open case. it holds the only interaction state there
is (selection, the gesture in flight, a pending year prompt) and calls
the commit hook after every mutation worth persisting.

gesture states:

    IDLE --press on node--> PRESSED
    PRESSED --mouse moves past tolerance--> DRAGGING
    PRESSED --touch held for hold_ms--> DRAGGING
    PRESSED --release within tolerance--> click, IDLE
    PRESSED --touch moves before hold--> IDLE (treated as a scroll)
    DRAGGING --move--> move_node (transient)
    DRAGGING --release--> snap_node_to_year, commit, IDLE
    IDLE --drop with prompt--> AWAITING_YEAR --provide_year--> IDLE
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .gestures import GestureEvent, Phase, Pointer
from .models import Link, Node
from .store import MindMapStore
from .timeline import TimelineRange, parse_year, parse_year_input

logger = logging.getLogger(__name__)


# --- configuration ---

HOLD_MS = 300          # touch press-and-hold before a drag starts
TAP_TOLERANCE = 6      # pixels a tap may wander and still count as a click


class State(Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    DRAGGING = "dragging"
    AWAITING_YEAR = "awaiting_year"


@dataclass(frozen=True)
class ControllerConfig:
    hold_ms: float = HOLD_MS
    tap_tolerance: float = TAP_TOLERANCE


@dataclass
class PendingYearInput:
    """a drop waiting for the user to confirm its year."""

    text: str
    default_year: int


@dataclass
class _Press:
    node_id: str
    pointer: Pointer
    x: float
    y: float
    t_ms: float
    offset_x: float
    offset_y: float
    moved: bool = False


CommitHook = Callable[[str], None]


class InteractionController:
    """state machine over a MindMapStore."""

    def __init__(
        self,
        store: MindMapStore,
        on_commit: Optional[CommitHook] = None,
        config: Optional[ControllerConfig] = None,
    ):
        self.store = store
        self.on_commit = on_commit or (lambda action: None)
        self.config = config or ControllerConfig()
        self.state = State.IDLE
        self.selected_id: Optional[str] = None
        self.pending: Optional[PendingYearInput] = None
        self._press: Optional[_Press] = None

    @property
    def dragging_id(self) -> Optional[str]:
        if self.state == State.DRAGGING and self._press:
            return self._press.node_id
        return None

    # --- gestures ---

    def handle(self, event: GestureEvent) -> None:
        """feed one normalized pointer event through the state machine."""
        if event.phase == Phase.START:
            self._on_start(event)
        elif event.phase == Phase.MOVE:
            self._on_move(event)
        elif event.phase == Phase.END:
            self._on_end(event)
        elif event.phase == Phase.CANCEL:
            self._on_cancel()

    def tick(self, t_ms: float) -> None:
        """advance time; a touch held long enough turns into a drag."""
        if self.state == State.PRESSED and self._hold_elapsed(t_ms):
            self._begin_drag()

    def _on_start(self, event: GestureEvent) -> None:
        if self.state != State.IDLE:
            return  # one gesture at a time
        node = self.store.get_node(event.node_id)
        if not node:
            return

        self._press = _Press(
            node_id=node.id,
            pointer=event.pointer,
            x=event.x,
            y=event.y,
            t_ms=event.t_ms,
            offset_x=event.x - node.x,
            offset_y=event.y - node.y,
        )
        self.state = State.PRESSED

    def _on_move(self, event: GestureEvent) -> None:
        press = self._press
        if self.state == State.PRESSED and press:
            if press.pointer == Pointer.TOUCH:
                if self._hold_elapsed(event.t_ms):
                    self._begin_drag()
                elif self._beyond_tolerance(event):
                    self._reset()  # finger moved before the hold: a scroll
                    return
            elif self._beyond_tolerance(event):
                press.moved = True
                self._begin_drag()

        if self.state == State.DRAGGING and press:
            self.store.move_node(press.node_id, event.x - press.offset_x, event.y - press.offset_y)

    def _on_end(self, event: GestureEvent) -> None:
        press = self._press
        if not press:
            return

        if self.state == State.PRESSED:
            node = self.store.get_node(press.node_id)
            if node and node.is_draggable and self._hold_elapsed(event.t_ms):
                self._begin_drag()
            elif node and node.is_draggable and press.pointer == Pointer.MOUSE and self._beyond_tolerance(event):
                # release far from the press with no move in between: a flick
                press.moved = True
                self._begin_drag()
            elif not press.moved and not self._beyond_tolerance(event):
                self._reset()
                self.click(press.node_id)
                return

        if self.state == State.DRAGGING:
            self.store.move_node(press.node_id, event.x - press.offset_x, event.y - press.offset_y)
            self._release(press.node_id, event.y)
            return

        self._reset()

    def _on_cancel(self) -> None:
        press = self._press
        if self.state == State.DRAGGING and press:
            node = self.store.get_node(press.node_id)
            if node:
                self._release(press.node_id, node.y + press.offset_y)
                return
        self._reset()

    def _begin_drag(self) -> None:
        press = self._press
        node = self.store.get_node(press.node_id) if press else None
        if not node or not node.is_draggable:
            return  # outcome presses never drag; the release decides
        self.state = State.DRAGGING
        logger.debug("drag start: %s", node.id)

    def _release(self, node_id: str, pointer_y: float) -> None:
        """snap on the pointer position; the node settles with its top on the line."""
        year = self.store.snap_node_to_year(node_id, pointer_y)
        self._reset()
        if year is not None:
            logger.debug("snapped %s to %s", node_id, year)
            self.on_commit("snap_node_to_year")

    def _reset(self) -> None:
        self._press = None
        if self.state in (State.PRESSED, State.DRAGGING):
            self.state = State.IDLE

    def _hold_elapsed(self, t_ms: float) -> bool:
        press = self._press
        return (
            press is not None
            and press.pointer == Pointer.TOUCH
            and not press.moved
            and t_ms - press.t_ms >= self.config.hold_ms
        )

    def _beyond_tolerance(self, event: GestureEvent) -> bool:
        press = self._press
        if not press:
            return False
        return math.hypot(event.x - press.x, event.y - press.y) > self.config.tap_tolerance

    # --- selection and linking ---

    def click(self, node_id: str) -> Optional[Link]:
        """select, deselect, or link against the current selection.

        returns the link when one was created.
        """
        if self.state == State.DRAGGING:
            return None
        if not self.store.get_node(node_id):
            return None

        selected = self.selected_id
        if selected is None or not self.store.get_node(selected):
            self.selected_id = node_id
            return None
        if selected == node_id:
            self.selected_id = None
            return None

        # second click always clears the selection, linked or not
        self.selected_id = None
        link = self.store.link_nodes(selected, node_id)
        if link:
            self.on_commit("link_nodes")
        return link

    def prune_selection(self) -> None:
        """drop a selection whose node no longer exists."""
        if self.selected_id and not self.store.get_node(self.selected_id):
            self.selected_id = None

    # --- drop to create ---

    def default_year_for(self, text: str) -> int:
        """year detected in the dropped text, else the start of the timeline."""
        year = parse_year(text)
        return year if year is not None else self.store.timeline.start_year

    def drop(
        self,
        payload: Optional[str],
        canvas_present: bool = True,
        prompt: bool = True,
    ) -> Optional[Node]:
        """evidence dropped on the canvas.

        with prompt=True the drop waits in AWAITING_YEAR for provide_year;
        otherwise the node is created straight away with the default year.
        """
        text = (payload or "").strip()
        if not text or not canvas_present:
            return None
        if self.state != State.IDLE:
            return None

        default = self.default_year_for(text)
        if prompt:
            self.pending = PendingYearInput(text=text, default_year=default)
            self.state = State.AWAITING_YEAR
            return None
        return self._create(text, default)

    def provide_year(self, raw: Optional[str]) -> Optional[Node]:
        """answer the pending year prompt; bad input falls back to the default."""
        pending = self.pending
        if self.state != State.AWAITING_YEAR or not pending:
            return None
        self.pending = None
        self.state = State.IDLE
        return self._create(pending.text, parse_year_input(raw, pending.default_year))

    def cancel_pending(self) -> None:
        if self.state == State.AWAITING_YEAR:
            self.pending = None
            self.state = State.IDLE

    def _create(self, text: str, year: int) -> Optional[Node]:
        node = self.store.add_cause_node(text, year)
        if node:
            self.on_commit("add_cause_node")
        return node

    # --- other mutations ---

    def delete_selected(self) -> bool:
        """delete the selected node; the outcome node can't be deleted."""
        node = self.store.get_node(self.selected_id)
        if not node or node.is_outcome:
            return False
        if not self.store.delete_node(node.id):
            return False
        self.selected_id = None
        self.on_commit("delete_node")
        return True

    def retimeline(self, start_year: int, end_year: int) -> TimelineRange:
        rng = self.store.retimeline(start_year, end_year)
        self.on_commit("retimeline")
        return rng

    def relabel_year(self, old_year: int, new_year: int) -> int:
        changed = self.store.relabel_year(old_year, new_year)
        if changed:
            self.on_commit("relabel_year")
        return changed
