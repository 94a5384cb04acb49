"""board widget: the causal map drawn in terminal cells.

canvas pixels map onto cells at a fixed scale. mouse presses, drags and
releases on the board become gestures for the interaction controller.
"""

from __future__ import annotations

import time
from typing import Optional

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widgets import Static

from ...core.gestures import from_mouse
from ...core.render import RenderFrame
from ...core.session import EditorSession

COL_PX = 10  # canvas pixels per terminal column
ROW_PX = 20  # canvas pixels per terminal row

STYLE_OUTCOME = "bold cyan"
STYLE_CAUSE = "white"
STYLE_SELECTED = "bold yellow"
STYLE_DRAGGING = "bold magenta"
STYLE_LINK = "dim"
STYLE_LINK_HIGHLIGHT = "yellow"
STYLE_TICK = "dim"
STYLE_TICK_USED = "bold green"


class BoardChanged(Message):
    """message emitted after the board handled input."""


def to_cell(px: float, py: float) -> tuple[int, int]:
    """canvas pixels -> (col, row)."""
    return int(px // COL_PX), int(py // ROW_PX)


def to_canvas(col: int, row: int) -> tuple[float, float]:
    """(col, row) -> canvas pixels at the cell's center."""
    return col * COL_PX + COL_PX / 2, row * ROW_PX + ROW_PX / 2


class _Grid:
    """char + style cells."""

    def __init__(self, cols: int, rows: int):
        self.cols = cols
        self.rows = rows
        self.chars = [[" "] * cols for _ in range(rows)]
        self.styles: list[list[Optional[str]]] = [[None] * cols for _ in range(rows)]

    def put(self, col: int, row: int, char: str, style: Optional[str] = None, over: bool = True) -> None:
        if not (0 <= col < self.cols and 0 <= row < self.rows):
            return
        if not over and self.chars[row][col] != " ":
            return
        self.chars[row][col] = char
        self.styles[row][col] = style

    def write(self, col: int, row: int, text: str, style: Optional[str] = None) -> None:
        for i, char in enumerate(text):
            self.put(col + i, row, char, style)

    def lines(self) -> list[str]:
        return ["".join(row).rstrip() for row in self.chars]

    def to_text(self) -> Text:
        text = Text()
        for r in range(self.rows):
            for c in range(self.cols):
                text.append(self.chars[r][c], style=self.styles[r][c] or "")
            if r < self.rows - 1:
                text.append("\n")
        return text


def _line_cells(c1: int, r1: int, c2: int, r2: int):
    """bresenham between two cells."""
    dc, dr = abs(c2 - c1), -abs(r2 - r1)
    sc = 1 if c1 < c2 else -1
    sr = 1 if r1 < r2 else -1
    err = dc + dr
    while True:
        yield c1, r1
        if c1 == c2 and r1 == r2:
            return
        e2 = 2 * err
        if e2 >= dr:
            err += dr
            c1 += sc
        if e2 <= dc:
            err += dc
            r1 += sr


def rasterize(frame: RenderFrame) -> _Grid:
    """draw a frame into cells: ticks, connectors, links, then nodes on top."""
    cols = -(-frame.width // COL_PX)
    rows = -(-frame.height // ROW_PX)
    grid = _Grid(cols, rows)

    for tick in frame.ticks:
        _, row = to_cell(0, tick.y)
        grid.write(0, row, f"{tick.year} ─", STYLE_TICK_USED if tick.used else STYLE_TICK)

    for conn in frame.connectors:
        c1, row = to_cell(conn.x1, conn.y)
        c2, _ = to_cell(conn.x2, conn.y)
        for col in range(c1, c2):
            grid.put(col, row, "┈", STYLE_TICK, over=False)

    for link in frame.links:
        c1, r1 = to_cell(link.x1, link.y1)
        c2, r2 = to_cell(link.x2, link.y2)
        style = STYLE_LINK_HIGHLIGHT if link.highlighted else STYLE_LINK
        for col, row in _line_cells(c1, r1, c2, r2):
            grid.put(col, row, "·", style)

    for view in frame.nodes:
        if view.is_dragging:
            style = STYLE_DRAGGING
        elif view.is_selected:
            style = STYLE_SELECTED
        elif view.is_outcome:
            style = STYLE_OUTCOME
        else:
            style = STYLE_CAUSE

        col, row = to_cell(view.x, view.y)
        width = max(4, view.width // COL_PX)
        height = max(3, view.height // ROW_PX)
        inner = width - 2

        bottom = view.year_label or ""
        if view.deletable:
            bottom = f"{bottom} [d]" if bottom else "[d]"
        bottom = bottom[:inner]

        grid.write(col, row, "┌" + "─" * inner + "┐", style)
        for r in range(1, height - 1):
            label = view.label if r == 1 else ""
            grid.write(col, row + r, "│" + label[:inner].ljust(inner) + "│", style)
        grid.write(col, row + height - 1, "└" + bottom.ljust(inner, "─") + "┘", style)

    return grid


class Board(Static):
    """the map canvas."""

    can_focus = True

    DEFAULT_CSS = """
    Board {
        width: auto;
        height: auto;
        padding: 0;
    }
    """

    def __init__(self, session: EditorSession, **kwargs) -> None:
        super().__init__(**kwargs)
        self.session = session
        self._frame: Optional[RenderFrame] = None
        self._pressed = False

    def on_mount(self) -> None:
        # drives the press-and-hold threshold
        self.set_interval(0.05, self._tick)

    def render(self) -> Text:
        self._frame = self.session.frame()
        return rasterize(self._frame).to_text()

    # --- mouse ---

    def _now(self) -> float:
        return time.monotonic() * 1000

    def _feed(self, event_type: str, event: events.MouseEvent) -> None:
        px, py = to_canvas(event.x, event.y)
        node_id = None
        if event_type == "mousedown":
            frame = self._frame or self.session.frame()
            view = frame.node_at(px, py)
            node_id = view.id if view else None
        self.session.controller.handle(from_mouse(event_type, px, py, self._now(), node_id))
        self.refresh()
        self.post_message(BoardChanged())

    def on_mouse_down(self, event: events.MouseDown) -> None:
        self._pressed = True
        self.capture_mouse()
        self._feed("mousedown", event)

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._pressed:
            self._feed("mousemove", event)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if not self._pressed:
            return
        self._pressed = False
        self.release_mouse()
        self._feed("mouseup", event)

    def _tick(self) -> None:
        if self._pressed:
            self.session.controller.tick(self._now())
