"""render projection: what a view needs to draw the current map.

project() reads the store and returns plain values; calling it twice on
the same state gives the same frame. node positions come from the store,
never from the view.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional

from .models import Node
from .store import MindMapStore
from .timeline import year_lines, year_to_y


TIMELINE_X = 80  # x of the vertical timeline axis


@dataclass(frozen=True)
class NodeView:
    id: str
    label: str
    year_label: Optional[str]
    x: float
    y: float
    width: int
    height: int
    is_outcome: bool
    is_selected: bool
    is_dragging: bool
    deletable: bool

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains(self, px: float, py: float) -> bool:
        """hit test in canvas pixels."""
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass(frozen=True)
class LinkView:
    id: str
    x1: float
    y1: float
    x2: float
    y2: float
    highlighted: bool


@dataclass(frozen=True)
class TimelineTick:
    year: int
    y: int
    used: bool


@dataclass(frozen=True)
class TimelineConnector:
    """dashed guide from the timeline axis to a node on its year line."""

    node_id: str
    x1: float
    x2: float
    y: int


@dataclass
class RenderFrame:
    width: int
    height: int
    nodes: list[NodeView] = field(default_factory=list)
    links: list[LinkView] = field(default_factory=list)
    ticks: list[TimelineTick] = field(default_factory=list)
    connectors: list[TimelineConnector] = field(default_factory=list)
    selected_id: Optional[str] = None

    def node_at(self, px: float, py: float) -> Optional[NodeView]:
        """topmost node under a point (later nodes draw on top)."""
        for view in reversed(self.nodes):
            if view.contains(px, py):
                return view
        return None

    def to_dict(self) -> dict:
        return asdict(self)


def project(
    store: MindMapStore,
    selected_id: Optional[str] = None,
    dragging_id: Optional[str] = None,
) -> RenderFrame:
    """project the store into a frame."""
    geometry = store.geometry
    frame = RenderFrame(
        width=geometry.width,
        height=store.canvas_height,
        selected_id=selected_id,
    )

    views: dict[str, NodeView] = {}
    for node in store.nodes:
        view = _node_view(node, store, selected_id, dragging_id)
        views[node.id] = view
        frame.nodes.append(view)

    for link in store.links:
        source = views.get(link.source)
        target = views.get(link.target)
        if not source or not target:
            continue
        (x1, y1), (x2, y2) = source.center, target.center
        frame.links.append(LinkView(
            id=link.id,
            x1=x1,
            y1=y1,
            x2=x2,
            y2=y2,
            highlighted=selected_id is not None and link.touches(selected_id),
        ))

    used = store.highlighted_years()
    frame.ticks = [TimelineTick(year, y, year in used) for year, y in year_lines(store.timeline)]

    for node in store.cause_nodes():
        if node.year is None or not store.timeline.contains(node.year):
            continue
        frame.connectors.append(TimelineConnector(
            node_id=node.id,
            x1=TIMELINE_X,
            x2=node.x,
            y=year_to_y(node.year, store.timeline),
        ))

    return frame


def _node_view(
    node: Node,
    store: MindMapStore,
    selected_id: Optional[str],
    dragging_id: Optional[str],
) -> NodeView:
    geometry = store.geometry
    is_selected = node.id == selected_id
    return NodeView(
        id=node.id,
        label=node.label(),
        year_label=f"Year: {node.year}" if node.year is not None else None,
        x=node.x,
        y=node.y,
        width=geometry.node_width,
        height=geometry.node_height,
        is_outcome=node.is_outcome,
        is_selected=is_selected,
        is_dragging=node.id == dragging_id,
        deletable=is_selected and not node.is_outcome,
    )
