"""core data model for caseboard.

a causal map: one fixed outcome node, user-placed cause nodes, and
undirected links between them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


# --- configuration ---

OUTCOME_ID = "outcome"
CANVAS_WIDTH = 800
NODE_WIDTH = 180
NODE_HEIGHT = 60
LANE_X = 250        # x of the column cause nodes snap into
OUTCOME_Y = 50
LABEL_MAX_LEN = 50


class NodeType(Enum):
    OUTCOME = "outcome"  # the event being explained
    CAUSE = "cause"      # a dropped piece of evidence


@dataclass(frozen=True)
class CanvasGeometry:
    """pixel dimensions of the canvas and its nodes."""

    width: int = CANVAS_WIDTH
    node_width: int = NODE_WIDTH
    node_height: int = NODE_HEIGHT
    lane_x: int = LANE_X
    outcome_y: int = OUTCOME_Y

    @property
    def outcome_x(self) -> float:
        """outcome node is centered horizontally."""
        return (self.width - self.node_width) / 2

    def clamp(self, x: float, y: float, height: int) -> tuple[float, float]:
        """clamp a node's top-left corner so the whole node stays on canvas."""
        max_x = max(0, self.width - self.node_width)
        max_y = max(0, height - self.node_height)
        return max(0, min(max_x, x)), max(0, min(max_y, y))


@dataclass
class Node:
    """single node on the canvas."""

    id: str
    text: str
    x: float
    y: float
    type: NodeType = NodeType.CAUSE
    year: Optional[int] = None   # cause nodes only
    is_fixed: bool = False       # outcome only

    @classmethod
    def create_outcome(cls, headline: str, geometry: CanvasGeometry) -> Node:
        """create the fixed outcome node for a case."""
        return cls(
            id=OUTCOME_ID,
            text=headline,
            x=geometry.outcome_x,
            y=geometry.outcome_y,
            type=NodeType.OUTCOME,
            is_fixed=True,
        )

    @classmethod
    def create_cause(cls, text: str, x: float, y: float, year: Optional[int]) -> Node:
        """create a draggable cause node with a fresh id."""
        return cls(
            id=f"cause-{_generate_id()}",
            text=text,
            x=x,
            y=y,
            type=NodeType.CAUSE,
            year=year,
        )

    @property
    def is_outcome(self) -> bool:
        return self.type == NodeType.OUTCOME

    @property
    def is_draggable(self) -> bool:
        return not self.is_outcome and not self.is_fixed

    def label(self, max_len: int = LABEL_MAX_LEN) -> str:
        """display text, truncated for the node box."""
        if len(self.text) <= max_len:
            return self.text
        return self.text[:max_len - 3] + "..."

    def to_dict(self) -> dict:
        """serialize to the wire format (camelCase isFixed, optional year)."""
        d = {
            "id": self.id,
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "type": self.type.value,
        }
        if self.year is not None:
            d["year"] = self.year
        if self.is_fixed:
            d["isFixed"] = True
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Node:
        """deserialize from the wire format.

        older documents may lack "type"; the node with the outcome id is
        taken to be the outcome.
        """
        node_id = str(d["id"])
        raw_type = d.get("type")
        if raw_type:
            node_type = NodeType(raw_type)
        else:
            node_type = NodeType.OUTCOME if node_id == OUTCOME_ID else NodeType.CAUSE

        year = d.get("year")
        return cls(
            id=node_id,
            text=str(d.get("text", "")),
            x=float(d.get("x", 0) or 0),
            y=float(d.get("y", 0) or 0),
            type=node_type,
            year=int(year) if year is not None and node_type == NodeType.CAUSE else None,
            is_fixed=bool(d.get("isFixed", node_type == NodeType.OUTCOME)),
        )


@dataclass
class Link:
    """undirected causal connection, stored as an ordered pair."""

    id: str
    source: str
    target: str

    @classmethod
    def create(cls, source: str, target: str) -> Link:
        return cls(id=f"l-{_generate_id()}", source=source, target=target)

    @property
    def pair(self) -> frozenset[str]:
        """unordered identity of the link."""
        return frozenset((self.source, self.target))

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source, self.target)

    def to_dict(self) -> dict:
        return {"id": self.id, "source": self.source, "target": self.target}

    @classmethod
    def from_dict(cls, d: dict) -> Link:
        return cls(
            id=str(d.get("id") or f"l-{_generate_id()}"),
            source=str(d["source"]),
            target=str(d["target"]),
        )


@dataclass
class MindMap:
    """nodes and links for one case. list order is render order only."""

    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    @classmethod
    def create(cls, headline: str, geometry: CanvasGeometry) -> MindMap:
        """fresh map holding only the outcome node."""
        return cls(nodes=[Node.create_outcome(headline, geometry)])

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_link(self, a: str, b: str) -> bool:
        """check for a link between a and b in either direction."""
        pair = frozenset((a, b))
        return any(link.pair == pair for link in self.links)

    def to_dict(self, last_updated: Optional[str] = None) -> dict:
        """serialize to the persisted document shape."""
        d = {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }
        if last_updated is not None:
            d["lastUpdated"] = last_updated
        return d

    @classmethod
    def from_dict(cls, d: dict) -> MindMap:
        """deserialize; lastUpdated is metadata and is not read back.

        entries that cannot be read are dropped, the rest of the map survives.
        """
        return cls(
            nodes=_parse_entries(Node.from_dict, d.get("nodes")),
            links=_parse_entries(Link.from_dict, d.get("links")),
        )


def _parse_entries(parse, entries) -> list:
    if not isinstance(entries, list):
        return []
    parsed = []
    for entry in entries:
        try:
            parsed.append(parse(entry))
        except (KeyError, ValueError, TypeError, AttributeError):
            continue
    return parsed


def now_iso() -> str:
    """timestamp for the lastUpdated field."""
    return datetime.now().isoformat()


def _generate_id() -> str:
    """generate a short unique id."""
    return uuid.uuid4().hex[:8]
