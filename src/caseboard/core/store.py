"""mind-map state store: the single source of truth for an open case.

every public mutation either completes fully or leaves the map untouched.
invalid requests (self links, duplicate links, moving or deleting the
outcome node, empty text) are silent no-ops that return None/False.
"""

from __future__ import annotations

from typing import Optional

from .models import CanvasGeometry, Link, MindMap, Node, NodeType, OUTCOME_ID
from .timeline import (
    TimelineRange,
    embed_year,
    extract_year,
    parse_year,
    required_canvas_height,
    used_years,
    y_to_closest_year,
    year_to_y,
)


# finalize gate: enough material to discuss
MIN_CAUSES_TO_FINALIZE = 3
MIN_LINKS_TO_FINALIZE = 2


class MindMapStore:
    """owns a MindMap plus the timeline range and canvas geometry it is laid out in."""

    def __init__(
        self,
        mind_map: MindMap,
        timeline: Optional[TimelineRange] = None,
        geometry: Optional[CanvasGeometry] = None,
    ):
        self.map = mind_map
        self.timeline = (timeline or TimelineRange()).normalized()
        self.geometry = geometry or CanvasGeometry()

    @classmethod
    def create(
        cls,
        headline: str,
        timeline: Optional[TimelineRange] = None,
        geometry: Optional[CanvasGeometry] = None,
    ) -> MindMapStore:
        """store for a fresh case: just the outcome node."""
        geometry = geometry or CanvasGeometry()
        return cls(MindMap.create(headline, geometry), timeline, geometry)

    @classmethod
    def from_document(
        cls,
        doc: dict,
        headline: str,
        timeline: Optional[TimelineRange] = None,
        geometry: Optional[CanvasGeometry] = None,
    ) -> MindMapStore:
        """load a persisted document, repairing anything that breaks the invariants."""
        store = cls(MindMap.from_dict(doc), timeline, geometry)
        store._repair(headline)
        store._relayout()
        return store

    # --- queries ---

    @property
    def canvas_height(self) -> int:
        return required_canvas_height(self.timeline)

    @property
    def nodes(self) -> list[Node]:
        return self.map.nodes

    @property
    def links(self) -> list[Link]:
        return self.map.links

    @property
    def outcome(self) -> Optional[Node]:
        for node in self.map.nodes:
            if node.is_outcome:
                return node
        return None

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        return self.map.get_node(node_id)

    def cause_nodes(self) -> list[Node]:
        return [n for n in self.map.nodes if n.type == NodeType.CAUSE]

    def links_for(self, node_id: str) -> list[Link]:
        return [l for l in self.map.links if l.touches(node_id)]

    def highlighted_years(self) -> set[int]:
        """years on the timeline that have at least one cause node."""
        return used_years((n.year for n in self.cause_nodes()), self.timeline)

    def finalize_status(self) -> dict:
        """whether the map has enough causes and links to move on."""
        causes = len(self.cause_nodes())
        links = len(self.map.links)
        return {
            "cause_count": causes,
            "link_count": links,
            "causes_needed": max(0, MIN_CAUSES_TO_FINALIZE - causes),
            "links_needed": max(0, MIN_LINKS_TO_FINALIZE - links),
            "can_finalize": causes >= MIN_CAUSES_TO_FINALIZE and links >= MIN_LINKS_TO_FINALIZE,
        }

    def snapshot(self) -> dict:
        """wire-format copy of the map (no lastUpdated)."""
        return self.map.to_dict()

    # --- mutations ---

    def add_cause_node(self, text: str, year: Optional[int] = None) -> Optional[Node]:
        """place a new cause node on its year line. no-op for empty text."""
        text = (text or "").strip()
        if not text:
            return None

        if year is None:
            year = extract_year(text, self.timeline)

        x, y = self._clamp(self.geometry.lane_x, year_to_y(year, self.timeline))
        node = Node.create_cause(embed_year(text, year), x, y, year)
        self.map.nodes.append(node)
        return node

    def move_node(self, node_id: str, proposed_x: float, proposed_y: float) -> bool:
        """transient position change during a drag. outcome never moves."""
        node = self.get_node(node_id)
        if not node or not node.is_draggable:
            return False

        node.x, node.y = self._clamp(proposed_x, proposed_y)
        return True

    def snap_node_to_year(self, node_id: str, pixel_y_hint: float) -> Optional[int]:
        """settle a node onto the nearest year line and into the cause lane."""
        node = self.get_node(node_id)
        if not node or not node.is_draggable:
            return None

        year = y_to_closest_year(pixel_y_hint, self.timeline)
        x, y = self._clamp(self.geometry.lane_x, year_to_y(year, self.timeline))
        node.year = year
        node.text = embed_year(node.text, year)
        node.x, node.y = x, y
        return year

    def link_nodes(self, a: str, b: str) -> Optional[Link]:
        """connect two nodes unless that would self-link or duplicate a pair."""
        if a == b:
            return None
        if not self.get_node(a) or not self.get_node(b):
            return None
        if self.map.has_link(a, b):
            return None

        link = Link.create(a, b)
        self.map.links.append(link)
        return link

    def delete_node(self, node_id: str) -> bool:
        """remove a cause node and every link touching it."""
        node = self.get_node(node_id)
        if not node or node.is_outcome:
            return False

        self.map.links = [l for l in self.map.links if not l.touches(node_id)]
        self.map.nodes = [n for n in self.map.nodes if n.id != node_id]
        return True

    def retimeline(self, start_year: int, end_year: int) -> TimelineRange:
        """switch to a new year window and re-lay out every dated cause node.

        years and text are left alone; nodes outside the window keep their
        year and end up clamped to the canvas edge.
        """
        self.timeline = TimelineRange(
            start_year=start_year,
            end_year=end_year,
            top_offset=self.timeline.top_offset,
            pixels_per_year=self.timeline.pixels_per_year,
            bottom_margin=self.timeline.bottom_margin,
        ).normalized()
        self._relayout()
        return self.timeline

    def relabel_year(self, old_year: int, new_year: int) -> int:
        """move every node dated old_year to new_year. returns the count changed."""
        if old_year == new_year:
            return 0

        changed = 0
        for node in self.cause_nodes():
            if node.year != old_year:
                continue
            node.year = new_year
            node.text = embed_year(node.text, new_year)
            node.x, node.y = self._clamp(self.geometry.lane_x, year_to_y(new_year, self.timeline))
            changed += 1
        return changed

    def replace_map(self, mind_map: MindMap, headline: str) -> None:
        """adopt a map from elsewhere (live update), keeping invariants."""
        self.map = mind_map
        self._repair(headline)
        self._relayout()

    # --- internals ---

    def _clamp(self, x: float, y: float) -> tuple[float, float]:
        return self.geometry.clamp(x, y, self.canvas_height)

    def _relayout(self) -> None:
        """recompute positions from years; undated nodes are only clamped."""
        for node in self.map.nodes:
            if node.type == NodeType.CAUSE and node.year is not None:
                node.x, node.y = self._clamp(
                    self.geometry.lane_x, year_to_y(node.year, self.timeline)
                )
            elif node.is_outcome:
                node.x, node.y = self._clamp(self.geometry.outcome_x, self.geometry.outcome_y)
            else:
                node.x, node.y = self._clamp(node.x, node.y)

    def _repair(self, headline: str) -> None:
        """restore the invariants on a map that came from outside."""
        outcomes = [n for n in self.map.nodes if n.is_outcome]
        if not outcomes:
            self.map.nodes.insert(0, Node.create_outcome(headline, self.geometry))
        else:
            keep = next((n for n in outcomes if n.id == OUTCOME_ID), outcomes[0])
            keep.is_fixed = True
            keep.year = None
            self.map.nodes = [n for n in self.map.nodes if not n.is_outcome or n is keep]

        # adopt years that only live in the label
        for node in self.cause_nodes():
            if node.year is None:
                node.year = parse_year(node.text)

        seen_ids: set[str] = set()
        nodes = []
        for node in self.map.nodes:
            if node.id in seen_ids:
                continue
            seen_ids.add(node.id)
            nodes.append(node)
        self.map.nodes = nodes

        seen_pairs: set[frozenset[str]] = set()
        links = []
        for link in self.map.links:
            if link.source == link.target:
                continue
            if link.source not in seen_ids or link.target not in seen_ids:
                continue
            if link.pair in seen_pairs:
                continue
            seen_pairs.add(link.pair)
            links.append(link)
        self.map.links = links
