"""tests for core data models."""

from caseboard.core.models import (
    OUTCOME_ID,
    CanvasGeometry,
    Link,
    MindMap,
    Node,
    NodeType,
)


class TestNode:
    """tests for Node."""

    def test_create_outcome(self):
        """outcome is fixed, centered and has the reserved id."""
        geometry = CanvasGeometry()
        node = Node.create_outcome("Wall opens (1989)", geometry)
        assert node.id == OUTCOME_ID
        assert node.is_outcome
        assert node.is_fixed
        assert not node.is_draggable
        assert node.x == (800 - 180) / 2
        assert node.y == 50

    def test_create_cause(self):
        """cause gets a fresh prefixed id."""
        a = Node.create_cause("Drought (1987)", 250, 420, 1987)
        b = Node.create_cause("Drought (1987)", 250, 420, 1987)
        assert a.id.startswith("cause-")
        assert a.id != b.id
        assert a.is_draggable

    def test_label_truncates(self):
        """long text is cut to 50 chars with an ellipsis."""
        node = Node.create_cause("x" * 80, 0, 0, None)
        assert len(node.label()) == 50
        assert node.label().endswith("...")

    def test_label_short_text_untouched(self):
        node = Node.create_cause("short", 0, 0, None)
        assert node.label() == "short"

    def test_to_dict_wire_keys(self):
        """isFixed is camelCase; year only when set."""
        outcome = Node.create_outcome("x", CanvasGeometry())
        d = outcome.to_dict()
        assert d["isFixed"] is True
        assert "year" not in d

        cause = Node.create_cause("y (1987)", 250, 420, 1987)
        d = cause.to_dict()
        assert d["year"] == 1987
        assert "isFixed" not in d

    def test_from_dict_without_type(self):
        """legacy documents: the outcome id implies the outcome type."""
        node = Node.from_dict({"id": "outcome", "text": "x", "x": 1, "y": 2})
        assert node.type == NodeType.OUTCOME
        assert node.is_fixed

        other = Node.from_dict({"id": "n1", "text": "y", "x": 1, "y": 2})
        assert other.type == NodeType.CAUSE

    def test_from_dict_drops_outcome_year(self):
        node = Node.from_dict({"id": "outcome", "text": "x", "x": 0, "y": 0, "year": 1989})
        assert node.year is None


class TestLink:
    """tests for Link."""

    def test_pair_is_unordered(self):
        assert Link.create("a", "b").pair == Link.create("b", "a").pair

    def test_touches(self):
        link = Link.create("a", "b")
        assert link.touches("a")
        assert link.touches("b")
        assert not link.touches("c")

    def test_from_dict_generates_missing_id(self):
        link = Link.from_dict({"source": "a", "target": "b"})
        assert link.id.startswith("l-")


class TestMindMap:
    """tests for MindMap."""

    def test_create_holds_only_outcome(self):
        mind_map = MindMap.create("x", CanvasGeometry())
        assert len(mind_map.nodes) == 1
        assert mind_map.nodes[0].is_outcome
        assert mind_map.links == []

    def test_has_link_either_direction(self):
        mind_map = MindMap(links=[Link.create("a", "b")])
        assert mind_map.has_link("a", "b")
        assert mind_map.has_link("b", "a")
        assert not mind_map.has_link("a", "c")

    def test_to_dict_last_updated(self):
        mind_map = MindMap.create("x", CanvasGeometry())
        assert "lastUpdated" not in mind_map.to_dict()
        assert mind_map.to_dict("2024-01-01T00:00:00")["lastUpdated"] == "2024-01-01T00:00:00"

    def test_roundtrip(self):
        """to_dict/from_dict preserves the document."""
        mind_map = MindMap.create("x", CanvasGeometry())
        cause = Node.create_cause("Drought (1987)", 250, 420, 1987)
        mind_map.nodes.append(cause)
        mind_map.links.append(Link.create(OUTCOME_ID, cause.id))

        doc = mind_map.to_dict("ignored")
        restored = MindMap.from_dict(doc)
        assert restored.to_dict() == mind_map.to_dict()

    def test_from_dict_tolerates_missing_lists(self):
        mind_map = MindMap.from_dict({"nodes": None})
        assert mind_map.nodes == []
        assert mind_map.links == []

    def test_from_dict_skips_unreadable_entries(self):
        """bad nodes and links are dropped, readable ones survive."""
        doc = {
            "nodes": [
                {"id": "outcome", "type": "root"},
                {"text": "no id", "x": 0, "y": 0},
                {"id": "n1", "text": "Drought", "x": 250, "y": 420, "year": "late"},
                "not a node",
                {"id": "n2", "text": "Protests (1989)", "x": 250, "y": 260, "type": "cause", "year": 1989},
            ],
            "links": [
                {"id": "l1", "target": "n2"},
                {"id": "l2", "source": "outcome", "target": "n2"},
            ],
        }
        mind_map = MindMap.from_dict(doc)
        assert [n.id for n in mind_map.nodes] == ["n2"]
        assert mind_map.nodes[0].year == 1989
        assert [l.id for l in mind_map.links] == ["l2"]

    def test_from_dict_ignores_non_list_sections(self):
        mind_map = MindMap.from_dict({"nodes": {"id": "outcome"}, "links": 7})
        assert mind_map.nodes == []
        assert mind_map.links == []


class TestCanvasGeometry:
    """tests for clamping."""

    def test_clamp_inside(self):
        assert CanvasGeometry().clamp(100, 100, 680) == (100, 100)

    def test_clamp_edges(self):
        """node box stays fully on canvas."""
        assert CanvasGeometry().clamp(-10, 9999, 680) == (0, 620)
        assert CanvasGeometry().clamp(9999, -5, 680) == (620, 0)
