"""tests for the render projection and the terminal rasterizer."""

from caseboard.core.models import OUTCOME_ID, Link
from caseboard.core.render import TIMELINE_X, project
from caseboard.tui.widgets.board import rasterize, to_canvas, to_cell


def _cause(store, year):
    return next(n for n in store.cause_nodes() if n.year == year)


class TestProject:
    """tests for project()."""

    def test_nodes_and_size(self, sample_store):
        frame = project(sample_store)
        assert frame.width == 800
        assert frame.height == 680
        assert len(frame.nodes) == 3

    def test_is_pure(self, sample_store):
        """same state, same frame."""
        assert project(sample_store).to_dict() == project(sample_store).to_dict()

    def test_year_label(self, sample_store):
        frame = project(sample_store)
        by_id = {v.id: v for v in frame.nodes}
        a = _cause(sample_store, 1985)
        assert by_id[a.id].year_label == "Year: 1985"
        assert by_id[OUTCOME_ID].year_label is None

    def test_link_between_centers(self, sample_store):
        a, b = _cause(sample_store, 1985), _cause(sample_store, 1990)
        sample_store.link_nodes(a.id, b.id)
        frame = project(sample_store)
        link = frame.links[0]
        assert (link.x1, link.y1) == (a.x + 90, a.y + 30)
        assert (link.x2, link.y2) == (b.x + 90, b.y + 30)
        assert not link.highlighted

    def test_selection_highlights(self, sample_store):
        a, b = _cause(sample_store, 1985), _cause(sample_store, 1990)
        sample_store.link_nodes(a.id, b.id)
        frame = project(sample_store, selected_id=a.id)
        view = next(v for v in frame.nodes if v.id == a.id)
        assert view.is_selected
        assert view.deletable
        assert frame.links[0].highlighted

    def test_selected_outcome_not_deletable(self, sample_store):
        frame = project(sample_store, selected_id=OUTCOME_ID)
        view = next(v for v in frame.nodes if v.id == OUTCOME_ID)
        assert view.is_selected
        assert not view.deletable

    def test_dragging_flag(self, sample_store):
        a = _cause(sample_store, 1985)
        frame = project(sample_store, dragging_id=a.id)
        assert [v.id for v in frame.nodes if v.is_dragging] == [a.id]

    def test_dangling_link_skipped(self, sample_store):
        a = _cause(sample_store, 1985)
        sample_store.map.links.append(Link.create(a.id, "ghost"))
        assert project(sample_store).links == []

    def test_ticks_mark_used_years(self, sample_store):
        frame = project(sample_store)
        assert [t.year for t in frame.ticks] == [1990, 1989, 1988, 1987, 1986, 1985]
        assert {t.year for t in frame.ticks if t.used} == {1985, 1990}

    def test_connectors_only_in_range(self, sample_store):
        sample_store.add_cause_node("Ancient (1900)")
        frame = project(sample_store)
        assert len(frame.connectors) == 2
        conn = frame.connectors[0]
        assert conn.x1 == TIMELINE_X
        assert conn.x2 == 250

    def test_node_at(self, sample_store):
        a = _cause(sample_store, 1985)
        frame = project(sample_store)
        assert frame.node_at(a.x + 1, a.y + 1).id == a.id
        assert frame.node_at(790, 670) is None


class TestRasterize:
    """tests for drawing a frame into terminal cells."""

    def test_cell_mapping(self):
        assert to_cell(255, 585) == (25, 29)
        assert to_cell(*to_canvas(25, 29)) == (25, 29)

    def test_grid_size(self, sample_store):
        grid = rasterize(project(sample_store))
        assert (grid.cols, grid.rows) == (80, 34)

    def test_ticks_and_labels(self, sample_store):
        lines = rasterize(project(sample_store)).lines()
        assert lines[9].startswith("1990 ─")
        assert lines[29].startswith("1985 ─")
        assert "Reforms announced (1985)"[:16] in lines[30]

    def test_selected_node_shows_delete_hint(self, sample_store):
        a = _cause(sample_store, 1985)
        lines = rasterize(project(sample_store, selected_id=a.id)).lines()
        assert "[d]" in lines[31]
