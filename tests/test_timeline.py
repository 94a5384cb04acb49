"""tests for timeline geometry."""

from caseboard.core.timeline import (
    TimelineRange,
    embed_year,
    extract_year,
    parse_year,
    parse_year_input,
    required_canvas_height,
    strip_year,
    used_years,
    y_to_closest_year,
    year_lines,
    year_to_y,
)


class TestYearToY:
    """tests for year -> pixel mapping."""

    def test_end_year_at_top_offset(self, timeline):
        """latest year sits on the top offset."""
        assert year_to_y(1990, timeline) == 180

    def test_start_year_at_bottom(self, timeline):
        """earliest year is span * pixels below the top."""
        assert year_to_y(1985, timeline) == 580

    def test_later_years_are_higher(self, timeline):
        """strictly decreasing y as year increases."""
        ys = [year_to_y(year, timeline) for year in range(1985, 1991)]
        assert ys == sorted(ys, reverse=True)
        assert len(set(ys)) == len(ys)

    def test_custom_spacing(self):
        """top offset and pixels per year are honored."""
        rng = TimelineRange(2000, 2002, top_offset=10, pixels_per_year=5)
        assert year_to_y(2000, rng) == 20


class TestClosestYear:
    """tests for pixel -> nearest year."""

    def test_exact_line(self, timeline):
        """a y on a line maps back to that year."""
        for year in range(1985, 1991):
            assert y_to_closest_year(year_to_y(year, timeline), timeline) == year

    def test_nearest_line(self, timeline):
        """picks the nearer of two lines."""
        assert y_to_closest_year(350, timeline) == 1988
        assert y_to_closest_year(400, timeline) == 1987

    def test_tie_goes_to_later_year(self, timeline):
        """halfway between two lines picks the later year."""
        assert y_to_closest_year(380, timeline) == 1988

    def test_clamps_outside_range(self, timeline):
        """above the top -> end year, below the bottom -> start year."""
        assert y_to_closest_year(-500, timeline) == 1990
        assert y_to_closest_year(5000, timeline) == 1985


class TestYearText:
    """tests for reading and writing years in labels."""

    def test_parse_year(self):
        assert parse_year("Drought (1987)") == 1987
        assert parse_year("Drought 1987") is None
        assert parse_year("") is None

    def test_extract_year_falls_back_to_midpoint(self, timeline):
        """no year in text -> middle of the range, rounded down."""
        assert extract_year("Unrest spreads", timeline) == 1987
        assert extract_year("Unrest spreads (1986)", timeline) == 1986

    def test_embed_appends(self):
        assert embed_year("Drought", 1988) == "Drought (1988)"

    def test_embed_replaces(self):
        assert embed_year("Drought (1987)", 1988) == "Drought (1988)"

    def test_embed_is_idempotent(self):
        """embedding the same year twice never duplicates it."""
        once = embed_year("Drought", 1988)
        assert embed_year(once, 1988) == once

    def test_embed_collapses_extra_years(self):
        """only one parenthesized year survives."""
        assert embed_year("A (1987) b (1986)", 1990) == "A (1990) b"

    def test_embed_empty_text(self):
        assert embed_year("", 1988) == "(1988)"

    def test_strip_year(self):
        assert strip_year("Drought (1987)") == "Drought"


class TestTimelineRange:
    """tests for the range itself."""

    def test_required_height(self, timeline):
        """top offset + span * pixels + bottom margin."""
        assert required_canvas_height(timeline) == 180 + 5 * 80 + 100

    def test_normalized_inverted_range(self):
        """end before start is clamped to a one-year span."""
        rng = TimelineRange(1990, 1985).normalized()
        assert rng.start_year == 1990
        assert rng.end_year == 1991

    def test_normalized_valid_range_unchanged(self, timeline):
        assert timeline.normalized() is timeline

    def test_year_lines_latest_first(self, timeline):
        lines = year_lines(timeline)
        assert lines[0] == (1990, 180)
        assert lines[-1] == (1985, 580)
        assert len(lines) == 6

    def test_used_years_ignores_out_of_range(self, timeline):
        assert used_years([1987, None, 1970, 1990], timeline) == {1987, 1990}

    def test_to_dict(self, timeline):
        assert timeline.to_dict() == {"startYear": 1985, "endYear": 1990}


class TestYearInput:
    """tests for parsing typed years."""

    def test_valid(self):
        assert parse_year_input(" 1986 ", 1987) == 1986

    def test_blank_or_garbage_uses_default(self):
        assert parse_year_input("", 1987) == 1987
        assert parse_year_input(None, 1987) == 1987
        assert parse_year_input("soon", 1987) == 1987
