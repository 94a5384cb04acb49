"""timeline geometry: calendar years <-> vertical pixel positions.

the latest year sits nearest the top of the canvas, the earliest nearest
the bottom. everything here is pure; the store owns the active range.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Iterable, Optional


# --- configuration ---

DEFAULT_START_YEAR = 1985
DEFAULT_END_YEAR = 1990
DEFAULT_TOP_OFFSET = 180      # y of the end-year line
DEFAULT_PIXELS_PER_YEAR = 80
DEFAULT_BOTTOM_MARGIN = 100

YEAR_PATTERN = re.compile(r"\((\d{4})\)")
_YEAR_WITH_SPACE = re.compile(r"\s*\(\d{4}\)")


@dataclass(frozen=True)
class TimelineRange:
    """the visible year window and its vertical layout."""

    start_year: int = DEFAULT_START_YEAR
    end_year: int = DEFAULT_END_YEAR
    top_offset: int = DEFAULT_TOP_OFFSET
    pixels_per_year: int = DEFAULT_PIXELS_PER_YEAR
    bottom_margin: int = DEFAULT_BOTTOM_MARGIN

    def normalized(self) -> TimelineRange:
        """clamp to a minimum 1-year span (end before start is invalid)."""
        if self.end_year - self.start_year >= 1:
            return self
        return replace(self, end_year=self.start_year + 1)

    @property
    def span(self) -> int:
        return self.end_year - self.start_year

    @property
    def midpoint(self) -> int:
        """middle year, rounded down."""
        return (self.start_year + self.end_year) // 2

    def contains(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year

    def to_dict(self) -> dict:
        return {"startYear": self.start_year, "endYear": self.end_year}


def year_to_y(year: int, rng: TimelineRange) -> int:
    """pixel y of a year's timeline line."""
    return rng.top_offset + (rng.end_year - year) * rng.pixels_per_year


def y_to_closest_year(pixel_y: float, rng: TimelineRange) -> int:
    """year whose line is nearest to pixel_y.

    scans from the latest year down and only replaces on a strictly smaller
    distance, so ties go to the later (higher on screen) year.
    """
    closest = rng.end_year
    closest_distance = float("inf")
    for year in range(rng.end_year, rng.start_year - 1, -1):
        distance = abs(pixel_y - year_to_y(year, rng))
        if distance < closest_distance:
            closest_distance = distance
            closest = year
    return closest


def parse_year(text: str) -> Optional[int]:
    """parenthesized 4-digit year in text, e.g. "Drought (1987)" -> 1987."""
    match = YEAR_PATTERN.search(text or "")
    if match:
        return int(match.group(1))
    return None


def extract_year(text: str, rng: TimelineRange) -> int:
    """parsed year, or the range midpoint when the text carries none."""
    year = parse_year(text)
    if year is None:
        return rng.midpoint
    return year


def strip_year(text: str) -> str:
    """remove every parenthesized year from text."""
    return _YEAR_WITH_SPACE.sub("", text or "").strip()


def embed_year(text: str, year: int) -> str:
    """write year into text as "(YYYY)", replacing rather than duplicating."""
    text = text or ""
    match = YEAR_PATTERN.search(text)
    if not match:
        base = text.rstrip()
        return f"{base} ({year})" if base else f"({year})"

    head = text[:match.start()]
    tail = _YEAR_WITH_SPACE.sub("", text[match.end():])
    return f"{head}({year}){tail}"


def required_canvas_height(rng: TimelineRange) -> int:
    """canvas height that fits every year line plus the bottom margin."""
    return rng.top_offset + rng.span * rng.pixels_per_year + rng.bottom_margin


def year_lines(rng: TimelineRange) -> list[tuple[int, int]]:
    """(year, y) for each line, latest first."""
    return [
        (year, year_to_y(year, rng))
        for year in range(rng.end_year, rng.start_year - 1, -1)
    ]


def used_years(years: Iterable[Optional[int]], rng: TimelineRange) -> set[int]:
    """years that fall inside the range; these get highlighted."""
    return {y for y in years if y is not None and rng.contains(y)}


def parse_year_input(raw: Optional[str], default: int) -> int:
    """parse a year typed by the user, falling back to default."""
    if raw is None:
        return default
    raw = raw.strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default
