"""case catalogue: the scenarios a user can investigate."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .timeline import DEFAULT_END_YEAR, DEFAULT_START_YEAR, TimelineRange


@dataclass
class Case:
    """a fixed scenario: what happened, and the evidence on offer."""

    id: str
    title: str
    headline: str  # becomes the outcome node's text
    description: str = ""
    difficulty: str = "Standard"
    evidence: list[str] = field(default_factory=list)
    timeline_start: int = DEFAULT_START_YEAR
    timeline_end: int = DEFAULT_END_YEAR

    @property
    def timeline(self) -> TimelineRange:
        return TimelineRange(self.timeline_start, self.timeline_end).normalized()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "headline": self.headline,
            "description": self.description,
            "difficulty": self.difficulty,
            "evidence": list(self.evidence),
            "timeline_start": self.timeline_start,
            "timeline_end": self.timeline_end,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Case:
        """evidence may be plain strings or {"text": ...} objects."""
        evidence = [e["text"] if isinstance(e, dict) else str(e) for e in d.get("evidence", [])]
        return cls(
            id=str(d["id"]),
            title=d["title"],
            headline=d["headline"],
            description=d.get("description", ""),
            difficulty=d.get("difficulty", "Standard"),
            evidence=evidence,
            timeline_start=int(d.get("timeline_start", DEFAULT_START_YEAR)),
            timeline_end=int(d.get("timeline_end", DEFAULT_END_YEAR)),
        )


BUILTIN_CASES: dict[str, Case] = {
    "berlin-wall": Case(
        id="berlin-wall",
        title="The Fall of the Wall",
        headline="The Berlin Wall opens (1989)",
        description="Why did the border between East and West Berlin open almost overnight?",
        difficulty="Standard",
        evidence=[
            "Gorbachev announces glasnost and perestroika (1986)",
            "Soviet troops begin leaving Afghanistan (1988)",
            "Hungary dismantles its border fence with Austria (1989)",
            "East German economy stagnates under foreign debt",
            "Monday demonstrations grow in Leipzig (1989)",
            "Press conference announces relaxed travel rules (1989)",
        ],
        timeline_start=1985,
        timeline_end=1990,
    ),
    "dust-bowl": Case(
        id="dust-bowl",
        title="Black Sunday",
        headline="The Great Plains dust storms peak (1935)",
        description="What turned the southern plains into a dust bowl?",
        difficulty="Advanced",
        evidence=[
            "Wheat prices soar during the First World War (1917)",
            "Tractors make plowing virgin grassland cheap (1925)",
            "Wheat prices collapse with the Depression (1930)",
            "Severe drought begins across the plains (1931)",
            "Farmers abandon plowed fields without cover crops",
        ],
        timeline_start=1915,
        timeline_end=1936,
    ),
}


def load_cases(path: Path) -> dict[str, Case]:
    """load cases from a json list file."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("cases", [])
    cases = [Case.from_dict(d) for d in data]
    return {c.id: c for c in cases}


def list_cases(cases: Optional[dict[str, Case]] = None) -> list[Case]:
    return list((cases if cases is not None else BUILTIN_CASES).values())


def get_case(case_id: str, cases: Optional[dict[str, Case]] = None) -> Optional[Case]:
    """get a case by id."""
    return (cases if cases is not None else BUILTIN_CASES).get(case_id)
