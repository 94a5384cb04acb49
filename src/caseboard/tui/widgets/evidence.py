"""evidence panel: the case's evidence cards. enter drops one on the board."""

from __future__ import annotations

from typing import Optional

from textual.containers import Vertical
from textual.message import Message
from textual.widgets import OptionList, Static

from ...core.cases import Case


class EvidenceChosen(Message):
    """message emitted when an evidence card is picked for dropping."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__()


class EvidencePanel(Vertical):
    """case headline and evidence list."""

    DEFAULT_CSS = """
    EvidencePanel {
        width: 36;
        border: solid $surface-lighten-2;
        padding: 0 1;
    }

    EvidencePanel .label {
        text-style: bold;
        margin-bottom: 1;
    }

    EvidencePanel #evidence-list {
        height: 1fr;
    }
    """

    def __init__(self, case: Case, **kwargs) -> None:
        super().__init__(**kwargs)
        self.case = case

    def compose(self):
        yield Static(self.case.title, classes="label")
        if self.case.description:
            yield Static(self.case.description)
        yield Static("evidence", classes="label")
        yield OptionList(*self.case.evidence, id="evidence-list")

    @property
    def highlighted_text(self) -> Optional[str]:
        options = self.query_one("#evidence-list", OptionList)
        if options.highlighted is None:
            return None
        return self.case.evidence[options.highlighted]

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.post_message(EvidenceChosen(self.case.evidence[event.option_index]))
