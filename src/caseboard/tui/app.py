"""caseboard: main textual application.

evidence on the left, the causal map in the middle, the challenger on
the right. every edit saves immediately.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, ScrollableContainer, Vertical
from textual.widgets import Footer, Header, Input, Static

from ..core.cases import BUILTIN_CASES, Case, get_case, load_cases
from ..core.chat import ChatGateway
from ..core.client import ClaudeClient, ClientProtocol, MockClient
from ..core.controller import State
from ..core.persistence import FilePersistence, PersistenceGateway, get_data_dir
from ..core.session import EditorSession
from ..core.timeline import parse_year
from .widgets.board import Board, BoardChanged
from .widgets.chat import ChatPanel, ChatSubmitted
from .widgets.evidence import EvidenceChosen, EvidencePanel

# what the prompt line is currently asking for
PROMPT_YEAR = "year"
PROMPT_TIMELINE = "timeline"
PROMPT_RELABEL = "relabel"


def parse_year_pair(raw: str) -> Optional[tuple[int, int]]:
    """'1980-1995' or '1980 1995' -> (1980, 1995)."""
    parts = raw.replace("-", " ").replace(",", " ").split()
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


class CaseboardApp(App):
    """main application."""

    TITLE = "caseboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-container {
        height: 1fr;
    }

    #board-scroll {
        width: 1fr;
        border: solid $primary;
    }

    #status {
        height: 1;
        padding: 0 1;
        background: $surface;
    }

    #prompt {
        display: none;
        height: auto;
        padding: 0 1;
        border: solid $accent;
    }

    #prompt.visible {
        display: block;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "quit"),
        Binding("a", "drop", "add evidence"),
        Binding("d", "delete", "delete"),
        Binding("t", "timeline", "timeline"),
        Binding("r", "relabel", "relabel year"),
        Binding("escape", "cancel", "cancel"),
    ]

    def __init__(
        self,
        case: Case,
        persistence: PersistenceGateway,
        client: ClientProtocol,
    ):
        super().__init__()
        self.case = case
        self.session = EditorSession(case, persistence, ChatGateway(client))
        self._prompt_mode: Optional[str] = None

    def compose(self) -> ComposeResult:
        """compose the app layout."""
        yield Header()

        with Horizontal(id="main-container"):
            yield EvidencePanel(self.case, id="evidence")
            with Vertical():
                with ScrollableContainer(id="board-scroll"):
                    yield Board(self.session, id="board")
                with Vertical(id="prompt"):
                    yield Static("", id="prompt-label")
                    yield Input(id="prompt-input")
                yield Static("", id="status")
            yield ChatPanel(self.session.transcript.messages, id="chat")

        yield Footer()

    async def on_mount(self) -> None:
        """open the case on mount."""
        self.sub_title = self.case.headline
        self.session.open()
        self.session.transcript.on_change = self._on_transcript_change
        self._refresh_all()
        if self.session.save_failures:
            self.notify("could not save map; working locally", severity="warning")

    async def on_unmount(self) -> None:
        """detach from persistence on quit."""
        self.session.close()

    # --- board ---

    def on_board_changed(self, event: BoardChanged) -> None:
        self._refresh_status()

    def _refresh_all(self) -> None:
        self.query_one("#board", Board).refresh(layout=True)
        self._refresh_status()

    def _refresh_status(self) -> None:
        status = self.session.store.finalize_status()
        timeline = self.session.store.timeline
        parts = [
            f"{timeline.start_year}-{timeline.end_year}",
            f"causes {status['cause_count']}",
            f"links {status['link_count']}",
        ]
        if status["can_finalize"]:
            parts.append("ready to finalize")
        else:
            parts.append(f"need {status['causes_needed']} causes, {status['links_needed']} links")
        if self.session.save_failures:
            parts.append(f"save failures: {self.session.save_failures}")
        self.query_one("#status", Static).update("  |  ".join(parts))

    # --- evidence drop ---

    def on_evidence_chosen(self, event: EvidenceChosen) -> None:
        self._drop(event.text)

    def action_drop(self) -> None:
        """drop the highlighted evidence card."""
        text = self.query_one("#evidence", EvidencePanel).highlighted_text
        if not text:
            self.notify("highlight some evidence first", severity="warning")
            return
        self._drop(text)

    def _drop(self, text: str) -> None:
        controller = self.session.controller
        if controller.state != State.IDLE:
            return
        controller.drop(text)
        pending = controller.pending
        if pending:
            self._show_prompt(
                PROMPT_YEAR,
                f"what year? (default {pending.default_year})",
                str(pending.default_year),
            )

    # --- prompt line ---

    def _show_prompt(self, mode: str, label: str, value: str = "") -> None:
        self._prompt_mode = mode
        self.query_one("#prompt-label", Static).update(label)
        prompt_input = self.query_one("#prompt-input", Input)
        prompt_input.value = value
        self.query_one("#prompt").add_class("visible")
        prompt_input.focus()

    def _hide_prompt(self) -> None:
        self._prompt_mode = None
        self.query_one("#prompt").remove_class("visible")
        self.query_one("#board", Board).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """handle prompt submission."""
        if event.input.id != "prompt-input":
            return
        raw = event.input.value.strip()
        mode = self._prompt_mode
        self._hide_prompt()

        if mode == PROMPT_YEAR:
            node = self.session.controller.provide_year(raw)
            if node:
                self.notify(f"added: {node.label()}")
        elif mode == PROMPT_TIMELINE:
            pair = parse_year_pair(raw)
            if not pair:
                self.notify("expected two years, e.g. 1980-1995", severity="error")
                return
            rng = self.session.controller.retimeline(*pair)
            self.notify(f"timeline {rng.start_year}-{rng.end_year}")
        elif mode == PROMPT_RELABEL:
            pair = parse_year_pair(raw)
            if not pair:
                self.notify("expected old and new year, e.g. 1987 1988", severity="error")
                return
            changed = self.session.controller.relabel_year(*pair)
            self.notify(f"moved {changed} node(s)")

        self._refresh_all()

    def action_cancel(self) -> None:
        """dismiss the prompt (and any pending drop)."""
        if self._prompt_mode == PROMPT_YEAR:
            self.session.controller.cancel_pending()
        if self._prompt_mode:
            self._hide_prompt()
            self._refresh_all()

    # --- other edits ---

    def action_delete(self) -> None:
        """delete the selected cause."""
        if self._prompt_mode:
            return
        if not self.session.controller.delete_selected():
            self.notify("select a cause node first", severity="warning")
            return
        self._refresh_all()

    def action_timeline(self) -> None:
        timeline = self.session.store.timeline
        self._show_prompt(
            PROMPT_TIMELINE,
            "timeline range (start-end)",
            f"{timeline.start_year}-{timeline.end_year}",
        )

    def action_relabel(self) -> None:
        selected = self.session.store.get_node(self.session.controller.selected_id)
        old = selected.year if selected and selected.year is not None else parse_year(self.case.headline)
        self._show_prompt(PROMPT_RELABEL, "relabel year (old new)", f"{old} " if old else "")

    # --- chat ---

    def on_chat_submitted(self, event: ChatSubmitted) -> None:
        if self.session.transcript.is_waiting:
            self.notify("the challenger is still thinking", severity="warning")
            return
        self.run_worker(self.session.send_chat(event.content), exclusive=True)

    def _on_transcript_change(self) -> None:
        chat = self.query_one("#chat", ChatPanel)
        self.call_later(chat.refresh_messages, self.session.transcript.messages)


def run(
    case_id: str = "berlin-wall",
    data_dir: Optional[Path] = None,
    cases_path: Optional[Path] = None,
    mock: bool = False,
) -> None:
    """run the caseboard app."""
    cases = load_cases(cases_path) if cases_path else BUILTIN_CASES
    case = get_case(case_id, cases)
    if not case:
        raise SystemExit(f"unknown case: {case_id} (known: {', '.join(cases)})")

    persistence = FilePersistence((data_dir or get_data_dir()) / "mindmaps")
    client: ClientProtocol = MockClient() if mock else ClaudeClient()
    app = CaseboardApp(case, persistence, client)
    app.run()


if __name__ == "__main__":
    run()
