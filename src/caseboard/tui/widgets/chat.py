"""chat panel: the challenger conversation plus an input line."""

from __future__ import annotations

from rich.text import Text
from textual.containers import Vertical, VerticalScroll
from textual.message import Message
from textual.widgets import Input, Static

from ...core.chat import ChatMessage


class ChatSubmitted(Message):
    """message emitted when the user sends a chat line."""

    def __init__(self, content: str) -> None:
        self.content = content
        super().__init__()


def _message_text(msg: ChatMessage) -> Text:
    if msg.role == "user":
        return Text.assemble(("you: ", "bold"), msg.content)
    if msg.role == "loading":
        return Text(msg.content, style="italic dim")
    return Text.assemble(("challenger: ", "bold cyan"), msg.content)


class ChatPanel(Vertical):
    """transcript + input."""

    DEFAULT_CSS = """
    ChatPanel {
        width: 40;
        border: solid $surface-lighten-2;
        padding: 0 1;
    }

    ChatPanel .label {
        text-style: bold;
        margin-bottom: 1;
    }

    ChatPanel #chat-log {
        height: 1fr;
    }

    ChatPanel .chat-message {
        margin-bottom: 1;
    }
    """

    def __init__(self, messages: list[ChatMessage], **kwargs) -> None:
        super().__init__(**kwargs)
        self.messages = messages

    def compose(self):
        yield Static("ai challenger", classes="label")
        with VerticalScroll(id="chat-log"):
            for msg in self.messages:
                yield Static(_message_text(msg), classes="chat-message")
        yield Input(placeholder="argue your case...", id="chat-input")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "chat-input":
            return
        event.stop()
        content = event.input.value.strip()
        if content:
            self.post_message(ChatSubmitted(content))
            event.input.value = ""

    async def refresh_messages(self, messages: list[ChatMessage]) -> None:
        """redraw the transcript."""
        self.messages = list(messages)
        log = self.query_one("#chat-log", VerticalScroll)
        await log.remove_children()
        await log.mount_all(
            Static(_message_text(m), classes="chat-message") for m in self.messages
        )
        log.scroll_end(animate=False)
