"""challenger chat: transcript handling and the gateway to the llm.

the chatbot never sees the "loading" placeholder turns; transport
failures come back as a fixed error string instead of an exception.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Callable, Iterable, Optional, Union

from .client import ClientProtocol
from .store import MindMapStore

logger = logging.getLogger(__name__)


# --- configuration ---

DEFAULT_CHAT_TIMEOUT = 60.0  # seconds
WELCOME_MESSAGE = (
    "Welcome, Detective. Which piece of evidence is the most compelling cause "
    "of the outcome? Drag it onto the canvas to begin!"
)
LOADING_MESSAGE = "AI Challenger is thinking..."
CHAT_ERROR_REPLY = "System error: Failed to get response from Challenger AI."


@dataclass
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> ChatMessage:
        return cls(role=str(d.get("role", "user")), content=str(d.get("content", "")))


MessageLike = Union[ChatMessage, dict]


def summarize_map(store: MindMapStore) -> str:
    """plain-text outline of the map for the challenger prompt."""
    lines = []
    outcome = store.outcome
    if outcome:
        lines.append(f"outcome: {outcome.text}")

    causes = sorted(store.cause_nodes(), key=lambda n: (n.year is None, n.year or 0))
    if causes:
        lines.append("causes:")
        for node in causes:
            lines.append(f"- {node.text}")
    else:
        lines.append("causes: (none yet)")

    names = {n.id: n.text for n in store.nodes}
    if store.links:
        lines.append("links:")
        for link in store.links:
            lines.append(f"- {names.get(link.source, link.source)} <-> {names.get(link.target, link.target)}")
    return "\n".join(lines)


def build_prompt(
    transcript: Iterable[ChatMessage],
    case_title: str,
    map_summary: Optional[str] = None,
) -> str:
    """assemble the challenger prompt from the conversation so far."""
    turns = []
    for msg in transcript:
        if msg.role == "loading":
            continue
        speaker = "Student" if msg.role == "user" else "Challenger"
        turns.append(f"{speaker}: {msg.content}")

    map_section = f"\n\ntheir current causal map:\n{map_summary}" if map_summary else ""

    return f"""you are the AI Challenger, a socratic tutor helping a student build a causal map for the case "{case_title}".
never hand over the answer. probe the student's reasoning: ask about timing, mechanism, and alternative explanations.
keep replies under 80 words and end with one question.{map_section}

conversation so far:

{chr(10).join(turns)}

reply as the Challenger."""


class ChatGateway:
    """exchanges a transcript for one assistant reply."""

    def __init__(self, client: ClientProtocol, timeout: float = DEFAULT_CHAT_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def send_chat(
        self,
        transcript: Iterable[MessageLike],
        case_title: str,
        map_summary: Optional[str] = None,
    ) -> str:
        """reply text, or CHAT_ERROR_REPLY on any transport failure."""
        messages = [m if isinstance(m, ChatMessage) else ChatMessage.from_dict(m) for m in transcript]
        prompt = build_prompt(messages, case_title, map_summary)
        try:
            reply = await asyncio.wait_for(self.client.complete(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("chat request timed out after %ss", self.timeout)
            return CHAT_ERROR_REPLY
        except Exception:
            logger.exception("chat request failed")
            return CHAT_ERROR_REPLY
        return reply.strip() or CHAT_ERROR_REPLY


class ChatTranscript:
    """the running conversation for one editor session."""

    def __init__(self, on_change: Optional[Callable[[], None]] = None):
        self.messages: list[ChatMessage] = [ChatMessage("assistant", WELCOME_MESSAGE)]
        self.on_change = on_change or (lambda: None)

    @property
    def is_waiting(self) -> bool:
        return bool(self.messages) and self.messages[-1].role == "loading"

    def api_messages(self) -> list[ChatMessage]:
        """the transcript as sent to the model."""
        return [m for m in self.messages if m.role != "loading"]

    async def submit(
        self,
        message: str,
        gateway: ChatGateway,
        case_title: str,
        map_summary: Optional[str] = None,
    ) -> Optional[str]:
        """add a user turn and wait for the reply. blank messages are ignored."""
        message = (message or "").strip()
        if not message or self.is_waiting:
            return None

        self.messages.append(ChatMessage("user", message))
        self.on_change()

        outgoing = self.api_messages()
        self.messages.append(ChatMessage("loading", LOADING_MESSAGE))
        self.on_change()

        try:
            reply = await gateway.send_chat(outgoing, case_title, map_summary)
        finally:
            if self.is_waiting:
                self.messages.pop()

        self.messages.append(ChatMessage("assistant", reply))
        self.on_change()
        return reply

    def to_list(self) -> list[dict]:
        return [m.to_dict() for m in self.messages]
