"""caseboard tui widgets."""

from .board import Board, BoardChanged
from .chat import ChatPanel, ChatSubmitted
from .evidence import EvidencePanel, EvidenceChosen

__all__ = [
    "Board",
    "BoardChanged",
    "ChatPanel",
    "ChatSubmitted",
    "EvidencePanel",
    "EvidenceChosen",
]
