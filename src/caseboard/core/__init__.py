"""core primitives shared between frontends."""

from .timeline import (
    TimelineRange,
    year_to_y,
    y_to_closest_year,
    extract_year,
    embed_year,
    parse_year,
    required_canvas_height,
)
from .models import CanvasGeometry, Link, MindMap, Node, NodeType, OUTCOME_ID
from .store import MindMapStore
from .gestures import GestureEvent, Phase, Pointer, from_mouse, from_touch
from .controller import ControllerConfig, InteractionController, PendingYearInput, State
from .render import RenderFrame, project
from .persistence import (
    FilePersistence,
    InMemoryPersistence,
    PersistenceError,
    PersistenceGateway,
    get_data_dir,
)
from .client import ClaudeClient, MockClient, ClientProtocol
from .chat import ChatGateway, ChatMessage, ChatTranscript
from .cases import Case, BUILTIN_CASES, get_case, list_cases, load_cases
from .session import EditorSession

__all__ = [
    # timeline
    "TimelineRange",
    "year_to_y",
    "y_to_closest_year",
    "extract_year",
    "embed_year",
    "parse_year",
    "required_canvas_height",
    # models
    "CanvasGeometry",
    "Link",
    "MindMap",
    "Node",
    "NodeType",
    "OUTCOME_ID",
    # editor
    "MindMapStore",
    "GestureEvent",
    "Phase",
    "Pointer",
    "from_mouse",
    "from_touch",
    "ControllerConfig",
    "InteractionController",
    "PendingYearInput",
    "State",
    "RenderFrame",
    "project",
    "EditorSession",
    # gateways
    "FilePersistence",
    "InMemoryPersistence",
    "PersistenceError",
    "PersistenceGateway",
    "get_data_dir",
    "ClaudeClient",
    "MockClient",
    "ClientProtocol",
    "ChatGateway",
    "ChatMessage",
    "ChatTranscript",
    # cases
    "Case",
    "BUILTIN_CASES",
    "get_case",
    "list_cases",
    "load_cases",
]
