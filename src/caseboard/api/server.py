"""fastapi server for caseboard.

serves the mind-map persistence backend, the challenger chat proxy, and
the editor core (gestures, selection, drops, timeline) as REST endpoints.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from ..core.cases import BUILTIN_CASES, Case, get_case, list_cases, load_cases
from ..core.chat import DEFAULT_CHAT_TIMEOUT, ChatGateway, ChatMessage
from ..core.client import ClaudeClient, ClientProtocol, MockClient
from ..core.gestures import from_raw
from ..core.persistence import (
    FilePersistence,
    InMemoryPersistence,
    PersistenceError,
    PersistenceGateway,
    get_data_dir,
)
from ..core.render import RenderFrame
from ..core.session import EditorSession

logger = logging.getLogger(__name__)


# --- pydantic models for api ---

class MindMapDocument(BaseModel):
    """persisted map body; lastUpdated is accepted and ignored."""
    model_config = ConfigDict(extra="ignore")

    nodes: list[dict] = []
    links: list[dict] = []


class ChatMessageModel(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    """request to the challenger chat proxy."""
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessageModel]
    current_case_title: str = Field("", alias="currentCaseTitle")


class OpenCase(BaseModel):
    case_id: str


class GestureRequest(BaseModel):
    """raw pointer event, e.g. {"type": "mousedown", "x": 10, "y": 20, "t": 0}."""
    type: str
    x: float
    y: float
    t: float = 0.0
    node_id: Optional[str] = None


class TickRequest(BaseModel):
    t: float


class DropRequest(BaseModel):
    """evidence dropped on the canvas."""
    text: str
    prompt: bool = True
    canvas_present: bool = True


class YearInput(BaseModel):
    value: Optional[str] = None


class TimelineUpdate(BaseModel):
    start_year: int
    end_year: int


class RelabelYear(BaseModel):
    old_year: int
    new_year: int


class ChatSubmit(BaseModel):
    message: str


class CaseInfo(BaseModel):
    """case summary for listing."""
    id: str
    title: str
    headline: str
    description: str
    difficulty: str
    evidence: list[str]
    timeline_start: int
    timeline_end: int

    @classmethod
    def from_case(cls, case: Case) -> "CaseInfo":
        return cls(**case.to_dict())


class NodeViewModel(BaseModel):
    id: str
    label: str
    year_label: Optional[str]
    x: float
    y: float
    width: int
    height: int
    is_outcome: bool
    is_selected: bool
    is_dragging: bool
    deletable: bool


class LinkViewModel(BaseModel):
    id: str
    x1: float
    y1: float
    x2: float
    y2: float
    highlighted: bool


class TickModel(BaseModel):
    year: int
    y: int
    used: bool


class ConnectorModel(BaseModel):
    node_id: str
    x1: float
    x2: float
    y: int


class PendingModel(BaseModel):
    text: str
    default_year: int


class FrameResponse(BaseModel):
    """everything a view needs to redraw the editor."""
    case_id: str
    state: str
    width: int
    height: int
    start_year: int
    end_year: int
    selected_id: Optional[str]
    pending: Optional[PendingModel] = None
    nodes: list[NodeViewModel]
    links: list[LinkViewModel]
    ticks: list[TickModel]
    connectors: list[ConnectorModel]

    @classmethod
    def from_session(cls, session: EditorSession) -> "FrameResponse":
        frame: RenderFrame = session.frame()
        data = frame.to_dict()
        pending = session.controller.pending
        timeline = session.store.timeline
        return cls(
            case_id=session.case.id,
            state=session.controller.state.value,
            width=frame.width,
            height=frame.height,
            start_year=timeline.start_year,
            end_year=timeline.end_year,
            selected_id=frame.selected_id,
            pending=PendingModel(text=pending.text, default_year=pending.default_year) if pending else None,
            nodes=[NodeViewModel(**n) for n in data["nodes"]],
            links=[LinkViewModel(**l) for l in data["links"]],
            ticks=[TickModel(**t) for t in data["ticks"]],
            connectors=[ConnectorModel(**c) for c in data["connectors"]],
        )


class StatusResponse(BaseModel):
    """finalize gate for the open map."""
    cause_count: int
    link_count: int
    causes_needed: int
    links_needed: int
    can_finalize: bool


# --- app state ---

class AppState:
    """shared application state: gateways plus at most one open case."""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        cases: Optional[dict[str, Case]] = None,
        mock: bool = False,
        chat_timeout: float = DEFAULT_CHAT_TIMEOUT,
        persistence: Optional[PersistenceGateway] = None,
    ):
        if persistence is not None:
            self.persistence = persistence
        elif data_dir is not None:
            self.persistence = FilePersistence(Path(data_dir) / "mindmaps")
        else:
            self.persistence = InMemoryPersistence()
        self.cases = cases if cases is not None else dict(BUILTIN_CASES)
        self.mock = mock
        self.chat_timeout = chat_timeout
        self.session: Optional[EditorSession] = None
        self._client: Optional[ClientProtocol] = None

    @property
    def client(self) -> ClientProtocol:
        if self._client is None:
            if self.mock:
                self._client = MockClient()
            else:
                self._client = ClaudeClient()
        return self._client

    @property
    def chat(self) -> ChatGateway:
        return ChatGateway(self.client, timeout=self.chat_timeout)

    def open_case(self, case: Case) -> EditorSession:
        """close whatever is open, then open case."""
        self.close_case()
        self.session = EditorSession(case, self.persistence, self.chat).open()
        return self.session

    def close_case(self) -> None:
        if self.session:
            self.session.close()
            self.session = None


state = AppState()


def _session() -> EditorSession:
    """helper to get the open session or 404."""
    if not state.session:
        raise HTTPException(status_code=404, detail="no case open")
    return state.session


def _frame() -> FrameResponse:
    return FrameResponse.from_session(_session())


# --- lifespan ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # shutdown: detach live updates
    state.close_case()


# --- app ---

app = FastAPI(
    title="caseboard api",
    description="REST API for the caseboard causal-map editor",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- endpoints ---

@app.get("/health")
async def health():
    """health check."""
    return {"status": "ok"}


@app.get("/cases", response_model=list[CaseInfo])
async def get_cases():
    """list available cases."""
    return [CaseInfo.from_case(c) for c in list_cases(state.cases)]


# --- persistence backend ---

@app.get("/api/mindmaps/{case_id}")
async def load_mind_map(case_id: str):
    """stored map document for a case."""
    try:
        doc = state.persistence.load(case_id)
    except PersistenceError as e:
        logger.warning("load failed for %s: %s", case_id, e)
        raise HTTPException(status_code=500, detail="could not load mind map")
    if doc is None:
        raise HTTPException(status_code=404, detail="Mind map not found")
    return doc


@app.post("/api/mindmaps/{case_id}")
async def save_mind_map(case_id: str, doc: MindMapDocument):
    """store a map document for a case."""
    try:
        state.persistence.save(case_id, doc.model_dump())
    except PersistenceError as e:
        logger.warning("save failed for %s: %s", case_id, e)
        raise HTTPException(status_code=500, detail="could not save mind map")
    return {"message": "Mind map saved successfully"}


# --- chat proxy ---

@app.post("/api/chat")
async def chat_proxy(req: ChatRequest):
    """exchange a transcript for a challenger reply."""
    messages = [ChatMessage(role=m.role, content=m.content) for m in req.messages]
    reply = await state.chat.send_chat(messages, req.current_case_title)
    return {"reply": reply}


# --- editor ---

@app.post("/editor/open", response_model=FrameResponse)
async def open_editor(req: OpenCase):
    """open a case in the editor, loading or starting its map."""
    case = get_case(req.case_id, state.cases)
    if not case:
        raise HTTPException(status_code=404, detail=f"case not found: {req.case_id}")
    state.open_case(case)
    return _frame()


@app.get("/editor", response_model=FrameResponse)
async def get_editor():
    """current render frame."""
    return _frame()


@app.delete("/editor")
async def close_editor():
    """close the open case."""
    state.close_case()
    return {"closed": True}


@app.post("/editor/gesture", response_model=FrameResponse)
async def gesture(req: GestureRequest):
    """feed one mouse or touch event to the controller."""
    session = _session()
    try:
        event = from_raw(req.type, req.x, req.y, req.t, req.node_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    session.controller.handle(event)
    return _frame()


@app.post("/editor/tick", response_model=FrameResponse)
async def tick(req: TickRequest):
    """advance the controller clock (touch hold detection)."""
    _session().controller.tick(req.t)
    return _frame()


@app.post("/editor/click/{node_id}", response_model=FrameResponse)
async def click_node(node_id: str):
    """select, deselect, or link."""
    _session().controller.click(node_id)
    return _frame()


@app.post("/editor/drop", response_model=FrameResponse)
async def drop_evidence(req: DropRequest):
    """drop evidence text onto the canvas."""
    _session().controller.drop(req.text, canvas_present=req.canvas_present, prompt=req.prompt)
    return _frame()


@app.post("/editor/year", response_model=FrameResponse)
async def provide_year(req: YearInput):
    """answer the pending year prompt."""
    _session().controller.provide_year(req.value)
    return _frame()


@app.post("/editor/year/cancel", response_model=FrameResponse)
async def cancel_year():
    """dismiss the pending year prompt."""
    _session().controller.cancel_pending()
    return _frame()


@app.delete("/editor/selected", response_model=FrameResponse)
async def delete_selected():
    """delete the selected cause node."""
    _session().controller.delete_selected()
    return _frame()


@app.post("/editor/timeline", response_model=FrameResponse)
async def update_timeline(req: TimelineUpdate):
    """change the timeline range and re-lay out the map."""
    _session().controller.retimeline(req.start_year, req.end_year)
    return _frame()


@app.post("/editor/relabel-year", response_model=FrameResponse)
async def relabel_year(req: RelabelYear):
    """move every node on one year line to another year."""
    _session().controller.relabel_year(req.old_year, req.new_year)
    return _frame()


@app.get("/editor/status", response_model=StatusResponse)
async def editor_status():
    """whether the map is ready to finalize."""
    return StatusResponse(**_session().store.finalize_status())


@app.post("/editor/chat")
async def editor_chat(req: ChatSubmit):
    """one challenger turn about the open map."""
    session = _session()
    reply = await session.send_chat(req.message)
    return {"reply": reply, "messages": session.transcript.to_list()}


# --- entrypoint ---

def main():
    """run the api server."""
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="caseboard api server")
    parser.add_argument("--host", default="127.0.0.1", help="host to bind")
    parser.add_argument("--port", "-p", type=int, default=8000, help="port to bind")
    parser.add_argument("--data-dir", "-d", help="where mind maps are stored (default: ~/.caseboard)")
    parser.add_argument("--cases", "-c", help="json file with the case catalogue")
    parser.add_argument("--mock", "-m", action="store_true", help="use mock chat client")
    parser.add_argument(
        "--chat-timeout",
        type=float,
        default=DEFAULT_CHAT_TIMEOUT,
        help=f"chat request timeout in seconds (default: {DEFAULT_CHAT_TIMEOUT:g})",
    )
    parser.add_argument("--reload", action="store_true", help="enable auto-reload")
    parser.add_argument("--log-level", default="INFO", help="logging level")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # configure state
    global state
    state = AppState(
        data_dir=Path(args.data_dir) if args.data_dir else get_data_dir(),
        cases=load_cases(Path(args.cases)) if args.cases else None,
        mock=args.mock,
        chat_timeout=args.chat_timeout,
    )

    uvicorn.run(
        "caseboard.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
