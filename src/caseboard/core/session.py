"""editor session: everything that belongs to one open case.

replaces ambient globals with one explicit object per case. the session
wires the controller's commit hook to persistence, owns the live-update
subscription, and carries the chat transcript.
"""

from __future__ import annotations

import logging
from typing import Optional

from .cases import Case
from .chat import ChatGateway, ChatTranscript, summarize_map
from .controller import ControllerConfig, InteractionController
from .models import CanvasGeometry, MindMap
from .persistence import PersistenceError, PersistenceGateway, Unsubscribe
from .render import RenderFrame, project
from .store import MindMapStore

logger = logging.getLogger(__name__)


class EditorSession:
    """one case open in the editor."""

    def __init__(
        self,
        case: Case,
        persistence: PersistenceGateway,
        chat: Optional[ChatGateway] = None,
        geometry: Optional[CanvasGeometry] = None,
        controller_config: Optional[ControllerConfig] = None,
    ):
        self.case = case
        self.persistence = persistence
        self.chat = chat
        self.geometry = geometry or CanvasGeometry()
        self.store = MindMapStore.create(case.headline, case.timeline, self.geometry)
        self.controller = InteractionController(self.store, self._on_commit, controller_config)
        self.transcript = ChatTranscript()
        self.save_failures = 0
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    # --- lifecycle ---

    def open(self) -> EditorSession:
        """load (or start) the case's map and begin listening for updates."""
        self.close()

        store = None
        load_failed = False
        try:
            doc = self.persistence.load(self.case.id)
            if doc and doc.get("nodes"):
                store = MindMapStore.from_document(doc, self.case.headline, self.case.timeline, self.geometry)
                logger.debug("loaded %d nodes for %s", len(store.nodes), self.case.id)
        except (PersistenceError, KeyError, ValueError, TypeError, AttributeError):
            load_failed = True
            logger.warning("could not load map for %s, starting fresh", self.case.id, exc_info=True)

        if store is None:
            self.store = MindMapStore.create(self.case.headline, self.case.timeline, self.geometry)
            # an unreadable document stays on disk until the first edit
            if not load_failed:
                self.save()
        else:
            self.store = store

        self.controller.store = self.store
        self.controller.selected_id = None
        self._unsubscribe = self.persistence.subscribe(self.case.id, self._on_remote_update)
        return self

    def close(self) -> None:
        """detach the live-update subscription."""
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    # --- persistence ---

    def save(self) -> bool:
        """write the current snapshot. failures are logged, never raised."""
        try:
            self.persistence.save(self.case.id, self.store.snapshot())
        except PersistenceError:
            self.save_failures += 1
            logger.warning("save failed for %s; keeping local state", self.case.id, exc_info=True)
            return False
        return True

    def _on_commit(self, action: str) -> None:
        logger.debug("%s on %s", action, self.case.id)
        self.save()

    def _on_remote_update(self, case_id: str, doc: dict) -> None:
        """adopt a snapshot written elsewhere, unless it is our own echo."""
        if case_id != self.case.id:
            return
        if self.controller.dragging_id:
            return  # local drag in flight wins
        incoming = MindMap.from_dict(doc).to_dict()
        if incoming == self.store.snapshot():
            return
        self.store.replace_map(MindMap.from_dict(doc), self.case.headline)
        self.controller.prune_selection()

    # --- views ---

    def frame(self) -> RenderFrame:
        return project(self.store, self.controller.selected_id, self.controller.dragging_id)

    async def send_chat(self, message: str) -> Optional[str]:
        """one chat turn about the current map."""
        if not self.chat:
            return None
        return await self.transcript.submit(
            message,
            self.chat,
            self.case.title,
            summarize_map(self.store),
        )
