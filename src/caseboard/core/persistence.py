"""persistence gateways: load/save mind-map documents keyed by case id.

documents are the wire shape {"nodes": [...], "links": [...], "lastUpdated": ...}.
gateways stamp lastUpdated on save and notify live subscribers afterwards.
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol, runtime_checkable

from .models import now_iso

logger = logging.getLogger(__name__)


Listener = Callable[[str, dict], None]
Unsubscribe = Callable[[], None]


class PersistenceError(Exception):
    """a load or save could not be completed."""

    pass


@runtime_checkable
class PersistenceGateway(Protocol):
    """protocol for mind-map storage backends."""

    def load(self, case_id: str) -> Optional[dict]:
        """return the stored document, or None if the case has none."""
        ...

    def save(self, case_id: str, doc: dict) -> None:
        """store a document. raises PersistenceError on failure."""
        ...

    def subscribe(self, case_id: str, listener: Listener) -> Unsubscribe:
        """call listener(case_id, doc) after each save of case_id."""
        ...


class _Subscriptions:
    """listener registry shared by the gateways."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add(self, case_id: str, listener: Listener) -> Unsubscribe:
        self._listeners.setdefault(case_id, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(case_id, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def notify(self, case_id: str, doc: dict) -> None:
        for listener in list(self._listeners.get(case_id, [])):
            try:
                listener(case_id, copy.deepcopy(doc))
            except Exception:
                logger.exception("live-update listener failed for %s", case_id)

    def count(self, case_id: str) -> int:
        return len(self._listeners.get(case_id, []))


def _stamp(doc: dict) -> dict:
    """copy of doc with a fresh lastUpdated."""
    stamped = {
        "nodes": copy.deepcopy(doc.get("nodes") or []),
        "links": copy.deepcopy(doc.get("links") or []),
    }
    stamped["lastUpdated"] = now_iso()
    return stamped


class InMemoryPersistence:
    """dict-backed store; the server's default when no data dir is wanted."""

    def __init__(self) -> None:
        self._docs: dict[str, dict] = {}
        self._subs = _Subscriptions()

    def load(self, case_id: str) -> Optional[dict]:
        doc = self._docs.get(case_id)
        return copy.deepcopy(doc) if doc is not None else None

    def save(self, case_id: str, doc: dict) -> None:
        if not case_id:
            raise PersistenceError("case id is required")
        stamped = _stamp(doc)
        self._docs[case_id] = stamped
        self._subs.notify(case_id, stamped)

    def subscribe(self, case_id: str, listener: Listener) -> Unsubscribe:
        return self._subs.add(case_id, listener)

    def listener_count(self, case_id: str) -> int:
        return self._subs.count(case_id)


class FilePersistence:
    """one json file per case under a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self._subs = _Subscriptions()

    def path_for(self, case_id: str) -> Path:
        safe_name = "".join(c if c.isalnum() or c in "-_" else "-" for c in case_id)
        if safe_name != case_id:
            # rewritten ids get a digest so "a/b" and "a-b" stay apart
            safe_name = f"{safe_name}-{hashlib.sha1(case_id.encode()).hexdigest()[:8]}"
        return self.directory / f"{safe_name}.json"

    def load(self, case_id: str) -> Optional[dict]:
        path = self.path_for(case_id)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                doc = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"could not read {path}: {e}") from e
        if not isinstance(doc, dict):
            raise PersistenceError(f"not a mind-map document: {path}")
        return doc

    def save(self, case_id: str, doc: dict) -> None:
        if not case_id:
            raise PersistenceError("case id is required")
        stamped = _stamp(doc)
        path = self.path_for(case_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # write then rename so a crash never leaves half a document
            fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            with os.fdopen(fd, "w") as f:
                json.dump(stamped, f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"could not write {path}: {e}") from e
        self._subs.notify(case_id, stamped)

    def subscribe(self, case_id: str, listener: Listener) -> Unsubscribe:
        return self._subs.add(case_id, listener)

    def listener_count(self, case_id: str) -> int:
        return self._subs.count(case_id)


def get_data_dir() -> Path:
    """get the default storage directory."""
    data_dir = Path.home() / ".caseboard"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
