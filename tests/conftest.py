"""pytest fixtures for caseboard tests."""

import pytest
import tempfile
from pathlib import Path

from caseboard.core.cases import Case
from caseboard.core.chat import ChatGateway
from caseboard.core.client import MockClient
from caseboard.core.persistence import InMemoryPersistence
from caseboard.core.session import EditorSession
from caseboard.core.store import MindMapStore
from caseboard.core.timeline import TimelineRange


@pytest.fixture
def temp_dir():
    """temporary directory that cleans up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def timeline():
    """the default 1985-1990 window."""
    return TimelineRange(1985, 1990)


@pytest.fixture
def store(timeline):
    """fresh store holding only the outcome."""
    return MindMapStore.create("The Berlin Wall opens (1989)", timeline)


@pytest.fixture
def sample_store(store):
    """store with two dated causes, unlinked."""
    store.add_cause_node("Reforms announced (1985)")
    store.add_cause_node("Borders open (1990)")
    return store


@pytest.fixture
def sample_case():
    """small case with a 1985-1990 window."""
    return Case(
        id="test-case",
        title="Test Case",
        headline="Something happened (1989)",
        evidence=["Drought (1987)", "Unrest spreads", "Reforms announced (1985)"],
        timeline_start=1985,
        timeline_end=1990,
    )


@pytest.fixture
def memory_persistence():
    return InMemoryPersistence()


@pytest.fixture
def mock_client():
    """mock llm client with no delay."""
    return MockClient(delay=0)


@pytest.fixture
def session(sample_case, memory_persistence, mock_client):
    """open editor session backed by memory."""
    session = EditorSession(sample_case, memory_persistence, ChatGateway(mock_client, timeout=5))
    session.open()
    yield session
    session.close()
