import base64
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from echolog.api import create_app
from echolog.domain.memo import Memo
from echolog.embedders.base import Embedder
from echolog.linking import BackgroundTaskWorker
from echolog.llms.base import MemoAnnotator
from echolog.memo_stores.local import LocalMemoStore
from tests.fakes import FakeEmbedder, FakeMemoAnnotator

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)

MemoFactory = Callable[..., Memo]


@pytest.fixture
def make_memo() -> MemoFactory:
    """Build memos whose creation time follows the order they are made in."""
    counter = {"n": 0}

    def _make_memo(
        memo_id: str,
        embedding: list[float] | None = None,
        *,
        owner_id: str = "alice",
        tags: list[str] | None = None,
        related_memo_ids: list[str] | None = None,
        summary: str | None = None,
    ) -> Memo:
        counter["n"] += 1
        return Memo(
            id=memo_id,
            owner_id=owner_id,
            audio_url=f"https://audio.example.com/{memo_id}.m4a",
            transcription=f"Transcription of {memo_id}",
            summary=summary or f"Memo {memo_id}",
            tags=tags or ["general"],
            embedding=embedding,
            created_at=BASE_TIME + timedelta(minutes=counter["n"]),
            related_memo_ids=related_memo_ids or [],
        )

    return _make_memo


@pytest.fixture
def memo_store() -> LocalMemoStore:
    return LocalMemoStore()


@pytest.fixture
def link_worker() -> Generator[BackgroundTaskWorker, None, None]:
    worker = BackgroundTaskWorker(name="test-link-worker")
    yield worker
    worker.stop()


@pytest.fixture
def fake_embedder() -> Embedder:
    return FakeEmbedder(vectors={"coffee": [1.0, 0.0], "tea": [0.0, 1.0]})


@pytest.fixture
def fake_annotator() -> MemoAnnotator:
    return FakeMemoAnnotator(title="Morning coffee", tags=["coffee", "morning"])


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Override settings for testing."""
    monkeypatch.setattr("echolog.config.settings.users", {"alice": "secret", "bob": "hunter2"})
    monkeypatch.setattr("echolog.config.settings.embedding_dimensions", 2)


def basic_auth(username: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def alice() -> dict[str, str]:
    return basic_auth("alice", "secret")


@pytest.fixture
def bob() -> dict[str, str]:
    return basic_auth("bob", "hunter2")


@pytest.fixture
def test_client(
    memo_store: LocalMemoStore,
    fake_embedder: Embedder,
    fake_annotator: MemoAnnotator,
    link_worker: BackgroundTaskWorker,
) -> Generator[TestClient, None, None]:
    """Create test client with fake implementations."""
    app = create_app(
        memo_store=memo_store,
        embedder=fake_embedder,
        annotator=fake_annotator,
        link_worker=link_worker,
    )
    with TestClient(app) as client:
        yield client
