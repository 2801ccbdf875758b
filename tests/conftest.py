"""Shared fixtures: in-memory store, deterministic embedders, notifiers."""

import pytest

from docgraph.chunking import Chunker
from docgraph.core.exceptions import EmbeddingGenerationError
from docgraph.core.models.progress import ProgressUpdate
from docgraph.pipelines.ingestion import KnowledgeGraphBuilder
from docgraph.services import KnowledgeService
from docgraph.stores import NetworkXGraphStore

EMBEDDING_DIM = 16


def fake_vector(text: str) -> list[float]:
    """Character-histogram vector: equal texts give equal vectors."""
    vector = [0.0] * EMBEDDING_DIM
    for ch in text.lower():
        vector[ord(ch) % EMBEDDING_DIM] += 1.0
    return vector


class FakeEmbedder:
    """Deterministic embedder recording every text it embeds."""

    model_id = "fake"

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed_text(self, text: str) -> list[float]:
        self.calls.append(text)
        return fake_vector(text)


class FlakyEmbedder(FakeEmbedder):
    """Fails on the given 1-based call number."""

    def __init__(self, fail_on_call: int) -> None:
        super().__init__()
        self.fail_on_call = fail_on_call

    async def embed_text(self, text: str) -> list[float]:
        if len(self.calls) + 1 == self.fail_on_call:
            self.calls.append(text)
            raise EmbeddingGenerationError("Failed to generate embedding")
        return await super().embed_text(text)


class RecordingNotifier:
    def __init__(self) -> None:
        self.updates: list[ProgressUpdate] = []

    async def notify(self, update: ProgressUpdate) -> None:
        self.updates.append(update)


class BrokenNotifier:
    async def notify(self, update: ProgressUpdate) -> None:
        raise RuntimeError("notification channel down")


@pytest.fixture
def store() -> NetworkXGraphStore:
    return NetworkXGraphStore()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(store: NetworkXGraphStore, embedder: FakeEmbedder) -> KnowledgeService:
    return KnowledgeService(store, embedder)


@pytest.fixture
def builder(service: KnowledgeService) -> KnowledgeGraphBuilder:
    return KnowledgeGraphBuilder(service, chunker=Chunker())
