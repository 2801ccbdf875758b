"""Tests for the embedding providers."""

import httpx
import pytest
from openai import AsyncOpenAI

from docgraph.core.exceptions import EmbeddingGenerationError
from docgraph.embedding import OpenAIEmbeddingProvider


def _client(handler) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key="sk-test",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _embeddings(data: list[dict]) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "object": "list",
            "data": data,
            "model": "text-embedding-ada-002",
            "usage": {"prompt_tokens": 2, "total_tokens": 2},
        },
    )


@pytest.mark.unit
class TestOpenAIEmbeddingProvider:
    async def test_returns_first_vector(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _embeddings([{"object": "embedding", "index": 0, "embedding": [0.5, -0.25]}])

        provider = OpenAIEmbeddingProvider(client=_client(handler))

        assert await provider.embed_text("hello world") == [0.5, -0.25]
        assert requests[0].url.path.endswith("/embeddings")

    async def test_empty_response(self) -> None:
        provider = OpenAIEmbeddingProvider(client=_client(lambda request: _embeddings([])))

        with pytest.raises(EmbeddingGenerationError, match="Failed to generate embedding"):
            await provider.embed_text("hello")

    async def test_api_error(self) -> None:
        provider = OpenAIEmbeddingProvider(
            client=_client(lambda request: httpx.Response(500, json={"error": {"message": "x"}}))
        )

        with pytest.raises(EmbeddingGenerationError, match="Embedding request failed"):
            await provider.embed_text("hello")
