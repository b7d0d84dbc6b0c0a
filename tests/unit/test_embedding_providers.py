"""Unit tests for the OpenAI embedding provider adapter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ragchat.config.settings import Settings


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_embedding_model": "",
        "pinecone_api_key": "",
        "pinecone_environment": "",
        "pinecone_host": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _response(count: int, dim: int = 1536) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=[0.1] * dim) for _ in range(count)]
    response.usage = MagicMock(total_tokens=10 * count)
    return response


def _client_echoing_batches() -> AsyncMock:
    client = AsyncMock()

    async def create(input, model):  # noqa: A002
        return _response(len(input))

    client.embeddings.create = AsyncMock(side_effect=create)
    return client


class TestValidateKey:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [("sk-abc", True), ("sk-proj-123", True), ("", False), (None, False), ("abc", False)],
    )
    def test_validate(self, key, expected) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import validate_openai_api_key

        assert validate_openai_api_key(key) is expected


class TestOpenAIEmbeddingProvider:
    def test_defaults(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(_settings(), client=AsyncMock())
        assert provider.get_dimension() == 1536
        assert provider.get_provider_name() == "openai_embedding"
        assert provider.is_available() is True

    def test_compatible_label(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(
            _settings(openai_base_url="http://localhost:8080/v1"), client=AsyncMock()
        )
        assert provider.get_provider_name() == "openai-compatible_embedding"

    def test_large_model_dimension(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(
            _settings(openai_embedding_model="text-embedding-3-large"), client=AsyncMock()
        )
        assert provider.get_dimension() == 3072

    @pytest.mark.asyncio
    async def test_invalid_key_never_calls_api(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
        from ragchat.utils.errors import EmbeddingError

        client = _client_echoing_batches()
        provider = OpenAIEmbeddingProvider(_settings(openai_api_key="not-a-key"), client=client)

        assert provider.is_available() is False
        with pytest.raises(EmbeddingError, match="missing or invalid"):
            await provider.embed(["hello"])
        client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_batches_of_sixteen(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        client = _client_echoing_batches()
        provider = OpenAIEmbeddingProvider(_settings(), client=client)

        result = await provider.embed([f"text {i}" for i in range(40)])

        assert len(result) == 40
        sizes = [len(c.kwargs["input"]) for c in client.embeddings.create.call_args_list]
        assert sizes == [16, 16, 8]
        assert all(c.kwargs["model"] == "text-embedding-3-small" for c in client.embeddings.create.call_args_list)

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        client = _client_echoing_batches()
        provider = OpenAIEmbeddingProvider(_settings(), client=client)
        assert await provider.embed([]) == []
        client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        client = _client_echoing_batches()
        with patch(
            "ragchat.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=client,
        ):
            provider = OpenAIEmbeddingProvider(_settings())
            vector = await provider.embed_single("hello")
        assert len(vector) == 1536

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        import openai

        from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
        from ragchat.utils.errors import EmbeddingError

        client = AsyncMock()
        client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(
                "rate limited",
                request=httpx.Request("POST", "https://api.openai.com/v1/embeddings"),
                body=None,
            )
        )
        provider = OpenAIEmbeddingProvider(_settings(), client=client)

        with pytest.raises(EmbeddingError) as exc_info:
            await provider.embed(["hello"])
        assert exc_info.value.provider_name == "openai_embedding"
        assert "rate limited" in exc_info.value.message
