"""Unit tests for embedding backends: OpenAI-compatible and Nomic via Ollama."""

from __future__ import annotations

import math
from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from docrag.utils.errors import EmbeddingError


def _embedding_response(vector: list[float] | None) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=vector)] if vector is not None else []
    return response


# ======================================================================
# OpenAI Embedding Provider
# ======================================================================


class TestOpenAIEmbeddingProvider:
    def test_known_model_dimension(self) -> None:
        from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(api_key="sk-test")
        assert provider.get_model_name() == "text-embedding-3-small"
        assert provider.get_dimension() == 1536

    def test_unknown_model_dimension_is_none(self) -> None:
        from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        assert OpenAIEmbeddingProvider(api_key="k", model="custom-embed").get_dimension() is None

    @pytest.mark.asyncio
    async def test_embed_success_records_dimension(self) -> None:
        from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.1, 0.2, 0.3]))

        with patch("docrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAIEmbeddingProvider(api_key="k", model="custom-embed")
            vector = await provider.embed("geothermal")

        assert vector == [0.1, 0.2, 0.3]
        assert provider.get_dimension() == 3
        mock_client.embeddings.create.assert_awaited_once_with(input=["geothermal"], model="custom-embed")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("vector", [None, [], [0.1, math.nan], [math.inf, 0.0]])
    async def test_invalid_vectors_rejected(self, vector: list[float] | None) -> None:
        from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response(vector))

        with patch("docrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI", return_value=mock_client):
            with pytest.raises(EmbeddingError):
                await OpenAIEmbeddingProvider(api_key="k").embed("text")

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="quota", request=MagicMock(), body=None)
        )

        with patch("docrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAIEmbeddingProvider(api_key="k", provider_label="together")
            with pytest.raises(EmbeddingError, match="together embedding API error"):
                await provider.embed("text")
            assert await provider.test_connection() is False


# ======================================================================
# Nomic Embedding Provider
# ======================================================================


class TestNomicEmbeddingProvider:
    def test_defaults(self) -> None:
        from docrag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        provider = NomicEmbeddingProvider(base_url="http://localhost:11434")
        assert provider.get_provider_name() == "ollama"
        assert provider.get_model_name() == "nomic-embed-text"
        assert provider.get_dimension() == 768

    @pytest.mark.asyncio
    async def test_embed_success(self) -> None:
        from docrag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.5] * 4))

        with patch(
            "docrag.providers.embedding.nomic_embedding_provider.openai.AsyncOpenAI", return_value=mock_client
        ) as client_cls:
            provider = NomicEmbeddingProvider(base_url="http://localhost:11434")
            vector = await provider.embed("tidal")

        assert vector == [0.5] * 4
        assert provider.get_dimension() == 4
        assert client_cls.call_args.kwargs["base_url"] == "http://localhost:11434/v1"

    @pytest.mark.asyncio
    async def test_connection_checks_tags(self) -> None:
        from docrag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        mock_http_client = AsyncMock()
        mock_http_client.__aenter__ = AsyncMock(return_value=mock_http_client)
        mock_http_client.__aexit__ = AsyncMock(return_value=False)
        mock_http_client.get = AsyncMock(return_value=MagicMock(status_code=404))

        with patch(
            "docrag.providers.embedding.nomic_embedding_provider.httpx.AsyncClient", return_value=mock_http_client
        ):
            assert await NomicEmbeddingProvider(base_url="http://localhost:11434").test_connection() is False
