"""Unit tests for RetrievalService and ResourceService."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from ragchat.models.rag import DocumentChunk
from ragchat.services.resource_service import ResourceService, resource_filename
from ragchat.services.retrieval_service import NO_RESULTS_MESSAGE, RetrievalService, rank_relevance
from ragchat.utils.errors import MetadataStoreError, VectorStoreError


def _chunk(index: int, text: str) -> DocumentChunk:
    return DocumentChunk(
        chunk_id=f"c{index}",
        text=text,
        file_name="facts.txt",
        chunk_index=index,
        total_chunks=3,
    )


async def _seed(embedding, vector_store, texts: list[str]) -> None:
    chunks = [_chunk(i, t) for i, t in enumerate(texts)]
    vectors = await embedding.embed(texts)
    await vector_store.add_chunks(chunks, vectors)


class TestRankRelevance:
    def test_values(self) -> None:
        assert rank_relevance(0) == 1.0
        assert rank_relevance(1) == 0.9
        assert rank_relevance(4) == 0.6


class TestRetrievalService:
    @pytest.mark.asyncio
    async def test_empty_store(self, mock_embedding_provider, mock_vector_store) -> None:
        service = RetrievalService(mock_embedding_provider, mock_vector_store)
        result = await service.find_relevant_content("anything?")
        assert result == {"found": False, "message": NO_RESULTS_MESSAGE}

    @pytest.mark.asyncio
    async def test_results_ranked(self, mock_embedding_provider, mock_vector_store) -> None:
        texts = ["The sky is blue.", "Water boils at 100 C.", "Cats sleep a lot."]
        await _seed(mock_embedding_provider, mock_vector_store, texts)
        service = RetrievalService(mock_embedding_provider, mock_vector_store, top_k=2)

        result = await service.find_relevant_content("The sky is blue.")

        assert result["found"] is True
        content = result["relevantContent"]
        assert len(content) == 2
        assert content[0]["content"] == "The sky is blue."
        assert content[0]["relevance"] == 1.0
        assert content[1]["relevance"] == 0.9
        assert content[0]["metadata"] == {"fileName": "facts.txt", "chunkIndex": 0, "totalChunks": 3}
        assert content[0]["similarity"] == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_store_error_returned_not_raised(self, mock_embedding_provider) -> None:
        from ragchat.interfaces.vector_store_provider import IVectorStoreProvider

        store = MagicMock(spec=IVectorStoreProvider)
        store.query = AsyncMock(side_effect=VectorStoreError("Pinecone query failed"))
        service = RetrievalService(mock_embedding_provider, store)

        result = await service.find_relevant_content("q")
        assert result == {"found": False, "error": "Pinecone query failed"}

    @pytest.mark.asyncio
    async def test_embedding_error_returned(self, failing_embedding_provider, mock_vector_store) -> None:
        service = RetrievalService(failing_embedding_provider, mock_vector_store)
        result = await service.find_relevant_content("q")
        assert result["found"] is False
        assert "API key" in result["error"]


class TestResourceService:
    def test_filename(self) -> None:
        assert resource_filename(date(2024, 3, 9)) == "user-added-content-2024-03-09"

    @pytest.mark.asyncio
    async def test_create_stores_full_content(self, mock_document_store) -> None:
        service = ResourceService(mock_document_store, today=lambda: date(2024, 1, 2))
        content = "x" * 900

        result = await service.create_resource(content)

        assert result["success"] is True
        row = mock_document_store.rows[result["resourceId"]]
        assert row.content == content
        assert row.filename == "user-added-content-2024-01-02"
        assert row.type == "text"

    @pytest.mark.asyncio
    async def test_create_vectorizes_when_ingestion_present(
        self, mock_document_store, mock_embedding_provider, mock_vector_store
    ) -> None:
        from ragchat.services.ingestion.chunker import TieredChunker
        from ragchat.services.ingestion.extractor import FormatExtractor
        from ragchat.services.ingestion.ingestion_service import IngestionService
        from ragchat.services.ingestion.source_reader import SourceReader

        ingestion = IngestionService(
            source_reader=SourceReader(MagicMock()),
            extractor=FormatExtractor(),
            chunker=TieredChunker(),
            embedding_provider=mock_embedding_provider,
            vector_store=mock_vector_store,
            document_store=mock_document_store,
        )
        service = ResourceService(mock_document_store, ingestion_service=ingestion)

        result = await service.create_resource("My favourite colour is green, remember that.")

        assert result["success"] is True
        assert "warning" not in result
        assert len(mock_vector_store.chunks) == 1

    @pytest.mark.asyncio
    async def test_vectorization_failure_adds_warning(
        self, mock_document_store, failing_embedding_provider, mock_vector_store
    ) -> None:
        from ragchat.services.ingestion.chunker import TieredChunker
        from ragchat.services.ingestion.ingestion_service import IngestionService

        ingestion = IngestionService(
            source_reader=MagicMock(),
            extractor=MagicMock(),
            chunker=TieredChunker(),
            embedding_provider=failing_embedding_provider,
            vector_store=mock_vector_store,
            document_store=mock_document_store,
        )
        service = ResourceService(mock_document_store, ingestion_service=ingestion)

        result = await service.create_resource("Remember that the meeting moved to Friday.")

        assert result["success"] is True
        assert result["warning"].startswith("Resource saved but not vectorized")

    @pytest.mark.asyncio
    async def test_store_failure_returns_error(self) -> None:
        from ragchat.interfaces.document_store import IDocumentStore

        store = MagicMock(spec=IDocumentStore)
        store.create_document = AsyncMock(side_effect=MetadataStoreError("Failed to add document: down"))
        service = ResourceService(store)

        result = await service.create_resource("hello")
        assert result == {"success": False, "error": "Failed to add document: down"}
