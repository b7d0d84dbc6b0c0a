"""Knowledge-base retrieval for the ``getInformation`` chat tool.

Embeds the question, runs a top-k similarity search and shapes the result
as a plain dict the model can read.  This method never raises: errors are
returned in the payload so a failing store cannot break the chat stream.
"""

from __future__ import annotations

from typing import Any

import structlog

from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.models.rag import RelevantContent
from ragchat.utils.errors import RagChatError

logger = structlog.get_logger(logger_name=__name__)

NO_RESULTS_MESSAGE = "No relevant information found"


def rank_relevance(rank: int) -> float:
    """Display score for the result at *rank* (0-based): ``1.0 - 0.1 * rank``."""
    return round(1.0 - 0.1 * rank, 4)


class RetrievalService:
    """Similarity search over the vector store."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        top_k: int = 5,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._top_k = top_k

    async def find_relevant_content(self, question: str) -> dict[str, Any]:
        """Return ``{found, relevantContent}``, ``{found, message}`` or ``{found, error}``."""
        try:
            query_embedding = await self._embedding_provider.embed_single(question)
            results = await self._vector_store.query(query_embedding, top_k=self._top_k)
        except RagChatError as exc:
            logger.error("retrieval_failed", error=str(exc))
            return {"found": False, "error": exc.message}
        except Exception as exc:
            logger.exception("retrieval_unexpected_error", error=str(exc))
            return {"found": False, "error": str(exc)}

        if not results:
            logger.info("retrieval_empty", question_length=len(question))
            return {"found": False, "message": NO_RESULTS_MESSAGE}

        relevant = [
            RelevantContent(
                content=rc.chunk.text,
                metadata={
                    "fileName": rc.chunk.file_name,
                    "chunkIndex": rc.chunk.chunk_index,
                    "totalChunks": rc.chunk.total_chunks,
                },
                relevance=rank_relevance(rank),
                similarity=rc.similarity_score,
            )
            for rank, rc in enumerate(results)
        ]
        logger.info(
            "retrieval_complete",
            results_count=len(relevant),
            top_similarity=relevant[0].similarity,
        )
        return {
            "found": True,
            "relevantContent": [r.model_dump() for r in relevant],
        }
