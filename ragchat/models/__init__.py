"""ragChat domain models; re-exports all public model classes.

Submodules by concern:
    - document.py: metadata-store rows and the SourceFormat tag
    - rag.py     : chunks, retrieval results, two-phase ingestion outcome
    - chat.py    : conversation messages and streamed model events
"""

from __future__ import annotations

from ragchat.models.chat import ChatMessage, ChatStreamEvent, ToolCall
from ragchat.models.document import (
    DeleteResult,
    Document,
    DocumentCreate,
    InitResult,
    SourceFormat,
)
from ragchat.models.rag import (
    DocumentChunk,
    IngestionResult,
    RelevantContent,
    RetrievedChunk,
    VectorizationDegraded,
    VectorizationOk,
)

__all__ = [
    # chat
    "ChatMessage",
    "ChatStreamEvent",
    "ToolCall",
    # document
    "DeleteResult",
    "Document",
    "DocumentCreate",
    "InitResult",
    "SourceFormat",
    # rag
    "DocumentChunk",
    "IngestionResult",
    "RelevantContent",
    "RetrievedChunk",
    "VectorizationDegraded",
    "VectorizationOk",
]
