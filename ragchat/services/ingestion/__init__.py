"""Document ingestion pipeline for the ragChat knowledge base.

Pipeline stages:

1. **Read** (source_reader.py / SourceReader) -- uploads and URLs become a
   SourcePayload tagged with a SourceFormat.

2. **Extract** (extractor.py / FormatExtractor) -- one routine per format
   turns the payload into plain text.

3. **Chunk** (chunker.py / TieredChunker) -- text is cleaned and split
   with window size chosen by document length.

4. **Embed** (via IEmbeddingProvider) and **Store** (via
   IVectorStoreProvider) -- one vector per chunk, upserted to the index.

IngestionService orchestrates the stages and records one Document row per
source through IDocumentStore.
"""

from ragchat.services.ingestion.chunker import ChunkTier, TieredChunker, clean_text
from ragchat.services.ingestion.extractor import FormatExtractor
from ragchat.services.ingestion.ingestion_service import IngestionService, make_preview
from ragchat.services.ingestion.source_reader import SourcePayload, SourceReader, validate_url

__all__ = [
    "ChunkTier",
    "FormatExtractor",
    "IngestionService",
    "SourcePayload",
    "SourceReader",
    "TieredChunker",
    "clean_text",
    "make_preview",
    "validate_url",
]
