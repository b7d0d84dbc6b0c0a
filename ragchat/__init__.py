"""ragChat: document ingestion and retrieval-augmented chat over a vector index."""

__version__ = "0.1.0"
