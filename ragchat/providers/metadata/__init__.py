"""Document metadata store: connection resolution, backends, and facade."""

from ragchat.providers.metadata.connection_resolver import ConnectionResolver, ConnectionState
from ragchat.providers.metadata.document_store import DocumentStore, friendly_db_error
from ragchat.providers.metadata.postgres_backend import PostgresDocumentBackend
from ragchat.providers.metadata.supabase_backend import SupabaseDocumentBackend

__all__ = [
    "ConnectionResolver",
    "ConnectionState",
    "DocumentStore",
    "PostgresDocumentBackend",
    "SupabaseDocumentBackend",
    "friendly_db_error",
]
