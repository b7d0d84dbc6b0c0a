"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from two sources, in priority order:
#
#   1. Environment variables, e.g. OPENAI_API_KEY=sk-abc123
#   2. The .env file in the project root (local development)
#
# Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.  A few fields
# also accept the NEXT_PUBLIC_* names used by older front-end deployments
# (see ``validation_alias`` below).
#
# Empty string means "not configured": the provider selection in main.py
# skips anything whose credentials are empty.
# ──────────────────────────────────────────────────────────────────────
"""

from urllib.parse import quote

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ragChat application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === Embeddings (OpenAI) ===
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_embedding_model: str = ""
    embedding_batch_size: int = 16

    # === Chat model ===
    # DeepSeek speaks the OpenAI wire protocol; when its key is empty the
    # chat provider falls back to OpenAI.
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com"
    chat_model: str = ""

    # === Vector store ===
    vector_store_backend: str = "auto"  # auto | pinecone | chromadb
    pinecone_api_key: str = ""
    pinecone_environment: str = ""
    pinecone_host: str = ""
    pinecone_index: str = "chatbot"
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "ragchat_documents"

    # === Metadata store: direct PostgreSQL ===
    postgres_host: str = ""
    postgres_port: int = 5432
    postgres_database: str = "postgres"
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_connection_string: str = ""
    disable_direct_pg_connection: bool = False

    # === Metadata store: hosted Supabase client ===
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "next_public_supabase_url"),
    )
    supabase_key: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_key", "next_public_supabase_anon_key"),
    )

    # === Uploads ===
    max_upload_mb: int = 20

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def postgres_dsn(self) -> str:
        """Return the DSN for the direct connection, or ``""`` if unconfigured.

        An explicit connection string wins; otherwise the DSN is composed from
        the individual fields, which requires at least a host and password.
        """
        if self.postgres_connection_string:
            return self.postgres_connection_string
        if not self.postgres_host or not self.postgres_password:
            return ""
        return (
            f"postgresql://{quote(self.postgres_user, safe='')}:{quote(self.postgres_password, safe='')}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_database}"
        )

    def pinecone_configured(self) -> bool:
        """Return ``True`` when Pinecone has a key, an index, and a host or environment."""
        return bool(
            self.pinecone_api_key
            and self.pinecone_index
            and (self.pinecone_environment or self.pinecone_host)
        )

    def get_available_vector_stores(self) -> list[str]:
        """Return the vector store backends usable with the current settings."""
        stores: list[str] = []
        if self.pinecone_configured():
            stores.append("pinecone")
        stores.append("chromadb")
        return stores
