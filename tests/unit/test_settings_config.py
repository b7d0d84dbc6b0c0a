"""Unit tests for Settings helpers and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from ragchat.config.loader import DEFAULT_CONFIG, load_config
from ragchat.config.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_postgres_dsn_from_parts(self) -> None:
        settings = _settings(postgres_host="db", postgres_password="pw", postgres_port=6543)
        assert settings.postgres_dsn() == "postgresql://postgres:pw@db:6543/postgres"

    def test_postgres_dsn_encodes_credentials(self) -> None:
        settings = _settings(postgres_host="db", postgres_user="app@corp", postgres_password="p#ss:w/rd")
        assert settings.postgres_dsn() == "postgresql://app%40corp:p%23ss%3Aw%2Frd@db:5432/postgres"

    def test_postgres_dsn_connection_string_wins(self) -> None:
        settings = _settings(postgres_host="db", postgres_password="pw", postgres_connection_string="postgresql://x")
        assert settings.postgres_dsn() == "postgresql://x"

    def test_postgres_dsn_needs_host_and_password(self) -> None:
        assert _settings(postgres_host="db", postgres_password="", postgres_connection_string="").postgres_dsn() == ""

    def test_pinecone_configured(self) -> None:
        assert _settings(pinecone_api_key="k", pinecone_environment="e").pinecone_configured() is True
        assert _settings(pinecone_api_key="k", pinecone_host="h", pinecone_environment="").pinecone_configured()
        assert (
            _settings(pinecone_api_key="", pinecone_environment="e", pinecone_host="").pinecone_configured()
            is False
        )

    def test_available_vector_stores(self) -> None:
        assert _settings(pinecone_api_key="", pinecone_host="", pinecone_environment="").get_available_vector_stores() == [
            "chromadb"
        ]
        assert _settings(pinecone_api_key="k", pinecone_environment="e").get_available_vector_stores() == [
            "pinecone",
            "chromadb",
        ]

    def test_next_public_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_KEY", raising=False)
        monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_URL", "https://p.supabase.co")
        monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", "anon")
        settings = Settings(_env_file=None)
        assert settings.supabase_url == "https://p.supabase.co"
        assert settings.supabase_key == "anon"


class TestLoadConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "missing.yaml"), settings=_settings())
        assert config["ingestion"]["preview_length"] == 500
        assert config["retrieval"]["top_k"] == 5
        assert config["chat"]["max_steps"] == 3
        assert len(config["ingestion"]["chunk_tiers"]) == 3

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("retrieval:\n  top_k: 8\nchat:\n  temperature: 0.7\n")

        config = load_config(str(path), settings=_settings())

        assert config["retrieval"]["top_k"] == 8
        assert config["chat"]["temperature"] == 0.7
        assert config["chat"]["max_steps"] == 3

    def test_env_overrides_applied(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "none.yaml"), settings=_settings(pinecone_index="kb", app_port=9000))
        assert config["vector_store"]["index"] == "kb"
        assert config["app"]["port"] == 9000
        assert config["vector_store"]["namespace"] == "default"

    def test_defaults_not_mutated(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("retrieval:\n  top_k: 2\n")
        load_config(str(path), settings=_settings())
        assert DEFAULT_CONFIG["retrieval"]["top_k"] == 5

    def test_repo_config_file_parses(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(str(repo_config), settings=_settings())
        assert config["vector_store"]["upsert_batch_size"] == 32
