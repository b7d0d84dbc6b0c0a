"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
#   1. config/config.yaml : static tunables checked into the repo
#                            (chunk tiers, retrieval k, poll intervals)
#   2. .env file          : local developer overrides (not committed)
#   3. Environment vars   : set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the values
# derived from Settings on top, so env-driven keys always win.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from ragchat.config.settings import Settings

# Used when config/config.yaml is missing or omits a section.
DEFAULT_CONFIG: dict = {
    "ingestion": {
        "preview_length": 500,
        "min_chunk_length": 20,
        "chunk_tiers": [
            {"min_length": 100000, "chunk_size": 1000, "chunk_overlap": 100},
            {"min_length": 10000, "chunk_size": 750, "chunk_overlap": 75},
            {"min_length": 0, "chunk_size": 500, "chunk_overlap": 50},
        ],
    },
    "vector_store": {
        "namespace": "default",
        "dimension": 1536,
        "metric": "cosine",
        "upsert_batch_size": 32,
        "ready_poll_attempts": 10,
        "ready_poll_interval": 5.0,
    },
    "retrieval": {
        "top_k": 5,
    },
    "chat": {
        "max_steps": 3,
        "temperature": 0.3,
    },
    "source": {
        "fetch_timeout": 30.0,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to derive overrides from.  A fresh one is
                  built from the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config: dict = {}
    _deep_merge(config, DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "embedding": {
            "batch_size": settings.embedding_batch_size,
        },
        "vector_store": {
            "index": settings.pinecone_index,
            "available_backends": settings.get_available_vector_stores(),
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
