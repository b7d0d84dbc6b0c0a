"""Configuration module: exports Settings and load_config."""

from ragchat.config.loader import load_config
from ragchat.config.settings import Settings

__all__ = ["Settings", "load_config"]
