"""Remote source fetchers."""

from ragchat.providers.source.http_source_fetcher import HttpSourceFetcher

__all__ = ["HttpSourceFetcher"]
