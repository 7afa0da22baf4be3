"""Search client factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import AdSearchConfig, load_config
from .base import BaseSearchClient
from .inmemory import InMemorySearchClient


def get_search_client(
    backend: Optional[str] = None, config: Optional[AdSearchConfig] = None
) -> BaseSearchClient:
    """Factory function to get the configured search client."""

    config = config or load_config()
    backend = (
        backend or os.getenv("ADSEARCH_SEARCH_BACKEND") or config.search.backend
    ).lower()

    if backend == "inmemory":
        return InMemorySearchClient()
    elif backend == "opensearch":
        from .opensearch import OpenSearchSearchClient

        conf = config.opensearch
        return OpenSearchSearchClient(
            base_url=conf.base_url,
            username=conf.username,
            password=conf.password,
            verify_ssl=conf.verify_ssl,
            request_timeout=conf.request_timeout,
        )
    else:
        raise ValueError(f"Unsupported search backend: {backend}")


__all__ = ["BaseSearchClient", "InMemorySearchClient", "get_search_client"]
