"""Status client factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import AdSearchConfig, load_config
from .base import BaseStatusClient
from .inmemory import InMemoryStatusClient


def get_status_client(
    backend: Optional[str] = None, config: Optional[AdSearchConfig] = None
) -> BaseStatusClient:
    """Factory function to get the configured status client."""

    config = config or load_config()
    backend = (
        backend or os.getenv("ADSEARCH_STATUS_BACKEND") or config.status.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryStatusClient()
    elif backend == "opensearch":
        from .opensearch import OpenSearchStatusClient

        conf = config.opensearch
        return OpenSearchStatusClient(
            base_url=conf.base_url,
            username=conf.username,
            password=conf.password,
            verify_ssl=conf.verify_ssl,
            request_timeout=conf.request_timeout,
        )
    else:
        raise ValueError(f"Unsupported status backend: {backend}")


__all__ = ["BaseStatusClient", "InMemoryStatusClient", "get_status_client"]
