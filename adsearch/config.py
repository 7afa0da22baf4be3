from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel


class OpenSearchConfig(BaseModel):
    """Connection settings for an OpenSearch cluster."""

    base_url: str = "http://localhost:9200"
    username: Optional[str] = None
    password: Optional[str] = None
    verify_ssl: bool = True
    request_timeout: float = 10.0


class SearchConfig(BaseModel):
    """Catalog search backend settings."""

    backend: Literal["inmemory", "opensearch"] = "inmemory"


class StatusConfig(BaseModel):
    """Status lookup backend settings."""

    backend: Literal["inmemory", "opensearch"] = "inmemory"


class EnrichmentConfig(BaseModel):
    """Deadline applied when the caller does not supply one."""

    timeout: float = 30.0


class DefaultsConfig(BaseModel):
    """Paging and sorting used when parameters omit them."""

    size: int = 20
    sort_string: str = "name.keyword"
    sort_order: Literal["asc", "desc"] = "asc"


class RetryConfig(BaseModel):
    """Whole-operation retry policy applied by the tool."""

    max_attempts: int = 0
    backoff_base: float = 1.5


class AdSearchConfig(BaseModel):
    """Top-level configuration model."""

    search: SearchConfig = SearchConfig()
    status: StatusConfig = StatusConfig()
    opensearch: OpenSearchConfig = OpenSearchConfig()
    enrichment: EnrichmentConfig = EnrichmentConfig()
    defaults: DefaultsConfig = DefaultsConfig()
    retry: RetryConfig = RetryConfig()


def load_config(path: Optional[str] = None) -> AdSearchConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to ADSEARCH_CONFIG env
            variable or 'adsearch.yaml' in the current directory.
    """

    config_path = path or os.getenv("ADSEARCH_CONFIG", "adsearch.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = AdSearchConfig(**data)
    else:
        config = AdSearchConfig()

    env_url = os.getenv("ADSEARCH_OPENSEARCH_URL")
    if env_url:
        config.opensearch.base_url = env_url
    env_search = os.getenv("ADSEARCH_SEARCH_BACKEND")
    if env_search:
        config.search.backend = env_search.lower()
    env_status = os.getenv("ADSEARCH_STATUS_BACKEND")
    if env_status:
        config.status.backend = env_status.lower()
    return config
