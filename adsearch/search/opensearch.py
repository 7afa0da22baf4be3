"""OpenSearch-backed detector catalog search."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..contracts import Detector, SearchPage, SearchRequest
from ..errors import SearchUnavailable
from ..query import build_search_body
from .base import BaseSearchClient

logger = logging.getLogger(__name__)

SEARCH_PATH = "/_plugins/_anomaly_detection/detectors/_search"


class OpenSearchSearchClient(BaseSearchClient):
    """Query the anomaly detection plugin's detector search API."""

    def __init__(
        self,
        base_url: str = "http://localhost:9200",
        username: Optional[str] = None,
        password: Optional[str] = None,
        verify_ssl: bool = True,
        request_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.verify_ssl = verify_ssl
        self.request_timeout = request_timeout
        self._client = client
        self._owns_client = client is None

    async def connect(self) -> None:
        if self._client is None:
            auth = (self.username, self.password) if self.username else None
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=auth,
                verify=self.verify_ssl,
                timeout=self.request_timeout,
            )
            self._owns_client = True

    async def disconnect(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def search(self, request: SearchRequest) -> SearchPage:
        if self._client is None:
            await self.connect()

        body = build_search_body(request)
        logger.debug(f"Searching detectors with body={body}")
        try:
            response = await self._client.post(SEARCH_PATH, json=body)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to search anomaly detectors: {e}")
            raise SearchUnavailable(f"Failed to search anomaly detectors: {e}") from e

        return self._parse(payload)

    @staticmethod
    def _parse(payload: Any) -> SearchPage:
        try:
            hits = payload["hits"]
            detectors = [
                Detector(id=hit["_id"], source=hit.get("_source") or {})
                for hit in hits.get("hits", [])
            ]
            total = hits.get("total", len(detectors))
            if isinstance(total, dict):
                total = total.get("value", len(detectors))
        except (KeyError, TypeError, AttributeError) as e:
            raise SearchUnavailable(f"Malformed search response: {e!r}") from e
        return SearchPage(detectors=detectors, total=int(total))
