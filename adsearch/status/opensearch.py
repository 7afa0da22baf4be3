"""OpenSearch-backed detector status lookups."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from ..contracts import DetectorState, StatusResult
from .base import BaseStatusClient

logger = logging.getLogger(__name__)

PROFILE_PATH = "/_plugins/_anomaly_detection/detectors/{detector_id}/_profile/state"


def parse_profile(detector_id: str, payload: Mapping[str, Any]) -> StatusResult:
    """Extract the detector state from a profile response.

    Accepts both the plain profile shape (``{"state": "RUNNING"}``) and the
    task profile shape, where the state sits on the first node's AD task.
    """
    raw_state = payload.get("state")
    if raw_state is None:
        nodes = payload.get("nodes") or []
        task_profile = (nodes[0] or {}).get("ad_task_profile") if nodes else None
        task = (task_profile or {}).get("ad_task") or {}
        raw_state = task.get("state")
    reported_id = payload.get("detector_id") or detector_id
    return StatusResult.resolved(reported_id, DetectorState.parse(raw_state))


class OpenSearchStatusClient(BaseStatusClient):
    """Fetch detector state from the anomaly detection profile API."""

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

    async def fetch_status(self, detector_id: str) -> StatusResult:
        if self._client is None:
            await self.connect()

        response = await self._client.get(PROFILE_PATH.format(detector_id=detector_id))
        response.raise_for_status()
        return parse_profile(detector_id, response.json())
