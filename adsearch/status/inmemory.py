"""In-memory status service for testing."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional, Union

from ..contracts import DetectorState, StatusResult
from .base import BaseStatusClient

Outcome = Union[DetectorState, BaseException]


class InMemoryStatusClient(BaseStatusClient):
    """Serve canned detector states, errors and per-detector latencies."""

    def __init__(
        self,
        outcomes: Optional[Mapping[str, Outcome]] = None,
        delays: Optional[Mapping[str, float]] = None,
    ) -> None:
        self._outcomes: Dict[str, Outcome] = dict(outcomes or {})
        self._delays: Dict[str, float] = dict(delays or {})
        self.calls: List[str] = []
        self.cancelled: List[str] = []
        self.completed: List[str] = []

    def set_state(self, detector_id: str, state: DetectorState, delay: float = 0) -> None:
        self._outcomes[detector_id] = state
        self._delays[detector_id] = delay

    def set_error(self, detector_id: str, error: BaseException, delay: float = 0) -> None:
        self._outcomes[detector_id] = error
        self._delays[detector_id] = delay

    async def fetch_status(self, detector_id: str) -> StatusResult:
        self.calls.append(detector_id)
        try:
            await asyncio.sleep(self._delays.get(detector_id, 0))
        except asyncio.CancelledError:
            self.cancelled.append(detector_id)
            raise
        self.completed.append(detector_id)

        outcome = self._outcomes.get(detector_id)
        if outcome is None:
            raise LookupError(f"Can't find detector with id: {detector_id}")
        if isinstance(outcome, BaseException):
            raise outcome
        return StatusResult.resolved(detector_id, outcome)
