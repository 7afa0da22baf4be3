"""Core data contracts for adsearch."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DetectorState(str, Enum):
    """Runtime state reported by the status service."""

    RUNNING = "RUNNING"
    DISABLED = "DISABLED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DetectorState":
        """Map a raw state string onto a known state, case-insensitively."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


class Detector(BaseModel):
    """One search hit: an opaque id plus the fields of its source document."""

    model_config = ConfigDict(frozen=True)

    id: str
    source: Dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.source.get("name")


class StatusResult(BaseModel):
    """Outcome of a single status lookup.

    Exactly one of ``state`` or ``error`` is set.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    detector_id: str
    state: Optional[DetectorState] = None
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def resolved(cls, detector_id: str, state: DetectorState) -> "StatusResult":
        return cls(detector_id=detector_id, state=state)

    @classmethod
    def failure(cls, detector_id: str, error: BaseException) -> "StatusResult":
        return cls(detector_id=detector_id, error=error)


class StatePredicate(BaseModel):
    """Caller constraints on acceptable runtime states.

    ``None`` means "don't care" for that axis. ``True`` keeps only detectors
    in that state and ``False`` keeps only detectors not in that state.
    """

    model_config = ConfigDict(frozen=True)

    running: Optional[bool] = None
    disabled: Optional[bool] = None
    failed: Optional[bool] = None

    def requested_states(self) -> Dict[DetectorState, bool]:
        """Map each requested state to whether it is wanted."""
        axes = {
            DetectorState.RUNNING: self.running,
            DetectorState.DISABLED: self.disabled,
            DetectorState.FAILED: self.failed,
        }
        return {state: flag for state, flag in axes.items() if flag is not None}

    def is_active(self) -> bool:
        """Return ``True`` when at least one axis was requested."""
        return bool(self.requested_states())

    def matches(self, state: DetectorState) -> bool:
        """Check ``state`` against every requested axis."""
        return all(
            (state == wanted_state) == flag
            for wanted_state, flag in self.requested_states().items()
        )


class EnrichedBatch(BaseModel):
    """Join of one search page to the status of each of its detectors."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    detectors: List[Detector] = Field(default_factory=list)
    statuses: Dict[str, StatusResult] = Field(default_factory=dict)

    def state_of(self, detector: Detector) -> DetectorState:
        return self.statuses[detector.id].state or DetectorState.UNKNOWN


class SearchRequest(BaseModel):
    """Paging and sorting for one catalog search."""

    query: Dict[str, Any] = Field(default_factory=lambda: {"bool": {"must": []}})
    size: int = 20
    start_index: int = 0
    sort_string: str = "name.keyword"
    sort_order: str = "asc"


class SearchPage(BaseModel):
    """One page of catalog hits plus the total number of matches."""

    detectors: List[Detector] = Field(default_factory=list)
    total: int = 0
