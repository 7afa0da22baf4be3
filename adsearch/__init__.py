"""adsearch: search anomaly detectors and filter them by live state."""

from .contracts import (
    Detector,
    DetectorState,
    EnrichedBatch,
    SearchPage,
    SearchRequest,
    StatePredicate,
    StatusResult,
)
from .enrich import EnrichmentCoordinator
from .errors import (
    AdSearchError,
    EnrichmentTimeout,
    LookupFailed,
    MissingResult,
    SearchUnavailable,
    UnknownIdentity,
)
from .search import get_search_client
from .status import get_status_client
from .tool import SearchDetectorsTool, build_tool

__version__ = "0.1.0"
__all__ = [
    "AdSearchError",
    "Detector",
    "DetectorState",
    "EnrichedBatch",
    "EnrichmentCoordinator",
    "EnrichmentTimeout",
    "LookupFailed",
    "MissingResult",
    "SearchDetectorsTool",
    "SearchPage",
    "SearchRequest",
    "SearchUnavailable",
    "StatePredicate",
    "StatusResult",
    "UnknownIdentity",
    "build_tool",
    "get_search_client",
    "get_status_client",
]
