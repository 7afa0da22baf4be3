"""Exception taxonomy for adsearch."""

from __future__ import annotations

from typing import Optional


class AdSearchError(Exception):
    """Base class for every failure surfaced by a detector search."""


class InvalidParameters(AdSearchError):
    """Tool parameters could not be parsed."""


class SearchUnavailable(AdSearchError):
    """The catalog search failed; enrichment never started."""


class LookupFailed(AdSearchError):
    """A status lookup failed and the whole enrichment was abandoned."""

    def __init__(self, cause: BaseException, detector_id: Optional[str] = None):
        self.cause = cause
        self.detector_id = detector_id
        target = f" for detector {detector_id}" if detector_id else ""
        super().__init__(f"Status lookup failed{target}: {cause}")


class EnrichmentTimeout(AdSearchError):
    """Status lookups did not all settle before the deadline."""

    def __init__(self, deadline: float, pending: int):
        self.deadline = deadline
        self.pending = pending
        super().__init__(
            f"{pending} status lookup(s) still pending after {deadline:g}s"
        )


class CorrelationError(AdSearchError):
    """Status results could not be joined back to the search page.

    These indicate a misbehaving status client and are never retried.
    """


class UnknownIdentity(CorrelationError):
    """A status result names a detector that is not on the page."""

    def __init__(self, detector_id: str):
        self.detector_id = detector_id
        super().__init__(f"Status result for unknown detector {detector_id}")


class MissingResult(CorrelationError):
    """Some detectors on the page never received a status result."""

    def __init__(self, detector_ids: list[str]):
        self.detector_ids = detector_ids
        super().__init__(f"No status result for detector(s): {', '.join(detector_ids)}")
