"""Base interface for detector status lookups."""

from __future__ import annotations

import abc

from ..contracts import StatusResult


class BaseStatusClient(metaclass=abc.ABCMeta):
    """Abstract client resolving the live state of a single detector.

    Implementations must tolerate concurrent ``fetch_status`` calls for
    distinct detectors and must let cancellation propagate.
    """

    async def connect(self) -> None:
        """Open connection to the status service (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Close connection to the status service (no-op by default)."""
        pass

    @abc.abstractmethod
    async def fetch_status(self, detector_id: str) -> StatusResult:
        """Return the current status of ``detector_id`` or raise on failure."""
        raise NotImplementedError
