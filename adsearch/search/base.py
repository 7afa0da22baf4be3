"""Base interface for detector catalog search."""

from __future__ import annotations

import abc

from ..contracts import SearchPage, SearchRequest


class BaseSearchClient(metaclass=abc.ABCMeta):
    """Abstract client executing one catalog search per call."""

    async def connect(self) -> None:
        """Open connection to the catalog (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Close connection to the catalog (no-op by default)."""
        pass

    @abc.abstractmethod
    async def search(self, request: SearchRequest) -> SearchPage:
        """Execute ``request`` and return one page of detectors.

        Raises:
            SearchUnavailable: If the catalog could not be queried.
        """
        raise NotImplementedError
