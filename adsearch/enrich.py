"""Fan out status lookups for a search page and filter by detector state."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from .contracts import Detector, StatePredicate, StatusResult
from .errors import EnrichmentTimeout, LookupFailed
from .join import filter_batch, join_statuses
from .status import BaseStatusClient

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE = 30.0


class EnrichmentCoordinator:
    """Enrich detectors with their live state, all or nothing.

    One lookup is issued per detector and all of them run concurrently.
    The first failed lookup fails the whole request, and so does a deadline
    expiring before every lookup settles. In both cases the lookups still in
    flight are cancelled and their outcomes are discarded.

    The coordinator keeps no per-request state, so one instance may serve
    concurrent requests.
    """

    def __init__(
        self,
        status_client: BaseStatusClient,
        default_deadline: float = DEFAULT_DEADLINE,
    ) -> None:
        self._status_client = status_client
        self._default_deadline = default_deadline

    @property
    def status_client(self) -> BaseStatusClient:
        return self._status_client

    async def enrich(
        self,
        detectors: Sequence[Detector],
        predicate: StatePredicate,
        deadline: Optional[float] = None,
    ) -> List[Detector]:
        """Return the detectors whose state satisfies ``predicate``.

        Args:
            detectors: One search page, in display order.
            predicate: Requested states. When no axis is set the page is
                returned unchanged and no lookup is made.
            deadline: Seconds to wait for every lookup to settle. Defaults to
                the coordinator's ``default_deadline``.

        Raises:
            LookupFailed: A lookup raised; carries the first observed cause.
            EnrichmentTimeout: Lookups were still pending at the deadline.
            UnknownIdentity: A lookup reported a detector not on the page.
            MissingResult: A detector on the page received no result.
        """
        if not predicate.is_active():
            return list(detectors)
        if not detectors:
            return []

        timeout = self._default_deadline if deadline is None else deadline
        logger.debug(f"Fetching state for {len(detectors)} detector(s)")
        results = await self._gather(detectors, timeout)
        batch = join_statuses(detectors, results)
        return filter_batch(batch, predicate)

    async def _lookup(self, detector_id: str) -> StatusResult:
        try:
            return await self._status_client.fetch_status(detector_id)
        except asyncio.CancelledError as e:
            # only cancellation requested through this task is propagated
            if asyncio.current_task().cancelling():
                raise
            logger.error(f"Anomaly detector profile lookup for {detector_id} was cancelled")
            return StatusResult.failure(detector_id, e)
        except Exception as e:
            logger.error(f"Failed to get anomaly detector profile for {detector_id}: {e}")
            return StatusResult.failure(detector_id, e)

    async def _gather(
        self, detectors: Sequence[Detector], timeout: float
    ) -> List[StatusResult]:
        tasks = [asyncio.create_task(self._lookup(d.id)) for d in detectors]
        results: List[StatusResult] = []
        try:
            for settled in asyncio.as_completed(tasks, timeout=timeout):
                result = await settled
                if result.failed:
                    raise LookupFailed(result.error, result.detector_id)
                results.append(result)
        except asyncio.TimeoutError:
            pending = sum(1 for t in tasks if not t.done())
            logger.warning(
                f"Detector state lookups timed out after {timeout:g}s with {pending} pending"
            )
            raise EnrichmentTimeout(timeout, pending) from None
        finally:
            await self._cancel_outstanding(tasks)
        return results

    @staticmethod
    async def _cancel_outstanding(tasks: List[asyncio.Task]) -> None:
        outstanding = [t for t in tasks if not t.done()]
        for task in outstanding:
            task.cancel()
        if outstanding:
            # Outcomes after cancellation are discarded.
            await asyncio.gather(*outstanding, return_exceptions=True)
