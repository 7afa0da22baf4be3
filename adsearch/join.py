"""Join status results back onto a search page and filter by state."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Sequence

from .contracts import Detector, EnrichedBatch, StatePredicate, StatusResult
from .errors import MissingResult, UnknownIdentity


def join_statuses(
    detectors: Sequence[Detector], results: Iterable[StatusResult]
) -> EnrichedBatch:
    """Correlate ``results`` with ``detectors`` by detector id.

    Arrival order of ``results`` is irrelevant. Every detector must receive
    exactly one result and every result must name a detector on the page.

    Raises:
        UnknownIdentity: A result names an id that is not on the page, or
            names an id that already received its result.
        MissingResult: Some detector on the page has no result.
    """
    outstanding = Counter(d.id for d in detectors)
    statuses: Dict[str, StatusResult] = {}
    for result in results:
        if outstanding[result.detector_id] <= 0:
            raise UnknownIdentity(result.detector_id)
        outstanding[result.detector_id] -= 1
        statuses[result.detector_id] = result

    missing = [detector_id for detector_id, n in outstanding.items() if n > 0]
    if missing:
        raise MissingResult(missing)
    return EnrichedBatch(detectors=list(detectors), statuses=statuses)


def filter_batch(batch: EnrichedBatch, predicate: StatePredicate) -> List[Detector]:
    """Keep the detectors whose state satisfies ``predicate``, in page order."""
    return [d for d in batch.detectors if predicate.matches(batch.state_of(d))]
