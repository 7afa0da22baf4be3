"""In-memory detector catalog for testing."""

from __future__ import annotations

import fnmatch
from typing import Any, Dict, Iterable, List, Optional

from ..contracts import Detector, SearchPage, SearchRequest
from ..errors import SearchUnavailable
from .base import BaseSearchClient


def _field_values(source: Dict[str, Any], field: str) -> List[Any]:
    # "name.keyword" addresses the exact value of "name"
    if field.endswith(".keyword"):
        field = field[: -len(".keyword")]
    value: Any = source
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return []
        value = value[part]
    if isinstance(value, list):
        return value
    return [value]


def matches(source: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Evaluate the subset of the query DSL produced by ``build_query``."""
    if not query or "match_all" in query:
        return True
    if "bool" in query:
        clauses = query["bool"]
        required = list(clauses.get("must", [])) + list(clauses.get("filter", []))
        return all(matches(source, clause) for clause in required)
    if "term" in query:
        (field, expected), = query["term"].items()
        if isinstance(expected, dict):
            expected = expected.get("value")
        return expected in _field_values(source, field)
    if "wildcard" in query:
        (field, pattern), = query["wildcard"].items()
        if isinstance(pattern, dict):
            pattern = pattern.get("value")
        return any(
            isinstance(v, str) and fnmatch.fnmatchcase(v, pattern)
            for v in _field_values(source, field)
        )
    if "range" in query:
        (field, bounds), = query["range"].items()
        values = _field_values(source, field)
        return any(_in_range(v, bounds) for v in values)
    raise SearchUnavailable(f"Unsupported query clause: {sorted(query)}")


def _in_range(value: Any, bounds: Dict[str, Any]) -> bool:
    if value is None:
        return False
    if "gte" in bounds and not value >= bounds["gte"]:
        return False
    if "gt" in bounds and not value > bounds["gt"]:
        return False
    if "lte" in bounds and not value <= bounds["lte"]:
        return False
    if "lt" in bounds and not value < bounds["lt"]:
        return False
    return True


class InMemorySearchClient(BaseSearchClient):
    """Search a fixed set of detector documents held in memory."""

    def __init__(self, documents: Optional[Iterable[Detector]] = None) -> None:
        self._documents: List[Detector] = list(documents or [])
        self.requests: List[SearchRequest] = []

    def add(self, detector: Detector) -> None:
        self._documents.append(detector)

    async def search(self, request: SearchRequest) -> SearchPage:
        self.requests.append(request)
        hits = [d for d in self._documents if matches(d.source, request.query)]

        def sort_value(detector: Detector) -> Any:
            values = _field_values(detector.source, request.sort_string)
            values = [v for v in values if v is not None]
            return values[0] if values else None

        present = [d for d in hits if sort_value(d) is not None]
        missing = [d for d in hits if sort_value(d) is None]
        present.sort(
            key=sort_value,
            reverse=request.sort_order.lower() != "asc",
        )
        ordered = present + missing

        start = request.start_index
        page = ordered[start : start + request.size]
        return SearchPage(detectors=page, total=len(hits))
