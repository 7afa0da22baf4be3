"""Translate detector filter parameters into an OpenSearch query."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .contracts import SearchRequest


class DetectorFilter(BaseModel):
    """Optional catalog filters; ``None`` leaves an axis unconstrained."""

    model_config = ConfigDict(frozen=True)

    detector_name: Optional[str] = None
    detector_name_pattern: Optional[str] = None
    indices: Optional[str] = None
    high_cardinality: Optional[bool] = None
    last_update_time: Optional[int] = None


def _detector_type(high_cardinality: bool) -> Dict[str, Any]:
    return {
        "term": {
            "detector_type": "MULTI_ENTITY" if high_cardinality else "SINGLE_ENTITY"
        }
    }


def _updated_since(epoch_millis: int) -> Dict[str, Any]:
    return {"bool": {"filter": [{"range": {"last_update_time": {"gte": epoch_millis}}}]}}


# Each optional axis and the clause it contributes when present.
FILTER_AXES: Tuple[Tuple[str, Callable[[Any], Dict[str, Any]]], ...] = (
    ("detector_name", lambda v: {"term": {"name.keyword": v}}),
    ("detector_name_pattern", lambda v: {"wildcard": {"name.keyword": v}}),
    ("indices", lambda v: {"term": {"indices": v}}),
    ("high_cardinality", _detector_type),
    ("last_update_time", _updated_since),
)


def build_query(detector_filter: DetectorFilter) -> Dict[str, Any]:
    """Return a ``bool`` query with one ``must`` clause per present axis."""
    must = [
        clause(getattr(detector_filter, field))
        for field, clause in FILTER_AXES
        if getattr(detector_filter, field) is not None
    ]
    return {"bool": {"must": must}}


def build_search_body(request: SearchRequest) -> Dict[str, Any]:
    """Render a :class:`SearchRequest` as an OpenSearch ``_search`` body."""
    return {
        "query": request.query,
        "size": request.size,
        "from": request.start_index,
        "sort": [{request.sort_string: {"order": request.sort_order}}],
    }
