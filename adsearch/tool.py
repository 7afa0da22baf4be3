"""Agent tool that searches anomaly detectors and filters them by state."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic_ai import Tool

from .config import AdSearchConfig, DefaultsConfig, load_config
from .contracts import SearchRequest, StatePredicate
from .enrich import EnrichmentCoordinator
from .errors import (
    AdSearchError,
    EnrichmentTimeout,
    InvalidParameters,
    LookupFailed,
    SearchUnavailable,
)
from .present import format_detectors
from .query import DetectorFilter, build_query
from .search import BaseSearchClient, get_search_client
from .status import get_status_client
from .utils.retry import schedule_retry

logger = logging.getLogger(__name__)

TOOL_NAME = "SearchAnomalyDetectorsTool"
DEFAULT_DESCRIPTION = "Use this tool to search anomaly detectors."

RETRYABLE_ERRORS = (SearchUnavailable, LookupFailed, EnrichmentTimeout)


def _parse_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _parse_int(name: str, value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidParameters(f"{name} must be an integer, got {value!r}") from None
    if parsed < 0:
        raise InvalidParameters(f"{name} must not be negative, got {parsed}")
    return parsed


def _parse_epoch_millis(value: Any) -> Optional[int]:
    # non-numeric values are ignored rather than rejected
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdecimal():
        return int(value)
    return None


class DetectorSearchParams(BaseModel):
    """Typed view of the tool's raw parameters."""

    detector_filter: DetectorFilter = Field(default_factory=DetectorFilter)
    predicate: StatePredicate = Field(default_factory=StatePredicate)
    size: int = 20
    start_index: int = 0
    sort_string: str = "name.keyword"
    sort_order: str = "asc"

    @classmethod
    def from_parameters(
        cls, parameters: Mapping[str, Any], defaults: Optional[DefaultsConfig] = None
    ) -> "DetectorSearchParams":
        """Parse host parameters, which usually arrive as strings."""
        defaults = defaults or DefaultsConfig()
        sort_order = str(parameters.get("sortOrder", defaults.sort_order))
        return cls(
            detector_filter=DetectorFilter(
                detector_name=parameters.get("detectorName"),
                detector_name_pattern=parameters.get("detectorNamePattern"),
                indices=parameters.get("indices"),
                high_cardinality=_parse_bool(parameters.get("highCardinality")),
                last_update_time=_parse_epoch_millis(parameters.get("lastUpdateTime")),
            ),
            predicate=StatePredicate(
                running=_parse_bool(parameters.get("running")),
                disabled=_parse_bool(parameters.get("disabled")),
                failed=_parse_bool(parameters.get("failed")),
            ),
            size=_parse_int("size", parameters.get("size"), defaults.size),
            start_index=_parse_int("startIndex", parameters.get("startIndex"), 0),
            sort_string=str(parameters.get("sortString", defaults.sort_string)),
            sort_order="asc" if sort_order.lower() == "asc" else "desc",
        )

    def search_request(self) -> SearchRequest:
        return SearchRequest(
            query=build_query(self.detector_filter),
            size=self.size,
            start_index=self.start_index,
            sort_string=self.sort_string,
            sort_order=self.sort_order,
        )


class SearchDetectorsTool:
    """Search detectors, then keep only those in the requested states.

    Clients and the coordinator are injected; use :func:`build_tool` to
    construct them from configuration.
    """

    def __init__(
        self,
        search_client: BaseSearchClient,
        coordinator: EnrichmentCoordinator,
        config: Optional[AdSearchConfig] = None,
        name: str = TOOL_NAME,
        description: str = DEFAULT_DESCRIPTION,
    ) -> None:
        self.name = name
        self.description = description
        self._search_client = search_client
        self._coordinator = coordinator
        self._config = config or AdSearchConfig()

    async def __aenter__(self) -> "SearchDetectorsTool":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._search_client.disconnect()
        await self._coordinator.status_client.disconnect()

    def validate(self, parameters: Mapping[str, Any]) -> bool:
        """Return ``True`` when ``parameters`` can be parsed."""
        try:
            DetectorSearchParams.from_parameters(parameters, self._config.defaults)
        except (InvalidParameters, ValueError):
            return False
        return True

    async def run(
        self, parameters: Mapping[str, Any], deadline: Optional[float] = None
    ) -> str:
        """Execute one search and return the formatted result.

        The whole operation is retried up to ``retry.max_attempts`` times on
        search, lookup and timeout failures. Correlation errors are raised
        immediately.
        """
        params = DetectorSearchParams.from_parameters(parameters, self._config.defaults)
        retry = self._config.retry
        attempt = 0
        while True:
            try:
                return await self._run_once(params, deadline)
            except RETRYABLE_ERRORS as e:
                attempt += 1
                if attempt > retry.max_attempts:
                    raise
                logger.warning(
                    f"Detector search failed ({e}); retrying attempt {attempt}/{retry.max_attempts}"
                )
                await schedule_retry(attempt, base=retry.backoff_base)

    async def _run_once(
        self, params: DetectorSearchParams, deadline: Optional[float]
    ) -> str:
        page = await self._search_client.search(params.search_request())
        if not params.predicate.is_active():
            return format_detectors(page.detectors, page.total)

        retained = await self._coordinator.enrich(
            page.detectors, params.predicate, deadline
        )
        logger.info(
            f"Kept {len(retained)} of {len(page.detectors)} detector(s) after state filtering"
        )
        return format_detectors(retained, len(retained))

    def as_pydantic_tool(self) -> Tool:
        """Expose this tool to a pydantic-ai agent."""

        async def search_anomaly_detectors(
            detectorName: Optional[str] = None,
            detectorNamePattern: Optional[str] = None,
            indices: Optional[str] = None,
            highCardinality: Optional[bool] = None,
            lastUpdateTime: Optional[int] = None,
            sortOrder: Optional[str] = None,
            sortString: Optional[str] = None,
            size: Optional[int] = None,
            startIndex: Optional[int] = None,
            running: Optional[bool] = None,
            disabled: Optional[bool] = None,
            failed: Optional[bool] = None,
        ) -> str:
            """Search anomaly detectors, optionally filtered by their live state.

            Args:
                detectorName: Exact detector name.
                detectorNamePattern: Wildcard pattern on the detector name.
                indices: Source index the detector reads from.
                highCardinality: True for multi-entity detectors, False for single-entity.
                lastUpdateTime: Only detectors updated at or after this epoch millis.
                sortOrder: asc or desc.
                sortString: Field to sort on.
                size: Page size.
                startIndex: Page offset.
                running: Keep only running (True) or non-running (False) detectors.
                disabled: Keep only disabled (True) or enabled (False) detectors.
                failed: Keep only failed (True) or non-failed (False) detectors.
            """
            raw = {
                "detectorName": detectorName,
                "detectorNamePattern": detectorNamePattern,
                "indices": indices,
                "highCardinality": highCardinality,
                "lastUpdateTime": lastUpdateTime,
                "sortOrder": sortOrder,
                "sortString": sortString,
                "size": size,
                "startIndex": startIndex,
                "running": running,
                "disabled": disabled,
                "failed": failed,
            }
            parameters = {k: v for k, v in raw.items() if v is not None}
            try:
                return await self.run(parameters)
            except AdSearchError as e:
                logger.error(f"Failed to search anomaly detectors: {e}")
                return f"Failed to search anomaly detectors: {e}"

        return Tool(
            search_anomaly_detectors,
            takes_ctx=False,
            name=self.name,
            description=self.description,
        )


def build_tool(config: Optional[AdSearchConfig] = None) -> SearchDetectorsTool:
    """Construct the tool and its clients from configuration."""
    config = config or load_config()
    search_client = get_search_client(config=config)
    coordinator = EnrichmentCoordinator(
        get_status_client(config=config),
        default_deadline=config.enrichment.timeout,
    )
    return SearchDetectorsTool(search_client, coordinator, config=config)
