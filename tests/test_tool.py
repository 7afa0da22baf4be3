"""Detector search tool tests."""

import pytest

from adsearch import build_tool
from adsearch.config import AdSearchConfig, RetryConfig
from adsearch.contracts import Detector, DetectorState, StatusResult
from adsearch.enrich import EnrichmentCoordinator
from adsearch.errors import LookupFailed, SearchUnavailable, UnknownIdentity
from adsearch.search import InMemorySearchClient
from adsearch.status import BaseStatusClient, InMemoryStatusClient
from adsearch.tool import DetectorSearchParams, SearchDetectorsTool

DETECTORS = [
    Detector(
        id="d1",
        source={
            "name": "cpu-high",
            "indices": ["metrics"],
            "detector_type": "SINGLE_ENTITY",
            "last_update_time": 1000,
        },
    ),
    Detector(
        id="d2",
        source={
            "name": "cpu-low",
            "indices": ["metrics"],
            "detector_type": "MULTI_ENTITY",
            "last_update_time": 2000,
        },
    ),
    Detector(
        id="d3",
        source={
            "name": "disk-io",
            "indices": ["logs"],
            "detector_type": "SINGLE_ENTITY",
            "last_update_time": 3000,
        },
    ),
]

STATES = {
    "d1": DetectorState.RUNNING,
    "d2": DetectorState.DISABLED,
    "d3": DetectorState.FAILED,
}


def _make_tool(status=None, search=None, config=None):
    status = status or InMemoryStatusClient(STATES)
    search = search or InMemorySearchClient(DETECTORS)
    tool = SearchDetectorsTool(search, EnrichmentCoordinator(status), config=config)
    return tool, search, status


@pytest.mark.asyncio
async def test_search_without_state_filter_skips_lookups():
    tool, _, status = _make_tool()

    output = await tool.run({})

    assert output == (
        "AnomalyDetectors=[{id=d1,name=cpu-high}{id=d2,name=cpu-low}"
        "{id=d3,name=disk-io}]TotalAnomalyDetectors=3"
    )
    assert status.calls == []


@pytest.mark.asyncio
async def test_search_with_running_filter():
    tool, _, _ = _make_tool()

    output = await tool.run({"detectorNamePattern": "cpu*", "running": "true"})

    assert output == "AnomalyDetectors=[{id=d1,name=cpu-high}]TotalAnomalyDetectors=1"


@pytest.mark.asyncio
async def test_search_with_false_flag_excludes_state():
    tool, _, _ = _make_tool()

    output = await tool.run({"failed": "false"})

    assert output == (
        "AnomalyDetectors=[{id=d1,name=cpu-high}{id=d2,name=cpu-low}]"
        "TotalAnomalyDetectors=2"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "parameters, expected_ids, expected_total",
    [
        ({"sortOrder": "desc", "size": "2"}, ["d3", "d2"], 3),
        ({"startIndex": "1", "size": "1"}, ["d2"], 3),
        ({"highCardinality": "true"}, ["d2"], 1),
        ({"highCardinality": "false"}, ["d1", "d3"], 2),
        ({"lastUpdateTime": "2000"}, ["d2", "d3"], 2),
        ({"lastUpdateTime": "yesterday"}, ["d1", "d2", "d3"], 3),
        ({"lastUpdateTime": "\u00b2"}, ["d1", "d2", "d3"], 3),
        ({"indices": "logs"}, ["d3"], 1),
        ({"detectorName": "cpu-low"}, ["d2"], 1),
    ],
)
async def test_catalog_filters(parameters, expected_ids, expected_total):
    tool, _, _ = _make_tool()

    output = await tool.run(parameters)

    ids = [part.split(",")[0] for part in output.split("{id=")[1:]]
    assert ids == expected_ids
    assert output.endswith(f"TotalAnomalyDetectors={expected_total}")


@pytest.mark.asyncio
async def test_lookup_failure_is_raised():
    status = InMemoryStatusClient(STATES)
    status.set_error("d2", ConnectionError("network error"))
    tool, _, _ = _make_tool(status=status)

    with pytest.raises(LookupFailed):
        await tool.run({"running": "true"})


@pytest.mark.asyncio
async def test_pydantic_tool_reports_single_error_message():
    status = InMemoryStatusClient(STATES)
    status.set_error("d2", ConnectionError("network error"))
    tool, _, _ = _make_tool(status=status)

    agent_tool = tool.as_pydantic_tool()
    output = await agent_tool.function(running=True)

    assert output.startswith("Failed to search anomaly detectors:")
    assert "network error" in output
    assert "AnomalyDetectors=" not in output


@pytest.mark.asyncio
async def test_pydantic_tool_runs_search():
    tool, _, _ = _make_tool()

    agent_tool = tool.as_pydantic_tool()
    output = await agent_tool.function(detectorNamePattern="cpu*", disabled=True)

    assert agent_tool.name == "SearchAnomalyDetectorsTool"
    assert agent_tool.description == "Use this tool to search anomaly detectors."
    assert output == "AnomalyDetectors=[{id=d2,name=cpu-low}]TotalAnomalyDetectors=1"


def test_validate_rejects_bad_numbers():
    tool, _, _ = _make_tool()

    assert tool.validate({}) is True
    assert tool.validate({"size": "10", "startIndex": "5"}) is True
    assert tool.validate({"size": "ten"}) is False
    assert tool.validate({"startIndex": "-1"}) is False


def test_parameter_parsing():
    params = DetectorSearchParams.from_parameters(
        {
            "running": "TRUE",
            "disabled": "nope",
            "sortOrder": "DESC",
            "sortString": "last_update_time",
        }
    )

    assert params.predicate.running is True
    assert params.predicate.disabled is False
    assert params.predicate.failed is None
    assert params.sort_order == "desc"
    assert params.sort_string == "last_update_time"
    assert params.size == 20
    assert params.start_index == 0


class FlakySearchClient(InMemorySearchClient):
    def __init__(self, documents, failures):
        super().__init__(documents)
        self.failures = failures
        self.attempts = 0

    async def search(self, request):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise SearchUnavailable("cluster unavailable")
        return await super().search(request)


@pytest.mark.asyncio
async def test_whole_operation_retried(monkeypatch):
    async def fake_retry(attempt, base=1.5):
        pass

    monkeypatch.setattr("adsearch.tool.schedule_retry", fake_retry)
    search = FlakySearchClient(DETECTORS, failures=1)
    config = AdSearchConfig(retry=RetryConfig(max_attempts=2))
    tool, _, _ = _make_tool(search=search, config=config)

    output = await tool.run({"detectorName": "disk-io"})

    assert search.attempts == 2
    assert output == "AnomalyDetectors=[{id=d3,name=disk-io}]TotalAnomalyDetectors=1"


@pytest.mark.asyncio
async def test_retries_exhausted(monkeypatch):
    async def fake_retry(attempt, base=1.5):
        pass

    monkeypatch.setattr("adsearch.tool.schedule_retry", fake_retry)
    search = FlakySearchClient(DETECTORS, failures=5)
    config = AdSearchConfig(retry=RetryConfig(max_attempts=2))
    tool, _, _ = _make_tool(search=search, config=config)

    with pytest.raises(SearchUnavailable):
        await tool.run({})
    assert search.attempts == 3


@pytest.mark.asyncio
async def test_correlation_errors_not_retried(monkeypatch):
    class WrongIdClient(BaseStatusClient):
        def __init__(self):
            self.calls = 0

        async def fetch_status(self, detector_id):
            self.calls += 1
            return StatusResult.resolved("unexpected", DetectorState.RUNNING)

    async def fake_retry(attempt, base=1.5):
        raise AssertionError("correlation errors must not be retried")

    monkeypatch.setattr("adsearch.tool.schedule_retry", fake_retry)
    status = WrongIdClient()
    config = AdSearchConfig(retry=RetryConfig(max_attempts=3))
    tool, _, _ = _make_tool(status=status, config=config)

    with pytest.raises(UnknownIdentity):
        await tool.run({"running": "true"})
    assert status.calls == 3


def test_build_tool_uses_configured_backends():
    tool = build_tool(AdSearchConfig())

    assert isinstance(tool, SearchDetectorsTool)
    assert tool.name == "SearchAnomalyDetectorsTool"
