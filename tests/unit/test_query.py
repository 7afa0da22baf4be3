"""Tests for query building."""

from adsearch.contracts import SearchRequest
from adsearch.query import DetectorFilter, build_query, build_search_body


def test_empty_filter_matches_all():
    assert build_query(DetectorFilter()) == {"bool": {"must": []}}


def test_each_axis_adds_one_clause():
    query = build_query(
        DetectorFilter(
            detector_name="cpu",
            detector_name_pattern="cpu*",
            indices="metrics",
            high_cardinality=True,
            last_update_time=1700000000000,
        )
    )

    assert query["bool"]["must"] == [
        {"term": {"name.keyword": "cpu"}},
        {"wildcard": {"name.keyword": "cpu*"}},
        {"term": {"indices": "metrics"}},
        {"term": {"detector_type": "MULTI_ENTITY"}},
        {
            "bool": {
                "filter": [{"range": {"last_update_time": {"gte": 1700000000000}}}]
            }
        },
    ]


def test_single_entity_when_high_cardinality_false():
    query = build_query(DetectorFilter(high_cardinality=False))
    assert query["bool"]["must"] == [{"term": {"detector_type": "SINGLE_ENTITY"}}]


def test_search_body():
    request = SearchRequest(
        query=build_query(DetectorFilter(indices="logs")),
        size=5,
        start_index=10,
        sort_string="last_update_time",
        sort_order="desc",
    )

    body = build_search_body(request)
    assert body == {
        "query": {"bool": {"must": [{"term": {"indices": "logs"}}]}},
        "size": 5,
        "from": 10,
        "sort": [{"last_update_time": {"order": "desc"}}],
    }
