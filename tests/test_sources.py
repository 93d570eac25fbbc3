import httpx
import pytest

from priorart.config import SourceConfig
from priorart.sources import (
    LensSource,
    PatentsViewSource,
    dedupe_candidates,
    search_all,
)

from conftest import BrokenSource, FakeSource, make_candidate


def _config(**overrides) -> SourceConfig:
    values = dict(
        patentsview_url="https://patentsview.test/api/v1/patent/",
        patentsview_api_key="pv-key",
        lens_url="https://lens.test/patent/search",
        lens_api_key="lens-key",
        timeout=5.0,
        result_limit=10,
        max_attempts=1,
    )
    values.update(overrides)
    return SourceConfig(**values)


PATENTSVIEW_BODY = {
    "patents": [
        {
            "patent_id": "11223344",
            "patent_title": "Home energy management using reinforcement learning",
            "patent_abstract": "A controller schedules appliances to reduce energy cost.",
            "patent_date": "2022-03-01",
            "assignees": [{"assignee_organization": "Grid Labs Inc."}],
        },
        {
            "patent_id": "10999888",
            "patent_title": None,
            "patent_abstract": None,
            "patent_date": "2019-07-16",
            "assignees": [],
        },
    ]
}


async def test_patentsview_parses_candidates():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("X-Api-Key")
        seen["body"] = request.content
        return httpx.Response(200, json=PATENTSVIEW_BODY)

    source = PatentsViewSource(_config(), transport=httpx.MockTransport(handler))
    results = await source.search("home energy learning")

    assert seen["url"] == "https://patentsview.test/api/v1/patent/"
    assert seen["key"] == "pv-key"
    assert b"home energy learning" in seen["body"]

    assert len(results) == 2
    first = results[0]
    assert first.publication_number == "US11223344"
    assert first.source == "USPTO"
    assert first.assignee == "Grid Labs Inc."
    assert first.patent_date == "2022-03-01"
    assert first.url == "https://patents.google.com/patent/US11223344"

    second = results[1]
    assert second.title == "Untitled Patent"
    assert second.summary == "No abstract available"
    assert second.assignee == "Unknown"


async def test_patentsview_http_error_yields_no_candidates():
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
    source = PatentsViewSource(_config(), transport=transport)
    assert await source.search("home energy") == []


async def test_patentsview_invalid_json_yields_no_candidates():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    source = PatentsViewSource(_config(), transport=transport)
    assert await source.search("home energy") == []


async def test_blank_query_makes_no_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=PATENTSVIEW_BODY)

    source = PatentsViewSource(_config(), transport=httpx.MockTransport(handler))
    assert await source.search("   ") == []
    assert calls == []


async def test_retry_recovers_from_transient_failure():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(502)
        return httpx.Response(200, json=PATENTSVIEW_BODY)

    source = PatentsViewSource(_config(max_attempts=2), transport=httpx.MockTransport(handler))
    results = await source.search("home energy")

    assert len(attempts) == 2
    assert len(results) == 2


async def test_lens_parses_nested_and_flat_records():
    body = {
        "data": [
            {
                "lens_id": "001-234-567-890-123",
                "jurisdiction": "EP",
                "doc_number": "3789456",
                "kind": "A1",
                "date_published": "2021-02-10",
                "biblio": {
                    "invention_title": [
                        {"text": "Procédé de gestion", "lang": "fr"},
                        {"text": "Energy management method", "lang": "en"},
                    ],
                    "parties": {"applicants": [{"extracted_name": {"value": "Siemens AG"}}]},
                },
                "abstract": [{"text": "Optimizes building energy with learning models.", "lang": "en"}],
            },
            {
                "lens_id": "042-000-000-000-001",
                "title": "Smart plug",
                "publication_number": "WO2020123456A1",
                "abstract": "A plug that learns usage.",
                "applicants": [{"extracted_name": "Plugs Ltd"}],
            },
        ]
    }
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=body)

    source = LensSource(_config(), transport=httpx.MockTransport(handler))
    results = await source.search("smart energy building")

    assert seen["auth"] == "Bearer lens-key"
    assert [r.publication_number for r in results] == ["EP3789456A1", "WO2020123456A1"]
    assert results[0].title == "Energy management method"
    assert results[0].assignee == "Siemens AG"
    assert results[0].url == "https://lens.org/lens/patent/001-234-567-890-123"
    assert results[1].assignee == "Plugs Ltd"
    assert all(r.source == "Lens.org" for r in results)


async def test_lens_without_api_key_is_skipped():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"data": []})

    source = LensSource(_config(lens_api_key=""), transport=httpx.MockTransport(handler))
    assert await source.search("anything at all") == []
    assert calls == []


def test_lens_query_uses_truncated_context():
    source = LensSource(_config())
    context = "x" * 800
    assert source.build_query(["alpha"], context) == "x" * 500
    assert PatentsViewSource(_config()).build_query(["a", "b", "c", "d", "e", "f"], context) == "a b c d e"


async def test_search_all_concatenates_in_source_order():
    first = FakeSource("USPTO", [make_candidate("US1", "One", "first")])
    second = FakeSource("Lens.org", [make_candidate("EP2", "Two", "second")])

    results = await search_all([first, second], ["energy", "home"], "home energy")

    assert [r.publication_number for r in results] == ["US1", "EP2"]
    assert first.queries == ["energy home"]


async def test_search_all_survives_broken_source():
    broken = BrokenSource("USPTO")
    healthy = FakeSource("Lens.org", [make_candidate("EP2", "Two", "second")])

    results = await search_all([broken, healthy], ["energy"], "energy")

    assert [r.source for r in results] == ["Lens.org"]


def test_dedupe_by_publication_number_then_title():
    candidates = [
        make_candidate("US123", "Thermostat", "a"),
        make_candidate("us123", "Thermostat copy", "b"),
        make_candidate("", "Heat Pump", "c"),
        make_candidate("", "heat pump", "d"),
        make_candidate("EP9", "Other", "e"),
    ]
    unique = dedupe_candidates(candidates)
    assert [c.summary for c in unique] == ["a", "c", "e"]


@pytest.mark.parametrize("status", [400, 401, 429, 500])
async def test_lens_error_statuses_yield_no_candidates(status):
    source = LensSource(_config(), transport=httpx.MockTransport(lambda r: httpx.Response(status)))
    assert await source.search("energy") == []
