"""
Tests for the organic search proxy and its localized fallback.
"""

from contextlib import contextmanager
from unittest.mock import patch
import httpx
import pytest
from fakesearch.services import search_service
from fakesearch.services.search_service import localized_fallback_results, search


@contextmanager
def _configured():
    with patch.object(search_service.settings, "google_api_key", "test-key"), \
            patch.object(search_service.settings, "google_search_engine_id", "test-cx"):
        yield


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _items(n: int) -> list[dict]:
    return [
        {
            "title": f"Result {i}",
            "link": f"https://site{i}.example.com/",
            "snippet": f"Snippet {i}",
            "pagemap": {"cse_image": [{"src": f"https://img.example.com/{i}.png"}]},
        }
        for i in range(n)
    ]


# ── Localized fallback ────────────────────────────────────────────────

def test_fallback_defaults_to_us_english():
    results = localized_fallback_results("pizza")

    assert len(results) == 4
    assert results[0].title == "pizza United States - Local .com Results"
    assert results[0].url == "https://www.google.com/search?q=pizza"
    assert results[2].url == "https://en.wikipedia.org/wiki/pizza"
    assert "Content in" not in results[0].description


def test_fallback_localizes_country_language_and_location():
    results = localized_fallback_results("pizza napoletana", gl="de", location="Berlin Mitte")

    assert results[0].url == "https://www.google.de/search?q=pizza%20napoletana+Berlin%20Mitte"
    assert results[1].url == "https://maps.google.de/search/pizza%20napoletana+Berlin%20Mitte"
    assert results[2].url == "https://de.wikipedia.org/wiki/pizza_napoletana"
    assert results[2].title.endswith("(German)")
    assert "Prices in EUR • Content in German in Berlin Mitte." in results[0].description


def test_fallback_unknown_country_uses_us_data():
    results = localized_fallback_results("tea", gl="zz")
    assert "United States" in results[0].title
    assert results[0].description.endswith(" in United States.")


# ── Proxy ─────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_unconfigured_search_returns_fallback():
    with patch.object(search_service, "fetch_google_results") as fetch:
        results = await search("pizza", gl="uk")
    fetch.assert_not_called()
    assert results == localized_fallback_results("pizza", gl="uk")


@pytest.mark.anyio
async def test_api_results_are_mapped():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        items = _items(2)
        del items[1]["snippet"]
        items[1]["pagemap"] = {"metatags": [{"og:image": "https://og.example.com/1.png"}]}
        return httpx.Response(200, json={"items": items})

    with _configured():
        async with _client(handler) as client:
            results = await search("pizza", hl="en", location="Boston", client=client)

    assert seen["q"] == "pizza Boston"
    assert seen["key"] == "test-key"
    assert seen["cx"] == "test-cx"
    assert seen["num"] == "10"
    assert seen["hl"] == "en"
    assert results[0].url == "https://site0.example.com/"
    assert results[0].favicon == "https://img.example.com/0.png"
    assert results[1].description == "No description available"
    assert results[1].favicon == "https://og.example.com/1.png"


@pytest.mark.anyio
async def test_non_us_country_prepends_two_localized_results():
    with _configured():
        async with _client(lambda request: httpx.Response(200, json={"items": _items(10)})) as client:
            results = await search("pizza", gl="uk", client=client)

    assert len(results) == 10
    assert results[:2] == localized_fallback_results("pizza", gl="uk")[:2]
    assert [r.title for r in results[2:]] == [f"Result {i}" for i in range(8)]


@pytest.mark.anyio
@pytest.mark.parametrize("response", [
    httpx.Response(500, text="backend error"),
    httpx.Response(429, json={"error": {"message": "quota"}}),
    httpx.Response(200, json={"searchInformation": {"totalResults": "0"}}),
    httpx.Response(200, text="<html>not json</html>"),
])
async def test_provider_problems_fall_back(response):
    with _configured():
        async with _client(lambda request: response) as client:
            results = await search("pizza", gl="fr", client=client)
    assert results == localized_fallback_results("pizza", gl="fr")


@pytest.mark.anyio
async def test_timeout_falls_back():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with _configured():
        async with _client(handler) as client:
            results = await search("pizza", client=client)
    assert results == localized_fallback_results("pizza")


@pytest.mark.anyio
async def test_search_endpoint_requires_query(client):
    response = await client.get("/api/search")
    assert response.status_code == 400
    assert response.json()["detail"] == "Query parameter required"


@pytest.mark.anyio
async def test_search_endpoint_returns_results(client):
    response = await client.get("/api/search", params={"q": "pizza", "gl": "it"})
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 4
    assert data[0]["url"].startswith("https://www.google.it/search?q=pizza")
    assert set(data[0]) == {"title", "url", "description", "favicon"}


@pytest.mark.anyio
async def test_provider_error_keeps_underlying_cause():
    with _configured():
        async with _client(lambda request: httpx.Response(503, text="unavailable")) as client:
            with pytest.raises(search_service.SearchProviderError) as exc_info:
                await search_service.fetch_google_results("pizza", client=client)
    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
