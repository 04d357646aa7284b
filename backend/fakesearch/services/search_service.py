"""
Search Service — Organic results via the Google Custom Search JSON API.
Falls back to locally generated, country-aware results when the API is not
configured, fails, times out or returns nothing.
"""

import logging
from typing import Optional
import httpx
from fakesearch.config import get_settings
from fakesearch.exceptions import SearchProviderError
from fakesearch.schemas import SearchResult
from fakesearch.services.attribution import encode_component

logger = logging.getLogger(__name__)
settings = get_settings()

GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"
NO_DESCRIPTION = "No description available"
# Localized results shown ahead of API results for non-US searches
LOCALIZED_LEAD_COUNT = 2
API_RESULTS_AFTER_LEAD = 8

COUNTRY_DATA = {
    "us": {"domain": "com", "lang": "en", "region": "United States", "currency": "USD", "tld": ".com"},
    "uk": {"domain": "co.uk", "lang": "en", "region": "United Kingdom", "currency": "GBP", "tld": ".co.uk"},
    "ca": {"domain": "ca", "lang": "en", "region": "Canada", "currency": "CAD", "tld": ".ca"},
    "au": {"domain": "com.au", "lang": "en", "region": "Australia", "currency": "AUD", "tld": ".com.au"},
    "de": {"domain": "de", "lang": "de", "region": "Germany", "currency": "EUR", "tld": ".de"},
    "fr": {"domain": "fr", "lang": "fr", "region": "France", "currency": "EUR", "tld": ".fr"},
    "es": {"domain": "es", "lang": "es", "region": "Spain", "currency": "EUR", "tld": ".es"},
    "it": {"domain": "it", "lang": "it", "region": "Italy", "currency": "EUR", "tld": ".it"},
    "jp": {"domain": "co.jp", "lang": "ja", "region": "Japan", "currency": "JPY", "tld": ".co.jp"},
    "br": {"domain": "com.br", "lang": "pt", "region": "Brazil", "currency": "BRL", "tld": ".com.br"},
    "mx": {"domain": "com.mx", "lang": "es", "region": "Mexico", "currency": "MXN", "tld": ".com.mx"},
    "in": {"domain": "co.in", "lang": "en", "region": "India", "currency": "INR", "tld": ".co.in"},
}

LANGUAGE_NAMES = {
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
    "ja": "Japanese",
    "pt": "Portuguese",
    "zh": "Chinese",
    "ru": "Russian",
    "ar": "Arabic",
}


# ── Offline results ───────────────────────────────────────────────────

def localized_fallback_results(
    q: str,
    gl: Optional[str] = None,
    hl: Optional[str] = None,
    lr: Optional[str] = None,
    location: Optional[str] = None,
) -> list[SearchResult]:
    """Four regional results (search, maps, Wikipedia, news). Unknown countries use US data."""
    country = COUNTRY_DATA.get((gl or "").lower(), COUNTRY_DATA["us"])
    language = hl or country["lang"]
    lang_name = LANGUAGE_NAMES.get(language, "English")
    foreign = language != "en"

    if location:
        location_suffix = f" in {location}"
    elif gl:
        location_suffix = f" in {country['region']}"
    else:
        location_suffix = ""
    query = encode_component(q) + (f"+{encode_component(location)}" if location else "")
    region = country["region"]

    return [
        SearchResult(
            title=f"{q} {region} - Local {country['tld']} Results",
            url=f"https://www.google.{country['domain']}/search?q={query}",
            description=(
                f"🌍 Regional results for \"{q}\" in {region}. Prices in {country['currency']}"
                f"{f' • Content in {lang_name}' if foreign else ''}{location_suffix}."
            ),
            favicon="https://www.google.com/favicon.ico",
        ),
        SearchResult(
            title=f"{q} Near Me - {region} Locations",
            url=f"https://maps.google.{country['domain']}/search/{query}",
            description=(
                f"📍 Find \"{q}\" businesses in {region}{location_suffix}. "
                f"Local reviews, opening hours, and contact details. Currency: {country['currency']}."
            ),
            favicon="https://maps.google.com/favicon.ico",
        ),
        SearchResult(
            title=f"{q} - {region} Wikipedia{f' ({lang_name})' if foreign else ''}",
            url=f"https://{language}.wikipedia.org/wiki/{encode_component(q.replace(' ', '_'))}",
            description=(
                f"📚 {region}-focused information about \"{q}\"{f' in {lang_name}' if foreign else ''}. "
                f"Regional context and local references included."
            ),
            favicon="https://en.wikipedia.org/static/favicon/wikipedia.ico",
        ),
        SearchResult(
            title=f"{q} News - {region} Coverage",
            url=f"https://news.google.{country['domain']}/search?q={query}",
            description=(
                f"📰 Latest \"{q}\" news from {region}{location_suffix}"
                f"{f' in {lang_name}' if foreign else ''}. Local media coverage and regional updates."
            ),
            favicon="https://ssl.gstatic.com/news/img/favicon_news.ico",
        ),
    ]


# ── Google Custom Search ──────────────────────────────────────────────

def _favicon(item: dict) -> Optional[str]:
    pagemap = item.get("pagemap") or {}
    for path in (("cse_image", "src"), ("metatags", "og:image")):
        entries = pagemap.get(path[0]) or []
        if entries and isinstance(entries[0], dict) and entries[0].get(path[1]):
            return entries[0][path[1]]
    return None


def _to_result(item: dict) -> SearchResult:
    return SearchResult(
        title=item.get("title") or "",
        url=item.get("link") or "",
        description=item.get("snippet") or NO_DESCRIPTION,
        favicon=_favicon(item),
    )


async def fetch_google_results(
    q: str,
    gl: Optional[str] = None,
    hl: Optional[str] = None,
    lr: Optional[str] = None,
    location: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> list[SearchResult]:
    """
    One Custom Search request. Returns [] when the API has no items.
    Raises SearchProviderError on HTTP errors, timeouts or unreadable bodies.
    """
    params = {
        "key": settings.google_api_key,
        "cx": settings.google_search_engine_id,
        "q": f"{q} {location}" if location else q,
        "num": str(settings.search_results_per_query),
    }
    if gl:
        params["gl"] = gl
    if lr:
        params["lr"] = lr
    if hl:
        params["hl"] = hl

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as own_client:
                response = await own_client.get(GOOGLE_CSE_URL, params=params)
        else:
            response = await client.get(GOOGLE_CSE_URL, params=params, timeout=settings.search_timeout_seconds)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise SearchProviderError(f"Custom Search API error ({e.response.status_code})") from e
    except (httpx.HTTPError, ValueError) as e:
        raise SearchProviderError(f"Custom Search request failed: {e}") from e

    items = data.get("items") if isinstance(data, dict) else None
    return [_to_result(item) for item in items or [] if isinstance(item, dict)]


async def search(
    q: str,
    gl: Optional[str] = None,
    hl: Optional[str] = None,
    lr: Optional[str] = None,
    location: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> list[SearchResult]:
    """Organic results for q. Never raises for provider problems."""
    if not settings.search_configured:
        return localized_fallback_results(q, gl, hl, lr, location)

    try:
        results = await fetch_google_results(q, gl, hl, lr, location, client=client)
    except SearchProviderError as e:
        logger.error(f"Search for '{q}' failed: {e}; using localized results")
        return localized_fallback_results(q, gl, hl, lr, location)

    if not results:
        logger.info(f"No Custom Search items for '{q}'; using localized results")
        return localized_fallback_results(q, gl, hl, lr, location)

    if gl and gl.lower() != "us":
        localized = localized_fallback_results(q, gl, hl, lr, location)
        return localized[:LOCALIZED_LEAD_COUNT] + results[:API_RESULTS_AFTER_LEAD]
    return results
