"""
Attribution Service — UTM parameters for sponsored click-through URLs.

The output is a pure function of its inputs: the same ad and keyword always
produce the same URL, so served ads can be compared by exact string.
Randomized click identifiers live in click_tracking and are layered on top.
"""

import logging
from typing import Optional
from urllib.parse import quote, urlsplit
from fakesearch.exceptions import MalformedUrlError

logger = logging.getLogger(__name__)

# Characters left unescaped by JavaScript's encodeURIComponent (besides alphanumerics and "_.-~")
_COMPONENT_SAFE = "!*'()"


def encode_component(value: str) -> str:
    """Percent-encode a query value (space becomes %20, not +)."""
    return quote(str(value), safe=_COMPONENT_SAFE)


def ensure_absolute_url(url: str) -> str:
    """Return url unchanged if it is an absolute URL, else raise MalformedUrlError."""
    if not url or not isinstance(url, str):
        raise MalformedUrlError(str(url), "empty")
    if any(ch.isspace() for ch in url):
        raise MalformedUrlError(url, "contains whitespace")
    try:
        parts = urlsplit(url)
        parts.port  # non-numeric or out-of-range port raises ValueError
    except ValueError as e:
        raise MalformedUrlError(url, str(e)) from e
    if not parts.scheme or not parts.hostname:
        raise MalformedUrlError(url)
    return url


def utm_params(
    keyword: Optional[str],
    title: Optional[str] = None,
    utm_source: Optional[str] = None,
    utm_medium: Optional[str] = None,
    utm_campaign: Optional[str] = None,
) -> list[tuple[str, str]]:
    """Ordered (name, value) pairs; empty sources are left out entirely."""
    candidates = (
        ("utm_content", title),
        ("utm_term", keyword),
        ("utm_source", utm_source),
        ("utm_medium", utm_medium),
        ("utm_campaign", utm_campaign),
    )
    return [(name, value) for name, value in candidates if value]


def build_attribution_url(
    final_url: str,
    keyword: Optional[str],
    title: Optional[str] = None,
    utm_source: Optional[str] = None,
    utm_medium: Optional[str] = None,
    utm_campaign: Optional[str] = None,
) -> str:
    """
    Append utm_content, utm_term, utm_source, utm_medium and utm_campaign to final_url.
    Joins with "&" if final_url already has a query string, else starts one with "?".
    Raises MalformedUrlError for anything that is not an absolute URL.
    """
    ensure_absolute_url(final_url)
    params = utm_params(keyword, title, utm_source, utm_medium, utm_campaign)
    if not params:
        return final_url
    separator = "&" if "?" in final_url else "?"
    query = "&".join(f"{name}={encode_component(value)}" for name, value in params)
    return f"{final_url}{separator}{query}"


def build_ad_url(ad, keyword: Optional[str]) -> str:
    """Click-through URL for a stored ad matched on keyword."""
    return build_attribution_url(
        ad.final_url,
        keyword,
        title=ad.title,
        utm_source=ad.utm_source,
        utm_medium=ad.utm_medium,
        utm_campaign=ad.utm_campaign,
    )
