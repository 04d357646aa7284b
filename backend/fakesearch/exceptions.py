"""
Domain exceptions. Routers translate these into HTTP responses.
"""


class MalformedUrlError(ValueError):
    """A click-through URL is not a syntactically valid absolute URL."""

    def __init__(self, url: str, reason: str = "not an absolute URL"):
        self.url = url
        super().__init__(f"Malformed URL {url!r}: {reason}")


class AdNotFoundError(LookupError):
    """No ad exists for the given id or listing position."""


class InvalidAIResponseError(Exception):
    """The generative-text provider returned output that fails validation."""


class SearchProviderError(Exception):
    """The web-search provider failed or returned an unusable response."""
