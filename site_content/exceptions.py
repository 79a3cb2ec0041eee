class ContentError(Exception):
    """Base class for content retrieval failures."""


class ConfigurationError(ContentError):
    """Raised when the Notion source is selected but a required setting is missing or invalid."""


class FetchError(ContentError):
    """Raised when a request to the content service cannot be completed."""


class UpstreamError(FetchError):
    """Raised when the content service answers with a non-success status."""

    def __init__(self, method: str, url: str, status: int, body: str) -> None:
        super().__init__(f"Notion {method} {status}: {body}")
        self.method = method
        self.url = url
        self.status = status
        self.body = body
