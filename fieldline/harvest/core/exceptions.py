"""Custom exception hierarchy."""

from __future__ import annotations

# Body text carried by HttpStatusError is truncated to this many characters
BODY_SNIPPET_LENGTH = 500


class HarvestError(Exception):
    """Base exception for all library errors."""

    pass


class TransientNetworkError(HarvestError):
    """Connection or timeout failure talking to a source.

    Raised by the HTTP client when the request never produced a response.
    The retry executor treats it like any other failure.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class HttpStatusError(HarvestError):
    """Source answered with a non-2xx status.

    The message carries the status and a snippet of the response body.
    Status codes are not used to decide retry eligibility: a 404 is retried
    exactly like a 503.
    """

    def __init__(self, status_code: int, body: str = "", url: str | None = None) -> None:
        snippet = body[:BODY_SNIPPET_LENGTH]
        super().__init__(f"HTTP {status_code}: {snippet}")
        self.status_code = status_code
        self.body = snippet
        self.url = url


class ResponseFormatError(HarvestError):
    """Response body does not have the shape the adapter expects."""

    pass


class EndpointFailure(HarvestError):
    """Failure of one endpoint inside a multi-endpoint fetch.

    Wraps the original error so the endpoint can be attributed. Only used
    for optional endpoints; required endpoints propagate the original error.
    """

    def __init__(self, endpoint_id: str, cause: BaseException) -> None:
        super().__init__(f"{endpoint_id}: {cause}")
        self.endpoint_id = endpoint_id
        self.cause = cause
