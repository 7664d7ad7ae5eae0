"""Errors raised by the PuppetDB client.

The client never leaks httpx or pydantic exceptions; callers handle
PuppetDBError and its subclasses only.
"""


class PuppetDBError(Exception):
    """Base exception for all PuppetDB client errors."""


class PuppetDBConnectionError(PuppetDBError):
    """Raised when the request could not be completed (DNS, TLS, timeout)."""

    def __init__(self, url: str, message: str) -> None:
        """Initialize the error.

        Args:
            url: Requested URL.
            message: Underlying transport error message.
        """
        self.url = url
        super().__init__(f"Request to {url} failed: {message}")


class PuppetDBResponseError(PuppetDBError):
    """Raised when PuppetDB answers with a non-2xx status code."""

    def __init__(self, url: str, status_code: int) -> None:
        """Initialize the error.

        Args:
            url: Requested URL.
            status_code: HTTP status code of the response.
        """
        self.url = url
        self.status_code = status_code
        super().__init__(f"PuppetDB returned HTTP {status_code} for {url}")


class PuppetDBDecodeError(PuppetDBError):
    """Raised when a response body is not the expected JSON document."""

    def __init__(self, url: str, message: str) -> None:
        """Initialize the error.

        Args:
            url: Requested URL.
            message: Description of the decoding problem.
        """
        self.url = url
        super().__init__(f"Unexpected response from {url}: {message}")
