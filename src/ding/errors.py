"""Errors raised by the ding API client."""

from typing import Optional


class DingError(Exception):
    """Base class for failures talking to the bookmark service."""


class UrlError(DingError):
    """The base URL and an API path could not be joined into a valid URL."""

    def __init__(self, base_url: str, path: str, reason: str):
        super().__init__(f"Cannot build URL from {base_url!r} and {path!r}: {reason}")
        self.base_url = base_url
        self.path = path


class RequestError(DingError):
    """The transport failed, the server answered non-2xx, or the body did not decode.

    ``status_code`` is set whenever the server produced a response; it is
    ``None`` for connection, timeout and TLS failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
