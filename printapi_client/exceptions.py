"""
Custom exception types for the Print API client.

These exceptions allow callers to distinguish between failures of the
client itself (bad configuration, unreachable server) and error reports
returned by the Print API.
"""

from __future__ import annotations

from typing import Any, Optional


class PrintApiError(Exception):
    """Base exception for all Print API client errors.

    ``code`` holds the native error code of the underlying failure when
    one is available, e.g. the errno of a failed connection.
    """

    def __init__(self, message: str, code: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class PrintApiResponseError(PrintApiError):
    """Raised when the Print API answers with a non-2xx status code.

    The raw response body is kept in ``body`` so callers can inspect the
    error report sent by the API.
    """

    def __init__(self, body: str, status_code: int) -> None:
        super().__init__(f"Print API returned status {status_code}: {body}", status_code)
        self.body = body
        self.status_code = status_code
