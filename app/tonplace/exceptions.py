"""
Exception classes for the Ton.Place public API client.

Provides structured exceptions for upstream communication failures.
"""


class TonPlaceError(Exception):
    """Base exception for all Ton.Place API related errors."""
    pass


class TonPlaceNetworkError(TonPlaceError):
    """
    Raised when network communication with Ton.Place fails.

    This occurs when:
    - Connection timeout
    - DNS resolution failure
    - TLS/SSL errors
    - Server unreachable

    Requests are never retried.
    """
    pass


class TonPlaceHTTPError(TonPlaceError):
    """
    Raised when Ton.Place returns a non-OK HTTP response.

    Includes status_code for callers that need to branch on specific errors.
    """

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"API returned status {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class TonPlaceResponseError(TonPlaceError):
    """Raised when a Ton.Place response body cannot be parsed."""
    pass
