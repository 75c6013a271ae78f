"""
Custom application exceptions.
"""

class TonPlaceAppException(Exception):
    """Base exception for the mini app."""
    pass


class InvalidRequestError(TonPlaceAppException):
    """Raised when a browser request carries an unusable parameter."""
    pass
