"""Custom exceptions for driver matching."""


class TransientIOError(Exception):
    """Raised by collaborators for retryable network/read failures."""
    pass


class InvalidMatchRequest(ValueError):
    """Raised when a match request is rejected before matching starts."""
    pass


class MatchStateException(Exception):
    """Raised when an invalid match state transition is attempted."""
    pass
