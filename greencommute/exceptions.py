"""Errors raised while planning a commute."""


class CommuteRoutingError(Exception):
    """Base exception for route planning errors."""
    pass


class MalformedPathError(CommuteRoutingError):
    """Raised when an encoded path cannot be decoded."""
    pass


class ProviderUnavailable(CommuteRoutingError):
    """Raised when an external provider fails, times out or is not configured."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} unavailable: {reason}")


class NoRoutesAvailable(CommuteRoutingError):
    """Raised when not a single route candidate could be produced."""
    pass


class RecommendationFailed(CommuteRoutingError):
    """Raised when the AI route advisor cannot produce a recommendation."""
    pass
