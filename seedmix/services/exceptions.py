"""
Service Exceptions

Error taxonomy of the recommendation service. Provider failures never reach
this layer; they are absorbed by the gateway as empty results.
"""


class SeedMixError(Exception):
    """Base class for errors reported to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(SeedMixError):
    """The request was rejected before any provider call."""

    status_code = 400


class NoRecommendationsError(SeedMixError):
    """Every fallback, including the global or same-artist one, came up empty."""

    status_code = 404
