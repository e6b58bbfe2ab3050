"""Errors raised while handling a ride request."""


class RideRequestError(Exception):
    """Base class for failures that end a ride request with an error envelope."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationMissing(RideRequestError):
    """Raised when no verified identity reached the handler."""

    def __init__(self, message: str = "Authorization not configured"):
        super().__init__(message)


class MalformedRequest(RideRequestError):
    """Raised when the request body is not valid JSON or lacks a pickup location."""

    status_code = 400


class StorageFailure(RideRequestError):
    """Raised when the ride store rejects or cannot complete a write."""
