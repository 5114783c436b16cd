"""
Error kinds raised by the account and search services.

Every kind carries the HTTP status and the message shown to the caller. The
exception handler in app.main turns them into {"error": message} responses.
"""
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class AlreadyExists(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class QuotaExceeded(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Search limit reached"


class UpstreamError(AppError):
    """Search or payment provider failed. Detail goes to the log, not the caller."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Search service unavailable, please try again later"

    def __init__(self, detail: str = "", message: str = None):
        self.detail = detail
        super().__init__(message)


class ConfigurationError(AppError):
    """A collaborator is missing a required secret."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Service configuration missing"

    def __init__(self, detail: str = "", message: str = None):
        self.detail = detail
        super().__init__(message)


class NotifierFailure(Exception):
    """Result email could not be delivered. Never fatal to a search."""
